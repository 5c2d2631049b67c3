"""
SerenitySphere Core

Main application entry point. Configuration, services and blueprints are
set up by serenity_core.app.create_app().
"""

import logging as _logging

from waitress import serve

from serenity_core.app import create_app

app = create_app()

_main_logger = _logging.getLogger(__name__)


if __name__ == "__main__":
    cfg = app.config["SERENITY_CFG"]
    _main_logger.info("Starting SerenitySphere v%s on %s:%d", cfg.version, cfg.host, cfg.port)
    serve(app, host=cfg.host, port=cfg.port)
