"""
Core Setup - Service initialization and blueprint registration.

Kept separate from app.py so tests can build services without an app.
"""

import logging
from typing import Optional

from flask import Flask

from serenity_core.api.blueprint import api
from serenity_core.api.experience import bp as experience_bp
from serenity_core.experience.local_store import DeviceStore
from serenity_core.storage import init_storage
from serenity_core.storage.memory import MemStorage

_LOGGER = logging.getLogger(__name__)


def init_services(config=None, storage: Optional[MemStorage] = None) -> dict:
    """
    Initialize core services and return them as a dict for testing/dependency injection.

    The record store is required; the device store is optional and a failure
    to open it is logged without stopping startup.
    """
    services: dict = {
        "config": config,
        "storage": None,
        "device_store": None,
    }

    storage = storage or MemStorage()
    storage.initialize_moods()
    init_storage(storage)
    services["storage"] = storage

    try:
        path = getattr(config, "device_store_path", None)
        if path:
            services["device_store"] = DeviceStore(path)
    except Exception:
        _LOGGER.exception("Failed to init DeviceStore")

    return services


def register_blueprints(app: Flask, services: dict = None) -> None:
    """
    Register all API blueprints with the Flask app.

    Args:
        app: Flask application instance
        services: Optional services dict from init_services()
    """
    app.register_blueprint(api)
    app.register_blueprint(experience_bp)
    _LOGGER.info("Registered API (/api/*) and experience routes (/experience/*)")
