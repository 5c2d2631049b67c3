import json
import logging
import os
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from flask import Flask, g, jsonify, request
from flask_compress import Compress

from serenity_core.core_setup import init_services, register_blueprints
from serenity_core.errors import InferenceInputError, SceneInitError, UnknownMoodError
from serenity_core.versioning import get_runtime_version

_LOGGER = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class SerenityConfig:
    version: str = get_runtime_version("1.2.0")

    # Logging
    log_level: str = "info"

    # Storage locations
    data_dir: str = "/data"
    device_store_path: str = "/data/device.json"

    # Experience defaults (slider values)
    default_volume: int = 70
    default_animation_speed: int = 50
    default_brightness: int = 60

    # Default surface for scene snapshots and experience descriptors
    scene_width: int = 800
    scene_height: int = 450

    # HTTP
    host: str = "0.0.0.0"
    port: int = 5000


def _load_options_json(path: str = "/data/options.json") -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return json.load(fh) or {}
    except (OSError, ValueError):
        return {}


def _env(name: str, fallback: Any) -> Any:
    value = os.environ.get(name, "").strip()
    return value if value else fallback


def _build_config() -> SerenityConfig:
    opts = _load_options_json(os.environ.get("SERENITY_OPTIONS", "/data/options.json"))

    log_level = str(_env("SERENITY_LOG_LEVEL", opts.get("log_level", "info")) or "info").strip().lower()
    data_dir = str(_env("SERENITY_DATA_DIR", opts.get("data_dir", "/data")))
    device_store_path = str(opts.get("device_store_path", os.path.join(data_dir, "device.json")))

    default_volume = int(opts.get("default_volume", 70))
    default_animation_speed = int(opts.get("default_animation_speed", 50))
    default_brightness = int(opts.get("default_brightness", 60))

    scene_width = int(opts.get("scene_width", 800))
    scene_height = int(opts.get("scene_height", 450))

    host = str(_env("SERENITY_HOST", opts.get("host", "0.0.0.0")))
    port = int(_env("SERENITY_PORT", _env("PORT", opts.get("port", 5000))))

    return SerenityConfig(
        log_level=log_level,
        data_dir=data_dir,
        device_store_path=device_store_path,
        default_volume=max(0, min(default_volume, 100)),
        default_animation_speed=max(10, min(default_animation_speed, 100)),
        default_brightness=max(20, min(default_brightness, 100)),
        scene_width=max(1, min(scene_width, 8192)),
        scene_height=max(1, min(scene_height, 8192)),
        host=host,
        port=max(1, min(port, 65535)),
    )


def _setup_logging(level: str) -> None:
    lvl = logging.INFO
    if level in ("trace", "debug"):
        lvl = logging.DEBUG
    elif level == "info":
        lvl = logging.INFO
    elif level in ("warn", "warning"):
        lvl = logging.WARNING
    elif level == "error":
        lvl = logging.ERROR

    logging.basicConfig(
        level=lvl,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Reduce noise unless debugging.
    logging.getLogger("werkzeug").setLevel(lvl)
    logging.getLogger("waitress").setLevel(lvl)


def create_app(config: Optional[SerenityConfig] = None, services: Optional[dict] = None) -> Flask:
    cfg = config or _build_config()
    _setup_logging(cfg.log_level)

    app = Flask(__name__)

    Compress(app)
    app.config["COMPRESS_MIMETYPES"] = ["application/json", "text/html"]
    app.config["COMPRESS_LEVEL"] = 6
    app.config["COMPRESS_MIN_SIZE"] = 500
    app.config["MAX_CONTENT_LENGTH"] = 1 * 1024 * 1024

    # Attach config to app (simple, explicit)
    app.config["SERENITY_CFG"] = cfg

    services = services if services is not None else init_services(cfg)
    app.config["SERENITY_SERVICES"] = services
    register_blueprints(app, services)

    @app.before_request
    def _before_request():
        g.start_time = time.time()
        g.request_id = request.headers.get("X-Request-ID", uuid.uuid4().hex[:12])

    @app.after_request
    def _after_request(response):
        duration = time.time() - getattr(g, "start_time", time.time())
        response.headers["X-Request-ID"] = getattr(g, "request_id", "-")
        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response

    @app.errorhandler(UnknownMoodError)
    def _unknown_mood(exc: UnknownMoodError):
        return jsonify({"error": "unknown_mood", "message": "Mood not found"}), 404

    @app.errorhandler(InferenceInputError)
    def _bad_chat_input(exc: InferenceInputError):
        return jsonify({"error": "invalid_input", "field": exc.field, "message": str(exc)}), 400

    @app.errorhandler(SceneInitError)
    def _scene_init(exc: SceneInitError):
        _LOGGER.error("Scene initialization failed: %s", exc)
        return jsonify({"error": "scene_init", "message": str(exc)}), 500

    @app.get("/")
    def index():
        return (
            "SerenitySphere Core\n"
            "Endpoints: /health, /version, /api/status, /api/moods, /api/ai/chat, /experience/<mood>\n"
        )

    @app.get("/health")
    def health():
        return jsonify({"ok": True, "time": _now_iso(), "port": cfg.port})

    @app.get("/version")
    def version():
        return jsonify({"version": cfg.version, "time": _now_iso()})

    @app.get("/api/status")
    def api_status():
        storage = services.get("storage")
        return jsonify(
            {
                "ok": True,
                "time": _now_iso(),
                "version": cfg.version,
                "port": cfg.port,
                "storage": storage.stats() if storage is not None else None,
                "device_store": services.get("device_store") is not None,
            }
        )

    _LOGGER.info("SerenitySphere Core v%s ready", cfg.version)
    return app
