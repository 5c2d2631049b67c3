"""Pydantic validation decorator for Flask route handlers."""
from __future__ import annotations

import functools
import logging
from typing import Any, Dict, List, Type

from flask import jsonify, request
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


def format_errors(exc: ValidationError) -> List[Dict[str, Any]]:
    errors = []
    for err in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        })
    return errors


def validate_json(model: Type[BaseModel], message: str = "Invalid request body"):
    """Decorator that auto-parses and validates the JSON request body.

    Usage::

        @bp.post("/users")
        @validate_json(UserCreate, message="Invalid user data")
        def create_user(body: UserCreate):
            ...

    On validation failure returns 400 with ``message`` and structured
    ``errors``.
    """

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            raw = request.get_json(silent=True)
            if not isinstance(raw, dict):
                return jsonify({
                    "ok": False,
                    "error": "invalid_json",
                    "message": message,
                    "errors": [{"field": "", "message": "Request body must be a JSON object", "type": "invalid_json"}],
                }), 400

            try:
                body = model.model_validate(raw)
            except ValidationError as exc:
                logger.debug("Rejected %s body: %s", request.path, exc)
                return jsonify({
                    "ok": False,
                    "error": "validation_error",
                    "message": message,
                    "errors": format_errors(exc),
                }), 400

            return fn(body, *args, **kwargs)

        return wrapper

    return decorator
