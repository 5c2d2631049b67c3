"""
Mood catalog endpoints.

    GET /api/moods                 - all moods
    GET /api/moods/<name>          - one mood (case-insensitive name)
    GET /api/moods/<name>/scene    - composed scene snapshot for thin clients
    GET /api/age-groups            - the age-group set with display info
"""
from __future__ import annotations

import logging

import numpy as np
from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from ..moods.catalog import age_groups_payload
from ..moods.profiles import profile_for
from ..scene.composer import compose
from ..scene.field import generate
from ..scene.resources import ResourceTracker
from ..storage import get_storage
from .schemas import SceneQuery
from .validation import format_errors

_LOGGER = logging.getLogger(__name__)

bp = Blueprint("moods", __name__)


@bp.get("/moods")
def list_moods():
    try:
        return jsonify([m.to_dict() for m in get_storage().get_all_moods()])
    except Exception:
        _LOGGER.exception("Failed to fetch moods")
        return jsonify({"message": "Failed to fetch moods"}), 500


@bp.get("/moods/<name>")
def get_mood(name: str):
    try:
        mood = get_storage().get_mood_by_name(name)
        if mood is None:
            return jsonify({"message": "Mood not found"}), 404
        return jsonify(mood.to_dict())
    except Exception:
        _LOGGER.exception("Failed to fetch mood %s", name)
        return jsonify({"message": "Failed to fetch mood"}), 500


@bp.get("/moods/<name>/scene")
def mood_scene(name: str):
    """Generate and compose a one-off scene for ``name``.

    Query: brightness (20-100), seed, width, height, particles (include
    buffers). Omitted values come from the app config. The scene's
    resources are released before responding.
    """
    try:
        query = SceneQuery.model_validate(request.args.to_dict())
    except ValidationError as exc:
        return jsonify({"message": "Invalid scene query", "errors": format_errors(exc)}), 400

    mood = get_storage().get_mood_by_name(name)
    if mood is None:
        return jsonify({"message": "Mood not found"}), 404

    cfg = current_app.config.get("SERENITY_CFG")
    brightness = query.brightness or getattr(cfg, "default_brightness", 60)
    width = query.width or getattr(cfg, "scene_width", 800)
    height = query.height or getattr(cfg, "scene_height", 450)

    try:
        profile = profile_for(mood.name)
        rng = np.random.default_rng(query.seed)
        level = brightness / 100.0
        tracker = ResourceTracker()

        field = generate(profile, level, rng)
        scene = compose(field, profile, level, width=width, height=height, rng=rng, tracker=tracker)
        try:
            payload = {
                "mood": mood.name,
                "profile": profile.to_dict(),
                "stats": field.stats(),
                "scene": scene.to_dict(include_buffers=query.particles),
            }
        finally:
            scene.dispose()
            field.dispose()
        return jsonify(payload)
    except Exception:
        _LOGGER.exception("Failed to compose scene for %s", name)
        return jsonify({"message": "Failed to compose scene"}), 500


@bp.get("/age-groups")
def list_age_groups():
    return jsonify(age_groups_payload())
