"""
Experience descriptor endpoint.

    GET /experience/<mood>   - everything a client needs to start an experience

The path segment follows the client route rule: first character
upper-cased, rest kept (``tired`` works, ``TIRED`` does not).
"""
from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify

from ..errors import UnknownMoodError
from ..experience.controller import ExperienceSettings
from ..moods.catalog import local_mood_data, mood_from_route
from ..moods.profiles import profile_for
from ..storage import get_storage

_LOGGER = logging.getLogger(__name__)

bp = Blueprint("experience", __name__)


@bp.get("/experience/<segment>")
def experience(segment: str):
    try:
        mood = mood_from_route(segment)
    except UnknownMoodError:
        _LOGGER.info("Invalid experience route %r", segment)
        return jsonify({
            "error": "invalid_mood",
            "message": "Mood not found",
            "segment": segment,
        }), 404

    cfg = current_app.config.get("SERENITY_CFG")
    settings = ExperienceSettings(
        volume=getattr(cfg, "default_volume", 70),
        animation_speed=getattr(cfg, "default_animation_speed", 50),
        brightness=getattr(cfg, "default_brightness", 60),
    )
    record = get_storage().get_mood_by_name(mood.value)
    return jsonify({
        "mood": record.to_dict() if record is not None else local_mood_data(mood),
        "media": local_mood_data(mood),
        "profile": profile_for(mood).to_dict(),
        "settings": settings.to_dict(),
        "viewport": [getattr(cfg, "scene_width", 800), getattr(cfg, "scene_height", 450)],
        "route": f"/experience/{mood.value.lower()}",
    })
