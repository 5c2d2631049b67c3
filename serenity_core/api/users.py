"""
User and preference endpoints.

    POST /api/users                        - create user + default preferences
    GET  /api/users/<id>                   - public user record
    PUT  /api/users/<id>/preferred-mood    - set preferred mood
    GET  /api/users/<id>/preferences       - preferences of a user
    PUT  /api/preferences/<id>             - partial preference update
"""
from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from ..moods.catalog import is_mood_name
from ..storage import DuplicateUsernameError, get_storage
from .schemas import PreferenceUpdate, UserCreate
from .validation import validate_json

_LOGGER = logging.getLogger(__name__)

bp = Blueprint("users", __name__)


@bp.post("/users")
@validate_json(UserCreate, message="Invalid user data")
def create_user(body: UserCreate):
    try:
        storage = get_storage()
        try:
            user = storage.create_user(
                username=body.username,
                password=body.password,
                age_group=body.age_group.value,
                preferred_mood=body.preferred_mood.value if body.preferred_mood else None,
            )
        except DuplicateUsernameError:
            return jsonify({"message": "Username already exists"}), 409

        preferences = storage.create_preference(user.id)
        _LOGGER.info("Created user %d (%s)", user.id, user.age_group)
        return jsonify({"user": user.to_dict(), "preferences": preferences.to_dict()}), 201
    except Exception:
        _LOGGER.exception("Failed to create user")
        return jsonify({"message": "Failed to create user"}), 500


@bp.get("/users/<int:user_id>")
def get_user(user_id: int):
    user = get_storage().get_user(user_id)
    if user is None:
        return jsonify({"message": "User not found"}), 404
    return jsonify(user.to_dict())


@bp.put("/users/<int:user_id>/preferred-mood")
def update_preferred_mood(user_id: int):
    try:
        payload = request.get_json(silent=True) or {}
        mood = payload.get("mood") if isinstance(payload, dict) else None
        if not is_mood_name(mood):
            return jsonify({"message": "Invalid mood"}), 400

        storage = get_storage()
        if storage.get_user(user_id) is None:
            return jsonify({"message": "User not found"}), 404

        user = storage.update_user_preferred_mood(user_id, mood)
        return jsonify(user.to_dict())
    except Exception:
        _LOGGER.exception("Failed to update preferred mood for user %d", user_id)
        return jsonify({"message": "Failed to update preferred mood"}), 500


@bp.get("/users/<int:user_id>/preferences")
def get_preferences(user_id: int):
    try:
        preferences = get_storage().get_preference(user_id)
        if preferences is None:
            return jsonify({"message": "Preferences not found"}), 404
        return jsonify(preferences.to_dict())
    except Exception:
        _LOGGER.exception("Failed to fetch preferences for user %d", user_id)
        return jsonify({"message": "Failed to fetch preferences"}), 500


@bp.put("/preferences/<int:preference_id>")
@validate_json(PreferenceUpdate, message="Invalid preferences data")
def update_preferences(body: PreferenceUpdate, preference_id: int):
    try:
        updated = get_storage().update_preference(preference_id, **body.model_dump(exclude_none=True))
        if updated is None:
            return jsonify({"message": "Preferences not found"}), 404
        return jsonify(updated.to_dict())
    except Exception:
        _LOGGER.exception("Failed to update preferences %d", preference_id)
        return jsonify({"message": "Failed to update preferences"}), 500
