"""
AI chat endpoints.

    POST /api/ai/chat                          - suggest moods for a message
    GET  /api/ai/conversations/<session_id>    - stored conversation history

Suggestions come from the shared keyword inference module; the chat client's
offline fallback uses the same module.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, jsonify, request

from ..errors import InferenceInputError
from ..moods.inference import infer, suggestion_message
from ..storage import get_storage
from ..storage.memory import MemStorage

_LOGGER = logging.getLogger(__name__)

bp = Blueprint("chat", __name__, url_prefix="/ai")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_chat_request(payload: Any) -> Tuple[str, str, Optional[int]]:
    """Validate a chat body; raises InferenceInputError before any inference."""
    if not isinstance(payload, dict):
        payload = {}
    message = payload.get("message")
    if not message or not isinstance(message, str):
        raise InferenceInputError("message", "Invalid message")
    session_id = payload.get("sessionId")
    if not session_id or not isinstance(session_id, str):
        raise InferenceInputError("sessionId", "Invalid session ID")
    return message, session_id, _parse_user_id(payload.get("userId"))


def _parse_user_id(value: Any) -> Optional[int]:
    """Optional user id; ints and numeric strings are accepted."""
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise InferenceInputError("userId", "Invalid user ID")


def answer(storage: MemStorage, message: str, session_id: str, user_id: Optional[int] = None) -> Dict[str, Any]:
    """Infer moods, look them up and persist the exchange."""
    moods = infer(message)
    records = []
    for mood in moods:
        record = storage.get_mood_by_name(mood.value)
        if record is not None:
            records.append(record.to_dict())

    reply = {"message": suggestion_message(moods), "suggestedMoods": records}
    storage.create_ai_conversation(
        user_id=user_id,
        session_id=session_id,
        user_message=message,
        ai_response=json.dumps(reply, separators=(",", ":")),
        suggested_mood=moods[0].value,
        timestamp=_now_iso(),
    )
    _LOGGER.debug("Session %s: suggested %s", session_id, [m.value for m in moods])
    return reply


@bp.post("/chat")
def chat():
    try:
        message, session_id, user_id = parse_chat_request(request.get_json(silent=True))
    except InferenceInputError as e:
        return jsonify({"message": str(e)}), 400

    try:
        return jsonify(answer(get_storage(), message, session_id, user_id))
    except Exception:
        _LOGGER.exception("AI chat failed")
        return jsonify({"message": "Failed to process AI chat"}), 500


@bp.get("/conversations/<session_id>")
def conversations(session_id: str):
    history = get_storage().get_ai_conversations_by_session(session_id)
    return jsonify({"sessionId": session_id, "conversations": [c.to_dict() for c in history]})
