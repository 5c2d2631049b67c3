"""
HTTP client for the chat and mood endpoints with an offline fallback.

When the service cannot be reached (or answers with an error) the client
answers locally: moods come from the shared inference module and mood
records from the local catalog, so a chat is never left unanswered.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .errors import InferenceInputError, NetworkError, UnknownMoodError
from .moods.catalog import MoodName, local_mood_data
from .moods.inference import OFFLINE_MESSAGE, infer

_LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


class ChatClient:
    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise NetworkError(f"{method} {path} failed: {e}") from e
        if not resp.ok:
            raise NetworkError(f"{method} {path} returned HTTP {resp.status_code}")
        try:
            return resp.json()
        except ValueError as e:
            raise NetworkError(f"{method} {path} returned invalid JSON") from e

    def send_message(self, message: str, session_id: str, user_id: Optional[int] = None) -> Dict[str, Any]:
        """Ask the service for mood suggestions.

        Raises InferenceInputError for a missing message or session id;
        network failures are answered locally (``offline`` is set).
        """
        if not message or not isinstance(message, str):
            raise InferenceInputError("message", "Invalid message")
        if not session_id or not isinstance(session_id, str):
            raise InferenceInputError("sessionId", "Invalid session ID")

        body: Dict[str, Any] = {"message": message, "sessionId": session_id}
        if user_id is not None:
            body["userId"] = user_id
        try:
            reply = self._request("POST", "/api/ai/chat", json=body)
        except NetworkError as e:
            _LOGGER.warning("Chat service unavailable, answering locally: %s", e)
            return self.local_reply(message)
        reply.setdefault("offline", False)
        return reply

    @staticmethod
    def local_reply(message: str) -> Dict[str, Any]:
        moods = infer(message)
        return {
            "message": OFFLINE_MESSAGE,
            "suggestedMoods": [local_mood_data(m) for m in moods],
            "offline": True,
        }

    def get_moods(self) -> List[Dict[str, Any]]:
        try:
            return self._request("GET", "/api/moods")
        except NetworkError as e:
            _LOGGER.warning("Mood list unavailable, using local catalog: %s", e)
            return [local_mood_data(m) for m in MoodName]

    def get_mood(self, name: str) -> Dict[str, Any]:
        """Mood record by name; raises UnknownMoodError if neither side knows it."""
        try:
            return self._request("GET", f"/api/moods/{name}")
        except NetworkError as e:
            _LOGGER.warning("Mood %s unavailable from service, using local data: %s", name, e)
        canonical = name[:1].upper() + name[1:].lower() if name else name
        try:
            return local_mood_data(canonical)
        except UnknownMoodError:
            raise UnknownMoodError(name) from None

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "ChatClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
