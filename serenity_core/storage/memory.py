"""
In-memory record store for users, preferences, moods and AI conversations.

Ids are assigned from per-table counters starting at 1. All access goes
through one re-entrant lock so the store can back a threaded server.
Records are plain dataclasses; ``to_dict`` produces the camelCase API shape.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from ..moods.catalog import seed_records

_LOGGER = logging.getLogger(__name__)

DEFAULT_PREFERENCES = {
    "volume": 70,
    "animation_speed": 50,
    "brightness": 60,
    "voice_enabled": True,
}


@dataclass(frozen=True)
class User:
    id: int
    username: str
    password: str
    age_group: str
    preferred_mood: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        # Password never leaves the store.
        return {
            "id": self.id,
            "username": self.username,
            "ageGroup": self.age_group,
            "preferredMood": self.preferred_mood,
        }


@dataclass(frozen=True)
class Preference:
    id: int
    user_id: int
    volume: int = 70
    animation_speed: int = 50
    brightness: int = 60
    voice_enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "volume": self.volume,
            "animationSpeed": self.animation_speed,
            "brightness": self.brightness,
            "voiceEnabled": self.voice_enabled,
        }


@dataclass(frozen=True)
class Mood:
    id: int
    name: str
    description: str
    visual_path: str
    sound_path: str
    voice_prompt: str
    icon: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "visualPath": self.visual_path,
            "soundPath": self.sound_path,
            "voicePrompt": self.voice_prompt,
            "icon": self.icon,
        }


@dataclass(frozen=True)
class AiConversation:
    id: int
    session_id: str
    user_message: str
    ai_response: str
    timestamp: str
    user_id: Optional[int] = None
    suggested_mood: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "sessionId": self.session_id,
            "userMessage": self.user_message,
            "aiResponse": self.ai_response,
            "suggestedMood": self.suggested_mood,
            "timestamp": self.timestamp,
        }


class DuplicateUsernameError(ValueError):
    """Username is already taken."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Username already exists: {username}")


class MemStorage:
    def __init__(self):
        self._lock = threading.RLock()
        self._users: Dict[int, User] = {}
        self._preferences: Dict[int, Preference] = {}
        self._moods: Dict[int, Mood] = {}
        self._conversations: Dict[int, AiConversation] = {}
        self._next_ids = {"user": 1, "preference": 1, "mood": 1, "conversation": 1}

    def _next_id(self, table: str) -> int:
        value = self._next_ids[table]
        self._next_ids[table] = value + 1
        return value

    # Users

    def get_user(self, user_id: int) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            return next((u for u in self._users.values() if u.username == username), None)

    def create_user(
        self,
        username: str,
        password: str,
        age_group: str,
        preferred_mood: Optional[str] = None,
    ) -> User:
        with self._lock:
            if any(u.username == username for u in self._users.values()):
                raise DuplicateUsernameError(username)
            user = User(
                id=self._next_id("user"),
                username=username,
                password=password,
                age_group=age_group,
                preferred_mood=preferred_mood,
            )
            self._users[user.id] = user
        _LOGGER.debug("Created user %d", user.id)
        return user

    def update_user_preferred_mood(self, user_id: int, mood: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            updated = replace(user, preferred_mood=mood)
            self._users[user_id] = updated
            return updated

    # Preferences

    def get_preference(self, user_id: int) -> Optional[Preference]:
        """Preferences belonging to ``user_id`` (looked up by owner, not id)."""
        with self._lock:
            return next((p for p in self._preferences.values() if p.user_id == user_id), None)

    def create_preference(self, user_id: int, **values: Any) -> Preference:
        fields = dict(DEFAULT_PREFERENCES)
        fields.update({k: v for k, v in values.items() if v is not None})
        with self._lock:
            pref = Preference(id=self._next_id("preference"), user_id=user_id, **fields)
            self._preferences[pref.id] = pref
        return pref

    def update_preference(self, preference_id: int, **changes: Any) -> Optional[Preference]:
        changes = {k: v for k, v in changes.items() if v is not None}
        with self._lock:
            pref = self._preferences.get(preference_id)
            if pref is None:
                return None
            updated = replace(pref, **changes)
            self._preferences[preference_id] = updated
            return updated

    # Moods

    def get_mood(self, mood_id: int) -> Optional[Mood]:
        with self._lock:
            return self._moods.get(mood_id)

    def get_mood_by_name(self, name: str) -> Optional[Mood]:
        """Case-insensitive lookup."""
        wanted = (name or "").lower()
        with self._lock:
            return next((m for m in self._moods.values() if m.name.lower() == wanted), None)

    def get_all_moods(self) -> List[Mood]:
        with self._lock:
            return list(self._moods.values())

    def create_mood(
        self,
        name: str,
        description: str,
        visual_path: str,
        sound_path: str,
        voice_prompt: str,
        icon: str,
    ) -> Mood:
        with self._lock:
            mood = Mood(
                id=self._next_id("mood"),
                name=name,
                description=description,
                visual_path=visual_path,
                sound_path=sound_path,
                voice_prompt=voice_prompt,
                icon=icon,
            )
            self._moods[mood.id] = mood
        return mood

    def initialize_moods(self) -> int:
        """Seed the mood catalog. Idempotent; returns the number inserted."""
        inserted = 0
        with self._lock:
            for record in seed_records():
                if self.get_mood_by_name(record["name"]) is not None:
                    continue
                self.create_mood(
                    name=record["name"],
                    description=record["description"],
                    visual_path=record["visualPath"],
                    sound_path=record["soundPath"],
                    voice_prompt=record["voicePrompt"],
                    icon=record["icon"],
                )
                inserted += 1
        if inserted:
            _LOGGER.info("Seeded %d moods", inserted)
        return inserted

    # AI conversations

    def create_ai_conversation(
        self,
        session_id: str,
        user_message: str,
        ai_response: str,
        timestamp: str,
        user_id: Optional[int] = None,
        suggested_mood: Optional[str] = None,
    ) -> AiConversation:
        with self._lock:
            conversation = AiConversation(
                id=self._next_id("conversation"),
                user_id=user_id,
                session_id=session_id,
                user_message=user_message,
                ai_response=ai_response,
                suggested_mood=suggested_mood,
                timestamp=timestamp,
            )
            self._conversations[conversation.id] = conversation
        return conversation

    def get_ai_conversations_by_session(self, session_id: str) -> List[AiConversation]:
        with self._lock:
            return [c for c in self._conversations.values() if c.session_id == session_id]

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "users": len(self._users),
                "preferences": len(self._preferences),
                "moods": len(self._moods),
                "conversations": len(self._conversations),
            }
