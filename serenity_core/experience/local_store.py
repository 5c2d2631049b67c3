"""
Device-local preferences (favorite mood, age group).

Persistence: small JSON file written atomically via a temp file. Values
that are not in the closed mood / age-group sets are dropped on load.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..moods.catalog import AGE_GROUPS, AgeGroup, MoodName, is_mood_name, parse_mood_name

_LOGGER = logging.getLogger(__name__)


class DeviceStore:
    def __init__(self, storage_path: Union[str, Path] = "/data/device.json"):
        self.storage_path = Path(storage_path)
        self._lock = threading.Lock()
        self._favorite_mood: Optional[MoodName] = None
        self._age_group: Optional[AgeGroup] = None
        self._load_from_disk()

    def _load_from_disk(self) -> None:
        if not self.storage_path.exists():
            return
        try:
            with open(self.storage_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            _LOGGER.warning("Ignoring unreadable device store %s: %s", self.storage_path, e)
            return
        if not isinstance(data, dict):
            return

        favorite = data.get("favoriteMood")
        if is_mood_name(favorite):
            self._favorite_mood = MoodName(favorite)
        elif favorite is not None:
            _LOGGER.debug("Dropping invalid stored favorite mood %r", favorite)

        age_group = data.get("ageGroup")
        if age_group in AGE_GROUPS:
            self._age_group = AgeGroup(age_group)
        elif age_group is not None:
            _LOGGER.debug("Dropping invalid stored age group %r", age_group)

    def _save_to_disk(self, favorite: Optional[MoodName], age_group: Optional[AgeGroup]) -> None:
        try:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.storage_path.with_suffix(".tmp")
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(self._payload(favorite, age_group), f, indent=2)
            # Atomic replace
            temp_path.replace(self.storage_path)
        except OSError as e:
            raise RuntimeError(f"Failed to save device store: {e}") from e

    @property
    def favorite_mood(self) -> Optional[MoodName]:
        return self._favorite_mood

    @property
    def age_group(self) -> Optional[AgeGroup]:
        return self._age_group

    # In-memory values change only after the file write succeeded.

    def save_favorite_mood(self, mood: Union[str, MoodName]) -> MoodName:
        mood = parse_mood_name(mood)
        with self._lock:
            self._save_to_disk(mood, self._age_group)
            self._favorite_mood = mood
        _LOGGER.info("Saved favorite mood %s", mood.value)
        return mood

    def set_age_group(self, age_group: Union[str, AgeGroup]) -> AgeGroup:
        group = AgeGroup(age_group)
        with self._lock:
            self._save_to_disk(self._favorite_mood, group)
            self._age_group = group
        return group

    def clear(self) -> None:
        with self._lock:
            self._save_to_disk(None, None)
            self._favorite_mood = None
            self._age_group = None

    @staticmethod
    def _payload(favorite: Optional[MoodName], age_group: Optional[AgeGroup]) -> Dict[str, Any]:
        return {
            "version": 1,
            "saved_at": time.time(),
            "favoriteMood": favorite.value if favorite else None,
            "ageGroup": age_group.value if age_group else None,
        }

    def to_dict(self) -> Dict[str, Any]:
        return self._payload(self._favorite_mood, self._age_group)
