"""Record storage and the process-wide storage provider used by the API."""

from typing import Optional

from .memory import AiConversation, DuplicateUsernameError, MemStorage, Mood, Preference, User

_STORAGE: Optional[MemStorage] = None


def init_storage(storage: MemStorage) -> None:
    """Install the storage instance shared by the API blueprints."""
    global _STORAGE
    _STORAGE = storage


def get_storage() -> MemStorage:
    """Get or create the shared storage (seeded on first creation)."""
    global _STORAGE
    if _STORAGE is None:
        _STORAGE = MemStorage()
        _STORAGE.initialize_moods()
    return _STORAGE


__all__ = [
    "AiConversation",
    "DuplicateUsernameError",
    "MemStorage",
    "Mood",
    "Preference",
    "User",
    "init_storage",
    "get_storage",
]
