"""Exception taxonomy for SerenitySphere Core."""
from __future__ import annotations


class SerenityError(Exception):
    """Base class for all SerenitySphere errors."""


class UnknownMoodError(SerenityError):
    """Mood name outside the closed mood set."""

    def __init__(self, mood: object):
        self.mood = mood
        super().__init__(f"Unknown mood: {mood!r}")


class AudioLoadError(SerenityError):
    """Background sound or voice prompt failed to load or play."""

    def __init__(self, source: str, reason: str = ""):
        self.source = source
        self.reason = reason
        msg = f"Failed to load audio {source!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class InferenceInputError(SerenityError, ValueError):
    """Chat request is missing its message or session identifier."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class NetworkError(SerenityError):
    """The chat backend could not be reached or answered with an error."""


class SceneInitError(SerenityError):
    """Unrecoverable scene initialization failure (e.g. no render surface)."""
