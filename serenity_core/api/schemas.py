"""Pydantic v2 models for API request validation."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..moods.catalog import AgeGroup, MoodName


# ── Users ────────────────────────────────────────────────────────────

class UserCreate(BaseModel):
    """POST /api/users body."""
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1)
    age_group: AgeGroup = Field(..., alias="ageGroup")
    preferred_mood: Optional[MoodName] = Field(None, alias="preferredMood")

    model_config = {"populate_by_name": True}

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("username must not be blank")
        return v


# ── Preferences ──────────────────────────────────────────────────────

class PreferenceUpdate(BaseModel):
    """PUT /api/preferences/<id> body; every field optional."""
    volume: Optional[int] = Field(None, ge=0, le=100)
    animation_speed: Optional[int] = Field(None, alias="animationSpeed", ge=10, le=100)
    brightness: Optional[int] = Field(None, ge=20, le=100)
    voice_enabled: Optional[bool] = Field(None, alias="voiceEnabled")

    model_config = {"populate_by_name": True}


# ── Scene snapshots ──────────────────────────────────────────────────

class SceneQuery(BaseModel):
    """Query string of GET /api/moods/<name>/scene.

    Missing brightness, width and height fall back to the app config.
    """
    brightness: Optional[int] = Field(None, ge=20, le=100)
    seed: Optional[int] = Field(None, ge=0)
    width: Optional[int] = Field(None, ge=1, le=8192)
    height: Optional[int] = Field(None, ge=1, le=8192)
    particles: bool = False
