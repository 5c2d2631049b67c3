"""Mood visual profiles - static mood → visual parameter table."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union

from .catalog import MoodName, parse_mood_name

RGB = Tuple[float, float, float]


class GeometryArchetype(str, Enum):
    """Geometric/motion template governing a particle field."""

    SPHERE = "sphere"
    CLOUD = "cloud"
    FLOWER = "flower"
    WAVE = "wave"
    CRYSTAL = "crystal"
    FOREST = "forest"
    BALLOON = "balloon"
    STARFIELD = "starfield"


def hex_to_rgb(value: str) -> RGB:
    """Convert ``#RRGGBB`` to an RGB triple in [0, 1]."""
    value = value.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Invalid hex color: {value!r}")
    return tuple(int(value[i:i + 2], 16) / 255.0 for i in (0, 2, 4))  # type: ignore[return-value]


@dataclass(frozen=True)
class MoodVisualProfile:
    geometry_archetype: GeometryArchetype
    particle_count: int
    base_color: RGB
    secondary_color: RGB
    accent_color: RGB
    background_intensity: float
    particle_size: float
    particle_opacity: float
    use_advanced_shading: bool

    def __post_init__(self):
        if self.particle_count <= 0:
            raise ValueError("particle_count must be positive")
        for color in (self.base_color, self.secondary_color, self.accent_color):
            if len(color) != 3 or any(not 0.0 <= c <= 1.0 for c in color):
                raise ValueError(f"Color components must be in [0, 1]: {color}")

    @property
    def palette(self) -> Tuple[RGB, RGB, RGB]:
        return (self.base_color, self.secondary_color, self.accent_color)

    def to_dict(self) -> Dict[str, object]:
        return {
            "geometryArchetype": self.geometry_archetype.value,
            "particleCount": self.particle_count,
            "baseColor": list(self.base_color),
            "secondaryColor": list(self.secondary_color),
            "accentColor": list(self.accent_color),
            "backgroundIntensity": self.background_intensity,
            "particleSize": self.particle_size,
            "particleOpacity": self.particle_opacity,
            "useAdvancedShading": self.use_advanced_shading,
        }


def _profile(archetype, count, base, secondary, accent, bg, size, opacity, shading):
    return MoodVisualProfile(
        geometry_archetype=archetype,
        particle_count=count,
        base_color=hex_to_rgb(base),
        secondary_color=hex_to_rgb(secondary),
        accent_color=hex_to_rgb(accent),
        background_intensity=bg,
        particle_size=size,
        particle_opacity=opacity,
        use_advanced_shading=shading,
    )


_PROFILES: Dict[MoodName, MoodVisualProfile] = {
    MoodName.TIRED: _profile(
        GeometryArchetype.SPHERE, 1200, "#DAD0C2", "#B2A89E", "#8E9AAF", 0.10, 0.18, 0.70, True
    ),
    MoodName.CHILL: _profile(
        GeometryArchetype.CLOUD, 1500, "#D2C4B0", "#A99D8A", "#C9D6DF", 0.20, 0.22, 0.60, False
    ),
    MoodName.HAPPY: _profile(
        GeometryArchetype.FLOWER, 2000, "#F0E7D8", "#DDA15E", "#F4A259", 0.30, 0.16, 0.85, True
    ),
    MoodName.ANXIOUS: _profile(
        GeometryArchetype.WAVE, 2500, "#E8E0D5", "#B2A89E", "#7FA7B5", 0.15, 0.12, 0.75, True
    ),
    MoodName.FOCUSED: _profile(
        GeometryArchetype.CRYSTAL, 1000, "#E1D6C7", "#A99D8A", "#9BC1BC", 0.25, 0.14, 0.90, False
    ),
    MoodName.STRESSED: _profile(
        GeometryArchetype.FOREST, 2400, "#E8E0D5", "#6B9080", "#A4C3B2", 0.20, 0.15, 0.80, False
    ),
    MoodName.PLAYFUL: _profile(
        GeometryArchetype.BALLOON, 800, "#F0E7D8", "#DDA15E", "#E07A5F", 0.35, 0.25, 0.90, False
    ),
    MoodName.CALM: _profile(
        GeometryArchetype.STARFIELD, 3000, "#D2C4B0", "#5F5648", "#B8C0FF", 0.15, 0.10, 0.95, True
    ),
}


def profile_for(mood: Union[str, MoodName]) -> MoodVisualProfile:
    """Visual profile for ``mood``; raises UnknownMoodError outside the set."""
    return _PROFILES[parse_mood_name(mood)]


def all_profiles() -> Dict[MoodName, MoodVisualProfile]:
    return dict(_PROFILES)
