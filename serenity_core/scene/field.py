"""
Particle field - fixed-size buffers for one mood visualization.

``generate`` is the only place randomness is used; everything the stepper
needs later (origins, phases, anchors) is drawn here once.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field as dc_field
from typing import Any, Dict, Optional

import numpy as np

from ..moods.profiles import GeometryArchetype, MoodVisualProfile
from .distributions import TAU, build_layout, size_factors
from .motion import MotionLaw, motion_law_for

_LOGGER = logging.getLogger(__name__)

# Largest float32 strictly below 2*pi
_PHASE_MAX = np.nextafter(np.float32(TAU), np.float32(0.0))


@dataclass(eq=False)
class ParticleField:
    archetype: GeometryArchetype
    positions: np.ndarray
    origins: np.ndarray
    colors: np.ndarray
    base_colors: np.ndarray
    sizes: np.ndarray
    base_sizes: np.ndarray
    phases: np.ndarray
    anchors: np.ndarray
    travel: np.ndarray
    segments: Dict[str, slice]
    motion: MotionLaw
    brightness: float = 1.0
    last_clock: Optional[float] = None
    positions_dirty: bool = True
    sizes_dirty: bool = True
    colors_dirty: bool = True
    disposed: bool = False
    metadata: Dict[str, Any] = dc_field(default_factory=dict)

    @property
    def count(self) -> int:
        return int(self.positions.shape[0])

    def apply_brightness(self, brightness: float) -> None:
        """Rescale colors from the unscaled palette mix."""
        self.brightness = float(brightness)
        np.clip(self.base_colors * self.brightness, 0.0, 1.0, out=self.colors)
        self.colors_dirty = True

    def mark_uploaded(self) -> None:
        self.positions_dirty = False
        self.sizes_dirty = False
        self.colors_dirty = False

    def dispose(self) -> None:
        if not self.disposed:
            _LOGGER.debug("Disposing %s field (%d particles)", self.archetype.value, self.count)
        self.disposed = True

    def stats(self) -> Dict[str, Any]:
        """Summary statistics, used to compare regenerated fields."""
        return {
            "archetype": self.archetype.value,
            "count": self.count,
            "colorMean": [round(float(c), 4) for c in self.base_colors.mean(axis=0)],
            "sizeMean": round(float(self.base_sizes.mean()), 4),
            "segments": {name: s.stop - s.start for name, s in self.segments.items()},
        }

    def to_dict(self, precision: int = 4) -> Dict[str, Any]:
        return {
            "archetype": self.archetype.value,
            "count": self.count,
            "positions": np.round(self.positions, precision).ravel().tolist(),
            "colors": np.round(self.colors, precision).ravel().tolist(),
            "sizes": np.round(self.sizes, precision).tolist(),
            "segments": {name: [s.start, s.stop] for name, s in self.segments.items()},
        }


def _color_weights(n: int, rng: np.random.Generator) -> np.ndarray:
    u = rng.random(n)
    v = rng.random(n)
    return np.column_stack([u, v * (1.0 - u), (1.0 - u) * (1.0 - v)])


def generate(
    profile: MoodVisualProfile,
    brightness: float,
    rng: Optional[np.random.Generator] = None,
) -> ParticleField:
    """Build a fresh particle field for ``profile``.

    ``brightness`` is a level in [0, 1]. Every buffer holds exactly
    ``profile.particle_count`` entries.
    """
    if rng is None:
        rng = np.random.default_rng()

    n = profile.particle_count
    archetype = GeometryArchetype(profile.geometry_archetype)
    layout = build_layout(archetype, n, rng)

    palette = np.asarray(profile.palette, dtype=np.float64)
    base_colors = (_color_weights(n, rng) @ palette).astype(np.float32)
    colors = np.clip(base_colors * brightness, 0.0, 1.0).astype(np.float32)

    base_sizes = (size_factors(archetype, layout.positions, rng) * profile.particle_size).astype(np.float32)
    phases = np.minimum(rng.uniform(0.0, TAU, n).astype(np.float32), _PHASE_MAX)

    particle_field = ParticleField(
        archetype=archetype,
        positions=layout.positions.copy(),
        origins=layout.positions,
        colors=colors,
        base_colors=base_colors,
        sizes=base_sizes.copy(),
        base_sizes=base_sizes,
        phases=phases,
        anchors=layout.anchors,
        travel=np.zeros(n, dtype=np.float32),
        segments=layout.segments,
        motion=motion_law_for(archetype),
        brightness=float(brightness),
    )
    _LOGGER.debug("Generated %s field with %d particles", archetype.value, n)
    return particle_field
