"""
Per-archetype motion laws and the animation stepper.

Each archetype has exactly one ``MotionLaw``; the law is chosen when the
field is generated and stored on it, so stepping never dispatches on the
archetype name. Closed-form laws recompute positions from ``origins`` and
the absolute scaled time ``tau``; drifting laws integrate a clamped frame
delta into ``travel`` and wrap it by a fixed span.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict

import numpy as np

from ..moods.profiles import GeometryArchetype, MoodVisualProfile
from .distributions import (
    BALLOON_CEILING,
    BALLOON_SPAN,
    CLOUD_LIMIT,
    CLOUD_SPAN,
    LEAF_FLOOR,
    LEAF_SPAN,
    wave_height,
)

if TYPE_CHECKING:
    from .field import ParticleField

_LOGGER = logging.getLogger(__name__)

MAX_FRAME_DELTA = 0.25

CLOUD_DRIFT = 0.3
LEAF_FALL = 0.5
BALLOON_RISE = 0.4


def rotate_y(points: np.ndarray, angle) -> np.ndarray:
    """Rotate ``points`` about the y axis; ``angle`` may be per-point."""
    c = np.cos(angle)
    s = np.sin(angle)
    out = np.empty_like(points)
    out[:, 0] = points[:, 0] * c + points[:, 2] * s
    out[:, 1] = points[:, 1]
    out[:, 2] = -points[:, 0] * s + points[:, 2] * c
    return out


class MotionLaw(ABC):
    """Base class for archetype motion laws."""

    archetype: GeometryArchetype
    drifts = False

    @abstractmethod
    def apply(self, field: "ParticleField", tau: float, dt: float, speed: float) -> None:
        """Write positions (and sizes) for shared time ``tau`` and frame delta ``dt``."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.archetype.value}>"


class SphereMotion(MotionLaw):
    archetype = GeometryArchetype.SPHERE

    def apply(self, field, tau, dt, speed):
        breathe = 1.0 + 0.04 * np.sin(0.8 * tau + field.phases)
        field.positions[:] = rotate_y(field.origins, 0.15 * tau) * breathe[:, None]
        # pulse
        field.sizes[:] = field.base_sizes * (0.85 + 0.15 * np.sin(1.2 * tau + field.phases))
        field.sizes_dirty = True


class CloudMotion(MotionLaw):
    archetype = GeometryArchetype.CLOUD
    drifts = True

    def apply(self, field, tau, dt, speed):
        field.travel += CLOUD_DRIFT * speed * dt
        # Anchors are puff centers, so a puff wraps as a unit.
        over = field.anchors + field.travel > CLOUD_LIMIT
        field.travel[over] -= CLOUD_SPAN

        o = field.origins
        field.positions[:, 0] = o[:, 0] + field.travel
        field.positions[:, 1] = o[:, 1] + 0.15 * np.sin(0.5 * tau + field.phases)
        field.positions[:, 2] = o[:, 2] + 0.1 * np.cos(0.3 * tau + field.phases)


class FlowerMotion(MotionLaw):
    archetype = GeometryArchetype.FLOWER

    def apply(self, field, tau, dt, speed):
        o = field.origins
        spin = 0.1 * tau
        c, s = np.cos(spin), np.sin(spin)
        bloom = 1.0 + 0.15 * np.sin(0.9 * tau)
        field.positions[:, 0] = (o[:, 0] * c - o[:, 1] * s) * bloom
        field.positions[:, 1] = (o[:, 0] * s + o[:, 1] * c) * bloom
        field.positions[:, 2] = o[:, 2] + 0.05 * np.sin(tau + field.phases)
        field.sizes[:] = field.base_sizes * (0.7 + 0.3 * (0.5 + 0.5 * np.sin(1.5 * tau + field.phases)))
        field.sizes_dirty = True


class WaveMotion(MotionLaw):
    archetype = GeometryArchetype.WAVE

    def apply(self, field, tau, dt, speed):
        o = field.origins
        field.positions[:, 0] = o[:, 0]
        field.positions[:, 2] = o[:, 2]
        field.positions[:, 1] = wave_height(o[:, 0], o[:, 2], tau)


class CrystalMotion(MotionLaw):
    archetype = GeometryArchetype.CRYSTAL

    def apply(self, field, tau, dt, speed):
        rotated = rotate_y(field.origins, 0.08 * tau)
        rotated[:, 1] += 0.05 * np.sin(0.7 * tau + field.phases)
        field.positions[:] = rotated
        # twinkle
        field.sizes[:] = field.base_sizes * (0.6 + 0.4 * np.sin(2.0 * tau + field.phases))
        field.sizes_dirty = True


class ForestMotion(MotionLaw):
    archetype = GeometryArchetype.FOREST
    drifts = True

    def apply(self, field, tau, dt, speed):
        o = field.origins
        pos = field.positions
        trunks = field.segments["trunks"]
        canopy = field.segments["canopy"]
        leaves = field.segments["leaves"]

        pos[trunks] = o[trunks]

        pos[canopy, 0] = o[canopy, 0] + 0.08 * np.sin(0.8 * tau + o[canopy, 1])
        pos[canopy, 1] = o[canopy, 1]
        pos[canopy, 2] = o[canopy, 2] + 0.04 * np.cos(0.6 * tau + o[canopy, 1])

        travel = field.travel[leaves]  # view
        travel -= LEAF_FALL * speed * dt
        travel[field.anchors[leaves] + travel < LEAF_FLOOR] += LEAF_SPAN

        phases = field.phases[leaves]
        pos[leaves, 0] = o[leaves, 0] + 0.3 * np.sin(0.7 * tau + phases)
        pos[leaves, 1] = o[leaves, 1] + travel
        pos[leaves, 2] = o[leaves, 2] + 0.1 * np.cos(0.5 * tau + phases)


class BalloonMotion(MotionLaw):
    archetype = GeometryArchetype.BALLOON
    drifts = True

    def apply(self, field, tau, dt, speed):
        field.travel += BALLOON_RISE * speed * dt
        # Anchors are balloon centers, so a balloon wraps as a unit.
        over = field.anchors + field.travel > BALLOON_CEILING
        field.travel[over] -= BALLOON_SPAN

        o = field.origins
        field.positions[:, 0] = o[:, 0] + 0.2 * np.sin(0.6 * tau + field.anchors)
        field.positions[:, 1] = o[:, 1] + field.travel
        field.positions[:, 2] = o[:, 2] + 0.1 * np.cos(0.4 * tau + field.anchors)
        field.sizes[:] = field.base_sizes * (0.9 + 0.1 * np.sin(2.0 * tau + field.phases))
        field.sizes_dirty = True


class StarfieldMotion(MotionLaw):
    archetype = GeometryArchetype.STARFIELD

    def apply(self, field, tau, dt, speed):
        galaxy = field.segments["galaxy"]
        stars = field.segments["stars"]
        o = field.origins

        # Inner arms turn faster than the rim.
        radius = np.hypot(o[galaxy, 0], o[galaxy, 2])
        field.positions[galaxy] = rotate_y(o[galaxy], 0.12 * tau / (0.6 + radius))
        field.positions[stars] = o[stars]

        field.sizes[:] = field.base_sizes * (0.3 + 0.7 * (0.5 + 0.5 * np.sin(2.5 * tau + field.phases)))
        field.sizes_dirty = True


MOTION_LAWS: Dict[GeometryArchetype, MotionLaw] = {
    law.archetype: law
    for law in (
        SphereMotion(),
        CloudMotion(),
        FlowerMotion(),
        WaveMotion(),
        CrystalMotion(),
        ForestMotion(),
        BalloonMotion(),
        StarfieldMotion(),
    )
}


def motion_law_for(archetype: GeometryArchetype) -> MotionLaw:
    return MOTION_LAWS[GeometryArchetype(archetype)]


def step(
    field: "ParticleField",
    profile: MoodVisualProfile,
    clock_seconds: float,
    speed_multiplier: float,
) -> None:
    """Advance ``field`` in place to ``clock_seconds``.

    Deterministic for identical inputs; marks the position buffer dirty.
    """
    if field.disposed:
        raise RuntimeError("Cannot step a disposed particle field")
    if field.archetype != profile.geometry_archetype:
        raise ValueError(
            f"Profile archetype {profile.geometry_archetype.value!r} does not match "
            f"field archetype {field.archetype.value!r}"
        )

    clock_seconds = float(clock_seconds)
    speed = float(speed_multiplier)
    if field.last_clock is None:
        dt = 0.0
    else:
        dt = min(max(clock_seconds - field.last_clock, 0.0), MAX_FRAME_DELTA)
    field.last_clock = clock_seconds

    field.motion.apply(field, clock_seconds * speed, dt, speed)
    field.positions_dirty = True
