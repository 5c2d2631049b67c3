"""
Archetype point distributions.

Each builder places ``n`` particles for one geometry archetype and returns a
``Layout``: float32 positions, named index segments and a per-particle drift
anchor (the coordinate checked against the wrap limit for drifting
archetypes, zero elsewhere). All builders are vectorized and O(n).
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict

import numpy as np

from ..moods.profiles import GeometryArchetype

TAU = 2.0 * math.pi
GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))

SPHERE_RADIUS = 2.6

CLOUD_PUFFS = 7
CLOUD_LIMIT = 6.0
CLOUD_SPAN = 12.0

FLOWER_SPIRAL_FRACTION = 0.6
FLOWER_SPIRAL_RADIUS = 3.2
FLOWER_BLOOMS = 6
FLOWER_BLOOM_RING = 1.6

WAVE_EXTENT = 10.0
WAVE_AMPLITUDE = 1.2

CRYSTAL_SPIKES = 8
CRYSTAL_SPIKE_FRACTION = 0.8
CRYSTAL_INNER = 0.4
CRYSTAL_LENGTH = 2.4
CRYSTAL_BASE_RADIUS = 0.3
CRYSTAL_SPARKLE_RADIUS = 4.5

FOREST_SLOTS = 9
FOREST_TRUNK_FRACTION = 0.25
FOREST_CANOPY_FRACTION = 0.45
FOREST_CANOPY_RADIUS = 0.9
FOREST_CANOPY_HEIGHT = 1.0
FOREST_GROUND = -2.0
LEAF_FLOOR = -2.5
LEAF_SPAN = 7.0

BALLOONS = 12
BALLOON_CEILING = 5.0
BALLOON_SPAN = 10.0

GALAXY_FRACTION = 0.45
GALAXY_ARMS = 3
GALAXY_RADIUS = 4.0
GALAXY_TWIST = 1.2
STAR_SHELL_INNER = 12.0
STAR_SHELL_OUTER = 20.0

# Tree slots on a 3x3 grid, (x, z)
TREE_BASES = np.array(
    [(x, z) for z in (-3.0, -1.0, 1.0) for x in (-3.2, 0.0, 3.2)],
    dtype=np.float32,
)


@dataclass
class Layout:
    positions: np.ndarray
    segments: Dict[str, slice]
    anchors: np.ndarray


def unit_vectors(rng: np.random.Generator, n: int) -> np.ndarray:
    v = rng.normal(size=(n, 3))
    norms = np.linalg.norm(v, axis=1, keepdims=True)
    norms[norms == 0.0] = 1.0
    return v / norms


def wave_height(x, z, tau: float):
    """Height of the wave surface at absolute (scaled) time ``tau``."""
    return WAVE_AMPLITUDE * np.sin((x + tau) * 0.5) + 0.35 * np.sin(z * 0.8 + 0.6 * tau)


def _finish(positions: np.ndarray, segments: Dict[str, slice], anchors=None) -> Layout:
    n = positions.shape[0]
    if anchors is None:
        anchors = np.zeros(n, dtype=np.float32)
    return Layout(
        positions=np.ascontiguousarray(positions, dtype=np.float32),
        segments=segments,
        anchors=np.asarray(anchors, dtype=np.float32),
    )


def sphere(n: int, rng: np.random.Generator) -> Layout:
    theta = rng.uniform(0.0, TAU, n)
    cos_phi = rng.uniform(-1.0, 1.0, n)
    sin_phi = np.sqrt(1.0 - cos_phi * cos_phi)
    r = SPHERE_RADIUS * (0.85 + 0.3 * rng.random(n))
    pos = np.empty((n, 3))
    pos[:, 0] = r * sin_phi * np.cos(theta)
    pos[:, 1] = r * cos_phi
    pos[:, 2] = r * sin_phi * np.sin(theta)
    return _finish(pos, {"shell": slice(0, n)})


def cloud(n: int, rng: np.random.Generator) -> Layout:
    centers = np.column_stack(
        [
            rng.uniform(-5.0, 5.0, CLOUD_PUFFS),
            rng.uniform(0.5, 2.5, CLOUD_PUFFS),
            rng.uniform(-2.0, 1.0, CLOUD_PUFFS),
        ]
    )
    slot = np.arange(n) % CLOUD_PUFFS
    offsets = rng.normal(size=(n, 3)) * np.array([0.9, 0.35, 0.6])
    pos = centers[slot] + offsets
    return _finish(pos, {"puffs": slice(0, n)}, anchors=centers[slot, 0])


def flower(n: int, rng: np.random.Generator) -> Layout:
    n_spiral = int(n * FLOWER_SPIRAL_FRACTION)
    n_bloom = n - n_spiral
    pos = np.empty((n, 3))

    k = np.arange(n_spiral)
    angle = k * GOLDEN_ANGLE
    r = FLOWER_SPIRAL_RADIUS * np.sqrt((k + 0.5) / max(n_spiral, 1))
    pos[:n_spiral, 0] = r * np.cos(angle)
    pos[:n_spiral, 1] = r * np.sin(angle)
    pos[:n_spiral, 2] = rng.normal(0.0, 0.05, n_spiral)

    bloom = np.arange(n_bloom) % FLOWER_BLOOMS
    bloom_angle = TAU * bloom / FLOWER_BLOOMS
    spread = rng.normal(size=(n_bloom, 3)) * np.array([0.25, 0.25, 0.1])
    pos[n_spiral:, 0] = FLOWER_BLOOM_RING * np.cos(bloom_angle) + spread[:, 0]
    pos[n_spiral:, 1] = FLOWER_BLOOM_RING * np.sin(bloom_angle) + spread[:, 1]
    pos[n_spiral:, 2] = 0.2 + spread[:, 2]

    return _finish(pos, {"spiral": slice(0, n_spiral), "blooms": slice(n_spiral, n)})


def wave(n: int, rng: np.random.Generator) -> Layout:
    side = max(1, int(math.ceil(math.sqrt(n))))
    rows = max(1, int(math.ceil(n / side)))
    idx = np.arange(n)
    gx = idx % side
    gz = idx // side
    pos = np.empty((n, 3))
    pos[:, 0] = gx / max(side - 1, 1) * WAVE_EXTENT - WAVE_EXTENT / 2 + rng.uniform(-0.02, 0.02, n)
    pos[:, 2] = gz / max(rows - 1, 1) * WAVE_EXTENT - WAVE_EXTENT / 2 + rng.uniform(-0.02, 0.02, n)
    pos[:, 1] = wave_height(pos[:, 0], pos[:, 2], 0.0)
    return _finish(pos, {"surface": slice(0, n)})


def crystal_axes() -> np.ndarray:
    """Unit axis of each crystal spike, alternating slightly up and down."""
    k = np.arange(CRYSTAL_SPIKES)
    azimuth = TAU * k / CRYSTAL_SPIKES
    elevation = np.where(k % 2 == 0, 0.35, -0.35)
    return np.column_stack(
        [
            np.cos(elevation) * np.cos(azimuth),
            np.sin(elevation),
            np.cos(elevation) * np.sin(azimuth),
        ]
    )


def crystal(n: int, rng: np.random.Generator) -> Layout:
    n_spikes = int(n * CRYSTAL_SPIKE_FRACTION)
    n_sparkle = n - n_spikes
    pos = np.empty((n, 3))

    axes = crystal_axes()[np.arange(n_spikes) % CRYSTAL_SPIKES]
    t = rng.random(n_spikes)
    along = CRYSTAL_INNER + t * CRYSTAL_LENGTH
    # Perpendicular offset shrinking toward the tip gives a cone.
    jitter = rng.normal(size=(n_spikes, 3))
    jitter -= axes * np.sum(jitter * axes, axis=1, keepdims=True)
    norms = np.linalg.norm(jitter, axis=1, keepdims=True)
    norms[norms == 0.0] = 1.0
    radius = CRYSTAL_BASE_RADIUS * (1.0 - t) * rng.random(n_spikes)
    pos[:n_spikes] = axes * along[:, None] + jitter / norms * radius[:, None]

    r = CRYSTAL_SPARKLE_RADIUS * np.cbrt(rng.random(n_sparkle))
    pos[n_spikes:] = unit_vectors(rng, n_sparkle) * r[:, None]

    return _finish(pos, {"spikes": slice(0, n_spikes), "sparkles": slice(n_spikes, n)})


def forest(n: int, rng: np.random.Generator) -> Layout:
    n_trunk = int(n * FOREST_TRUNK_FRACTION)
    n_canopy = int(n * FOREST_CANOPY_FRACTION)
    canopy_end = n_trunk + n_canopy
    n_leaves = n - canopy_end
    pos = np.empty((n, 3))
    anchors = np.zeros(n)

    trunk_slot = np.arange(n_trunk) % FOREST_SLOTS
    pos[:n_trunk, 0] = TREE_BASES[trunk_slot, 0] + rng.normal(0.0, 0.06, n_trunk)
    pos[:n_trunk, 1] = rng.uniform(FOREST_GROUND, 0.2, n_trunk)
    pos[:n_trunk, 2] = TREE_BASES[trunk_slot, 1] + rng.normal(0.0, 0.06, n_trunk)

    canopy_slot = np.arange(n_canopy) % FOREST_SLOTS
    shell = unit_vectors(rng, n_canopy) * (
        FOREST_CANOPY_RADIUS * (0.8 + 0.2 * rng.random(n_canopy))
    )[:, None]
    pos[n_trunk:canopy_end, 0] = TREE_BASES[canopy_slot, 0] + shell[:, 0]
    pos[n_trunk:canopy_end, 1] = FOREST_CANOPY_HEIGHT + shell[:, 1] * 0.8
    pos[n_trunk:canopy_end, 2] = TREE_BASES[canopy_slot, 1] + shell[:, 2]

    pos[canopy_end:, 0] = rng.uniform(-5.0, 5.0, n_leaves)
    pos[canopy_end:, 1] = rng.uniform(LEAF_FLOOR, LEAF_FLOOR + LEAF_SPAN, n_leaves)
    pos[canopy_end:, 2] = rng.uniform(-4.0, 3.0, n_leaves)
    anchors[canopy_end:] = pos[canopy_end:, 1]

    segments = {
        "trunks": slice(0, n_trunk),
        "canopy": slice(n_trunk, canopy_end),
        "leaves": slice(canopy_end, n),
    }
    return _finish(pos, segments, anchors=anchors)


def balloon(n: int, rng: np.random.Generator) -> Layout:
    centers = np.column_stack(
        [
            rng.uniform(-4.0, 4.0, BALLOONS),
            rng.uniform(-4.5, 4.5, BALLOONS),
            rng.uniform(-2.0, 2.0, BALLOONS),
        ]
    )
    radii = rng.uniform(0.3, 0.45, BALLOONS)
    slot = np.arange(n) % BALLOONS
    shell = unit_vectors(rng, n) * radii[slot][:, None]
    shell[:, 1] *= 1.15
    pos = centers[slot] + shell
    return _finish(pos, {"balloons": slice(0, n)}, anchors=centers[slot, 1])


def starfield(n: int, rng: np.random.Generator) -> Layout:
    n_galaxy = int(n * GALAXY_FRACTION)
    n_stars = n - n_galaxy
    pos = np.empty((n, 3))

    arm = np.arange(n_galaxy) % GALAXY_ARMS
    r = GALAXY_RADIUS * np.sqrt(rng.random(n_galaxy))
    angle = arm * TAU / GALAXY_ARMS + r * GALAXY_TWIST + rng.normal(0.0, 0.25, n_galaxy) / (1.0 + r)
    pos[:n_galaxy, 0] = r * np.cos(angle)
    pos[:n_galaxy, 1] = rng.normal(0.0, 0.12, n_galaxy) * (1.0 - 0.6 * r / GALAXY_RADIUS)
    pos[:n_galaxy, 2] = r * np.sin(angle)

    shell_r = rng.uniform(STAR_SHELL_INNER, STAR_SHELL_OUTER, n_stars)
    pos[n_galaxy:] = unit_vectors(rng, n_stars) * shell_r[:, None]

    return _finish(pos, {"galaxy": slice(0, n_galaxy), "stars": slice(n_galaxy, n)})


BUILDERS: Dict[GeometryArchetype, Callable[[int, np.random.Generator], Layout]] = {
    GeometryArchetype.SPHERE: sphere,
    GeometryArchetype.CLOUD: cloud,
    GeometryArchetype.FLOWER: flower,
    GeometryArchetype.WAVE: wave,
    GeometryArchetype.CRYSTAL: crystal,
    GeometryArchetype.FOREST: forest,
    GeometryArchetype.BALLOON: balloon,
    GeometryArchetype.STARFIELD: starfield,
}

# Size vs. normalized distance from origin: factor = base + slope * d.
# Positive slope grows particles toward the edge, negative shrinks them.
SIZE_RULES: Dict[GeometryArchetype, tuple] = {
    GeometryArchetype.SPHERE: (0.6, 0.6),
    GeometryArchetype.CLOUD: (1.3, -0.6),
    GeometryArchetype.FLOWER: (1.2, -0.5),
    GeometryArchetype.WAVE: (0.7, 0.5),
    GeometryArchetype.CRYSTAL: (1.1, -0.5),
    GeometryArchetype.FOREST: (1.0, -0.3),
    GeometryArchetype.BALLOON: (0.8, 0.4),
    GeometryArchetype.STARFIELD: (1.2, -0.8),
}


def build_layout(archetype: GeometryArchetype, n: int, rng: np.random.Generator) -> Layout:
    return BUILDERS[GeometryArchetype(archetype)](n, rng)


def size_factors(archetype: GeometryArchetype, positions: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    base, slope = SIZE_RULES[GeometryArchetype(archetype)]
    dist = np.linalg.norm(positions, axis=1)
    max_dist = float(dist.max()) if dist.size else 0.0
    norm = dist / max(max_dist, 1e-6)
    return (base + slope * norm) * rng.uniform(0.5, 1.0, positions.shape[0])
