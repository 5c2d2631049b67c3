"""
Tests for particle field generation.

Tests:
- Buffer shapes for every archetype at full particle count
- Color convexity and brightness scaling
- Phase range
- Regeneration keeps the statistical profile
"""

import math
import unittest

import numpy as np
import pytest

from serenity_core.moods.catalog import MoodName
from serenity_core.moods.profiles import GeometryArchetype, profile_for
from serenity_core.scene.distributions import CLOUD_LIMIT, TREE_BASES
from serenity_core.scene.field import generate
from serenity_core.scene.motion import motion_law_for


@pytest.mark.parametrize("mood", list(MoodName))
def test_buffers_sized_to_particle_count(mood):
    profile = profile_for(mood)
    field = generate(profile, 0.6, np.random.default_rng(7))
    n = profile.particle_count

    assert field.count == n
    assert field.positions.shape == (n, 3)
    assert field.origins.shape == (n, 3)
    assert field.colors.shape == (n, 3)
    assert field.sizes.shape == (n,)
    assert field.phases.shape == (n,)
    assert field.anchors.shape == (n,)
    assert field.travel.shape == (n,)
    assert field.positions.dtype == np.float32
    assert field.colors.dtype == np.float32
    assert field.sizes.dtype == np.float32
    assert np.all(np.isfinite(field.positions))
    assert np.all(field.sizes > 0)

    covered = sum(s.stop - s.start for s in field.segments.values())
    assert covered == n


@pytest.mark.parametrize("mood", list(MoodName))
def test_phases_in_range(mood):
    field = generate(profile_for(mood), 1.0, np.random.default_rng(3))
    assert float(field.phases.min()) >= 0.0
    assert float(field.phases.max()) < 2 * math.pi


class TestFieldColors(unittest.TestCase):
    def setUp(self):
        self.profile = profile_for(MoodName.HAPPY)
        self.field = generate(self.profile, 1.0, np.random.default_rng(11))

    def test_colors_are_convex_palette_mix(self):
        palette = np.asarray(self.profile.palette)
        lo = palette.min(axis=0) - 1e-5
        hi = palette.max(axis=0) + 1e-5
        self.assertTrue(np.all(self.field.base_colors >= lo))
        self.assertTrue(np.all(self.field.base_colors <= hi))

    def test_brightness_scales_colors(self):
        dim = generate(self.profile, 0.5, np.random.default_rng(11))
        np.testing.assert_allclose(dim.colors, np.clip(self.field.base_colors * 0.5, 0, 1), rtol=1e-6)
        self.assertTrue(np.all(dim.colors <= self.field.colors + 1e-6))

    def test_apply_brightness_rescales_from_base(self):
        self.field.apply_brightness(0.2)
        self.field.apply_brightness(1.0)
        np.testing.assert_allclose(self.field.colors, self.field.base_colors, rtol=1e-6)
        self.assertTrue(self.field.colors_dirty)

    def test_colors_clipped(self):
        bright = generate(self.profile, 3.0, np.random.default_rng(11))
        self.assertLessEqual(float(bright.colors.max()), 1.0)


class TestFieldLayout(unittest.TestCase):
    def test_motion_law_selected_at_generation(self):
        for mood in MoodName:
            profile = profile_for(mood)
            field = generate(profile, 0.6, np.random.default_rng(0))
            self.assertIs(field.motion, motion_law_for(profile.geometry_archetype))

    def test_forest_segments_and_tree_slots(self):
        field = generate(profile_for(MoodName.STRESSED), 0.6, np.random.default_rng(5))
        self.assertEqual(set(field.segments), {"trunks", "canopy", "leaves"})
        trunks = field.origins[field.segments["trunks"]]
        # Each trunk particle sits close to one of the fixed tree bases.
        d = np.hypot(
            trunks[:, 0][:, None] - TREE_BASES[:, 0][None, :],
            trunks[:, 2][:, None] - TREE_BASES[:, 1][None, :],
        )
        self.assertLess(float(d.min(axis=1).max()), 0.5)

    def test_starfield_segments(self):
        field = generate(profile_for(MoodName.CALM), 0.6, np.random.default_rng(5))
        stars = field.origins[field.segments["stars"]]
        radius = np.linalg.norm(stars, axis=1)
        self.assertGreaterEqual(float(radius.min()), 12.0 - 1e-3)
        galaxy = field.origins[field.segments["galaxy"]]
        self.assertLess(float(np.abs(galaxy[:, 1]).max()), 1.0)

    def test_cloud_anchors_within_limit(self):
        field = generate(profile_for(MoodName.CHILL), 0.6, np.random.default_rng(5))
        self.assertTrue(np.all(field.anchors <= CLOUD_LIMIT))

    def test_seed_reproducible(self):
        profile = profile_for(MoodName.ANXIOUS)
        a = generate(profile, 0.6, np.random.default_rng(99))
        b = generate(profile, 0.6, np.random.default_rng(99))
        np.testing.assert_array_equal(a.positions, b.positions)
        np.testing.assert_array_equal(a.colors, b.colors)
        np.testing.assert_array_equal(a.phases, b.phases)

    def test_regeneration_keeps_statistical_profile(self):
        profile = profile_for(MoodName.TIRED)
        first = generate(profile, 0.6, np.random.default_rng(1))
        again = generate(profile, 0.6, np.random.default_rng(2))
        self.assertEqual(first.count, again.count)
        self.assertFalse(np.array_equal(first.positions, again.positions))
        a, b = first.stats(), again.stats()
        self.assertEqual(a["segments"], b["segments"])
        np.testing.assert_allclose(a["colorMean"], b["colorMean"], atol=0.05)
        self.assertAlmostEqual(a["sizeMean"], b["sizeMean"], delta=0.02)

    def test_wave_starts_on_surface(self):
        from serenity_core.scene.distributions import wave_height

        field = generate(profile_for(MoodName.ANXIOUS), 0.6, np.random.default_rng(4))
        o = field.origins
        np.testing.assert_allclose(o[:, 1], wave_height(o[:, 0], o[:, 2], 0.0), atol=1e-5)

    def test_dispose_marks_field(self):
        field = generate(profile_for(MoodName.PLAYFUL), 0.6, np.random.default_rng(4))
        field.dispose()
        field.dispose()
        self.assertTrue(field.disposed)
        self.assertEqual(field.archetype, GeometryArchetype.BALLOON)


if __name__ == "__main__":
    unittest.main()
