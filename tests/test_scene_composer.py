"""
Tests for scene composition and GPU resource tracking.

Tests:
- Camera and lights per archetype
- Auxiliary meshes per archetype
- Resize keeps particle state
- Dispose releases every tracked resource
"""

import json
import unittest

import numpy as np
import pytest

from serenity_core.errors import SceneInitError
from serenity_core.moods.catalog import MoodName
from serenity_core.moods.profiles import profile_for
from serenity_core.scene.composer import BACKGROUND, compose, fallback_scene
from serenity_core.scene.field import generate
from serenity_core.scene.motion import step
from serenity_core.scene.renderer import HeadlessRenderer, ensure_surface
from serenity_core.scene.resources import ResourceTracker


def _scene(mood, brightness=0.6, tracker=None, width=800, height=450):
    profile = profile_for(mood)
    rng = np.random.default_rng(17)
    field = generate(profile, brightness, rng)
    scene = compose(field, profile, brightness, width=width, height=height, rng=rng, tracker=tracker)
    return profile, field, scene


@pytest.mark.parametrize("mood", list(MoodName))
def test_compose_every_mood(mood):
    tracker = ResourceTracker()
    profile, field, scene = _scene(mood, tracker=tracker)

    assert scene.camera.fov == 75.0
    assert scene.camera.near == 0.1
    assert scene.camera.far == 1000.0
    assert 2 <= len(scene.lights) <= 4
    assert scene.points.count == profile.particle_count
    assert scene.points.field is field
    assert tracker.live_count == len(scene.resources) > 0

    json.dumps(scene.to_dict())

    scene.dispose()
    assert tracker.live_count == 0


class TestComposer(unittest.TestCase):
    def test_light_intensity_scales_with_brightness(self):
        _, _, scene = _scene(MoodName.TIRED, brightness=0.8)
        ambient = next(light for light in scene.lights if light.kind == "ambient")
        directional = next(light for light in scene.lights if light.kind == "directional")
        self.assertAlmostEqual(ambient.intensity, 0.8)
        self.assertAlmostEqual(directional.intensity, 0.4)
        self.assertEqual(directional.position, (1.0, 1.0, 1.0))

        scene.set_brightness(0.4)
        self.assertAlmostEqual(ambient.intensity, 0.4)
        self.assertAlmostEqual(directional.intensity, 0.2)

    def test_extra_lights(self):
        _, _, crystal = _scene(MoodName.FOCUSED)
        _, _, forest = _scene(MoodName.STRESSED)
        _, _, calm = _scene(MoodName.CALM)
        self.assertIn("point", [light.kind for light in crystal.lights])
        self.assertIn("point", [light.kind for light in calm.lights])
        self.assertIn("hemisphere", [light.kind for light in forest.lights])

    def test_background(self):
        profile, _, scene = _scene(MoodName.HAPPY, brightness=0.5)
        expected = [c * 0.5 * profile.background_intensity for c in BACKGROUND]
        np.testing.assert_allclose(scene.background, expected)

    def test_shading_material(self):
        _, _, advanced = _scene(MoodName.CALM)
        _, _, plain = _scene(MoodName.CHILL)
        self.assertEqual(advanced.points.material.program, "shader:starfield")
        self.assertIn("time", advanced.points.material.uniforms)
        self.assertEqual(plain.points.material.program, "points")
        self.assertIsNotNone(plain.points.material.texture)

    def test_auxiliary_meshes(self):
        _, _, tired = _scene(MoodName.TIRED)
        self.assertEqual([m.name for m in tired.meshes], ["glow"])

        _, _, wave = _scene(MoodName.ANXIOUS)
        ground = wave.meshes[0]
        self.assertEqual(ground.shape, "plane")
        before = ground.vertices[:, 1].copy()
        wave.update(5.0, 1.0)
        self.assertFalse(np.array_equal(before, ground.vertices[:, 1]))

        _, _, crystal = _scene(MoodName.FOCUSED)
        cones = [m for m in crystal.meshes if m.shape == "cone"]
        self.assertEqual(len(cones), 8)

        _, _, forest = _scene(MoodName.STRESSED)
        groups = {m.group for m in forest.meshes}
        self.assertEqual(len(groups), 9)
        self.assertEqual(len(forest.meshes), 18)

        _, _, calm = _scene(MoodName.CALM)
        self.assertIn("nebula", [m.name for m in calm.meshes])
        self.assertEqual(len(calm.extra_points), 1)

        _, _, playful = _scene(MoodName.PLAYFUL)
        self.assertEqual(playful.meshes, [])

    def test_resize_keeps_particle_state(self):
        profile, field, scene = _scene(MoodName.HAPPY)
        step(field, profile, 3.0, 0.5)
        snapshot = field.positions.copy()
        self.assertTrue(scene.resize(1024, 512))
        self.assertEqual(scene.viewport, (1024, 512))
        self.assertAlmostEqual(scene.camera.aspect, 2.0)
        np.testing.assert_array_equal(field.positions, snapshot)
        self.assertIs(scene.points.field, field)

    def test_resize_to_zero_ignored(self):
        _, _, scene = _scene(MoodName.HAPPY)
        self.assertFalse(scene.resize(0, 300))
        self.assertEqual(scene.viewport, (800, 450))

    def test_invalid_surface_raises(self):
        with self.assertRaises(SceneInitError):
            _scene(MoodName.TIRED, width=0)
        with self.assertRaises(SceneInitError):
            _scene(MoodName.TIRED, height=-1)
        with self.assertRaises(SceneInitError):
            ensure_surface(None, 800, 450)
        with self.assertRaises(SceneInitError):
            ensure_surface(HeadlessRenderer(has_surface=False), 800, 450)

    def test_dispose_is_idempotent(self):
        tracker = ResourceTracker()
        _, _, scene = _scene(MoodName.CALM, tracker=tracker)
        allocated = tracker.allocated_total
        self.assertEqual(scene.dispose(), allocated)
        self.assertEqual(scene.dispose(), 0)
        self.assertEqual(tracker.stats()["released_total"], allocated)
        self.assertTrue(scene.disposed)
        with self.assertRaises(RuntimeError):
            scene.update(1.0, 1.0)

    def test_shared_tracker_releases_only_own_resources(self):
        tracker = ResourceTracker()
        _, _, a = _scene(MoodName.TIRED, tracker=tracker)
        _, _, b = _scene(MoodName.CALM, tracker=tracker)
        a.dispose()
        self.assertEqual(tracker.live_count, len(b.resources))
        b.dispose()
        self.assertEqual(tracker.live_count, 0)

    def test_unbounded_mood_switching_does_not_leak(self):
        tracker = ResourceTracker()
        for i in range(40):
            mood = list(MoodName)[i % 8]
            _, field, scene = _scene(mood, tracker=tracker)
            scene.dispose()
            field.dispose()
        self.assertEqual(tracker.live_count, 0)

    def test_camera_orbits_around_target(self):
        _, _, scene = _scene(MoodName.TIRED)
        scene.update(30.0, 0.5)
        distance = float(np.linalg.norm(scene.camera.position))
        self.assertAlmostEqual(distance, 5.0, places=5)
        self.assertEqual(scene.camera.target, (0.0, 0.0, 0.0))

    def test_headless_render_uploads(self):
        _, field, scene = _scene(MoodName.TIRED)
        renderer = HeadlessRenderer()
        renderer.render(scene)
        self.assertEqual(renderer.frames_rendered, 1)
        self.assertFalse(field.positions_dirty)
        scene.dispose()
        with self.assertRaises(RuntimeError):
            renderer.render(scene)

    def test_fallback_scene(self):
        tracker = ResourceTracker()
        scene = fallback_scene(0, 0, 0.5, tracker)
        self.assertTrue(scene.fallback)
        self.assertIsNone(scene.points)
        self.assertEqual(scene.viewport, (1, 1))
        HeadlessRenderer().render(scene)
        data = scene.to_dict()
        self.assertTrue(data["fallback"])
        self.assertIsNone(data["archetype"])


if __name__ == "__main__":
    unittest.main()
