"""
Tests for the mood catalog and visual profile table.

Tests:
- Profile table is total over the mood set with valid palettes
- Unknown moods are rejected, never substituted
- Route segment resolution
"""

import unittest

from serenity_core.errors import UnknownMoodError
from serenity_core.moods.catalog import (
    AGE_GROUPS,
    MOOD_NAMES,
    MoodName,
    age_groups_payload,
    local_mood_data,
    mood_from_route,
    parse_mood_name,
    seed_records,
)
from serenity_core.moods.profiles import GeometryArchetype, MoodVisualProfile, hex_to_rgb, profile_for


class TestProfileTable(unittest.TestCase):
    def test_every_mood_has_valid_profile(self):
        for mood in MoodName:
            profile = profile_for(mood)
            self.assertGreater(profile.particle_count, 0)
            for color in profile.palette:
                self.assertEqual(len(color), 3)
                for c in color:
                    self.assertGreaterEqual(c, 0.0)
                    self.assertLessEqual(c, 1.0)

    def test_archetype_mapping(self):
        expected = {
            "Tired": GeometryArchetype.SPHERE,
            "Chill": GeometryArchetype.CLOUD,
            "Happy": GeometryArchetype.FLOWER,
            "Anxious": GeometryArchetype.WAVE,
            "Focused": GeometryArchetype.CRYSTAL,
            "Stressed": GeometryArchetype.FOREST,
            "Playful": GeometryArchetype.BALLOON,
            "Calm": GeometryArchetype.STARFIELD,
        }
        for name, archetype in expected.items():
            self.assertEqual(profile_for(name).geometry_archetype, archetype)

    def test_unknown_mood_raises(self):
        for bad in ("Sleepy", "", "tired", None, 3):
            with self.assertRaises(UnknownMoodError):
                profile_for(bad)

    def test_profile_validation(self):
        with self.assertRaises(ValueError):
            MoodVisualProfile(
                geometry_archetype=GeometryArchetype.SPHERE,
                particle_count=0,
                base_color=(1.0, 1.0, 1.0),
                secondary_color=(1.0, 1.0, 1.0),
                accent_color=(1.0, 1.0, 1.0),
                background_intensity=0.1,
                particle_size=0.1,
                particle_opacity=0.5,
                use_advanced_shading=False,
            )

    def test_hex_to_rgb(self):
        self.assertEqual(hex_to_rgb("#FFFFFF"), (1.0, 1.0, 1.0))
        self.assertEqual(hex_to_rgb("000000"), (0.0, 0.0, 0.0))
        with self.assertRaises(ValueError):
            hex_to_rgb("#FFF")

    def test_to_dict_uses_camel_case(self):
        data = profile_for("Calm").to_dict()
        self.assertEqual(data["geometryArchetype"], "starfield")
        self.assertEqual(data["particleCount"], 3000)
        self.assertTrue(data["useAdvancedShading"])


class TestCatalog(unittest.TestCase):
    def test_closed_sets(self):
        self.assertEqual(
            MOOD_NAMES,
            ["Tired", "Chill", "Happy", "Anxious", "Focused", "Stressed", "Playful", "Calm"],
        )
        self.assertEqual(AGE_GROUPS, ["Child", "Kid", "Adult", "Mature"])

    def test_parse_mood_name(self):
        self.assertIs(parse_mood_name("Calm"), MoodName.CALM)
        self.assertIs(parse_mood_name(MoodName.HAPPY), MoodName.HAPPY)
        with self.assertRaises(UnknownMoodError):
            parse_mood_name("calm")

    def test_mood_from_route(self):
        self.assertIs(mood_from_route("tired"), MoodName.TIRED)
        self.assertIs(mood_from_route("Focused"), MoodName.FOCUSED)
        with self.assertRaises(UnknownMoodError):
            mood_from_route("TIRED")
        with self.assertRaises(UnknownMoodError):
            mood_from_route("")
        with self.assertRaises(UnknownMoodError):
            mood_from_route("sleepy")

    def test_seed_records(self):
        records = seed_records()
        self.assertEqual([r["name"] for r in records], MOOD_NAMES)
        tired = records[0]
        self.assertEqual(tired["visualPath"], "/assets/moods/tired_visual.mp4")
        self.assertEqual(tired["soundPath"], "/assets/moods/tired_sound.mp3")
        self.assertEqual(tired["icon"], "moon")

    def test_local_mood_data_has_remote_audio(self):
        data = local_mood_data("Calm")
        self.assertTrue(data["soundPath"].startswith("https://"))
        self.assertIn("Breathe in peace", data["voicePrompt"])

    def test_age_groups_payload(self):
        payload = age_groups_payload()
        self.assertEqual([g["name"] for g in payload], AGE_GROUPS)
        self.assertTrue(all(g["description"] for g in payload))


if __name__ == "__main__":
    unittest.main()
