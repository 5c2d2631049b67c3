"""Tests for the audio controller."""

import unittest

from serenity_core.errors import AudioLoadError
from serenity_core.experience.audio import AudioController, SilentAudioOutput


class RecordingFactory:
    """Keeps every output the controller opens."""

    def __init__(self, unavailable=()):
        self.unavailable = unavailable
        self.outputs = []

    def __call__(self):
        output = SilentAudioOutput(unavailable=self.unavailable)
        self.outputs.append(output)
        return output


class BrokenOutput(SilentAudioOutput):
    def load(self, source, loop=False):
        raise OSError("device busy")


class TestAudioController(unittest.TestCase):
    def setUp(self):
        self.factory = RecordingFactory(unavailable=("missing.mp3",))
        self.audio = AudioController(output_factory=self.factory, volume=0.5)

    def test_background_loops(self):
        self.audio.load_background_sound("rain.mp3")
        self.audio.play_background_sound()
        output = self.factory.outputs[0]
        self.assertTrue(output.loop)
        self.assertTrue(output.playing)
        self.assertEqual(output.volume, 0.5)
        self.assertTrue(self.audio.is_background_playing)

    def test_play_is_idempotent(self):
        self.audio.load_background_sound("rain.mp3")
        self.audio.play_background_sound()
        self.audio.play_background_sound()
        self.assertEqual(self.factory.outputs[0].events.count("play"), 1)

    def test_pause_and_resume(self):
        self.audio.load_background_sound("rain.mp3")
        self.audio.play_background_sound()
        self.audio.pause_background_sound()
        self.assertFalse(self.audio.is_background_playing)
        self.assertFalse(self.factory.outputs[0].playing)
        self.audio.play_background_sound()
        self.assertTrue(self.audio.is_background_playing)

    def test_replacing_releases_previous(self):
        self.audio.load_background_sound("rain.mp3")
        self.audio.play_background_sound()
        self.audio.load_background_sound("waves.mp3")
        first, second = self.factory.outputs
        self.assertIsNone(first.source)
        self.assertFalse(first.playing)
        self.assertEqual(second.source, "waves.mp3")
        self.assertFalse(self.audio.is_background_playing)

    def test_load_failure_raises(self):
        with self.assertLogs("serenity_core.experience.audio", level="ERROR"):
            with self.assertRaises(AudioLoadError) as ctx:
                self.audio.load_background_sound("missing.mp3")
        self.assertEqual(ctx.exception.source, "missing.mp3")
        self.assertFalse(self.audio.has_background)
        with self.assertRaises(AudioLoadError):
            self.audio.play_background_sound()

    def test_unexpected_output_error_wrapped(self):
        audio = AudioController(output_factory=BrokenOutput)
        with self.assertLogs("serenity_core.experience.audio", level="ERROR"):
            with self.assertRaises(AudioLoadError) as ctx:
                audio.load_background_sound("rain.mp3")
        self.assertIn("device busy", str(ctx.exception))

    def test_voice_prompt_is_one_shot_speech(self):
        self.audio.load_voice_prompt("Breathe in")
        self.assertEqual(self.audio.voice_source, "speech:Breathe in")
        self.assertFalse(self.factory.outputs[0].loop)
        self.audio.play_voice_prompt()
        self.assertTrue(self.audio.is_voice_playing)
        self.audio.voice_prompt_finished()
        self.assertFalse(self.audio.is_voice_playing)

    def test_voice_prompt_without_load(self):
        with self.assertRaises(AudioLoadError):
            self.audio.play_voice_prompt()

    def test_volume_clamped_and_applied(self):
        self.audio.load_background_sound("rain.mp3")
        self.audio.load_voice_prompt("hello")
        self.audio.set_volume(1.7)
        self.assertEqual(self.audio.volume, 1.0)
        self.assertTrue(all(o.volume == 1.0 for o in self.factory.outputs))
        self.audio.set_volume(-1)
        self.assertEqual(self.audio.volume, 0.0)

    def test_cleanup_releases_both_channels(self):
        self.audio.load_background_sound("rain.mp3")
        self.audio.load_voice_prompt("hello")
        self.audio.play_background_sound()
        self.audio.play_voice_prompt()
        self.audio.cleanup()
        self.assertFalse(self.audio.has_background)
        self.assertIsNone(self.audio.voice_source)
        self.assertFalse(self.audio.is_background_playing)
        self.assertFalse(self.audio.is_voice_playing)
        self.assertTrue(all("unload" in o.events for o in self.factory.outputs))
        # Safe to call again.
        self.audio.cleanup()


if __name__ == "__main__":
    unittest.main()
