"""
Audio playback for an experience.

``AudioController`` is constructed per experience view and owns two
channels: a looping background sound and a one-shot voice prompt. Actual
playback is delegated to an ``AudioOutput`` produced by an injected factory;
``SilentAudioOutput`` is the headless implementation.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol, Tuple

from ..errors import AudioLoadError

_LOGGER = logging.getLogger(__name__)

# Voice prompts are spoken text, not audio files.
SPEECH_SCHEME = "speech:"


class AudioOutput(Protocol):
    def load(self, source: str, loop: bool = False) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def stop(self) -> None: ...

    def set_volume(self, level: float) -> None: ...

    def unload(self) -> None: ...


class SilentAudioOutput:
    """Headless output: records what would be played.

    ``load`` fails for empty sources and anything in ``unavailable``.
    """

    def __init__(self, unavailable: Tuple[str, ...] = ()):
        self.unavailable = tuple(unavailable)
        self.source: Optional[str] = None
        self.loop = False
        self.playing = False
        self.volume = 1.0
        self.events: List[str] = []

    def load(self, source: str, loop: bool = False) -> None:
        if not source:
            raise AudioLoadError(source or "", "empty source")
        if source in self.unavailable:
            raise AudioLoadError(source, "source unavailable")
        self.source = source
        self.loop = loop
        self.events.append("load")

    def play(self) -> None:
        if self.source is None:
            raise AudioLoadError("", "nothing loaded")
        self.playing = True
        self.events.append("play")

    def pause(self) -> None:
        self.playing = False
        self.events.append("pause")

    def stop(self) -> None:
        self.playing = False
        self.events.append("stop")

    def set_volume(self, level: float) -> None:
        self.volume = level

    def unload(self) -> None:
        self.playing = False
        self.source = None
        self.events.append("unload")


AudioOutputFactory = Callable[[], AudioOutput]


def _clamp_volume(level: float) -> float:
    return max(0.0, min(1.0, float(level)))


class AudioController:
    def __init__(self, output_factory: AudioOutputFactory = SilentAudioOutput, volume: float = 0.7):
        self._factory = output_factory
        self._volume = _clamp_volume(volume)
        self._background: Optional[AudioOutput] = None
        self._voice: Optional[AudioOutput] = None
        self._background_source: Optional[str] = None
        self._voice_source: Optional[str] = None
        self.is_background_playing = False
        self.is_voice_playing = False

    @property
    def volume(self) -> float:
        return self._volume

    @property
    def background_source(self) -> Optional[str]:
        return self._background_source

    @property
    def voice_source(self) -> Optional[str]:
        return self._voice_source

    @property
    def has_background(self) -> bool:
        return self._background is not None

    def _open(self, source: str, loop: bool) -> AudioOutput:
        output = self._factory()
        output.set_volume(self._volume)
        try:
            output.load(source, loop=loop)
        except AudioLoadError:
            output.unload()
            raise
        except Exception as e:
            output.unload()
            raise AudioLoadError(source, str(e)) from e
        return output

    def load_background_sound(self, source: str) -> None:
        """Load a looping background sound, replacing the current one.

        Raises AudioLoadError; the previous sound is released either way.
        """
        self._release_background()
        try:
            self._background = self._open(source, loop=True)
        except AudioLoadError as e:
            _LOGGER.error("Background sound failed to load: %s", e)
            raise
        self._background_source = source

    def load_voice_prompt(self, text: str) -> None:
        self._release_voice()
        source = text if text.startswith(SPEECH_SCHEME) else f"{SPEECH_SCHEME}{text}"
        try:
            self._voice = self._open(source, loop=False)
        except AudioLoadError as e:
            _LOGGER.error("Voice prompt failed to load: %s", e)
            raise
        self._voice_source = source

    def play_background_sound(self) -> None:
        if self._background is None:
            raise AudioLoadError(self._background_source or "", "no background sound loaded")
        if not self.is_background_playing:
            self._background.play()
            self.is_background_playing = True

    def pause_background_sound(self) -> None:
        if self._background is not None and self.is_background_playing:
            self._background.pause()
        self.is_background_playing = False

    def stop_background_sound(self) -> None:
        if self._background is not None:
            self._background.stop()
        self.is_background_playing = False

    def play_voice_prompt(self) -> None:
        if self._voice is None:
            raise AudioLoadError(self._voice_source or "", "no voice prompt loaded")
        if not self.is_voice_playing:
            self._voice.play()
            self.is_voice_playing = True

    def voice_prompt_finished(self) -> None:
        """Called by the output when a one-shot prompt reaches its end."""
        self.is_voice_playing = False

    def stop_voice_prompt(self) -> None:
        if self._voice is not None:
            self._voice.stop()
        self.is_voice_playing = False

    def set_volume(self, level: float) -> None:
        self._volume = _clamp_volume(level)
        for output in (self._background, self._voice):
            if output is not None:
                output.set_volume(self._volume)

    def _release_background(self) -> None:
        if self._background is not None:
            self._background.stop()
            self._background.unload()
        self._background = None
        self._background_source = None
        self.is_background_playing = False

    def _release_voice(self) -> None:
        if self._voice is not None:
            self._voice.stop()
            self._voice.unload()
        self._voice = None
        self._voice_source = None
        self.is_voice_playing = False

    def cleanup(self) -> None:
        """Stop and release both channels."""
        self._release_background()
        self._release_voice()
