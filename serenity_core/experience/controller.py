"""
Experience controller - the per-view state machine.

    Idle -> Loading -> Playing <-> Paused
    any state -> Idle on mood change (teardown first) or close

The controller exclusively owns the active particle field, scene, animation
handle and audio controller. Pausing only pauses audio; visuals keep
animating. Frame errors are contained by an ErrorBoundary which swaps in a
static fallback scene and stops the loop.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

import numpy as np

from ..error_boundary import ErrorBoundary
from ..errors import AudioLoadError, SceneInitError
from ..moods.catalog import MoodName, MoodSeed, parse_mood_name, seed_for
from ..moods.profiles import MoodVisualProfile, profile_for
from ..scene.composer import RenderableScene, compose, fallback_scene
from ..scene.field import ParticleField, generate
from ..scene.loop import AnimationHandle, AnimationLoop, FrameScheduler
from ..scene.motion import step
from ..scene.renderer import HeadlessRenderer, Renderer, ensure_surface
from ..scene.resources import ResourceTracker
from .audio import AudioController
from .local_store import DeviceStore

_LOGGER = logging.getLogger(__name__)

VOLUME_RANGE = (0, 100)
SPEED_RANGE = (10, 100)
BRIGHTNESS_RANGE = (20, 100)


def _clamp(value: float, bounds) -> int:
    lo, hi = bounds
    return int(max(lo, min(hi, round(float(value)))))


class ExperienceState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass
class ExperienceSettings:
    volume: int = 70
    animation_speed: int = 50
    brightness: int = 60

    def __post_init__(self):
        self.volume = _clamp(self.volume, VOLUME_RANGE)
        self.animation_speed = _clamp(self.animation_speed, SPEED_RANGE)
        self.brightness = _clamp(self.brightness, BRIGHTNESS_RANGE)

    @property
    def volume_level(self) -> float:
        return self.volume / 100.0

    @property
    def speed_multiplier(self) -> float:
        return self.animation_speed / 100.0

    @property
    def brightness_level(self) -> float:
        return self.brightness / 100.0

    def to_dict(self) -> Dict[str, int]:
        return {
            "volume": self.volume,
            "animationSpeed": self.animation_speed,
            "brightness": self.brightness,
        }


def _default_sound(seed: MoodSeed) -> str:
    return seed.audio_url


class ExperienceController:
    def __init__(
        self,
        *,
        renderer: Optional[Renderer] = None,
        scheduler: Optional[FrameScheduler] = None,
        audio: Optional[AudioController] = None,
        device_store: Optional[DeviceStore] = None,
        settings: Optional[ExperienceSettings] = None,
        tracker: Optional[ResourceTracker] = None,
        seed: Optional[int] = None,
        width: int = 800,
        height: int = 450,
        sound_source: Callable[[MoodSeed], str] = _default_sound,
    ):
        self.settings = settings or ExperienceSettings()
        self.renderer = renderer if renderer is not None else HeadlessRenderer(width, height)
        self.scheduler = scheduler or FrameScheduler()
        self.audio = audio or AudioController(volume=self.settings.volume_level)
        self.device_store = device_store
        self.tracker = tracker or ResourceTracker()
        self.width = int(width)
        self.height = int(height)
        self._sound_source = sound_source
        self._rng = np.random.default_rng(seed)
        self._loop = AnimationLoop(self.scheduler, self._frame)
        self._boundary = ErrorBoundary("experience", fallback=self._on_frame_error)

        self._state = ExperienceState.IDLE
        self._mood: Optional[MoodName] = None
        self._profile: Optional[MoodVisualProfile] = None
        self._field: Optional[ParticleField] = None
        self._scene: Optional[RenderableScene] = None
        self._handle: Optional[AnimationHandle] = None

    # ------------------------------------------------------------------
    # Read-only views

    @property
    def state(self) -> ExperienceState:
        return self._state

    @property
    def mood(self) -> Optional[MoodName]:
        return self._mood

    @property
    def profile(self) -> Optional[MoodVisualProfile]:
        return self._profile

    @property
    def field(self) -> Optional[ParticleField]:
        return self._field

    @property
    def scene(self) -> Optional[RenderableScene]:
        return self._scene

    @property
    def animating(self) -> bool:
        return self._handle is not None and self._handle.active

    @property
    def clock(self) -> float:
        return self._loop.clock.elapsed

    @property
    def boundary(self) -> ErrorBoundary:
        return self._boundary

    # ------------------------------------------------------------------
    # Transitions

    def select_mood(self, mood: Union[str, MoodName]) -> ExperienceState:
        """Tear down the current experience and load ``mood``.

        Raises UnknownMoodError before touching any state.
        """
        mood = parse_mood_name(mood)
        self._teardown()

        self._state = ExperienceState.LOADING
        self._mood = mood
        self._profile = profile_for(mood)
        _LOGGER.info("Loading %s experience (%s)", mood.value, self._profile.geometry_archetype.value)

        self._build_scene()
        audio_ready = self._load_audio(seed_for(mood))
        self._start(audio_ready)
        return self._state

    def toggle_play(self) -> ExperienceState:
        """Playing <-> Paused. Only audio is affected."""
        if self._state is ExperienceState.PLAYING:
            self.audio.pause_background_sound()
            self._state = ExperienceState.PAUSED
        elif self._state is ExperienceState.PAUSED:
            try:
                if not self.audio.has_background:
                    self.audio.load_background_sound(self._sound_source(seed_for(self._mood)))
                self.audio.play_background_sound()
            except AudioLoadError as e:
                _LOGGER.error("Cannot resume %s audio: %s", self._mood.value, e)
            else:
                self._state = ExperienceState.PLAYING
        else:
            _LOGGER.debug("toggle_play ignored in state %s", self._state.value)
        return self._state

    def close(self) -> None:
        """Unmount: stop audio and the animation loop unconditionally."""
        self._teardown()
        self._loop.clock.reset()
        self._state = ExperienceState.IDLE
        self._mood = None
        self._profile = None

    def __enter__(self) -> "ExperienceController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Parameter updates, applied from the next frame on

    def set_volume(self, value: float) -> int:
        self.settings.volume = _clamp(value, VOLUME_RANGE)
        self.audio.set_volume(self.settings.volume_level)
        return self.settings.volume

    def set_animation_speed(self, value: float) -> int:
        self.settings.animation_speed = _clamp(value, SPEED_RANGE)
        return self.settings.animation_speed

    def set_brightness(self, value: float) -> int:
        self.settings.brightness = _clamp(value, BRIGHTNESS_RANGE)
        if self._scene is not None and not self._scene.disposed:
            self._scene.set_brightness(self.settings.brightness_level)
        return self.settings.brightness

    def play_voice_prompt(self) -> bool:
        if self._mood is None:
            return False
        try:
            self.audio.play_voice_prompt()
        except AudioLoadError as e:
            _LOGGER.error("Voice prompt for %s unavailable: %s", self._mood.value, e)
            return False
        return True

    def save_favorite(self) -> MoodName:
        if self._mood is None:
            raise RuntimeError("No mood selected")
        if self.device_store is None:
            raise RuntimeError("No device store configured")
        return self.device_store.save_favorite_mood(self._mood)

    def resize(self, width: int, height: int) -> bool:
        if width <= 0 or height <= 0:
            _LOGGER.debug("Ignoring resize to %sx%s", width, height)
            return False
        self.width, self.height = int(width), int(height)
        self.renderer.set_viewport(self.width, self.height)
        if self._scene is not None and not self._scene.disposed:
            self._scene.resize(self.width, self.height)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self._state.value,
            "mood": self._mood.value if self._mood else None,
            "settings": self.settings.to_dict(),
            "animating": self.animating,
            "clock": round(self.clock, 3),
            "frames": self._loop.frames,
            "fallback": bool(self._scene is not None and self._scene.fallback),
        }

    # ------------------------------------------------------------------
    # Internals

    def _build_scene(self) -> None:
        level = self.settings.brightness_level
        try:
            ensure_surface(self.renderer, self.width, self.height)
            self._field = generate(self._profile, level, self._rng)
            self._scene = compose(
                self._field,
                self._profile,
                level,
                width=self.width,
                height=self.height,
                rng=self._rng,
                tracker=self.tracker,
            )
        except SceneInitError as e:
            _LOGGER.error("Scene initialization failed for %s: %s", self._mood.value, e)
            if self._field is not None:
                self._field.dispose()
                self._field = None
            self._scene = fallback_scene(self.width, self.height, level, self.tracker)

    def _load_audio(self, seed: MoodSeed) -> bool:
        try:
            self.audio.load_background_sound(self._sound_source(seed))
        except AudioLoadError:
            return False
        try:
            self.audio.load_voice_prompt(seed.long_voice_prompt)
        except AudioLoadError:
            _LOGGER.warning("Continuing %s without a voice prompt", seed.name.value)
        return True

    def _start(self, audio_ready: bool) -> None:
        if self._field is not None:
            self._handle = self._loop.start()

        self._state = ExperienceState.PAUSED
        if not audio_ready:
            return
        try:
            self.audio.play_background_sound()
        except AudioLoadError as e:
            _LOGGER.error("Background sound for %s failed to play: %s", self._mood.value, e)
            return
        self._state = ExperienceState.PLAYING

    def _frame(self, clock: float) -> None:
        self._boundary.execute(self._advance, clock)

    def _advance(self, clock: float) -> None:
        speed = self.settings.speed_multiplier
        # Positions for this frame are written before the render call.
        step(self._field, self._profile, clock, speed)
        self._scene.update(clock, speed)
        self.renderer.render(self._scene)

    def _on_frame_error(self, exc: Exception) -> None:
        _LOGGER.warning("Swapping %s scene for static fallback", self._mood.value if self._mood else "?")
        self._stop_animation()
        if self._scene is not None:
            self._scene.dispose()
        if self._field is not None:
            self._field.dispose()
            self._field = None
        self._scene = fallback_scene(self.width, self.height, self.settings.brightness_level, self.tracker)

    def _stop_animation(self) -> None:
        if self._handle is not None:
            self._handle.stop()
            self._handle = None

    def _teardown(self) -> None:
        self._stop_animation()
        if self._scene is not None:
            self._scene.dispose()
            self._scene = None
        if self._field is not None:
            self._field.dispose()
            self._field = None
        self.audio.cleanup()
        self._boundary.reset()
