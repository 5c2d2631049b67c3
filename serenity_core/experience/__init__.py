"""Experience session: state machine, audio channels and device-local preferences."""

from .audio import AudioController, AudioOutput, SilentAudioOutput
from .controller import ExperienceController, ExperienceSettings, ExperienceState
from .local_store import DeviceStore

__all__ = [
    "AudioController",
    "AudioOutput",
    "SilentAudioOutput",
    "ExperienceController",
    "ExperienceSettings",
    "ExperienceState",
    "DeviceStore",
]
