"""
Mood catalog - the closed mood and age-group sets plus their seed records.

The server seed (``seed_records``) mirrors what the mood data service
publishes over ``/api/moods``. ``local_mood_data`` is the richer client-side
copy used when the backend cannot be reached.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Union

from ..errors import UnknownMoodError


class MoodName(str, Enum):
    """The eight moods, in catalog order."""

    TIRED = "Tired"
    CHILL = "Chill"
    HAPPY = "Happy"
    ANXIOUS = "Anxious"
    FOCUSED = "Focused"
    STRESSED = "Stressed"
    PLAYFUL = "Playful"
    CALM = "Calm"


class AgeGroup(str, Enum):
    CHILD = "Child"
    KID = "Kid"
    ADULT = "Adult"
    MATURE = "Mature"


MOOD_NAMES: List[str] = [m.value for m in MoodName]
AGE_GROUPS: List[str] = [a.value for a in AgeGroup]


@dataclass(frozen=True)
class MoodSeed:
    name: MoodName
    description: str
    voice_prompt: str
    icon: str
    # Client-side extras
    long_voice_prompt: str
    audio_url: str

    @property
    def visual_path(self) -> str:
        return f"/assets/moods/{self.name.value.lower()}_visual.mp4"

    @property
    def sound_path(self) -> str:
        return f"/assets/moods/{self.name.value.lower()}_sound.mp3"


_SEEDS: Dict[MoodName, MoodSeed] = {
    MoodName.TIRED: MoodSeed(
        name=MoodName.TIRED,
        description="Gentle relaxation to help you unwind and rest.",
        voice_prompt="Allow your body to relax.",
        icon="moon",
        long_voice_prompt=(
            "Allow your body to relax. Feel the tension melt away as you drift into tranquility."
        ),
        audio_url="https://cdn.pixabay.com/download/audio/2022/03/10/audio_1fb29c1397.mp3",
    ),
    MoodName.CHILL: MoodSeed(
        name=MoodName.CHILL,
        description="Let your worries drift away with soothing sensations.",
        voice_prompt="Let your worries drift away.",
        icon="cloud",
        long_voice_prompt=(
            "Let your worries drift away like clouds in a gentle breeze. "
            "Feel the calm spreading through your body."
        ),
        audio_url="https://cdn.pixabay.com/download/audio/2022/01/18/audio_428d1f5860.mp3",
    ),
    MoodName.HAPPY: MoodSeed(
        name=MoodName.HAPPY,
        description="Embrace the feeling of joy and positive energy.",
        voice_prompt="Embrace the feeling of joy.",
        icon="smile",
        long_voice_prompt=(
            "Embrace the feeling of joy. Feel positivity flowing through you, "
            "bringing light to every part of your being."
        ),
        audio_url="https://cdn.pixabay.com/download/audio/2022/01/13/audio_ccf97ad22b.mp3",
    ),
    MoodName.ANXIOUS: MoodSeed(
        name=MoodName.ANXIOUS,
        description="Find your inner stillness with calming rhythms.",
        voice_prompt="Find your inner stillness.",
        icon="water",
        long_voice_prompt=(
            "Find your inner stillness. With each breath, feel your anxiety "
            "slowly dissolving into calmness."
        ),
        audio_url="https://cdn.pixabay.com/download/audio/2021/09/06/audio_8cb749dc4c.mp3",
    ),
    MoodName.FOCUSED: MoodSeed(
        name=MoodName.FOCUSED,
        description="Center your thoughts and enhance concentration.",
        voice_prompt="Center your thoughts.",
        icon="bullseye",
        long_voice_prompt=(
            "Center your thoughts. Let your mind become clear and focused, "
            "like a perfectly still pond."
        ),
        audio_url="https://cdn.pixabay.com/download/audio/2021/11/01/audio_16bc369401.mp3",
    ),
    MoodName.STRESSED: MoodSeed(
        name=MoodName.STRESSED,
        description="Immerse in nature's peace to release tension.",
        voice_prompt="Imagine the peace of nature surrounding you.",
        icon="wind",
        long_voice_prompt=(
            "Imagine the peace of nature surrounding you. Feel the stress "
            "melting away with each gentle breath."
        ),
        audio_url="https://cdn.pixabay.com/download/audio/2021/04/07/audio_f8feb23275.mp3",
    ),
    MoodName.PLAYFUL: MoodSeed(
        name=MoodName.PLAYFUL,
        description="Let your imagination soar with light-hearted joy.",
        voice_prompt="Let your imagination soar.",
        icon="feather",
        long_voice_prompt=(
            "Let your imagination soar. Embrace the lightness of being and "
            "enjoy this moment of playful energy."
        ),
        audio_url="https://cdn.pixabay.com/download/audio/2020/11/10/audio_cb46f2b816.mp3",
    ),
    MoodName.CALM: MoodSeed(
        name=MoodName.CALM,
        description="Breathe in peace, breathe out tension.",
        voice_prompt="Breathe in peace, breathe out tension.",
        icon="star",
        long_voice_prompt=(
            "Breathe in peace, breathe out tension. Feel a wave of calm washing "
            "over you, bringing harmony to your mind and body."
        ),
        audio_url="https://cdn.pixabay.com/download/audio/2022/04/27/audio_361904d625.mp3",
    ),
}


AGE_GROUP_INFO: Dict[AgeGroup, Dict[str, str]] = {
    AgeGroup.CHILD: {
        "title": "Child",
        "icon": "child",
        "description": "Playful and gentle experiences designed for young minds.",
    },
    AgeGroup.KID: {
        "title": "Kid",
        "icon": "user",
        "description": "Engaging content that nurtures focus and creativity.",
    },
    AgeGroup.ADULT: {
        "title": "Adult",
        "icon": "user-tie",
        "description": "Balanced relaxation for everyday stress relief.",
    },
    AgeGroup.MATURE: {
        "title": "Mature",
        "icon": "user-friends",
        "description": "Serene experiences focused on wellness and reflection.",
    },
}


def parse_mood_name(value: Union[str, MoodName]) -> MoodName:
    """Return the canonical mood for ``value`` or raise UnknownMoodError.

    Only exact canonical names are accepted; callers that need a lenient
    lookup (route segments, storage queries) normalize first.
    """
    if isinstance(value, MoodName):
        return value
    if isinstance(value, str):
        try:
            return MoodName(value)
        except ValueError:
            pass
    raise UnknownMoodError(value)


def is_mood_name(value: object) -> bool:
    return isinstance(value, str) and value in MOOD_NAMES


def mood_from_route(segment: str) -> MoodName:
    """Resolve an ``/experience/<segment>`` path segment.

    The first character is upper-cased and the rest kept as-is, so
    ``tired`` resolves while ``TIRED`` does not.
    """
    if not segment:
        raise UnknownMoodError(segment)
    return parse_mood_name(segment[0].upper() + segment[1:])


def seed_for(mood: Union[str, MoodName]) -> MoodSeed:
    return _SEEDS[parse_mood_name(mood)]


def seed_records() -> List[Dict[str, Any]]:
    """Insert payloads for the mood data service, in catalog order."""
    return [
        {
            "name": seed.name.value,
            "description": seed.description,
            "visualPath": seed.visual_path,
            "soundPath": seed.sound_path,
            "voicePrompt": seed.voice_prompt,
            "icon": seed.icon,
        }
        for seed in (_SEEDS[m] for m in MoodName)
    ]


def local_mood_data(mood: Union[str, MoodName]) -> Dict[str, Any]:
    """Client-side mood record used when the API is unavailable."""
    seed = seed_for(mood)
    return {
        "name": seed.name.value,
        "description": seed.description,
        "icon": seed.icon,
        "visualPath": seed.visual_path,
        "soundPath": seed.audio_url,
        "voicePrompt": seed.long_voice_prompt,
    }


def age_groups_payload() -> List[Dict[str, str]]:
    return [{"name": group.value, **AGE_GROUP_INFO[group]} for group in AgeGroup]
