"""
Moods - closed mood set, visual profiles and keyword inference.

- catalog: MoodName/AgeGroup sets and seed records
- profiles: MoodVisualProfile table (mood → archetype, palette, counts)
- inference: shared keyword rule table used by server and client fallback
"""

from .catalog import AGE_GROUPS, MOOD_NAMES, AgeGroup, MoodName, mood_from_route, parse_mood_name
from .inference import DEFAULT_MOODS, RULES, RULESET_VERSION, infer
from .profiles import GeometryArchetype, MoodVisualProfile, profile_for

__all__ = [
    "AGE_GROUPS",
    "MOOD_NAMES",
    "AgeGroup",
    "MoodName",
    "mood_from_route",
    "parse_mood_name",
    "DEFAULT_MOODS",
    "RULES",
    "RULESET_VERSION",
    "infer",
    "GeometryArchetype",
    "MoodVisualProfile",
    "profile_for",
]
