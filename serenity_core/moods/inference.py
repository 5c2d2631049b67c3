"""
Keyword-based mood inference.

Single shared implementation used by the chat endpoint and by the chat
client's offline fallback. Rules are evaluated in table order with
case-insensitive substring matching; at most ``MAX_SUGGESTIONS`` matches are
returned and an empty match falls back to ``DEFAULT_MOODS``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, List, Sequence, Tuple

from .catalog import MoodName

_LOGGER = logging.getLogger(__name__)

RULESET_VERSION = 2
MAX_SUGGESTIONS = 2
DEFAULT_MOODS: Tuple[MoodName, MoodName] = (MoodName.CALM, MoodName.CHILL)


@dataclass(frozen=True)
class MoodInferenceRule:
    mood: MoodName
    keywords: FrozenSet[str]

    def matches(self, text_lower: str) -> bool:
        return any(keyword in text_lower for keyword in self.keywords)


def _rule(mood: MoodName, *keywords: str) -> MoodInferenceRule:
    return MoodInferenceRule(mood=mood, keywords=frozenset(k.lower() for k in keywords))


# Priority order matters: earlier rules win the two suggestion slots.
RULES: Tuple[MoodInferenceRule, ...] = (
    _rule(MoodName.TIRED, "tired", "exhausted", "sleep"),
    _rule(MoodName.STRESSED, "stress", "overwhelm", "pressure"),
    _rule(MoodName.ANXIOUS, "anxious", "worry", "nervous"),
    _rule(MoodName.HAPPY, "happy", "joy", "excited", "glad"),
    _rule(MoodName.FOCUSED, "focus", "concentrate", "attention"),
    _rule(MoodName.CHILL, "relax", "chill", "unwind"),
    _rule(MoodName.PLAYFUL, "play", "fun", "light", "enjoy"),
    _rule(MoodName.CALM, "calm", "peace", "tranquil", "quiet"),
)


def infer(text: str, rules: Sequence[MoodInferenceRule] = RULES) -> List[MoodName]:
    """Map free text to at most two suggested moods, in rule order.

    Never returns an empty list.
    """
    text_lower = (text or "").lower()
    matched: List[MoodName] = []
    for rule in rules:
        if rule.mood in matched:
            continue
        if rule.matches(text_lower):
            matched.append(rule.mood)
            if len(matched) == MAX_SUGGESTIONS:
                break

    if not matched:
        _LOGGER.debug("No mood keywords matched; using defaults")
        return list(DEFAULT_MOODS)
    return matched


def suggestion_message(moods: Sequence[MoodName]) -> str:
    names = " or ".join(m.value for m in moods)
    return f"Based on what you've shared, I think you might benefit from our {names} experience."


OFFLINE_MESSAGE = (
    "I'm sorry, I'm having trouble connecting right now. "
    "Let me suggest some experiences that might help you."
)
