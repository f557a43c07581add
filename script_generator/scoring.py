"""Lexical heuristics for scripts graded without a model call.

Each bonus applies independently; totals are clamped to ``[0, 100]``.
"""

from __future__ import annotations

import math
import re

from .models import Language, Tone
from .tones import policy_for

QUALITY_BASE = 70
ENGAGEMENT_BASE = 60

OPTIMAL_WORDS = (150, 300)

_STRONG_OPENING = re.compile(r".{1,50}[!?؟]")
_CALL_TO_ACTION = re.compile(r"(شارك|اتبع|اشترك|علق|لايك|تابع|subscribe|follow|share|comment)", re.IGNORECASE)
_QUESTION_MARK = re.compile(r"[?؟]")
_DIGIT = re.compile(r"\d")

EMOTIONAL_WORDS = ("مذهل", "رائع", "لا تصدق", "سر", "اكتشف", "تخيل")

# Words per second by script language, for the single-call path.
LANGUAGE_RATES = {Language.AR: 2.7, Language.EN: 2.3}


def word_count(script: str) -> int:
    return len(script.split())


def estimate_duration(words: int, words_per_second: float) -> int:
    """Spoken duration in whole seconds, rounded up."""
    if words <= 0:
        return 0
    return math.ceil(words / words_per_second)


def _clamp(score: float) -> int:
    return int(min(100, max(0, score)))


def quality_score(script: str, tone: Tone | str) -> int:
    score = QUALITY_BASE

    if _STRONG_OPENING.match(script.lstrip()):
        score += 10
    if _CALL_TO_ACTION.search(script):
        score += 10

    low, high = OPTIMAL_WORDS
    if low <= word_count(script) <= high:
        score += 10

    if any(k in script for k in policy_for(tone).quality_keywords):
        score += 5

    return _clamp(score)


def engagement_score(script: str, tone: Tone | str) -> int:
    score = ENGAGEMENT_BASE

    if _QUESTION_MARK.search(script):
        score += 15
    score += 3 * sum(1 for w in EMOTIONAL_WORDS if w in script)
    if _DIGIT.search(script):
        score += 10
    if any(m in script for m in policy_for(tone).engagement_markers):
        score += 10

    return _clamp(score)


def engagement_level(score: float) -> str:
    if score >= 80:
        return "high"
    if score >= 60:
        return "medium"
    return "low"
