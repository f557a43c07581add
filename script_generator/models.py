"""Data models for the multi-stage script generation pipeline.

Stage outputs are pydantic models with lenient field validators: the
gateway emits untrusted JSON, and every model must come out fully
populated with documented defaults instead of propagating missing keys.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Tone(str, Enum):
    ENTHUSIASTIC = "enthusiastic"
    COMEDY = "comedy"
    EDUCATIONAL = "educational"
    STORYTELLING = "storytelling"
    PROFESSIONAL = "professional"


class Language(str, Enum):
    AR = "ar"
    EN = "en"


class EnhancementLevel(str, Enum):
    BASIC = "basic"
    INTELLIGENT = "intelligent"


class PipelineStage(str, Enum):
    """Orchestrator states, in execution order."""

    NOT_STARTED = "not_started"
    ANALYZING_INSIGHTS = "analyzing_insights"
    GENERATING_HOOKS = "generating_hooks"
    GENERATING_STATISTICS = "generating_statistics"
    ASSEMBLING_SCRIPT = "assembling_script"
    ANALYZING_QUALITY = "analyzing_quality"
    COMPLETED = "completed"
    DEGRADED = "degraded"


HOOK_TYPES = ("statistic", "question", "promise", "problem")
ENGAGEMENT_LEVELS = ("high", "medium", "low")
AUDIENCE_FITS = ("excellent", "good", "fair", "poor")


def _clamp_int(value: Any, low: int, high: int, default: int) -> int:
    """Coerce *value* to an int inside ``[low, high]``; *default* if not numeric."""
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return int(max(low, min(high, round(number))))


def _clamp_float(value: Any, low: float, high: float, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return max(low, min(high, number))


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _string_list(value: Any) -> list[str]:
    """Keep non-empty strings from a list; a lone string becomes a one-item list."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if isinstance(v, (str, int, float)) and str(v).strip()]


def _dict_items(value: Any) -> list[dict]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


# ----------------------------------------------------------------------
# Request
# ----------------------------------------------------------------------


class GenerationRequest(BaseModel):
    """One script generation request. Immutable once constructed."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    topic: str = Field(min_length=1, max_length=500)
    key_points: Optional[str] = Field(default=None, max_length=1000)
    tone: Tone
    language: Language = Language.AR
    duration: int = Field(default=60, ge=30, le=180)
    enhancement_level: EnhancementLevel = EnhancementLevel.INTELLIGENT


# ----------------------------------------------------------------------
# Stage 1: insights
# ----------------------------------------------------------------------


class InsightStatistic(BaseModel):
    number: str = ""
    context: str = ""
    source: str = ""
    impact: int = 5

    @field_validator("number", "context", "source", mode="before")
    @classmethod
    def _strings(cls, v: Any) -> str:
        return _text(v)

    @field_validator("impact", mode="before")
    @classmethod
    def _impact(cls, v: Any) -> int:
        return _clamp_int(v, 1, 10, 5)


class InsightBundle(BaseModel):
    statistics: list[InsightStatistic] = Field(default_factory=list)
    pain_points: list[str] = Field(default_factory=list)
    solutions: list[str] = Field(default_factory=list)
    success_examples: list[str] = Field(default_factory=list)
    power_words: list[str] = Field(default_factory=list)
    current_trends: list[str] = Field(default_factory=list)

    @field_validator("statistics", mode="before")
    @classmethod
    def _statistics(cls, v: Any) -> list[dict]:
        return _dict_items(v)

    @field_validator(
        "pain_points", "solutions", "success_examples", "power_words", "current_trends",
        mode="before",
    )
    @classmethod
    def _lists(cls, v: Any) -> list[str]:
        return _string_list(v)


# ----------------------------------------------------------------------
# Stage 2: hooks
# ----------------------------------------------------------------------


class Hook(BaseModel):
    text: str = ""
    type: str = "question"
    impact_score: int = 1
    reasoning: str = ""

    @field_validator("text", "reasoning", mode="before")
    @classmethod
    def _strings(cls, v: Any) -> str:
        return _text(v)

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, v: Any) -> str:
        value = _text(v).lower()
        return value if value in HOOK_TYPES else "question"

    @field_validator("impact_score", mode="before")
    @classmethod
    def _score(cls, v: Any) -> int:
        # Missing scores take the bottom of the range and rank with the weakest.
        return _clamp_int(v, 1, 10, 1)


# ----------------------------------------------------------------------
# Stage 3: statistics
# ----------------------------------------------------------------------


class StatisticItem(BaseModel):
    number: str = ""
    full_text: str = ""
    context: str = ""
    source: str = ""
    impact_level: int = 1
    usage_suggestion: str = ""

    @field_validator("number", "full_text", "context", "source", "usage_suggestion", mode="before")
    @classmethod
    def _strings(cls, v: Any) -> str:
        return _text(v)

    @field_validator("impact_level", mode="before")
    @classmethod
    def _level(cls, v: Any) -> int:
        return _clamp_int(v, 1, 10, 1)


# ----------------------------------------------------------------------
# Stage 5: quality
# ----------------------------------------------------------------------


class QualityBreakdown(BaseModel):
    """Six graded dimensions; maxima 25/20/20/15/10/10 sum to 100."""

    hook_strength: int = 0
    content_clarity: int = 0
    tone_matching: int = 0
    engagement: int = 0
    timing: int = 0
    originality: int = 0

    @field_validator("hook_strength", mode="before")
    @classmethod
    def _hook(cls, v: Any) -> int:
        return _clamp_int(v, 0, 25, 0)

    @field_validator("content_clarity", "tone_matching", mode="before")
    @classmethod
    def _twenty(cls, v: Any) -> int:
        return _clamp_int(v, 0, 20, 0)

    @field_validator("engagement", mode="before")
    @classmethod
    def _fifteen(cls, v: Any) -> int:
        return _clamp_int(v, 0, 15, 0)

    @field_validator("timing", "originality", mode="before")
    @classmethod
    def _ten(cls, v: Any) -> int:
        return _clamp_int(v, 0, 10, 0)

    def total(self) -> int:
        return (self.hook_strength + self.content_clarity + self.tone_matching
                + self.engagement + self.timing + self.originality)


class QualityReport(BaseModel):
    overall_score: int = 75
    breakdown: QualityBreakdown = Field(default_factory=QualityBreakdown)
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    confidence_score: float = 0.8
    engagement_prediction: Literal["high", "medium", "low"] = "medium"
    target_audience_fit: Literal["excellent", "good", "fair", "poor"] = "good"

    @field_validator("overall_score", mode="before")
    @classmethod
    def _overall(cls, v: Any) -> int:
        return _clamp_int(v, 0, 100, 75)

    @field_validator("breakdown", mode="before")
    @classmethod
    def _breakdown(cls, v: Any) -> dict:
        return v if isinstance(v, (dict, QualityBreakdown)) else {}

    @field_validator("strengths", "improvements", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> list[str]:
        return _string_list(v)

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _confidence(cls, v: Any) -> float:
        number = _clamp_float(v, 0.0, 100.0, 0.8)
        # Some graders answer on a 0-100 scale.
        if number > 1.0:
            number = number / 100.0
        return round(number, 2)

    @field_validator("engagement_prediction", mode="before")
    @classmethod
    def _engagement(cls, v: Any) -> str:
        value = _text(v).lower()
        return value if value in ENGAGEMENT_LEVELS else "medium"

    @field_validator("target_audience_fit", mode="before")
    @classmethod
    def _fit(cls, v: Any) -> str:
        value = _text(v).lower()
        return value if value in AUDIENCE_FITS else "good"


# ----------------------------------------------------------------------
# Aggregate result
# ----------------------------------------------------------------------


class GenerationMetadata(BaseModel):
    stages_completed: int = Field(default=0, ge=0, le=5)
    processing_time: float = 0.0
    confidence_score: float = 0.0
    enhancement_level: str = "intelligent"


class GenerationResult(BaseModel):
    """Terminal aggregate handed back to the caller.

    Either fully populated with ``success=True`` or a structured error
    (``success=False`` plus ``error``/``error_code``).
    """

    success: bool
    script: str = ""
    word_count: int = 0
    estimated_duration: int = 0
    quality_analysis: QualityReport = Field(default_factory=QualityReport)
    insights_used: InsightBundle = Field(default_factory=InsightBundle)
    hooks_generated: list[Hook] = Field(default_factory=list)
    statistics_used: list[StatisticItem] = Field(default_factory=list)
    generation_metadata: GenerationMetadata = Field(default_factory=GenerationMetadata)
    engagement_score: Optional[float] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @property
    def is_degraded(self) -> bool:
        return "mock" in self.generation_metadata.enhancement_level


@dataclass
class StageMetrics:
    """Timing for one pipeline stage."""

    stage_name: str
    stage_type: str  # "ai" | "programmatic"
    duration_ms: int = 0
    succeeded: bool = True
