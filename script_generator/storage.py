"""Persistence for generated scripts and their feedback.

The generation core never touches storage; the HTTP layer hands a
finished ``GenerationResult`` to a ``ScriptStore``, which assigns the id
and timestamps.  ``InMemoryScriptStore`` serves development and tests;
``postgres.PostgresScriptStore`` is used when ``DATABASE_URL`` is set.
"""

from __future__ import annotations

import itertools
import threading
from abc import ABC, abstractmethod
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from .models import GenerationRequest, GenerationResult

POPULAR_TOPICS_LIMIT = 5
DAILY_STATS_DAYS = 7


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class NewScript(BaseModel):
    topic: str
    key_points: Optional[str] = None
    tone: str
    language: str = "ar"
    generated_script: str
    word_count: int = 0
    estimated_duration: int = 0
    quality_score: float = 0.0
    engagement_score: Optional[float] = None
    engagement_prediction: str = "medium"
    generation_time: float = 0.0
    enhancement_level: str = "intelligent"
    metadata: dict[str, Any] = Field(default_factory=dict)
    user_ip: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_result(
        cls,
        request: GenerationRequest,
        result: GenerationResult,
        user_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> "NewScript":
        meta = result.generation_metadata
        return cls(
            topic=request.topic,
            key_points=request.key_points,
            tone=request.tone.value,
            language=request.language.value,
            generated_script=result.script,
            word_count=result.word_count,
            estimated_duration=result.estimated_duration,
            quality_score=float(result.quality_analysis.overall_score),
            engagement_score=result.engagement_score,
            engagement_prediction=result.quality_analysis.engagement_prediction,
            generation_time=meta.processing_time,
            enhancement_level=meta.enhancement_level,
            metadata={
                "requested_enhancement_level": request.enhancement_level.value,
                "insights_used": result.insights_used.model_dump(),
                "hooks_generated": [h.model_dump() for h in result.hooks_generated],
                "statistics_used": [s.model_dump() for s in result.statistics_used],
                "quality_analysis": result.quality_analysis.model_dump(),
                "generation_metadata": meta.model_dump(),
            },
            user_ip=user_ip,
            user_agent=(user_agent or "")[:500] or None,
        )


class ScriptRecord(NewScript):
    id: int
    created_at: datetime
    updated_at: datetime
    average_rating: float = 0.0
    feedback_count: int = 0

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "topic": self.topic,
            "key_points": self.key_points,
            "tone": self.tone,
            "language": self.language,
            "generated_script": self.generated_script,
            "word_count": self.word_count,
            "estimated_duration": self.estimated_duration,
            "quality_score": self.quality_score,
            "engagement_score": self.engagement_score,
            "engagement_prediction": self.engagement_prediction,
            "enhancement_level": self.enhancement_level,
            "generation_time": self.generation_time,
            "average_rating": self.average_rating,
            "feedback_count": self.feedback_count,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class NewFeedback(BaseModel):
    rating: int = Field(ge=1, le=5)
    usefulness: Optional[int] = Field(default=None, ge=1, le=5)
    clarity: Optional[int] = Field(default=None, ge=1, le=5)
    engagement: Optional[int] = Field(default=None, ge=1, le=5)
    feedback_text: Optional[str] = Field(default=None, max_length=1000)
    user_ip: Optional[str] = None


class FeedbackRecord(NewFeedback):
    id: int
    script_id: int
    created_at: datetime

    @property
    def overall_score(self) -> float:
        scores = [s for s in (self.rating, self.usefulness, self.clarity, self.engagement) if s]
        return sum(scores) / len(scores) if scores else 0.0

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "script_id": self.script_id,
            "rating": self.rating,
            "usefulness": self.usefulness,
            "clarity": self.clarity,
            "engagement": self.engagement,
            "feedback_text": self.feedback_text,
            "overall_score": self.overall_score,
            "created_at": _iso(self.created_at),
        }


class ScriptNotFound(LookupError):
    pass


class ScriptStore(ABC):
    @abstractmethod
    async def create_script(self, script: NewScript) -> ScriptRecord:
        ...

    @abstractmethod
    async def get_script(self, script_id: int) -> Optional[ScriptRecord]:
        ...

    @abstractmethod
    async def add_feedback(self, script_id: int, feedback: NewFeedback) -> FeedbackRecord:
        """Store feedback; raises ``ScriptNotFound`` for an unknown script."""

    @abstractmethod
    async def analytics(self) -> dict:
        ...

    @abstractmethod
    async def ping(self) -> dict:
        """Connection status for the health endpoint."""

    async def start(self) -> None:
        pass

    async def close(self) -> None:
        pass


def daily_window(days: int, today: Optional[date] = None) -> list[date]:
    """The last *days* calendar days ending today, oldest first."""
    today = today or utcnow().date()
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


class InMemoryScriptStore(ScriptStore):
    def __init__(self):
        self._scripts: dict[int, ScriptRecord] = {}
        self._feedback: list[FeedbackRecord] = []
        self._script_ids = itertools.count(1)
        self._feedback_ids = itertools.count(1)
        self._lock = threading.Lock()

    async def create_script(self, script: NewScript) -> ScriptRecord:
        now = utcnow()
        with self._lock:
            record = ScriptRecord(
                **script.model_dump(), id=next(self._script_ids),
                created_at=now, updated_at=now,
            )
            self._scripts[record.id] = record
        return record

    async def get_script(self, script_id: int) -> Optional[ScriptRecord]:
        with self._lock:
            record = self._scripts.get(script_id)
            if record is None:
                return None
            ratings = [f.rating for f in self._feedback if f.script_id == script_id]
        return record.model_copy(update={
            "average_rating": _mean(ratings),
            "feedback_count": len(ratings),
        })

    async def add_feedback(self, script_id: int, feedback: NewFeedback) -> FeedbackRecord:
        with self._lock:
            if script_id not in self._scripts:
                raise ScriptNotFound(script_id)
            record = FeedbackRecord(
                **feedback.model_dump(), id=next(self._feedback_ids),
                script_id=script_id, created_at=utcnow(),
            )
            self._feedback.append(record)
        return record

    async def analytics(self) -> dict:
        with self._lock:
            scripts = list(self._scripts.values())
            feedback = list(self._feedback)

        created_on = Counter(s.created_at.date() for s in scripts)
        engagement = [s.engagement_score for s in scripts if s.engagement_score is not None]

        def ranked(field: str, limit: Optional[int] = None) -> list[dict]:
            counts = Counter(getattr(s, field) for s in scripts)
            return [{field: value, "count": n} for value, n in counts.most_common(limit)]

        def average(field: str) -> float:
            return _mean([getattr(f, field) for f in feedback if getattr(f, field) is not None])

        return {
            "total_scripts": len(scripts),
            "popular_topics": ranked("topic", POPULAR_TOPICS_LIMIT),
            "tone_statistics": ranked("tone"),
            "language_statistics": ranked("language"),
            "daily_stats": [
                {"date": day.isoformat(), "count": created_on.get(day, 0)}
                for day in daily_window(DAILY_STATS_DAYS)
            ],
            "average_ratings": {
                "overall_rating": average("rating"),
                "usefulness": average("usefulness"),
                "clarity": average("clarity"),
                "engagement": average("engagement"),
            },
            "quality_metrics": {
                "average_quality_score": _mean([s.quality_score for s in scripts]),
                "average_engagement_score": _mean(engagement),
                "average_duration": _mean([s.estimated_duration for s in scripts]),
            },
        }

    async def ping(self) -> dict:
        return {"status": "connected", "driver": "memory"}
