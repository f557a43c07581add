"""PostgreSQL-backed script store.

Uses an asyncpg connection pool created lazily on first use; the schema
is created on startup if missing.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import Optional

import asyncpg

from .storage import (
    DAILY_STATS_DAYS,
    POPULAR_TOPICS_LIMIT,
    FeedbackRecord,
    NewFeedback,
    NewScript,
    ScriptNotFound,
    ScriptRecord,
    ScriptStore,
    daily_window,
)

log = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS scripts (
    id                    BIGSERIAL PRIMARY KEY,
    topic                 TEXT NOT NULL,
    key_points            TEXT,
    tone                  VARCHAR(32) NOT NULL,
    language              VARCHAR(8) NOT NULL DEFAULT 'ar',
    generated_script      TEXT NOT NULL,
    word_count            INTEGER NOT NULL DEFAULT 0,
    estimated_duration    INTEGER NOT NULL DEFAULT 0,
    quality_score         DOUBLE PRECISION NOT NULL DEFAULT 0,
    engagement_score      DOUBLE PRECISION,
    engagement_prediction VARCHAR(16) NOT NULL DEFAULT 'medium',
    generation_time       DOUBLE PRECISION NOT NULL DEFAULT 0,
    enhancement_level     VARCHAR(32) NOT NULL DEFAULT 'intelligent',
    metadata              JSONB NOT NULL DEFAULT '{}'::jsonb,
    user_ip               VARCHAR(64),
    user_agent            TEXT,
    created_at            TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at            TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS scripts_tone_language_idx ON scripts (tone, language);
CREATE INDEX IF NOT EXISTS scripts_created_at_idx ON scripts (created_at);

CREATE TABLE IF NOT EXISTS script_feedback (
    id            BIGSERIAL PRIMARY KEY,
    script_id     BIGINT NOT NULL REFERENCES scripts (id) ON DELETE CASCADE,
    rating        SMALLINT NOT NULL CHECK (rating BETWEEN 1 AND 5),
    usefulness    SMALLINT CHECK (usefulness BETWEEN 1 AND 5),
    clarity       SMALLINT CHECK (clarity BETWEEN 1 AND 5),
    engagement    SMALLINT CHECK (engagement BETWEEN 1 AND 5),
    feedback_text TEXT,
    user_ip       VARCHAR(64),
    created_at    TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS script_feedback_script_rating_idx ON script_feedback (script_id, rating);
"""

_SCRIPT_COLUMNS = (
    "topic", "key_points", "tone", "language", "generated_script", "word_count",
    "estimated_duration", "quality_score", "engagement_score", "engagement_prediction",
    "generation_time", "enhancement_level", "metadata", "user_ip", "user_agent",
)


def _script_from_row(row) -> ScriptRecord:
    data = dict(row)
    metadata = data.get("metadata")
    if isinstance(metadata, str):
        data["metadata"] = json.loads(metadata)
    return ScriptRecord(**data)


class PostgresScriptStore(ScriptStore):
    def __init__(self, dsn: str, min_size: int = 2, max_size: int = 10):
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max_size
        self._pool: Optional[asyncpg.Pool] = None

    async def _get_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            self._pool = await asyncpg.create_pool(
                self._dsn, min_size=self._min_size, max_size=self._max_size,
            )
        return self._pool

    @asynccontextmanager
    async def acquire(self):
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            yield conn

    async def start(self) -> None:
        async with self.acquire() as conn:
            await conn.execute(SCHEMA)
        log.info("Database schema ready")

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def create_script(self, script: NewScript) -> ScriptRecord:
        values = script.model_dump()
        values["metadata"] = json.dumps(values["metadata"], ensure_ascii=False)
        placeholders = ", ".join(
            f"${i}::jsonb" if col == "metadata" else f"${i}"
            for i, col in enumerate(_SCRIPT_COLUMNS, start=1)
        )
        query = (
            f"INSERT INTO scripts ({', '.join(_SCRIPT_COLUMNS)}) "
            f"VALUES ({placeholders}) RETURNING *"
        )
        async with self.acquire() as conn:
            row = await conn.fetchrow(query, *(values[col] for col in _SCRIPT_COLUMNS))
        return _script_from_row(row)

    async def get_script(self, script_id: int) -> Optional[ScriptRecord]:
        async with self.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT s.*,
                       COALESCE(AVG(f.rating), 0)::float8 AS average_rating,
                       COUNT(f.id)::int AS feedback_count
                FROM scripts s
                LEFT JOIN script_feedback f ON f.script_id = s.id
                WHERE s.id = $1
                GROUP BY s.id
                """,
                script_id,
            )
        return _script_from_row(row) if row else None

    async def add_feedback(self, script_id: int, feedback: NewFeedback) -> FeedbackRecord:
        async with self.acquire() as conn:
            exists = await conn.fetchval("SELECT 1 FROM scripts WHERE id = $1", script_id)
            if not exists:
                raise ScriptNotFound(script_id)
            row = await conn.fetchrow(
                """
                INSERT INTO script_feedback
                    (script_id, rating, usefulness, clarity, engagement, feedback_text, user_ip)
                VALUES ($1, $2, $3, $4, $5, $6, $7)
                RETURNING *
                """,
                script_id, feedback.rating, feedback.usefulness, feedback.clarity,
                feedback.engagement, feedback.feedback_text, feedback.user_ip,
            )
        return FeedbackRecord(**dict(row))

    async def analytics(self) -> dict:
        window = daily_window(DAILY_STATS_DAYS)
        async with self.acquire() as conn:
            total = await conn.fetchval("SELECT COUNT(*) FROM scripts")
            topics = await conn.fetch(
                "SELECT topic, COUNT(*) AS count FROM scripts "
                "GROUP BY topic ORDER BY count DESC LIMIT $1",
                POPULAR_TOPICS_LIMIT,
            )
            tones = await conn.fetch(
                "SELECT tone, COUNT(*) AS count FROM scripts GROUP BY tone ORDER BY count DESC"
            )
            languages = await conn.fetch(
                "SELECT language, COUNT(*) AS count FROM scripts "
                "GROUP BY language ORDER BY count DESC"
            )
            daily = await conn.fetch(
                "SELECT (created_at AT TIME ZONE 'UTC')::date AS day, COUNT(*) AS count "
                "FROM scripts WHERE (created_at AT TIME ZONE 'UTC')::date >= $1 GROUP BY day",
                window[0],
            )
            ratings = await conn.fetchrow(
                """
                SELECT COALESCE(AVG(rating), 0)::float8 AS overall_rating,
                       COALESCE(AVG(usefulness), 0)::float8 AS usefulness,
                       COALESCE(AVG(clarity), 0)::float8 AS clarity,
                       COALESCE(AVG(engagement), 0)::float8 AS engagement
                FROM script_feedback
                """
            )
            quality = await conn.fetchrow(
                """
                SELECT COALESCE(AVG(quality_score), 0)::float8 AS average_quality_score,
                       COALESCE(AVG(engagement_score), 0)::float8 AS average_engagement_score,
                       COALESCE(AVG(estimated_duration), 0)::float8 AS average_duration
                FROM scripts
                """
            )

        per_day = {row["day"]: row["count"] for row in daily}
        return {
            "total_scripts": total,
            "popular_topics": [dict(row) for row in topics],
            "tone_statistics": [dict(row) for row in tones],
            "language_statistics": [dict(row) for row in languages],
            "daily_stats": [
                {"date": day.isoformat(), "count": per_day.get(day, 0)} for day in window
            ],
            "average_ratings": dict(ratings),
            "quality_metrics": dict(quality),
        }

    async def ping(self) -> dict:
        try:
            async with self.acquire() as conn:
                await conn.fetchval("SELECT 1")
        except (OSError, asyncpg.PostgresError) as e:
            log.error("Database ping failed: %s", e)
            return {"status": "disconnected", "driver": "postgres", "error": str(e)}
        return {"status": "connected", "driver": "postgres"}
