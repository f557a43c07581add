import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest

from conftest import FakeGateway
from script_generator.models import GenerationRequest
from script_generator.pipeline import ScriptPipeline
from script_generator.storage import (
    FeedbackRecord,
    InMemoryScriptStore,
    NewFeedback,
    NewScript,
    ScriptNotFound,
    daily_window,
)


def _script(topic="الادخار", tone="professional", quality=80.0, engagement=70.0, duration=60):
    return NewScript(
        topic=topic, tone=tone, generated_script="نص", word_count=1,
        estimated_duration=duration, quality_score=quality, engagement_score=engagement,
    )


def test_create_and_get():
    store = InMemoryScriptStore()

    async def scenario():
        created = await store.create_script(_script())
        second = await store.create_script(_script(topic="الرياضة"))
        fetched = await store.get_script(created.id)
        missing = await store.get_script(999)
        return created, second, fetched, missing

    created, second, fetched, missing = asyncio.run(scenario())
    assert (created.id, second.id) == (1, 2)
    assert fetched.topic == "الادخار"
    assert fetched.feedback_count == 0
    assert missing is None
    api = fetched.to_api()
    assert api["id"] == 1
    assert api["created_at"].endswith("+00:00")


def test_feedback_updates_script_rating():
    store = InMemoryScriptStore()

    async def scenario():
        record = await store.create_script(_script())
        await store.add_feedback(record.id, NewFeedback(rating=5))
        await store.add_feedback(record.id, NewFeedback(rating=2, clarity=4))
        return await store.get_script(record.id)

    record = asyncio.run(scenario())
    assert record.feedback_count == 2
    assert record.average_rating == 3.5


def test_feedback_for_unknown_script():
    with pytest.raises(ScriptNotFound):
        asyncio.run(InMemoryScriptStore().add_feedback(7, NewFeedback(rating=3)))


def test_feedback_overall_score_averages_present_ratings():
    feedback = FeedbackRecord(
        id=1, script_id=1, rating=5, usefulness=3, clarity=None, engagement=4,
        created_at=datetime.now(timezone.utc),
    )
    assert feedback.overall_score == 4.0
    assert feedback.to_api()["overall_score"] == 4.0


def test_feedback_ratings_are_bounded():
    with pytest.raises(ValueError):
        NewFeedback(rating=6)
    with pytest.raises(ValueError):
        NewFeedback(rating=3, usefulness=0)


def test_daily_window_is_oldest_first():
    days = daily_window(7, today=date(2025, 3, 7))
    assert days[0] == date(2025, 3, 1)
    assert days[-1] == date(2025, 3, 7)
    assert len(days) == 7


def test_analytics():
    store = InMemoryScriptStore()

    async def scenario():
        first = await store.create_script(_script(quality=80, engagement=None, duration=60))
        await store.create_script(_script(quality=90, engagement=70, duration=90))
        await store.create_script(_script(topic="الرياضة", tone="comedy", quality=70, engagement=50, duration=30))
        await store.add_feedback(first.id, NewFeedback(rating=4, usefulness=5))
        await store.add_feedback(first.id, NewFeedback(rating=2))
        return await store.analytics()

    stats = asyncio.run(scenario())
    assert stats["total_scripts"] == 3
    assert stats["popular_topics"][0] == {"topic": "الادخار", "count": 2}
    assert {"tone": "comedy", "count": 1} in stats["tone_statistics"]
    assert stats["language_statistics"] == [{"language": "ar", "count": 3}]

    daily = stats["daily_stats"]
    assert len(daily) == 7
    assert daily[-1] == {"date": datetime.now(timezone.utc).date().isoformat(), "count": 3}
    assert all(day["count"] == 0 for day in daily[:-1])

    assert stats["average_ratings"]["overall_rating"] == 3.0
    assert stats["average_ratings"]["usefulness"] == 5.0
    assert stats["average_ratings"]["clarity"] == 0.0
    assert stats["quality_metrics"]["average_quality_score"] == 80.0
    assert stats["quality_metrics"]["average_engagement_score"] == 60.0
    assert stats["quality_metrics"]["average_duration"] == 60.0


def test_new_script_from_pipeline_result(settings):
    request = GenerationRequest(topic="كيف تتعلم البرمجة", key_points="مشاريع", tone="educational")
    result = asyncio.run(ScriptPipeline(FakeGateway(), settings).run(request))

    script = NewScript.from_result(request, result, user_ip="10.0.0.1", user_agent="ua")
    assert script.generated_script == result.script
    assert script.quality_score == 88.0
    assert script.engagement_prediction == "high"
    assert script.enhancement_level == "intelligent"
    assert script.metadata["requested_enhancement_level"] == "intelligent"
    assert len(script.metadata["hooks_generated"]) == 3
    assert script.metadata["generation_metadata"]["stages_completed"] == 5
