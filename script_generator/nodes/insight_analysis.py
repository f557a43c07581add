"""Stage 1: Topic Insight Analysis.

Asks the model for statistics, audience pain points, solutions, success
examples, power words and current trends for the topic, at low
temperature.  Unparseable output degrades to ``FALLBACK_INSIGHTS``;
gateway errors propagate to the orchestrator.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..cache import InsightCache
from ..gateway import ModelGateway
from ..models import InsightBundle, InsightStatistic
from ..parsing import extract_json
from ..timing import timed_stage

log = logging.getLogger(__name__)

_PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"
_SYSTEM_PROMPT = (_PROMPTS_DIR / "insight_system.txt").read_text(encoding="utf-8").strip()
_USER_TEMPLATE = (_PROMPTS_DIR / "insight_user.txt").read_text(encoding="utf-8").strip()

MAX_TOKENS = 1500
TEMPERATURE = 0.3

FALLBACK_INSIGHTS = InsightBundle(
    statistics=[InsightStatistic(number="85%", context="إحصائية عامة", source="دراسات متنوعة", impact=7)],
    pain_points=["صعوبة في التطبيق", "نقص المعرفة"],
    solutions=["التعلم المستمر", "الممارسة العملية"],
    success_examples=["قصص نجاح ملهمة"],
    power_words=["مذهل", "رائع", "فعال"],
    current_trends=["اتجاهات حديثة في المجال"],
)

_BUNDLE_KEYS = frozenset(InsightBundle.model_fields)


def parse_insights(raw: str) -> InsightBundle:
    """Decode the model's answer; any failure yields a copy of ``FALLBACK_INSIGHTS``."""
    parsed = extract_json(raw)
    if parsed is None:
        log.warning("Insight analysis returned no JSON, using fallback insights")
        return FALLBACK_INSIGHTS.model_copy(deep=True)
    # Also catches a truncated answer whose inner array came back as {"items": [...]}.
    if not _BUNDLE_KEYS.intersection(parsed):
        log.warning("Insight analysis JSON has none of the expected keys (%s), using fallback",
                    ", ".join(sorted(parsed))[:200])
        return FALLBACK_INSIGHTS.model_copy(deep=True)
    return InsightBundle.model_validate(parsed)


@timed_stage("insight_analysis", "ai")
async def analyze_topic(
    gateway: ModelGateway,
    model_name: str,
    topic: str,
    tone: str,
    cache: InsightCache | None = None,
) -> InsightBundle:
    """Return the insight bundle for (*topic*, *tone*), consulting *cache* first."""

    async def compute() -> InsightBundle:
        prompt = _USER_TEMPLATE.format(topic=topic, tone=tone)
        raw = await gateway.complete(_SYSTEM_PROMPT, prompt, model_name, MAX_TOKENS, TEMPERATURE)
        bundle = parse_insights(raw)
        log.info("Insights: %d statistics, %d pain points, %d solutions",
                 len(bundle.statistics), len(bundle.pain_points), len(bundle.solutions))
        return bundle

    if cache is None:
        return await compute()
    return await cache.get_or_compute(topic, tone, compute)
