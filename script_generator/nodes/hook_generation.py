"""Stage 2: Hook Generation.

Requests eight opening hooks, two of each type (statistic, question,
promise, problem), each with an impact score, at a higher temperature.
Not cached: identical inputs are expected to yield different hooks.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ..gateway import ModelGateway
from ..models import Hook, InsightBundle
from ..parsing import extract_json, pick_list
from ..timing import timed_stage
from ..tones import policy_for

log = logging.getLogger(__name__)

_PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"
_SYSTEM_PROMPT = (_PROMPTS_DIR / "hooks_system.txt").read_text(encoding="utf-8").strip()
_USER_TEMPLATE = (_PROMPTS_DIR / "hooks_user.txt").read_text(encoding="utf-8").strip()

MAX_TOKENS = 1200
TEMPERATURE = 0.7


def fallback_hooks(topic: str) -> list[Hook]:
    return [
        Hook(
            text=f"هل تريد معرفة السر وراء {topic}؟",
            type="question",
            impact_score=7,
            reasoning="سؤال يثير الفضول",
        )
    ]


def parse_hooks(raw: str, topic: str) -> list[Hook]:
    """Decode hooks; drop entries without text; empty result -> placeholder list."""
    entries = pick_list(extract_json(raw), "hooks")
    hooks = [Hook.model_validate(e) for e in entries if isinstance(e, dict)]
    hooks = [h for h in hooks if h.text]
    if not hooks:
        log.warning("Hook generation produced no usable hooks, using placeholder")
        return fallback_hooks(topic)
    return hooks


@timed_stage("hook_generation", "ai")
async def generate_hooks(
    gateway: ModelGateway,
    model_name: str,
    insights: InsightBundle,
    tone: str,
    topic: str,
) -> list[Hook]:
    prompt = _USER_TEMPLATE.format(
        topic=topic,
        statistics=json.dumps([s.model_dump() for s in insights.statistics], ensure_ascii=False),
        pain_points=json.dumps(insights.pain_points, ensure_ascii=False),
        solutions=json.dumps(insights.solutions, ensure_ascii=False),
        tone=tone,
        tone_instructions=policy_for(tone).instructions,
    )
    raw = await gateway.complete(_SYSTEM_PROMPT, prompt, model_name, MAX_TOKENS, TEMPERATURE)
    hooks = parse_hooks(raw, topic)
    log.info("Hook generation: %d hooks (types: %s)",
             len(hooks), ", ".join(sorted({h.type for h in hooks})))
    return hooks
