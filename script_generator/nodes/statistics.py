"""Stage 3: Statistics Generation.

Five topic statistics with impact levels, at low temperature.  Parse
failures degrade to an empty list; selection downstream copes with it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..gateway import ModelGateway
from ..models import StatisticItem
from ..parsing import extract_json, pick_list
from ..timing import timed_stage

log = logging.getLogger(__name__)

_PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"
_SYSTEM_PROMPT = (_PROMPTS_DIR / "statistics_system.txt").read_text(encoding="utf-8").strip()
_USER_TEMPLATE = (_PROMPTS_DIR / "statistics_user.txt").read_text(encoding="utf-8").strip()

MAX_TOKENS = 1000
TEMPERATURE = 0.2


def parse_statistics(raw: str) -> list[StatisticItem]:
    entries = pick_list(extract_json(raw), "statistics")
    stats = [StatisticItem.model_validate(e) for e in entries if isinstance(e, dict)]
    # full_text is what the assembly prompt quotes; rebuild it when only parts came back.
    for s in stats:
        if not s.full_text and (s.number or s.context):
            s.full_text = " ".join(p for p in (s.number, s.context) if p)
    return [s for s in stats if s.full_text]


@timed_stage("statistics_generation", "ai")
async def generate_statistics(
    gateway: ModelGateway,
    model_name: str,
    topic: str,
) -> list[StatisticItem]:
    prompt = _USER_TEMPLATE.format(topic=topic)
    raw = await gateway.complete(_SYSTEM_PROMPT, prompt, model_name, MAX_TOKENS, TEMPERATURE)
    stats = parse_statistics(raw)
    if not stats:
        log.warning("Statistics generation returned nothing usable")
    log.info("Statistics generation: %d statistics", len(stats))
    return stats
