"""Stage 5: Quality Analysis.

Grades the assembled script on six dimensions at near-zero temperature.
A missing or malformed grade never fails the request: ``DEFAULT_REPORT``
stands in.  ``overall_score`` is taken as graded, not recomputed from
the breakdown.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..gateway import ModelGateway
from ..models import QualityBreakdown, QualityReport
from ..parsing import extract_json
from ..timing import timed_stage

log = logging.getLogger(__name__)

_PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"
_SYSTEM_PROMPT = (_PROMPTS_DIR / "quality_system.txt").read_text(encoding="utf-8").strip()
_USER_TEMPLATE = (_PROMPTS_DIR / "quality_user.txt").read_text(encoding="utf-8").strip()

MAX_TOKENS = 800
TEMPERATURE = 0.1

DEFAULT_REPORT = QualityReport(
    overall_score=75,
    breakdown=QualityBreakdown(
        hook_strength=19, content_clarity=15, tone_matching=15,
        engagement=11, timing=8, originality=7,
    ),
    confidence_score=0.8,
    engagement_prediction="medium",
    target_audience_fit="good",
)


def parse_quality(raw: str) -> QualityReport:
    parsed = extract_json(raw)
    if not parsed or "overall_score" not in parsed:
        log.warning("Quality analysis returned no usable grade, using default report")
        return DEFAULT_REPORT.model_copy(deep=True)
    return QualityReport.model_validate(parsed)


@timed_stage("quality_analysis", "ai")
async def analyze_quality(
    gateway: ModelGateway,
    model_name: str,
    script: str,
    tone: str,
    duration: int,
) -> QualityReport:
    prompt = _USER_TEMPLATE.format(script=script, tone=tone, duration=duration)
    raw = await gateway.complete(_SYSTEM_PROMPT, prompt, model_name, MAX_TOKENS, TEMPERATURE)
    report = parse_quality(raw)
    log.info("Quality analysis: overall=%d confidence=%.2f engagement=%s",
             report.overall_score, report.confidence_score, report.engagement_prediction)
    return report
