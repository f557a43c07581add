"""Single-call generation graded by lexical heuristics.

The alternative to the multi-stage pipeline for ``enhancement_level=basic``:
one model call, then quality and engagement scored locally in
``scoring``.  Gateway failures are reported as a structured error; no
fallback script is substituted on this path.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from .config import Settings
from .gateway import GatewayError, ModelGateway
from .models import (
    GenerationMetadata,
    GenerationRequest,
    GenerationResult,
    Language,
    QualityReport,
)
from .scoring import (
    LANGUAGE_RATES,
    engagement_level,
    engagement_score,
    estimate_duration,
    quality_score,
    word_count,
)
from .timing import timed_stage
from .tones import policy_for

log = logging.getLogger(__name__)

_PROMPTS_DIR = Path(__file__).resolve().parent / "prompts"
_SYSTEM_TEMPLATE = (_PROMPTS_DIR / "basic_system.txt").read_text(encoding="utf-8").strip()
_USER_TEMPLATE = (_PROMPTS_DIR / "basic_user.txt").read_text(encoding="utf-8").strip()

ENHANCEMENT_LEVEL = "basic"
GENERATION_FAILED_MESSAGE = "فشل في إنشاء الاسكربت. يرجى المحاولة مرة أخرى."

_LANGUAGE_PHRASES = {Language.AR: "باللغة العربية", Language.EN: "باللغة الإنجليزية"}


def build_system_prompt(tone: str) -> str:
    return _SYSTEM_TEMPLATE.format(tone_line=policy_for(tone).system_line)


def build_user_prompt(request: GenerationRequest) -> str:
    policy = policy_for(request.tone)
    key_points_section = (
        f"\nالنقاط الرئيسية المطلوب التركيز عليها:\n{request.key_points}\n"
        if request.key_points else ""
    )
    return _USER_TEMPLATE.format(
        topic=request.topic,
        key_points_section=key_points_section,
        tone_description=policy.description,
        hook_instructions=policy.hook_instructions,
        voice_characteristics=policy.voice_characteristics,
        language=_LANGUAGE_PHRASES[request.language],
    )


class BasicScriptGenerator:
    def __init__(self, gateway: ModelGateway, settings: Settings):
        self._gateway = gateway
        self._settings = settings

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        started = time.monotonic()
        try:
            script = await self._complete(request)
        except GatewayError as e:
            log.error("Basic script generation failed: topic=%.60r tone=%s language=%s error=%s",
                      request.topic, request.tone.value, request.language.value, e)
            return GenerationResult(
                success=False,
                error=GENERATION_FAILED_MESSAGE,
                error_code="GENERATION_FAILED",
                generation_metadata=GenerationMetadata(
                    processing_time=round(time.monotonic() - started, 2),
                    enhancement_level=ENHANCEMENT_LEVEL,
                ),
            )

        words = word_count(script)
        quality = quality_score(script, request.tone)
        engagement = engagement_score(script, request.tone)
        processing_time = round(time.monotonic() - started, 2)
        log.info("Basic script: %d words, quality=%d engagement=%d in %.2fs",
                 words, quality, engagement, processing_time)

        return GenerationResult(
            success=True,
            script=script,
            word_count=words,
            estimated_duration=estimate_duration(words, LANGUAGE_RATES[request.language]),
            quality_analysis=QualityReport(
                overall_score=quality,
                engagement_prediction=engagement_level(engagement),
            ),
            engagement_score=float(engagement),
            generation_metadata=GenerationMetadata(
                stages_completed=1,
                processing_time=processing_time,
                confidence_score=QualityReport().confidence_score,
                enhancement_level=ENHANCEMENT_LEVEL,
            ),
        )

    @timed_stage("basic_generation", "ai")
    async def _complete(self, request: GenerationRequest) -> str:
        script = await self._gateway.complete(
            build_system_prompt(request.tone),
            build_user_prompt(request),
            self._settings.model,
            self._settings.max_tokens,
            self._settings.temperature,
        )
        script = script.strip()
        if not script:
            raise GatewayError("Model returned an empty script")
        return script
