"""Pipeline orchestrator.

Runs the five model stages strictly in sequence, each stage feeding the
next:

    insights -> hooks -> statistics -> script -> quality

If the gateway is unavailable before the first stage, or any stage
raises, the partial work is discarded and the deterministic fallback
script is returned in its place.
"""

from __future__ import annotations

import logging
import time

from .cache import InsightCache
from .config import Settings
from .fallback import generate_mock_result
from .gateway import ModelGateway
from .models import (
    GenerationMetadata,
    GenerationRequest,
    GenerationResult,
    PipelineStage,
)
from .nodes import (
    hook_generation,
    insight_analysis,
    quality_analysis,
    script_assembly,
    statistics,
)
from .scoring import estimate_duration, word_count
from .timing import collect_metrics, completed_stages
from .tones import policy_for

log = logging.getLogger(__name__)

ENHANCEMENT_LEVEL = "intelligent"


class ScriptPipeline:
    """Multi-stage generation. The gateway and cache are injected."""

    def __init__(
        self,
        gateway: ModelGateway,
        settings: Settings,
        cache: InsightCache | None = None,
    ):
        self._gateway = gateway
        self._model = settings.model
        self._cache = cache if cache is not None else InsightCache(settings.insight_cache_ttl)

    @property
    def cache(self) -> InsightCache:
        return self._cache

    async def run(self, request: GenerationRequest) -> GenerationResult:
        started = time.monotonic()
        tone = request.tone.value
        stage = PipelineStage.NOT_STARTED

        if not self._gateway.is_available():
            log.warning("Model gateway unavailable, returning fallback script")
            return self._degrade(request, started, stages_completed=0)

        with collect_metrics() as metrics:
            try:
                stage = self._enter(PipelineStage.ANALYZING_INSIGHTS)
                insights = await insight_analysis.analyze_topic(
                    self._gateway, self._model, request.topic, tone, self._cache,
                )

                stage = self._enter(PipelineStage.GENERATING_HOOKS)
                hooks = await hook_generation.generate_hooks(
                    self._gateway, self._model, insights, tone, request.topic,
                )

                stage = self._enter(PipelineStage.GENERATING_STATISTICS)
                stats = await statistics.generate_statistics(
                    self._gateway, self._model, request.topic,
                )

                stage = self._enter(PipelineStage.ASSEMBLING_SCRIPT)
                script = await script_assembly.assemble_script(
                    self._gateway, self._model, request.topic, request.key_points,
                    insights, hooks, stats, tone, request.duration, request.language,
                )

                stage = self._enter(PipelineStage.ANALYZING_QUALITY)
                quality = await quality_analysis.analyze_quality(
                    self._gateway, self._model, script, tone, request.duration,
                )
            except Exception:
                log.exception("Pipeline failed during %s, returning fallback script", stage.value)
                return self._degrade(request, started, completed_stages(metrics))

        self._enter(PipelineStage.COMPLETED)
        words = word_count(script)
        processing_time = round(time.monotonic() - started, 2)
        log.info(
            "Pipeline complete: %d words, quality=%d, %d stages in %.2fs (%s)",
            words, quality.overall_score, completed_stages(metrics), processing_time,
            ", ".join(f"{m.stage_name}={m.duration_ms}ms" for m in metrics),
        )

        return GenerationResult(
            success=True,
            script=script,
            word_count=words,
            estimated_duration=estimate_duration(words, policy_for(tone).speaking_rate),
            quality_analysis=quality,
            insights_used=insights,
            hooks_generated=hooks,
            statistics_used=stats,
            generation_metadata=GenerationMetadata(
                stages_completed=completed_stages(metrics),
                processing_time=processing_time,
                confidence_score=quality.confidence_score,
                enhancement_level=ENHANCEMENT_LEVEL,
            ),
        )

    @staticmethod
    def _enter(stage: PipelineStage) -> PipelineStage:
        log.debug("Pipeline stage -> %s", stage.value)
        return stage

    @staticmethod
    def _degrade(
        request: GenerationRequest,
        started: float,
        stages_completed: int,
    ) -> GenerationResult:
        """Switch to the fallback generator; fatal only if it cannot run either."""
        log.info("Pipeline stage -> %s", PipelineStage.DEGRADED.value)
        try:
            result = generate_mock_result(
                request.topic, request.key_points, request.tone.value, request.duration,
            )
        except Exception:
            log.exception("Fallback script generation failed")
            return GenerationResult(
                success=False,
                error="حدث خطأ في إنشاء الاسكربت. يرجى المحاولة مرة أخرى.",
                error_code="INTERNAL_ERROR",
            )

        result.generation_metadata = result.generation_metadata.model_copy(update={
            "stages_completed": stages_completed,
            "processing_time": round(time.monotonic() - started, 2),
        })
        return result
