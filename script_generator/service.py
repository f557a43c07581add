"""Entry point for callers: one ``generate`` operation over both strategies."""

from __future__ import annotations

import logging
from typing import Optional

from .basic import BasicScriptGenerator
from .cache import InsightCache
from .config import Settings
from .gateway import ModelGateway, OpenAIGateway
from .models import EnhancementLevel, GenerationRequest, GenerationResult
from .pipeline import ScriptPipeline

log = logging.getLogger(__name__)


class ScriptService:
    def __init__(self, pipeline: ScriptPipeline, basic: BasicScriptGenerator, gateway: ModelGateway):
        self._pipeline = pipeline
        self._basic = basic
        self._gateway = gateway

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        gateway: Optional[ModelGateway] = None,
        cache: Optional[InsightCache] = None,
    ) -> "ScriptService":
        if gateway is None:
            gateway = OpenAIGateway(settings)
        if cache is None:
            cache = InsightCache(settings.insight_cache_ttl)
        return cls(
            pipeline=ScriptPipeline(gateway, settings, cache),
            basic=BasicScriptGenerator(gateway, settings),
            gateway=gateway,
        )

    @property
    def gateway(self) -> ModelGateway:
        return self._gateway

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """LLM-graded pipeline for ``intelligent``, heuristic single call for ``basic``."""
        log.info("Generating script: topic=%.60r tone=%s language=%s duration=%d level=%s",
                 request.topic, request.tone.value, request.language.value,
                 request.duration, request.enhancement_level.value)
        if request.enhancement_level == EnhancementLevel.INTELLIGENT:
            return await self._pipeline.run(request)
        return await self._basic.generate(request)
