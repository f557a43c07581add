import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .config import SERVICE_NAME, SERVICE_VERSION, Settings
from .models import EnhancementLevel, GenerationRequest, Language, Tone
from .postgres import PostgresScriptStore
from .service import ScriptService
from .storage import (
    InMemoryScriptStore,
    NewFeedback,
    NewScript,
    ScriptNotFound,
    ScriptStore,
)
from .tones import suggest_tones

log = logging.getLogger(__name__)

INVALID_DATA = "بيانات غير صحيحة"
SCRIPT_NOT_FOUND = "الاسكربت غير موجود"
INTERNAL_ERROR = "حدث خطأ في إنشاء الاسكربت. يرجى المحاولة مرة أخرى."
FEEDBACK_THANKS = "شكراً لك على تقييمك!"


class GenerateScriptBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    topic: str = Field(min_length=5, max_length=500)
    key_points: Optional[str] = Field(default=None, alias="keyPoints", max_length=1000)
    tone: Tone
    language: Language = Language.AR
    duration: int = Field(default=60, ge=30, le=180)
    enhancement_level: EnhancementLevel = EnhancementLevel.INTELLIGENT

    def to_request(self) -> GenerationRequest:
        return GenerationRequest(
            topic=self.topic,
            key_points=self.key_points or None,
            tone=self.tone,
            language=self.language,
            duration=self.duration,
            enhancement_level=self.enhancement_level,
        )


class FeedbackBody(BaseModel):
    rating: int = Field(ge=1, le=5)
    usefulness: Optional[int] = Field(default=None, ge=1, le=5)
    clarity: Optional[int] = Field(default=None, ge=1, le=5)
    engagement: Optional[int] = Field(default=None, ge=1, le=5)
    feedback_text: Optional[str] = Field(default=None, max_length=1000)


class SuggestToneBody(BaseModel):
    topic: str = Field(min_length=1, max_length=500)


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def _not_found() -> JSONResponse:
    return JSONResponse(status_code=404, content={"success": False, "error": SCRIPT_NOT_FOUND})


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[ScriptService] = None,
    store: Optional[ScriptStore] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(message)s",
    )
    if service is None:
        service = ScriptService.from_settings(settings)
    if store is None:
        if settings.database_url:
            store = PostgresScriptStore(settings.database_url)
        else:
            store = InMemoryScriptStore()

    app = FastAPI(
        title=SERVICE_NAME,
        description="Generates Arabic short-video scripts through a multi-stage model pipeline",
        version=SERVICE_VERSION,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup():
        await store.start()
        log.info("%s %s started: env=%s model=%s gateway_configured=%s store=%s",
                 SERVICE_NAME, SERVICE_VERSION, settings.environment, settings.model,
                 settings.gateway_configured, type(store).__name__)

    @app.on_event("shutdown")
    async def shutdown():
        await store.close()

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in e.get("loc", ()) if p != "body"), "message": e.get("msg", "")}
            for e in exc.errors()
        ]
        log.warning("422 validation error on %s %s: %s", request.method, request.url.path, errors)
        return JSONResponse(
            status_code=422,
            content={"success": False, "error": INVALID_DATA, "errors": errors},
        )

    @app.get("/api/health")
    async def health():
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
            "database": await store.ping(),
            "openai": {
                "configured": service.gateway.is_available(),
                "model": settings.model,
                "max_tokens": settings.max_tokens,
            },
        }

    @app.post("/api/scripts/generate")
    async def generate_script(body: GenerateScriptBody, request: Request):
        log.info("POST /api/scripts/generate: topic=%.60r tone=%s level=%s",
                 body.topic, body.tone.value, body.enhancement_level.value)
        generation = body.to_request()
        try:
            result = await service.generate(generation)
            if not result.success:
                return JSONResponse(
                    status_code=500,
                    content={
                        "success": False,
                        "error": result.error,
                        "error_code": result.error_code or "UNKNOWN_ERROR",
                    },
                )
            record = await store.create_script(NewScript.from_result(
                generation, result,
                user_ip=_client_ip(request),
                user_agent=request.headers.get("user-agent"),
            ))
        except Exception:
            log.exception("Script generation failed: topic=%.60r tone=%s level=%s",
                          body.topic, body.tone.value, body.enhancement_level.value)
            return JSONResponse(
                status_code=500,
                content={"success": False, "error": INTERNAL_ERROR, "error_code": "INTERNAL_ERROR"},
            )

        meta = result.generation_metadata
        return {
            "success": True,
            "data": {
                "id": record.id,
                "script": result.script,
                "word_count": result.word_count,
                "estimated_duration": result.estimated_duration,
                "quality_score": result.quality_analysis.overall_score,
                "engagement_prediction": result.quality_analysis.engagement_prediction,
                "confidence_score": result.quality_analysis.confidence_score,
                "generation_time": meta.processing_time,
                "enhancement_level": meta.enhancement_level,
                "created_at": record.created_at.isoformat(),
            },
            "meta": {
                "tone": generation.tone.value,
                "language": generation.language.value,
                "insights_summary": {
                    "hooks_generated": len(result.hooks_generated),
                    "statistics_used": len(result.statistics_used),
                    "stages_completed": meta.stages_completed,
                },
            },
        }

    @app.post("/api/scripts/suggest-tone")
    async def suggest_tone(body: SuggestToneBody):
        return {
            "success": True,
            "data": {"suggested_tones": suggest_tones(body.topic), "topic": body.topic},
        }

    @app.get("/api/scripts/{script_id}")
    async def show_script(script_id: int):
        record = await store.get_script(script_id)
        if record is None:
            return _not_found()
        return {"success": True, "data": record.to_api()}

    @app.post("/api/scripts/{script_id}/feedback")
    async def submit_feedback(script_id: int, body: FeedbackBody, request: Request):
        try:
            feedback = await store.add_feedback(
                script_id, NewFeedback(**body.model_dump(), user_ip=_client_ip(request)),
            )
        except ScriptNotFound:
            return _not_found()
        log.info("Feedback %d stored for script %d (rating=%d)", feedback.id, script_id, feedback.rating)
        return {"success": True, "message": FEEDBACK_THANKS, "data": feedback.to_api()}

    @app.get("/api/analytics")
    async def analytics():
        return {"success": True, "data": await store.analytics()}

    return app


app = create_app()
