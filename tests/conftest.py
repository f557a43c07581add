import json

import pytest

from script_generator.config import Settings
from script_generator.gateway import GatewayError, ModelGateway
from script_generator.nodes import (
    hook_generation,
    insight_analysis,
    quality_analysis,
    script_assembly,
    statistics,
)

INSIGHTS_REPLY = json.dumps({
    "statistics": [
        {"number": "73%", "context": "من المبتدئين يتوقفون في أول شهر", "source": "استطلاع", "impact": 8},
    ],
    "pain_points": ["كثرة المصادر", "غياب الخطة"],
    "solutions": ["مشروع صغير كل أسبوع"],
    "success_examples": ["مطور تعلم في ستة أشهر"],
    "power_words": ["اكتشف", "سر"],
    "current_trends": ["الذكاء الاصطناعي"],
}, ensure_ascii=False)

HOOKS_REPLY = "```json\n" + json.dumps({
    "hooks": [
        {"text": "هل تعرف لماذا يفشل أغلب المبتدئين؟", "type": "question", "impact_score": 5},
        {"text": "73% يتوقفون في الشهر الأول!", "type": "statistic", "impact_score": 9},
        {"text": "سأريك الطريق في دقيقة", "type": "promise", "impact_score": 9},
    ]
}, ensure_ascii=False) + "\n```"

STATISTICS_REPLY = json.dumps({
    "statistics": [
        {"number": "40%", "full_text": "40% أسرع عند التعلم بالمشاريع", "impact_level": 6},
        {"number": "3x", "full_text": "ثلاثة أضعاف الاحتفاظ بالمعلومة", "impact_level": 8},
    ]
}, ensure_ascii=False)

SCRIPT_REPLY = (
    "هل تعرف لماذا يتوقف 73% من المبتدئين؟\n\n"
    "المشكلة ليست في الذكاء بل في غياب الخطة.\n\n"
    "ابدأ بمشروع صغير كل أسبوع وتعلم منه.\n\n"
    "تابعنا وشارك الفيديو مع صديق يتعلم البرمجة!"
)

QUALITY_REPLY = json.dumps({
    "overall_score": 88,
    "breakdown": {
        "hook_strength": 23, "content_clarity": 18, "tone_matching": 17,
        "engagement": 13, "timing": 9, "originality": 8,
    },
    "strengths": ["خطاف رقمي قوي"],
    "improvements": ["مثال أكثر تحديداً"],
    "confidence_score": 0.92,
    "engagement_prediction": "high",
    "target_audience_fit": "excellent",
})

STAGE_REPLIES = {
    insight_analysis.TEMPERATURE: INSIGHTS_REPLY,
    hook_generation.TEMPERATURE: HOOKS_REPLY,
    statistics.TEMPERATURE: STATISTICS_REPLY,
    script_assembly.TEMPERATURE: SCRIPT_REPLY,
    quality_analysis.TEMPERATURE: QUALITY_REPLY,
}


class FakeGateway(ModelGateway):
    """Answers by temperature, which is distinct for each pipeline stage."""

    def __init__(self, replies=None, available=True, error=None, fail_on=None, default=""):
        self.replies = dict(STAGE_REPLIES if replies is None else replies)
        self.available = available
        self.error = error
        self.fail_on = fail_on
        self.default = default
        self.calls = []

    def is_available(self):
        return self.available

    async def complete(self, system_prompt, user_prompt, model_name, max_tokens, temperature):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "model_name": model_name,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        if self.error is not None:
            raise self.error
        if self.fail_on is not None and temperature == self.fail_on:
            raise GatewayError(f"stage at temperature {temperature} failed")
        return self.replies.get(temperature, self.default)

    def temperatures(self):
        return [c["temperature"] for c in self.calls]


@pytest.fixture
def settings():
    return Settings(openai_api_key="test-key", model="gpt-4")


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def failing_gateway():
    return FakeGateway(error=GatewayError("connection refused"))
