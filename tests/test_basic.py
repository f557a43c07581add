import asyncio
import math

from conftest import FakeGateway
from script_generator.basic import (
    BasicScriptGenerator,
    GENERATION_FAILED_MESSAGE,
    build_system_prompt,
    build_user_prompt,
)
from script_generator.gateway import GatewayTimeout
from script_generator.models import GenerationRequest
from script_generator.tones import policy_for

SCRIPT = "هل تعلم أن 80% من الناس يتعلمون أفضل بالممارسة؟ تابعنا للمزيد"


def _request(**overrides):
    fields = {"topic": "تعلم اللغات", "tone": "educational", "enhancement_level": "basic"}
    fields.update(overrides)
    return GenerationRequest(**fields)


def test_single_call_with_configured_parameters(settings):
    gateway = FakeGateway(replies={}, default=SCRIPT)
    result = asyncio.run(BasicScriptGenerator(gateway, settings).generate(_request()))

    assert len(gateway.calls) == 1
    call = gateway.calls[0]
    assert call["model_name"] == settings.model
    assert call["max_tokens"] == settings.max_tokens
    assert call["temperature"] == settings.temperature

    assert result.success
    assert result.script == SCRIPT
    assert result.word_count == 11
    assert result.estimated_duration == math.ceil(11 / 2.7)
    assert result.generation_metadata.stages_completed == 1
    assert result.generation_metadata.enhancement_level == "basic"


def test_heuristic_scores(settings):
    gateway = FakeGateway(replies={}, default=SCRIPT)
    result = asyncio.run(BasicScriptGenerator(gateway, settings).generate(_request()))

    # opening question + call to action + tone keyword
    assert result.quality_analysis.overall_score == 95
    # question + digit; educational earns no engagement bonus
    assert result.engagement_score == 85.0
    assert result.quality_analysis.engagement_prediction == "high"


def test_english_rate(settings):
    gateway = FakeGateway(replies={}, default="one two three four five")
    result = asyncio.run(BasicScriptGenerator(gateway, settings).generate(_request(language="en")))
    assert result.estimated_duration == math.ceil(5 / 2.3)


def test_gateway_failure_is_structured_error(settings):
    gateway = FakeGateway(error=GatewayTimeout("timed out"))
    result = asyncio.run(BasicScriptGenerator(gateway, settings).generate(_request()))

    assert not result.success
    assert result.error == GENERATION_FAILED_MESSAGE
    assert result.error_code == "GENERATION_FAILED"
    assert result.script == ""


def test_empty_answer_is_a_failure(settings):
    gateway = FakeGateway(replies={}, default="  ")
    result = asyncio.run(BasicScriptGenerator(gateway, settings).generate(_request()))
    assert result.error_code == "GENERATION_FAILED"


def test_prompts():
    assert policy_for("comedy").system_line in build_system_prompt("comedy")

    prompt = build_user_prompt(_request(key_points="المفردات اليومية", language="en"))
    assert "تعلم اللغات" in prompt
    assert "المفردات اليومية" in prompt
    assert "باللغة الإنجليزية" in prompt
    assert "النقاط الرئيسية" not in build_user_prompt(_request())
