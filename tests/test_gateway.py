import asyncio
import json

import httpx
import pytest

from script_generator.config import Settings
from script_generator.gateway import (
    GatewayError,
    GatewayTimeout,
    GatewayUnavailable,
    OpenAIGateway,
)

SETTINGS = Settings(openai_api_key="sk-test", openai_base_url="https://llm.example/v1")


def _complete(gateway):
    return asyncio.run(gateway.complete("system", "user", "gpt-4", 500, 0.3))


def test_posts_chat_completion_and_returns_content():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "مرحبا"}}]})

    text = _complete(OpenAIGateway(SETTINGS, transport=httpx.MockTransport(handler)))

    assert text == "مرحبا"
    assert seen["url"] == "https://llm.example/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"] == {
        "model": "gpt-4",
        "messages": [
            {"role": "system", "content": "system"},
            {"role": "user", "content": "user"},
        ],
        "max_tokens": 500,
        "temperature": 0.3,
    }


def test_http_error_status():
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="upstream broke"))
    with pytest.raises(GatewayError) as exc_info:
        _complete(OpenAIGateway(SETTINGS, transport=transport))
    assert not isinstance(exc_info.value, GatewayTimeout)


def test_timeout():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(GatewayTimeout):
        _complete(OpenAIGateway(SETTINGS, transport=httpx.MockTransport(handler)))


def test_unexpected_body():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"error": "?"}))
    with pytest.raises(GatewayError):
        _complete(OpenAIGateway(SETTINGS, transport=transport))


def test_null_content_is_empty_text():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"choices": [{"message": {"content": None}}]})
    )
    assert _complete(OpenAIGateway(SETTINGS, transport=transport)) == ""


def test_unavailable_without_key():
    def handler(request):
        raise AssertionError("no request expected")

    gateway = OpenAIGateway(Settings(), transport=httpx.MockTransport(handler))
    assert not gateway.is_available()
    with pytest.raises(GatewayUnavailable):
        _complete(gateway)
