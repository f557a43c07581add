"""Model gateway: the single outbound capability the generators depend on.

``ModelGateway`` is injected into the pipeline and the basic generator;
``OpenAIGateway`` is the production implementation speaking the
OpenAI-compatible chat-completions protocol over httpx.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from .config import Settings

log = logging.getLogger(__name__)


class GatewayError(Exception):
    """The model call failed (transport, HTTP status, malformed envelope)."""


class GatewayTimeout(GatewayError):
    """The model call did not answer within the configured timeout."""


class GatewayUnavailable(GatewayError):
    """No credentials are configured, so no call can be made."""


class ModelGateway(ABC):
    """Given a structured chat prompt, return generated text or raise ``GatewayError``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the gateway can be called at all."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model_name: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        """Run one completion and return the raw generated text."""


class OpenAIGateway(ModelGateway):
    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings
        self._transport = transport

    def is_available(self) -> bool:
        return self._settings.gateway_configured

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model_name: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        if not self.is_available():
            raise GatewayUnavailable("OPENAI_API_KEY is not configured")

        url = f"{self._settings.openai_base_url}/chat/completions"
        payload = {
            "model": model_name,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        headers = {"Authorization": f"Bearer {self._settings.openai_api_key}"}

        log.info("Calling model=%s max_tokens=%d temperature=%.1f",
                 model_name, max_tokens, temperature)
        async with httpx.AsyncClient(
            timeout=self._settings.request_timeout,
            transport=self._transport,
        ) as client:
            try:
                resp = await client.post(url, json=payload, headers=headers)
                resp.raise_for_status()
            except httpx.TimeoutException as e:
                log.error("Model request timed out: %s", e)
                raise GatewayTimeout(f"Model request timed out: {e}") from e
            except httpx.HTTPStatusError as e:
                log.error("Model request failed with status %d: %s",
                          e.response.status_code, e.response.text[:500])
                raise GatewayError(
                    f"Model request failed with status {e.response.status_code}"
                ) from e
            except httpx.HTTPError as e:
                log.error("Model request failed: %s", e)
                raise GatewayError(f"Model request failed: {e}") from e

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            log.error("Model returned an unexpected body: %s", resp.text[:500])
            raise GatewayError("Model returned an unexpected response body") from e

        text = content or ""
        log.info("Model responded (%d chars)", len(text))
        return text
