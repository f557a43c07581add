"""Service configuration.

Read once from the environment at startup, validated, and passed by
reference to the gateway, the generators and the app factory.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

SERVICE_NAME = "ScriptAI Backend"
SERVICE_VERSION = "1.0.0"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4"
    max_tokens: int = Field(default=2000, gt=0)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    request_timeout: float = Field(default=60.0, gt=0)
    insight_cache_ttl: float = Field(default=1800.0, gt=0)
    database_url: Optional[str] = None
    environment: str = "production"
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables; unset ones keep defaults.

        Raises ``pydantic.ValidationError`` on malformed values.
        """
        env = os.environ if environ is None else environ
        mapping = {
            "openai_api_key": "OPENAI_API_KEY",
            "openai_base_url": "OPENAI_BASE_URL",
            "model": "OPENAI_MODEL",
            "max_tokens": "OPENAI_MAX_TOKENS",
            "temperature": "OPENAI_TEMPERATURE",
            "request_timeout": "OPENAI_TIMEOUT",
            "insight_cache_ttl": "INSIGHT_CACHE_TTL",
            "database_url": "DATABASE_URL",
            "environment": "APP_ENV",
            "log_level": "LOG_LEVEL",
        }
        values: dict = {
            field: env[var] for field, var in mapping.items()
            if env.get(var, "").strip()
        }
        origins = env.get("CORS_ORIGINS", "").strip()
        if origins:
            values["cors_origins"] = tuple(o.strip() for o in origins.split(",") if o.strip())
        if "openai_base_url" in values:
            values["openai_base_url"] = values["openai_base_url"].rstrip("/")
        return cls(**values)

    @property
    def gateway_configured(self) -> bool:
        return bool(self.openai_api_key.strip())
