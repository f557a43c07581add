import pytest
from pydantic import ValidationError

from script_generator.config import Settings


def test_defaults():
    settings = Settings.from_env({})
    assert settings.model == "gpt-4"
    assert settings.max_tokens == 2000
    assert settings.temperature == 0.7
    assert settings.insight_cache_ttl == 1800
    assert settings.database_url is None
    assert settings.cors_origins == ("*",)
    assert not settings.gateway_configured


def test_reads_environment():
    settings = Settings.from_env({
        "OPENAI_API_KEY": "sk-live",
        "OPENAI_BASE_URL": "https://proxy.example/v1/",
        "OPENAI_MODEL": "gpt-4o",
        "OPENAI_MAX_TOKENS": "1500",
        "OPENAI_TEMPERATURE": "0.4",
        "OPENAI_TIMEOUT": "30",
        "INSIGHT_CACHE_TTL": "60",
        "DATABASE_URL": "postgresql://localhost/scripts",
        "APP_ENV": "local",
        "CORS_ORIGINS": "http://a.test, http://b.test,",
    })
    assert settings.gateway_configured
    assert settings.openai_base_url == "https://proxy.example/v1"
    assert settings.model == "gpt-4o"
    assert settings.max_tokens == 1500
    assert settings.temperature == 0.4
    assert settings.request_timeout == 30
    assert settings.insight_cache_ttl == 60
    assert settings.database_url == "postgresql://localhost/scripts"
    assert settings.environment == "local"
    assert settings.cors_origins == ("http://a.test", "http://b.test")


def test_blank_values_keep_defaults():
    settings = Settings.from_env({"OPENAI_MODEL": "  ", "DATABASE_URL": ""})
    assert settings.model == "gpt-4"
    assert settings.database_url is None


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        Settings.from_env({"OPENAI_TEMPERATURE": "5"})
    with pytest.raises(ValidationError):
        Settings.from_env({"OPENAI_MAX_TOKENS": "many"})


def test_settings_are_frozen():
    settings = Settings()
    with pytest.raises(ValidationError):
        settings.model = "other"
