"""Tests for environment-driven configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from aivalidator.config import Config, RetrySettings, get_config

ENV_VARS = [
    "AI_VALIDATOR_PROVIDER",
    "AI_VALIDATOR_MAX_RETRIES",
    "AI_VALIDATOR_BACKOFF_MS",
    "AI_VALIDATOR_BACKOFF_MULTIPLIER",
    "AI_VALIDATOR_INCLUDE_ERRORS",
    "AI_VALIDATOR_CACHE_ENABLED",
    "AI_VALIDATOR_CACHE_STORE",
    "AI_VALIDATOR_CACHE_TTL",
    "AI_VALIDATOR_CACHE_PATH",
    "AI_VALIDATOR_LOGGING",
    "AI_VALIDATOR_LOG_CHANNEL",
    "AI_VALIDATOR_LOG_PROMPTS",
    "AI_VALIDATOR_LOG_RESPONSES",
    "AI_VALIDATOR_OPENAI_MODEL",
    "OPENAI_API_KEY",
    "OLLAMA_BASE_URL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    config = get_config()

    assert config.default_provider == "openai"
    assert set(config.providers) == {"openai", "anthropic", "ollama"}
    assert config.providers["openai"].api_key is None
    assert config.retry.max_attempts == 3
    assert config.retry.backoff_ms == 500
    assert config.retry.backoff_multiplier == 2.0
    assert config.retry.include_errors_in_retry is True
    assert config.cache.enabled is False
    assert config.cache.store is None
    assert config.cache.ttl == 3600
    assert config.cache.prefix == "ai_validator:"
    assert config.logging.enabled is True
    assert config.logging.channel is None
    assert config.logging.log_prompts is False


def test_environment_overrides(clean_env):
    clean_env.setenv("AI_VALIDATOR_PROVIDER", "ollama")
    clean_env.setenv("AI_VALIDATOR_MAX_RETRIES", "5")
    clean_env.setenv("AI_VALIDATOR_BACKOFF_MS", "100")
    clean_env.setenv("AI_VALIDATOR_BACKOFF_MULTIPLIER", "3")
    clean_env.setenv("AI_VALIDATOR_INCLUDE_ERRORS", "false")
    clean_env.setenv("AI_VALIDATOR_CACHE_ENABLED", "yes")
    clean_env.setenv("AI_VALIDATOR_CACHE_STORE", "sqlite")
    clean_env.setenv("AI_VALIDATOR_CACHE_PATH", "/tmp/av.sqlite")
    clean_env.setenv("AI_VALIDATOR_LOG_CHANNEL", "ai")
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    clean_env.setenv("AI_VALIDATOR_OPENAI_MODEL", "gpt-4o-mini")
    clean_env.setenv("OLLAMA_BASE_URL", "http://gpu-box:11434")

    config = get_config()

    assert config.default_provider == "ollama"
    assert config.retry == RetrySettings(
        max_attempts=5, backoff_ms=100, backoff_multiplier=3.0, include_errors_in_retry=False
    )
    assert config.cache.enabled is True
    assert config.cache.store == "sqlite"
    assert config.cache.path == Path("/tmp/av.sqlite")
    assert config.logging.channel == "ai"
    assert config.providers["openai"].api_key == "sk-test"
    assert config.providers["openai"].model == "gpt-4o-mini"
    assert config.providers["ollama"].base_url == "http://gpu-box:11434"


def test_empty_values_fall_back_to_defaults(clean_env):
    clean_env.setenv("AI_VALIDATOR_PROVIDER", "")
    clean_env.setenv("AI_VALIDATOR_MAX_RETRIES", "")

    config = Config()

    assert config.default_provider == "openai"
    assert config.retry.max_attempts == 3


def test_invalid_retry_values_rejected(clean_env):
    clean_env.setenv("AI_VALIDATOR_MAX_RETRIES", "0")

    with pytest.raises(ValidationError):
        get_config()


@pytest.mark.parametrize(
    "name,value",
    [
        ("AI_VALIDATOR_BACKOFF_MS", "-1"),
        ("AI_VALIDATOR_BACKOFF_MULTIPLIER", "0.5"),
        ("AI_VALIDATOR_CACHE_TTL", "-10"),
    ],
)
def test_out_of_range_environment_values_rejected(clean_env, name, value):
    clean_env.setenv(name, value)

    with pytest.raises(ValidationError):
        get_config()
