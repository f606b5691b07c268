"""Configuration management for AiValidator."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

load_dotenv()


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    return value if value not in (None, "") else default


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class ProviderSettings(BaseModel):
    """Connection settings for a single AI provider."""

    api_key: Optional[str] = None
    base_url: str
    model: str
    temperature: float = 0.0
    max_tokens: int = 4096


class RetrySettings(BaseModel):
    """Retry loop defaults, overridable per call."""

    model_config = ConfigDict(validate_default=True)

    max_attempts: int = Field(
        default_factory=lambda: int(_env("AI_VALIDATOR_MAX_RETRIES", "3")), ge=1
    )
    backoff_ms: int = Field(
        default_factory=lambda: int(_env("AI_VALIDATOR_BACKOFF_MS", "500")), ge=0
    )
    backoff_multiplier: float = Field(
        default_factory=lambda: float(_env("AI_VALIDATOR_BACKOFF_MULTIPLIER", "2.0")), ge=1.0
    )
    include_errors_in_retry: bool = Field(
        default_factory=lambda: _env_bool("AI_VALIDATOR_INCLUDE_ERRORS", True)
    )


class CacheSettings(BaseModel):
    """Result caching for identical prompt + rule set combinations."""

    model_config = ConfigDict(validate_default=True)

    enabled: bool = Field(default_factory=lambda: _env_bool("AI_VALIDATOR_CACHE_ENABLED", False))
    store: Optional[str] = Field(default_factory=lambda: _env("AI_VALIDATOR_CACHE_STORE"))  # None = memory
    ttl: int = Field(default_factory=lambda: int(_env("AI_VALIDATOR_CACHE_TTL", "3600")), ge=0)
    prefix: str = "ai_validator:"
    path: Path = Field(
        default_factory=lambda: Path(
            _env("AI_VALIDATOR_CACHE_PATH", "./data/cache/aivalidator.sqlite")  # type: ignore[arg-type]
        )
    )


class LoggingSettings(BaseModel):
    """Attempt logging for debugging and token usage monitoring."""

    enabled: bool = Field(default_factory=lambda: _env_bool("AI_VALIDATOR_LOGGING", True))
    channel: Optional[str] = Field(default_factory=lambda: _env("AI_VALIDATOR_LOG_CHANNEL"))
    level: str = Field(default_factory=lambda: _env("AI_VALIDATOR_LOG_LEVEL", "INFO"))  # type: ignore[arg-type]
    log_prompts: bool = Field(default_factory=lambda: _env_bool("AI_VALIDATOR_LOG_PROMPTS", False))
    log_responses: bool = Field(default_factory=lambda: _env_bool("AI_VALIDATOR_LOG_RESPONSES", False))


def _default_providers() -> Dict[str, ProviderSettings]:
    return {
        "openai": ProviderSettings(
            api_key=_env("OPENAI_API_KEY"),
            base_url=_env("OPENAI_BASE_URL", "https://api.openai.com/v1"),  # type: ignore[arg-type]
            model=_env("AI_VALIDATOR_OPENAI_MODEL", "gpt-4o"),  # type: ignore[arg-type]
        ),
        "anthropic": ProviderSettings(
            api_key=_env("ANTHROPIC_API_KEY"),
            base_url=_env("ANTHROPIC_BASE_URL", "https://api.anthropic.com/v1"),  # type: ignore[arg-type]
            model=_env("AI_VALIDATOR_ANTHROPIC_MODEL", "claude-sonnet-4-5-20250929"),  # type: ignore[arg-type]
        ),
        "ollama": ProviderSettings(
            base_url=_env("OLLAMA_BASE_URL", "http://localhost:11434"),  # type: ignore[arg-type]
            model=_env("AI_VALIDATOR_OLLAMA_MODEL", "llama3"),  # type: ignore[arg-type]
        ),
    }


class Config(BaseModel):
    """Application configuration loaded from environment variables."""

    default_provider: str = Field(default_factory=lambda: _env("AI_VALIDATOR_PROVIDER", "openai"))  # type: ignore[arg-type]
    providers: Dict[str, ProviderSettings] = Field(default_factory=_default_providers)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def get_config() -> Config:
    """Get the application configuration."""
    return Config()
