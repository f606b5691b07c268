"""Shared fakes and fixtures for AiValidator tests."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

import pytest

from aivalidator.config import CacheSettings, Config, LoggingSettings, RetrySettings
from aivalidator.errors import ProviderError
from aivalidator.providers import LLMProvider, ProviderManager, ProviderResponse
from aivalidator.schemas import TokenUsage
from aivalidator.services import AiValidator


class ScriptedProvider(LLMProvider):
    """Returns the scripted responses in order, repeating the last one."""

    def __init__(
        self,
        responses: Sequence[str],
        usage: Optional[TokenUsage] = None,
        provider_name: str = "fake",
    ) -> None:
        self._responses = list(responses)
        self._usage = usage or TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15)
        self._name = provider_name
        self.calls: List[Dict[str, Any]] = []

    @property
    def name(self) -> str:
        return self._name

    def send(
        self,
        prompt: str,
        system_prompt: str,
        options: Optional[Mapping[str, Any]] = None,
    ) -> ProviderResponse:
        index = min(len(self.calls), len(self._responses) - 1)
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt, "options": dict(options or {})})
        return ProviderResponse(text=self._responses[index], usage=self._usage)

    @property
    def call_count(self) -> int:
        return len(self.calls)


class FailingProvider(LLMProvider):
    """Raises a transport fault on every call."""

    def __init__(self) -> None:
        self.call_count = 0

    @property
    def name(self) -> str:
        return "failing"

    def send(self, prompt, system_prompt, options=None) -> ProviderResponse:
        self.call_count += 1
        raise ProviderError(self.name, "connection refused")


class RecordingSleep:
    """Stands in for time.sleep, recording requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def make_config(
    max_attempts: int = 3,
    backoff_ms: int = 500,
    backoff_multiplier: float = 2.0,
    include_errors_in_retry: bool = True,
    cache_enabled: bool = False,
    log_responses: bool = False,
    log_prompts: bool = False,
) -> Config:
    return Config(
        default_provider="fake",
        retry=RetrySettings(
            max_attempts=max_attempts,
            backoff_ms=backoff_ms,
            backoff_multiplier=backoff_multiplier,
            include_errors_in_retry=include_errors_in_retry,
        ),
        cache=CacheSettings(enabled=cache_enabled, store="memory", ttl=3600),
        logging=LoggingSettings(
            enabled=True,
            channel=None,
            level="INFO",
            log_prompts=log_prompts,
            log_responses=log_responses,
        ),
    )


def make_validator(
    provider: LLMProvider,
    config: Optional[Config] = None,
    sleep: Optional[RecordingSleep] = None,
    **kwargs: Any,
) -> AiValidator:
    config = config or make_config()
    manager = ProviderManager(config)
    manager.register(config.default_provider, provider)
    return AiValidator(config=config, providers=manager, sleep=sleep or RecordingSleep(), **kwargs)


PERSON_RULES = {"name": "required|string", "age": "required|integer"}


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()
