"""Validator service: the send -> extract -> validate -> retry loop."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from aivalidator.cache import CacheStore, build_cache_key, get_cache_store
from aivalidator.config import Config, get_config
from aivalidator.errors import CastError, ConfigurationError
from aivalidator.extraction import extract_json
from aivalidator.logging_utils import AttemptLogger
from aivalidator.prompts import build_retry_prompt
from aivalidator.providers.base import LLMProvider
from aivalidator.providers.factory import ProviderManager
from aivalidator.rules import RuleCheck, RuleEngine, RuleValidator
from aivalidator.schemas import (
    AttemptRecord,
    InlineRules,
    RetryConfig,
    StructuredOutput,
    TokenUsage,
    ValidationResult,
)

logger = logging.getLogger(__name__)

INVALID_JSON_SUMMARY = "Invalid JSON response from AI"
SCHEMA_FAILED_SUMMARY = "Schema validation failed: "


class CallSettings(BaseModel):
    """Immutable snapshot of everything a single validate() call uses."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    provider: LLMProvider
    retry: RetryConfig


class AiValidator:
    """
    Service for obtaining schema-valid JSON from an LLM.

    Each attempt sends the prompt, extracts a JSON object from the reply
    and checks it against the schema rules. Failed attempts are retried
    with the errors appended to the original prompt, with exponential
    backoff in between. Provider faults and cast faults are raised;
    invalid output is returned as a failed ValidationResult.

    Per-call overrides (provider, max_attempts) never mutate the service,
    so one instance can serve concurrent calls.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        providers: Optional[ProviderManager] = None,
        rule_validator: Optional[RuleValidator] = None,
        cache: Optional[CacheStore] = None,
        attempt_logger: Optional[AttemptLogger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or get_config()
        self.providers = providers or ProviderManager(self.config)
        self.rule_validator = rule_validator or RuleEngine()
        if cache is None and self.config.cache.enabled:
            cache = get_cache_store(self.config)
        self.cache = cache
        self.attempt_logger = attempt_logger or AttemptLogger(self.config.logging)
        self._sleep = sleep

    def settings_for(
        self,
        provider: Optional[str] = None,
        max_attempts: Optional[int] = None,
    ) -> CallSettings:
        """Resolve the provider and retry policy for one call."""
        try:
            retry = RetryConfig.from_settings(self.config.retry, max_attempts=max_attempts)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid retry settings: {e}") from e

        return CallSettings(provider=self.providers.driver(provider), retry=retry)

    def validate(
        self,
        prompt: str,
        schema: StructuredOutput[Any],
        options: Optional[Mapping[str, Any]] = None,
        *,
        provider: Optional[str] = None,
        max_attempts: Optional[int] = None,
    ) -> ValidationResult:
        """
        Validate AI output against a structured output schema.

        Args:
            prompt: The prompt sent on the first attempt
            schema: Rules, messages, system prompt and cast for the output
            options: Provider options (model, temperature, max_tokens)
            provider: Provider name override for this call
            max_attempts: Attempt budget override for this call

        Returns:
            ValidationResult, successful or exhausted

        Raises:
            ProviderError: the provider failed to respond (not retried)
            CastError: schema.cast() failed on validated data
            ConfigurationError: unknown provider or invalid rule definitions
        """
        settings = self.settings_for(provider=provider, max_attempts=max_attempts)

        cache_key = self._cache_key(prompt, schema)
        cached = self._check_cache(cache_key)
        if cached is not None:
            logger.debug("AiValidator: cache hit for %s", cache_key)
            return cached

        result = self._run(prompt, schema, dict(options or {}), settings)

        if result.success:
            self._store_cache(cache_key, result)

        return result

    def validate_with_rules(
        self,
        prompt: str,
        rules: Mapping[str, Any],
        options: Optional[Mapping[str, Any]] = None,
        *,
        messages: Optional[Mapping[str, str]] = None,
        provider: Optional[str] = None,
        max_attempts: Optional[int] = None,
    ) -> ValidationResult:
        """Quick validation with inline rules (no schema class needed)."""
        return self.validate(
            prompt,
            InlineRules(rules, messages),
            options,
            provider=provider,
            max_attempts=max_attempts,
        )

    def validate_or_fail(
        self,
        prompt: str,
        schema: StructuredOutput[Any],
        options: Optional[Mapping[str, Any]] = None,
        *,
        provider: Optional[str] = None,
        max_attempts: Optional[int] = None,
    ) -> Any:
        """Return the cast data, or raise ValidationFailedError when every attempt failed."""
        result = self.validate(
            prompt, schema, options, provider=provider, max_attempts=max_attempts
        )
        return result.data_or_fail()

    def _run(
        self,
        prompt: str,
        schema: StructuredOutput[Any],
        options: Dict[str, Any],
        settings: CallSettings,
    ) -> ValidationResult:
        provider = settings.provider
        retry = settings.retry
        system_prompt = schema.system_prompt()
        rules = schema.rules()
        messages = schema.messages()

        attempts: List[AttemptRecord] = []
        total_usage = TokenUsage()
        current_prompt = prompt

        for attempt in range(1, retry.max_attempts + 1):
            started = time.perf_counter()
            response = provider.send(current_prompt, system_prompt, options)
            duration_ms = (time.perf_counter() - started) * 1000

            total_usage = total_usage + response.usage

            parsed = extract_json(response.text)
            check: Optional[RuleCheck] = None
            if parsed is not None:
                check = self.rule_validator.validate(parsed, rules, messages)

            record = AttemptRecord(
                attempt=attempt,
                raw_response=response.text,
                parsed=parsed,
                json_valid=parsed is not None,
                schema_valid=check is not None and check.passes,
                validation_errors=check.errors if check is not None else {},
                usage=response.usage,
                duration_ms=duration_ms,
            )
            attempts.append(record)
            self.attempt_logger.log_attempt(record, provider.name, current_prompt)

            if record.succeeded and check is not None:
                return ValidationResult(
                    success=True,
                    data=self._cast(schema, check.validated, attempts),
                    attempt_count=attempt,
                    attempts=tuple(attempts),
                    usage=total_usage,
                )

            if attempt < retry.max_attempts:
                current_prompt = build_retry_prompt(
                    prompt,
                    response.text,
                    record.json_valid,
                    record.validation_errors,
                    include_errors=retry.include_errors_in_retry,
                )
                delay = retry.delay_before(attempt + 1)
                if delay > 0:
                    self._sleep(delay)

        last = attempts[-1]
        if last.json_valid:
            error = SCHEMA_FAILED_SUMMARY + json.dumps(last.validation_errors)
        else:
            error = INVALID_JSON_SUMMARY

        return ValidationResult(
            success=False,
            data=None,
            attempt_count=len(attempts),
            attempts=tuple(attempts),
            usage=total_usage,
            error=error,
        )

    def _cast(
        self,
        schema: StructuredOutput[Any],
        validated: Dict[str, Any],
        attempts: List[AttemptRecord],
    ) -> Any:
        try:
            return schema.cast(validated)
        except Exception as e:
            raise CastError(schema.name, attempts) from e

    def _cache_enabled(self) -> bool:
        return self.config.cache.enabled and self.cache is not None

    def _cache_key(self, prompt: str, schema: StructuredOutput[Any]) -> str:
        return build_cache_key(prompt, schema.rules(), prefix=self.config.cache.prefix)

    def _check_cache(self, key: str) -> Optional[ValidationResult]:
        if not self._cache_enabled():
            return None
        return self.cache.get(key)  # type: ignore[union-attr]

    def _store_cache(self, key: str, result: ValidationResult) -> None:
        if not self._cache_enabled():
            return
        try:
            self.cache.put(key, result, self.config.cache.ttl)  # type: ignore[union-attr]
        except Exception as e:
            # The result is already validated, a failed write only loses the cache entry
            logger.warning("AiValidator: could not cache result for %s: %s", key, e)
