"""Attempt, usage and result schema definitions."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from aivalidator.errors import ValidationFailedError


class TokenUsage(BaseModel):
    """Token counts reported by a provider for one or more calls."""

    model_config = ConfigDict(frozen=True)

    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


class AttemptRecord(BaseModel):
    """One send -> parse -> validate cycle. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    attempt: int = Field(ge=1)
    raw_response: str
    parsed: Optional[Dict[str, Any]] = None
    json_valid: bool = False
    schema_valid: bool = False
    validation_errors: Dict[str, List[str]] = Field(default_factory=dict)
    usage: TokenUsage = Field(default_factory=TokenUsage)
    duration_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.json_valid and self.schema_valid


class ValidationResult(BaseModel):
    """
    Terminal outcome of a validation run.

    Successful results carry the cast data; failed ones carry an error
    summary. Both keep every attempt, oldest first.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    success: bool
    data: Any = None
    attempt_count: int = Field(ge=0)
    attempts: Tuple[AttemptRecord, ...] = ()
    usage: TokenUsage = Field(default_factory=TokenUsage)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return not self.success

    @property
    def last_attempt(self) -> Optional[AttemptRecord]:
        return self.attempts[-1] if self.attempts else None

    @property
    def last_errors(self) -> Dict[str, List[str]]:
        """Field errors of the final attempt (empty when it had none)."""
        last = self.last_attempt
        return dict(last.validation_errors) if last else {}

    @property
    def was_retried(self) -> bool:
        return self.attempt_count > 1

    def data_or_fail(self) -> Any:
        """Return the cast data, or raise ValidationFailedError with the full history."""
        if self.success:
            return self.data
        raise ValidationFailedError(
            self.error or "AI output validation failed",
            errors=self.last_errors,
            attempts=self.attempts,
        )
