"""Retry configuration schema."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from aivalidator.config import RetrySettings


class RetryConfig(BaseModel):
    """Retry policy resolved once per validation call."""

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1)
    backoff_ms: int = Field(default=500, ge=0)
    backoff_multiplier: float = Field(default=2.0, ge=1.0)
    include_errors_in_retry: bool = True

    @classmethod
    def from_settings(
        cls, settings: RetrySettings, max_attempts: Optional[int] = None
    ) -> "RetryConfig":
        return cls(
            max_attempts=max_attempts if max_attempts is not None else settings.max_attempts,
            backoff_ms=settings.backoff_ms,
            backoff_multiplier=settings.backoff_multiplier,
            include_errors_in_retry=settings.include_errors_in_retry,
        )

    def delay_before(self, attempt: int) -> float:
        """
        Seconds to wait before sending the given attempt.

        Attempt 1 never waits; attempt n waits
        backoff_ms * multiplier ** (n - 2), i.e. the backoff of the attempt
        that just failed.
        """
        if attempt <= 1:
            return 0.0
        return self.backoff_ms * (self.backoff_multiplier ** (attempt - 2)) / 1000.0
