"""
Logging utilities.

- setup_logging() configures console output once, from the CLI or API.
- AttemptLogger records one structured event per validation attempt.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from rich.logging import RichHandler

from aivalidator.config import LoggingSettings
from aivalidator.schemas.results import AttemptRecord

DEFAULT_CHANNEL = "aivalidator"

# Raw text is truncated to this many characters in log events
LOG_TEXT_LIMIT = 1000


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging to the console."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    # Suppress noisy client logs
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


class AttemptLogger:
    """
    Emits one log event per attempt.

    Passing attempts log at INFO, failing ones at WARNING. The event
    fields are attached as the "context" attribute of the log record.
    """

    def __init__(self, settings: LoggingSettings, logger: Optional[logging.Logger] = None):
        self.settings = settings
        self.logger = logger or logging.getLogger(settings.channel or DEFAULT_CHANNEL)

    def build_context(
        self,
        attempt: AttemptRecord,
        provider_name: str,
        prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        context: Dict[str, Any] = {
            "provider": provider_name,
            "attempt": attempt.attempt,
            "json_valid": attempt.json_valid,
            "schema_valid": attempt.schema_valid,
            "duration_ms": round(attempt.duration_ms, 2),
            "tokens": attempt.usage.total_tokens,
        }

        if attempt.validation_errors:
            context["errors"] = attempt.validation_errors

        if self.settings.log_responses:
            context["response"] = attempt.raw_response[:LOG_TEXT_LIMIT]

        if self.settings.log_prompts and prompt is not None:
            context["prompt"] = prompt[:LOG_TEXT_LIMIT]

        return context

    def log_attempt(
        self,
        attempt: AttemptRecord,
        provider_name: str,
        prompt: Optional[str] = None,
    ) -> None:
        if not self.settings.enabled:
            return

        context = self.build_context(attempt, provider_name, prompt)

        if attempt.succeeded:
            self.logger.info("AiValidator: attempt succeeded %s", context, extra={"context": context})
        else:
            self.logger.warning("AiValidator: attempt failed %s", context, extra={"context": context})
