"""Prompt templates for AiValidator."""

from aivalidator.prompts.templates import (
    PREVIOUS_RESPONSE_ECHO_LIMIT,
    build_retry_prompt,
    build_system_prompt,
    format_rule,
)

__all__ = [
    "build_retry_prompt",
    "build_system_prompt",
    "format_rule",
    "PREVIOUS_RESPONSE_ECHO_LIMIT",
]
