"""Prompt templates for system instructions and correction retries."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

# Hard cap on how much of an unparseable response is echoed back
PREVIOUS_RESPONSE_ECHO_LIMIT = 500

SYSTEM_PROMPT_HEADER = """You are a precise data extraction assistant.
You must respond with ONLY a valid JSON object. No markdown, no explanation, no additional text.
"""

CORRECTION_HEADER = "\n\n---\nYour previous response was invalid and needs correction."
INVALID_JSON_ERROR = "ERROR: Your response was not valid JSON. Respond with ONLY a valid JSON object."
SCHEMA_ERROR = "ERROR: The JSON did not pass validation. Fix these errors:"
SCHEMA_ERROR_NO_DETAILS = "ERROR: The JSON did not pass validation."
CORRECTION_FOOTER = "\nPlease try again. Return ONLY the corrected JSON object."


def format_rule(rule: Any) -> str:
    """Render a field rule (pipe string or list of rules) as a pipe string."""
    if isinstance(rule, str):
        return rule
    if isinstance(rule, Sequence):
        return "|".join(str(part) for part in rule)
    return str(rule)


def build_system_prompt(rules: Mapping[str, Any]) -> str:
    """
    Build the default system prompt for a rule set.

    Lists each field with its rules so the model knows the expected shape.
    """
    lines = [SYSTEM_PROMPT_HEADER, "The JSON object must satisfy these field rules:"]
    for field, rule in rules.items():
        lines.append(f"- {field}: {format_rule(rule)}")
    return "\n".join(lines)


def build_retry_prompt(
    original_prompt: str,
    previous_response: str,
    json_valid: bool,
    errors: Mapping[str, Sequence[str]],
    include_errors: bool = True,
) -> str:
    """
    Build the prompt for the next attempt.

    Args:
        original_prompt: The caller's prompt, reproduced verbatim
        previous_response: Raw text of the failed attempt
        json_valid: Whether the failed attempt contained a JSON object
        errors: Field errors in the order the rule validator reported them
        include_errors: Echo the previous response / field errors back

    Returns:
        The original prompt followed by a correction block
    """
    parts = [original_prompt, CORRECTION_HEADER]

    if not json_valid:
        parts.append(INVALID_JSON_ERROR)
        if include_errors:
            parts.append(
                "Previous response (invalid): "
                + previous_response[:PREVIOUS_RESPONSE_ECHO_LIMIT]
            )
    elif include_errors:
        parts.append(SCHEMA_ERROR)
        for field, messages in errors.items():
            for message in messages:
                parts.append(f"  - {field}: {message}")
    else:
        parts.append(SCHEMA_ERROR_NO_DETAILS)

    parts.append(CORRECTION_FOOTER)

    return "\n".join(parts)
