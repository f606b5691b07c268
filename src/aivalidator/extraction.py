"""Tolerant JSON object extraction from raw model text."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\n?```\s*$")
_OBJECT_SPAN = re.compile(r"\{.*\}", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapped around the text, if any."""
    text = text.strip()
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def _decode_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        decoded = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return decoded if isinstance(decoded, dict) else None


def extract_json(text: str) -> Optional[Dict[str, Any]]:
    """
    Recover a JSON object from model output.

    Tries, in order: the whole text once fences are stripped, then the
    greedy span from the first "{" to the last "}". Arrays and scalars at
    the root are rejected. Returns None when nothing decodes; never raises.
    """
    text = strip_code_fences(text)

    decoded = _decode_object(text)
    if decoded is not None:
        return decoded

    match = _OBJECT_SPAN.search(text)
    if match:
        return _decode_object(match.group(0))

    return None
