"""Local rule engine for pipe-delimited field rules."""

from __future__ import annotations

import copy
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlsplit

from aivalidator.errors import ConfigurationError
from aivalidator.rules.base import RuleCheck, RuleValidator

_MISSING = object()

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Rules that only change how other rules are applied
MODIFIER_RULES = ("required", "nullable", "bail")

DEFAULT_MESSAGES: Dict[str, str] = {
    "required": "The {attribute} field is required.",
    "string": "The {attribute} field must be a string.",
    "integer": "The {attribute} field must be an integer.",
    "numeric": "The {attribute} field must be a number.",
    "boolean": "The {attribute} field must be true or false.",
    "array": "The {attribute} field must be an array.",
    "list": "The {attribute} field must be a list.",
    "min.numeric": "The {attribute} field must be at least {min}.",
    "min.string": "The {attribute} field must be at least {min} characters.",
    "min.array": "The {attribute} field must have at least {min} items.",
    "max.numeric": "The {attribute} field must not be greater than {max}.",
    "max.string": "The {attribute} field must not be greater than {max} characters.",
    "max.array": "The {attribute} field must not have more than {max} items.",
    "between.numeric": "The {attribute} field must be between {min} and {max}.",
    "between.string": "The {attribute} field must be between {min} and {max} characters.",
    "between.array": "The {attribute} field must have between {min} and {max} items.",
    "size.numeric": "The {attribute} field must be {size}.",
    "size.string": "The {attribute} field must be {size} characters.",
    "size.array": "The {attribute} field must contain {size} items.",
    "in": "The selected {attribute} is invalid.",
    "not_in": "The selected {attribute} is invalid.",
    "email": "The {attribute} field must be a valid email address.",
    "url": "The {attribute} field must be a valid URL.",
    "regex": "The {attribute} field format is invalid.",
}


# Only {name} placeholders are substituted, other brace text is kept
_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def parse_rules(definition: Any) -> List[Tuple[str, List[str]]]:
    """
    Split a rule definition into (name, params) pairs.

    Accepts "required|string|max:255" or ["required", "regex:/a|b/"].
    List entries are never split on "|", so patterns containing a pipe
    must use the list form.
    """
    if isinstance(definition, str):
        entries = [part for part in definition.split("|") if part.strip()]
    elif isinstance(definition, (list, tuple)):
        entries = [str(part) for part in definition]
    else:
        raise ConfigurationError(f"Unsupported rule definition: {definition!r}")

    parsed: List[Tuple[str, List[str]]] = []
    for entry in entries:
        name, _, raw_params = entry.strip().partition(":")
        name = name.strip().lower()
        if name == "regex":
            params = [raw_params]
        else:
            params = [p.strip() for p in raw_params.split(",")] if raw_params else []
        parsed.append((name, params))
    return parsed


def _lookup(data: Mapping[str, Any], field: str) -> Any:
    """Resolve a dot-notation field name against nested data."""
    if field in data:
        return data[field]

    current: Any = data
    for segment in field.split("."):
        if isinstance(current, Mapping) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            return _MISSING
    return current


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_empty(value: Any) -> bool:
    if value is _MISSING or value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


def _size_kind(value: Any) -> str:
    if _is_number(value):
        return "numeric"
    if isinstance(value, (list, dict)):
        return "array"
    return "string"


def _size(value: Any) -> float:
    if _is_number(value):
        return float(value)
    if isinstance(value, (str, list, dict)):
        return float(len(value))
    return float(len(str(value)))


def _to_float(rule: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"Rule [{rule}] expects a number, got {raw!r}") from None


def _require_params(rule: str, params: List[str], count: int) -> None:
    if len(params) < count or any(p == "" for p in params[:count]):
        raise ConfigurationError(f"Rule [{rule}] requires {count} parameter(s)")


def _matches_any(value: Any, params: List[str]) -> bool:
    if isinstance(value, (list, dict)):
        return False
    if isinstance(value, bool):
        candidates = {str(value).lower(), "1" if value else "0"}
    else:
        candidates = {str(value)}
    return any(candidate in params for candidate in candidates)


def _check_regex(value: Any, params: List[str]) -> bool:
    pattern = params[0] if params else ""
    if len(pattern) >= 2 and pattern.startswith("/") and pattern.rfind("/") > 0:
        end = pattern.rfind("/")
        flags = re.IGNORECASE if "i" in pattern[end + 1:] else 0
        pattern = pattern[1:end]
    else:
        flags = 0
    try:
        compiled = re.compile(pattern, flags)
    except re.error as e:
        raise ConfigurationError(f"Invalid regex rule {params[0]!r}: {e}") from e
    return isinstance(value, (str, int, float)) and compiled.search(str(value)) is not None


def _check_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    parts = urlsplit(value)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


TypeCheck = Callable[[Any], bool]

TYPE_CHECKS: Dict[str, TypeCheck] = {
    "string": lambda v: isinstance(v, str),
    "integer": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "numeric": _is_number,
    "boolean": lambda v: isinstance(v, bool) or (v in (0, 1) and not isinstance(v, float)),
    "array": lambda v: isinstance(v, (list, dict)),
    "list": lambda v: isinstance(v, list),
    "email": lambda v: isinstance(v, str) and _EMAIL_PATTERN.match(v) is not None,
    "url": _check_url,
}


class RuleEngine(RuleValidator):
    """
    Rule validator for pipe-delimited rules.

    Supported rules: required, nullable, bail, string, integer, numeric,
    boolean, array, list, min, max, between, size, in, not_in, email, url,
    regex. Field names may use dot notation for nested objects.

    Fields that are absent and not required are skipped. A present null is
    skipped when the field is nullable. Every other rule is checked and all
    failures are reported unless the field uses "bail".
    """

    def validate(
        self,
        data: Mapping[str, Any],
        rules: Mapping[str, Any],
        messages: Mapping[str, str],
    ) -> RuleCheck:
        errors: Dict[str, List[str]] = {}

        for field, definition in rules.items():
            field_errors = self._check_field(data, field, parse_rules(definition), messages)
            if field_errors:
                errors[field] = field_errors

        validated: Dict[str, Any] = {}
        if not errors:
            for field in rules:
                top = field if field in data else field.split(".")[0]
                if top in data:
                    validated[top] = copy.deepcopy(data[top])

        return RuleCheck(passes=not errors, validated=validated, errors=errors)

    def _check_field(
        self,
        data: Mapping[str, Any],
        field: str,
        parsed: List[Tuple[str, List[str]]],
        messages: Mapping[str, str],
    ) -> List[str]:
        names = {name for name, _ in parsed}
        value = _lookup(data, field)

        if "required" in names and _is_empty(value):
            return [self._message(field, "required", None, {}, messages)]
        if value is _MISSING:
            return []
        if value is None and "nullable" in names:
            return []

        field_errors: List[str] = []
        for name, params in parsed:
            if name in MODIFIER_RULES:
                continue
            failure = self._apply(name, params, value)
            if failure is None:
                continue
            kind, replacements = failure
            field_errors.append(self._message(field, name, kind, replacements, messages))
            if "bail" in names:
                break
        return field_errors

    def _apply(
        self, name: str, params: List[str], value: Any
    ) -> Optional[Tuple[Optional[str], Dict[str, str]]]:
        """Return None when the rule passes, else (size kind, placeholders)."""
        if name in TYPE_CHECKS:
            return None if TYPE_CHECKS[name](value) else (None, {})

        if name in ("min", "max", "size"):
            _require_params(name, params, 1)
            limit = _to_float(name, params[0])
            size = _size(value)
            passed = {
                "min": size >= limit,
                "max": size <= limit,
                "size": size == limit,
            }[name]
            return None if passed else (_size_kind(value), {name: params[0]})

        if name == "between":
            _require_params(name, params, 2)
            low, high = _to_float(name, params[0]), _to_float(name, params[1])
            if low <= _size(value) <= high:
                return None
            return _size_kind(value), {"min": params[0], "max": params[1]}

        if name == "in":
            return None if _matches_any(value, params) else (None, {"values": ", ".join(params)})

        if name == "not_in":
            return None if not _matches_any(value, params) else (None, {"values": ", ".join(params)})

        if name == "regex":
            return None if _check_regex(value, params) else (None, {})

        raise ConfigurationError(f"Unknown validation rule [{name}]")

    def _message(
        self,
        field: str,
        rule: str,
        kind: Optional[str],
        replacements: Dict[str, str],
        messages: Mapping[str, str],
    ) -> str:
        template = (
            messages.get(f"{field}.{rule}")
            or messages.get(rule)
            or (kind and DEFAULT_MESSAGES.get(f"{rule}.{kind}"))
            or DEFAULT_MESSAGES.get(rule)
            or "The {attribute} field is invalid."
        )
        placeholders = dict(replacements)
        placeholders["attribute"] = field.replace("_", " ")
        return _PLACEHOLDER.sub(lambda m: placeholders.get(m.group(1), m.group(0)), template)
