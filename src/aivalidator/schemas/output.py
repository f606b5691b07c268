"""Structured output schema capabilities."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Generic, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel

from aivalidator.prompts import build_system_prompt

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class StructuredOutput(ABC, Generic[T]):
    """
    Describes the output expected from the model.

    Subclasses declare the field rules and may override the error
    messages, the system prompt and the cast into a typed value.
    cast() must not fail for data that already passed the rules.
    """

    @abstractmethod
    def rules(self) -> Dict[str, Any]:
        """Field rules handed to the rule validator."""
        ...

    def messages(self) -> Dict[str, str]:
        """Custom error messages keyed by "field.rule" or "rule"."""
        return {}

    def system_prompt(self) -> str:
        return build_system_prompt(self.rules())

    def cast(self, data: Dict[str, Any]) -> T:
        return data  # type: ignore[return-value]

    @property
    def name(self) -> str:
        return type(self).__name__


class InlineRules(StructuredOutput[Dict[str, Any]]):
    """Rules-only schema: default system prompt and identity cast."""

    def __init__(self, rules: Mapping[str, Any], messages: Optional[Mapping[str, str]] = None):
        self._rules = dict(rules)
        self._messages = dict(messages or {})

    def rules(self) -> Dict[str, Any]:
        return dict(self._rules)

    def messages(self) -> Dict[str, str]:
        return dict(self._messages)


class ModelOutput(StructuredOutput[M]):
    """
    Schema whose cast builds a pydantic model.

    Example:
        class PersonOutput(ModelOutput[Person]):
            model = Person

            def rules(self):
                return {"name": "required|string", "age": "required|integer"}
    """

    model: ClassVar[Type[BaseModel]]

    def cast(self, data: Dict[str, Any]) -> M:
        return self.model.model_validate(data)  # type: ignore[return-value]
