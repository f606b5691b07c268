"""Base rule validator interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping

from pydantic import BaseModel, ConfigDict, Field


class RuleCheck(BaseModel):
    """Outcome of checking one parsed object against a rule set."""

    model_config = ConfigDict(frozen=True)

    passes: bool
    validated: Dict[str, Any] = Field(default_factory=dict)
    errors: Dict[str, List[str]] = Field(default_factory=dict)


class RuleValidator(ABC):
    """
    Abstract base class for rule validators.

    Implementations check a parsed JSON object against field rules and
    report errors per field, in rule order.
    """

    @abstractmethod
    def validate(
        self,
        data: Mapping[str, Any],
        rules: Mapping[str, Any],
        messages: Mapping[str, str],
    ) -> RuleCheck:
        """
        Validate data against rules.

        Args:
            data: Parsed JSON object
            rules: Field name -> rule definition
            messages: Custom messages keyed by "field.rule" or "rule"

        Returns:
            RuleCheck with pass/fail, the validated subset and field errors
        """
        ...
