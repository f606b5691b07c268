"""Rule validators for parsed model output."""

from aivalidator.rules.base import RuleCheck, RuleValidator
from aivalidator.rules.engine import DEFAULT_MESSAGES, RuleEngine, parse_rules

__all__ = ["RuleValidator", "RuleCheck", "RuleEngine", "parse_rules", "DEFAULT_MESSAGES"]
