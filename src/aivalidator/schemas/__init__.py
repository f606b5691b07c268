"""Pydantic schemas and structured output capabilities for AiValidator."""

from aivalidator.schemas.output import InlineRules, ModelOutput, StructuredOutput
from aivalidator.schemas.results import AttemptRecord, TokenUsage, ValidationResult
from aivalidator.schemas.retry import RetryConfig

__all__ = [
    "StructuredOutput",
    "InlineRules",
    "ModelOutput",
    "AttemptRecord",
    "TokenUsage",
    "ValidationResult",
    "RetryConfig",
]
