"""Validate, retry and correct structured JSON output from LLM providers."""

from aivalidator.errors import (
    AiValidatorError,
    CastError,
    ConfigurationError,
    ProviderError,
    UnknownProviderError,
    ValidationFailedError,
)
from aivalidator.extraction import extract_json
from aivalidator.schemas import (
    AttemptRecord,
    InlineRules,
    ModelOutput,
    RetryConfig,
    StructuredOutput,
    TokenUsage,
    ValidationResult,
)
from aivalidator.services import AiValidator

__version__ = "0.1.0"

__all__ = [
    "AiValidator",
    "StructuredOutput",
    "InlineRules",
    "ModelOutput",
    "AttemptRecord",
    "TokenUsage",
    "ValidationResult",
    "RetryConfig",
    "extract_json",
    "AiValidatorError",
    "ConfigurationError",
    "UnknownProviderError",
    "ProviderError",
    "CastError",
    "ValidationFailedError",
]
