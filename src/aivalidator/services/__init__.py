"""Core services for AiValidator."""

from aivalidator.services.validator import AiValidator, CallSettings

__all__ = ["AiValidator", "CallSettings"]
