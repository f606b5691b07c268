"""LLM provider implementations."""

from aivalidator.providers.anthropic import AnthropicProvider
from aivalidator.providers.base import LLMProvider, ProviderResponse
from aivalidator.providers.factory import ProviderManager, get_provider
from aivalidator.providers.local import LocalProvider
from aivalidator.providers.openai import OpenAIProvider

__all__ = [
    "LLMProvider",
    "ProviderResponse",
    "OpenAIProvider",
    "AnthropicProvider",
    "LocalProvider",
    "ProviderManager",
    "get_provider",
]
