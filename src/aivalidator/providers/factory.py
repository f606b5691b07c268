"""Factory for creating LLM providers based on configuration."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from aivalidator.config import Config
from aivalidator.errors import UnknownProviderError
from aivalidator.providers.anthropic import AnthropicProvider
from aivalidator.providers.base import LLMProvider
from aivalidator.providers.local import LocalProvider
from aivalidator.providers.openai import OpenAIProvider


def get_provider(config: Config, name: Optional[str] = None) -> LLMProvider:
    """
    Create an LLM provider based on configuration.

    Args:
        config: Application configuration
        name: Provider name; defaults to config.default_provider

    Returns:
        Configured LLM provider instance

    Raises:
        UnknownProviderError: if the name has no configured provider
    """
    name = name or config.default_provider
    settings = config.providers.get(name)
    if settings is None:
        raise UnknownProviderError(name, available=list(config.providers))

    if name == "openai":
        return OpenAIProvider(
            api_key=settings.api_key,
            base_url=settings.base_url,
            default_model=settings.model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )

    elif name == "anthropic":
        return AnthropicProvider(
            api_key=settings.api_key,
            base_url=settings.base_url,
            default_model=settings.model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )

    elif name == "ollama":
        return LocalProvider(
            base_url=settings.base_url,
            default_model=settings.model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )

    raise UnknownProviderError(name, available=list(config.providers))


class ProviderManager:
    """
    Resolves providers by name and reuses the instances it builds.

    Custom providers can be registered under any name and take
    precedence over configured ones.
    """

    def __init__(self, config: Config):
        self.config = config
        self._providers: Dict[str, LLMProvider] = {}
        self._lock = threading.Lock()

    def register(self, name: str, provider: LLMProvider) -> None:
        """Register a provider instance under a name."""
        with self._lock:
            self._providers[name] = provider

    def driver(self, name: Optional[str] = None) -> LLMProvider:
        """Get the provider for a name (default provider when None)."""
        name = name or self.config.default_provider
        with self._lock:
            provider = self._providers.get(name)
            if provider is None:
                provider = get_provider(self.config, name)
                self._providers[name] = provider
            return provider

    def available(self) -> List[str]:
        """Names of configured and registered providers."""
        with self._lock:
            registered = list(self._providers)
        return sorted(set(self.config.providers) | set(registered))

    def close(self) -> None:
        with self._lock:
            providers = list(self._providers.values())
            self._providers.clear()
        for provider in providers:
            provider.close()
