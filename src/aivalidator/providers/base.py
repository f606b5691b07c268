"""Base LLM provider interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from aivalidator.schemas.results import TokenUsage


class ProviderResponse(BaseModel):
    """Raw text returned by a provider together with its token usage."""

    model_config = ConfigDict(frozen=True)

    text: str
    usage: TokenUsage = Field(default_factory=TokenUsage)


class LLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    Providers only move text: the response may contain prose or markdown
    around the JSON, extraction and validation happen in the caller.
    Transport and API failures must raise ProviderError.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name."""
        ...

    @abstractmethod
    def send(
        self,
        prompt: str,
        system_prompt: str,
        options: Optional[Mapping[str, Any]] = None,
    ) -> ProviderResponse:
        """
        Send a prompt to the model.

        Args:
            prompt: The user prompt
            system_prompt: System instructions
            options: Per-call overrides (model, temperature, max_tokens)

        Returns:
            ProviderResponse with the raw text and token usage
        """
        ...

    def close(self) -> None:
        """Release any client resources."""
        pass

    def __enter__(self) -> "LLMProvider":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
