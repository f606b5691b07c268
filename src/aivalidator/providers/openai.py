"""OpenAI LLM provider implementation using official OpenAI SDK."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import openai
from openai import OpenAI

from aivalidator.errors import ConfigurationError, ProviderError
from aivalidator.providers.base import LLMProvider, ProviderResponse
from aivalidator.schemas.results import TokenUsage


class OpenAIProvider(LLMProvider):
    """
    OpenAI API provider using official OpenAI Python SDK.

    Works with any OpenAI-compatible endpoint through base_url.
    """

    # Models that don't support custom temperature (only default=1)
    NO_TEMPERATURE_MODELS = ("gpt-5", "o1", "o3")

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.openai.com/v1",
        default_model: str = "gpt-4o",
        temperature: float = 0.0,
        max_tokens: int = 4096,
        client: Optional[OpenAI] = None,
    ):
        if client is None and not api_key:
            raise ConfigurationError("OpenAI API key is not configured (OPENAI_API_KEY).")
        self.default_model = default_model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client or OpenAI(api_key=api_key, base_url=base_url, timeout=60.0)

    @property
    def name(self) -> str:
        return "openai"

    def _supports_temperature(self, model: str) -> bool:
        """Check if model supports custom temperature values."""
        model_lower = model.lower()
        return not any(model_lower.startswith(prefix) for prefix in self.NO_TEMPERATURE_MODELS)

    def send(
        self,
        prompt: str,
        system_prompt: str,
        options: Optional[Mapping[str, Any]] = None,
    ) -> ProviderResponse:
        """Send a chat completion with system and user messages."""
        options = options or {}
        model = options.get("model") or self.default_model

        # Build kwargs - only include temperature if model supports it
        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "max_completion_tokens": options.get("max_tokens", self.max_tokens),
        }
        if self._supports_temperature(model):
            kwargs["temperature"] = options.get("temperature", self.temperature)

        try:
            response = self._client.chat.completions.create(**kwargs)
        except openai.APIStatusError as e:
            raise ProviderError(self.name, e.message, status_code=e.status_code) from e
        except openai.APIError as e:
            raise ProviderError(self.name, str(e)) from e

        text = response.choices[0].message.content or ""
        usage = response.usage
        return ProviderResponse(
            text=text,
            usage=TokenUsage(
                prompt_tokens=usage.prompt_tokens if usage else 0,
                completion_tokens=usage.completion_tokens if usage else 0,
                total_tokens=usage.total_tokens if usage else 0,
            ),
        )

    def close(self) -> None:
        """Close the OpenAI client."""
        self._client.close()
