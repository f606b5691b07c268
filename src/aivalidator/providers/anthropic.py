"""Anthropic LLM provider over the Messages HTTP API."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import httpx

from aivalidator.errors import ConfigurationError, ProviderError
from aivalidator.providers.base import LLMProvider, ProviderResponse
from aivalidator.schemas.results import TokenUsage


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API provider using httpx."""

    API_VERSION = "2023-06-01"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.anthropic.com/v1",
        default_model: str = "claude-sonnet-4-5-20250929",
        temperature: float = 0.0,
        max_tokens: int = 4096,
        client: Optional[httpx.Client] = None,
    ):
        if not api_key:
            raise ConfigurationError("Anthropic API key is not configured (ANTHROPIC_API_KEY).")
        self.base_url = base_url.rstrip("/")
        self.default_model = default_model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client or httpx.Client(timeout=60.0)
        self._headers = {
            "x-api-key": api_key,
            "anthropic-version": self.API_VERSION,
            "content-type": "application/json",
        }

    @property
    def name(self) -> str:
        return "anthropic"

    def send(
        self,
        prompt: str,
        system_prompt: str,
        options: Optional[Mapping[str, Any]] = None,
    ) -> ProviderResponse:
        """Send a single-turn message with the system prompt."""
        options = options or {}
        url = f"{self.base_url}/messages"

        payload: Dict[str, Any] = {
            "model": options.get("model") or self.default_model,
            "system": system_prompt,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": options.get("max_tokens", self.max_tokens),
            "temperature": options.get("temperature", self.temperature),
        }

        try:
            response = self._client.post(url, json=payload, headers=self._headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                self.name,
                f"HTTP {e.response.status_code}: {e.response.text[:200]}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(self.name, str(e)) from e
        except ValueError as e:
            raise ProviderError(self.name, "Malformed response body") from e

        # Content is a list of blocks; only text blocks carry output
        text = "".join(
            block.get("text", "")
            for block in data.get("content", [])
            if block.get("type") == "text"
        )
        usage = data.get("usage") or {}
        input_tokens = int(usage.get("input_tokens", 0))
        output_tokens = int(usage.get("output_tokens", 0))

        return ProviderResponse(
            text=text,
            usage=TokenUsage(
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            ),
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()
