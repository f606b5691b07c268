"""Local LLM provider (Ollama-compatible HTTP interface)."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import httpx

from aivalidator.errors import ProviderError
from aivalidator.providers.base import LLMProvider, ProviderResponse
from aivalidator.schemas.results import TokenUsage


class LocalProvider(LLMProvider):
    """
    Local LLM provider using Ollama-compatible HTTP API.

    Compatible with:
    - Ollama (http://localhost:11434)
    - LM Studio
    - Any OpenAI-compatible local server
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        default_model: str = "llama3",
        temperature: float = 0.0,
        max_tokens: int = 4096,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.default_model = default_model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client or httpx.Client(
            timeout=120.0,  # Local models can be slow
        )

    @property
    def name(self) -> str:
        return "ollama"

    def _is_ollama(self) -> bool:
        """Check if the endpoint is Ollama (uses /api/generate)."""
        return "11434" in self.base_url

    def send(
        self,
        prompt: str,
        system_prompt: str,
        options: Optional[Mapping[str, Any]] = None,
    ) -> ProviderResponse:
        """Send the prompt to the local model."""
        options = options or {}
        model = options.get("model") or self.default_model
        temperature = options.get("temperature", self.temperature)
        max_tokens = options.get("max_tokens", self.max_tokens)

        if self._is_ollama():
            return self._ollama_generate(prompt, system_prompt, model, temperature, max_tokens)
        return self._openai_compatible_generate(prompt, system_prompt, model, temperature, max_tokens)

    def _post(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._client.post(url, json=payload)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                self.name,
                f"HTTP {e.response.status_code} from {url}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"{e}. Ensure the local LLM server is running.") from e
        except ValueError as e:
            raise ProviderError(self.name, f"Malformed response body from {url}") from e

    def _ollama_generate(
        self,
        prompt: str,
        system_prompt: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> ProviderResponse:
        """Generate using Ollama API."""
        url = f"{self.base_url}/api/generate"

        payload = {
            "model": model,
            "prompt": prompt,
            "system": system_prompt,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
            },
        }

        data = self._post(url, payload)
        prompt_tokens = int(data.get("prompt_eval_count", 0))
        completion_tokens = int(data.get("eval_count", 0))
        return ProviderResponse(
            text=data.get("response", ""),
            usage=TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
        )

    def _openai_compatible_generate(
        self,
        prompt: str,
        system_prompt: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> ProviderResponse:
        """Generate using OpenAI-compatible API (LM Studio, etc.)."""
        url = f"{self.base_url}/v1/chat/completions"

        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        data = self._post(url, payload)
        try:
            text = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(self.name, f"Unexpected response shape from {url}") from e

        usage = data.get("usage") or {}
        return ProviderResponse(
            text=text,
            usage=TokenUsage(
                prompt_tokens=int(usage.get("prompt_tokens", 0)),
                completion_tokens=int(usage.get("completion_tokens", 0)),
                total_tokens=int(usage.get("total_tokens", 0)),
            ),
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()
