"""
OpenAI LLM adapter.

Works against the OpenAI API or any OpenAI-compatible server
(vLLM, LM Studio, llama.cpp server) via ``base_url``.
"""

import os
from typing import Any, Dict, List, Optional

import httpx

from .base import LLMAdapter, LLMError, LLMMessage, LLMResponse, MessageRole


class OpenAIAdapter(LLMAdapter):
    """Adapter for the OpenAI chat completions API."""

    provider: str = "openai"

    API_BASE_URL: str = "https://api.openai.com/v1"
    DEFAULT_MODEL: str = "gpt-4o"

    # Models that require max_completion_tokens instead of max_tokens
    MODELS_WITH_COMPLETION_TOKENS: tuple = ("o1", "o3", "o4", "gpt-5")

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize OpenAI adapter.

        Args:
            model: OpenAI model identifier
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            base_url: Alternative OpenAI-compatible endpoint
            **kwargs: Additional configuration (``default_timeout`` in seconds)
        """
        api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OpenAI API key required (set OPENAI_API_KEY env var)")

        super().__init__(model, api_key, **kwargs)

        self.client = httpx.AsyncClient(
            base_url=(base_url or self.API_BASE_URL).rstrip("/"),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=kwargs.get("default_timeout", 60.0),
        )

    def _uses_completion_tokens(self, model: str) -> bool:
        return any(model.startswith(prefix) for prefix in self.MODELS_WITH_COMPLETION_TOKENS)

    def _convert_messages(self, messages: List[LLMMessage]) -> List[Dict[str, Any]]:
        """Convert LLMMessage objects to OpenAI API format."""
        result = []
        for msg in messages:
            role = msg.role.value if isinstance(msg.role, MessageRole) else msg.role
            result.append({"role": role, "content": msg.content})
        return result

    async def complete(
        self,
        messages: List[LLMMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Generate completion using the chat completions endpoint.

        Raises:
            LLMError: If API request fails
        """
        model = kwargs.pop("model", None) or self.model

        payload: Dict[str, Any] = {
            "model": model,
            "messages": self._convert_messages(messages),
            "temperature": temperature,
        }

        if max_tokens:
            if self._uses_completion_tokens(model):
                payload["max_completion_tokens"] = max_tokens
            else:
                payload["max_tokens"] = max_tokens

        payload.update(kwargs)

        try:
            response = await self.client.post(
                "/chat/completions", json=payload, timeout=timeout or 60.0
            )
            response.raise_for_status()
            data = response.json()

            choice = data.get("choices", [{}])[0]
            usage = data.get("usage", {})

            return LLMResponse(
                content=choice.get("message", {}).get("content") or "",
                finish_reason=choice.get("finish_reason", "unknown"),
                model=data.get("model", model),
                usage={
                    "prompt_tokens": usage.get("prompt_tokens", 0),
                    "completion_tokens": usage.get("completion_tokens", 0),
                    "total_tokens": usage.get("total_tokens", 0),
                },
                raw_response=data,
            )

        except httpx.TimeoutException as e:
            raise LLMError(
                f"OpenAI request timed out after {timeout or 60.0}s",
                provider=self.provider,
                original_error=e,
            )
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"OpenAI API request failed: {e.response.text}",
                provider=self.provider,
                original_error=e,
            )
        except Exception as e:
            raise LLMError(
                f"Unexpected error calling OpenAI API: {str(e)}",
                provider=self.provider,
                original_error=e,
            )

    async def validate_api_key(self) -> bool:
        """Validate the API key by listing models."""
        try:
            response = await self.client.get("/models", timeout=10.0)
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
