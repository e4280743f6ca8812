"""
Ollama local inference server adapter.

Talks to Ollama's native chat endpoint (``POST /api/chat``).
Default: http://localhost:11434 (Ollama default port)
"""

import os
from typing import Any, Dict, List, Optional

import httpx

from .base import LLMAdapter, LLMError, LLMMessage, LLMResponse, MessageRole


class OllamaAdapter(LLMAdapter):
    """Adapter for a local or remote Ollama server."""

    provider: str = "ollama"

    DEFAULT_ENDPOINT: str = "http://localhost:11434"
    DEFAULT_MODEL: str = "llama3.2"

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        endpoint: Optional[str] = None,
        api_key: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize Ollama adapter.

        Args:
            model: Ollama model tag (e.g. "llama3.2", "qwen2.5-coder:7b")
            endpoint: Server URL (defaults to OLLAMA_ENDPOINT env var or http://localhost:11434)
            api_key: Optional bearer token when Ollama sits behind a proxy
            **kwargs: Additional configuration (``default_timeout`` in seconds)
        """
        endpoint = endpoint or os.getenv("OLLAMA_ENDPOINT", self.DEFAULT_ENDPOINT)

        super().__init__(model, api_key, **kwargs)

        self.endpoint = endpoint.rstrip("/")

        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        self.client = httpx.AsyncClient(
            base_url=self.endpoint,
            headers=headers,
            timeout=kwargs.get("default_timeout", 120.0),
        )

    def _convert_messages(self, messages: List[LLMMessage]) -> List[Dict[str, Any]]:
        """Convert LLMMessage objects to Ollama chat format."""
        result = []
        for msg in messages:
            # role is stored as a plain string because of use_enum_values
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
        Generate a completion from the Ollama server.

        Args:
            messages: Conversation history
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate (sent as ``num_predict``)
            timeout: Request timeout in seconds
            **kwargs: ``model`` override and extra Ollama ``options``

        Returns:
            LLM response

        Raises:
            LLMError: If the request fails or times out
        """
        model = kwargs.pop("model", None) or self.model

        options: Dict[str, Any] = {"temperature": temperature}
        if max_tokens:
            options["num_predict"] = max_tokens
        options.update(kwargs)

        payload = {
            "model": model,
            "messages": self._convert_messages(messages),
            "stream": False,
            "options": options,
        }

        try:
            response = await self.client.post("/api/chat", json=payload, timeout=timeout or 120.0)
            response.raise_for_status()
            data = response.json()

            message = data.get("message", {})
            prompt_tokens = data.get("prompt_eval_count", 0)
            completion_tokens = data.get("eval_count", 0)

            return LLMResponse(
                content=message.get("content", ""),
                finish_reason=data.get("done_reason", "stop"),
                model=data.get("model", model),
                usage={
                    "prompt_tokens": prompt_tokens,
                    "completion_tokens": completion_tokens,
                    "total_tokens": prompt_tokens + completion_tokens,
                },
                raw_response=data,
            )

        except httpx.TimeoutException as e:
            raise LLMError(
                f"Ollama request timed out after {timeout or 120.0}s",
                provider=self.provider,
                original_error=e,
            )
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"Ollama request failed: {e.response.text}",
                provider=self.provider,
                original_error=e,
            )
        except Exception as e:
            raise LLMError(
                f"Unexpected error calling Ollama: {str(e)}",
                provider=self.provider,
                original_error=e,
            )

    async def validate_api_key(self) -> bool:
        """Check the server is reachable by listing installed models."""
        try:
            response = await self.client.get("/api/tags", timeout=10.0)
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def list_models(self) -> List[str]:
        """Return the names of models installed on the server."""
        try:
            response = await self.client.get("/api/tags", timeout=10.0)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise LLMError(f"Failed to list models: {str(e)}", provider=self.provider, original_error=e)
        return [model.get("name", "") for model in response.json().get("models", [])]

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
