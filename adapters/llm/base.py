"""
Abstract base adapter for LLM providers.

This module defines the contract every model-service adapter implements,
so the agent core can talk to Ollama, OpenAI-compatible servers, or the
mock adapter interchangeably.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(str, Enum):
    """Message role in LLM conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class LLMMessage(BaseModel):
    """A message in an LLM conversation."""

    model_config = ConfigDict(use_enum_values=True)

    role: MessageRole
    content: str
    name: Optional[str] = None


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    content: str
    finish_reason: str
    model: str
    usage: Dict[str, int] = Field(
        default_factory=lambda: {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}
    )
    raw_response: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class LLMAdapter(ABC):
    """
    Abstract base class for LLM provider adapters.

    All adapters must implement this interface so the model service can
    swap providers without touching the agent core.
    """

    provider: str = "base"

    def __init__(self, model: str, api_key: Optional[str] = None, **kwargs: Any) -> None:
        """
        Initialize the LLM adapter.

        Args:
            model: Model identifier (e.g., "llama3.2", "gpt-4o")
            api_key: API key for the provider (if required)
            **kwargs: Provider-specific configuration options
        """
        self.model = model
        self.api_key = api_key
        self.config = kwargs

    @abstractmethod
    async def complete(
        self,
        messages: List[LLMMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Generate a completion from the LLM.

        Args:
            messages: Conversation history
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            timeout: Request timeout in seconds
            **kwargs: Provider-specific parameters (``model`` overrides the
                adapter's default model for this call)

        Returns:
            LLM response with content and metadata

        Raises:
            LLMError: If the request fails or times out
        """

    @abstractmethod
    async def validate_api_key(self) -> bool:
        """
        Check that the provider is reachable with the configured credentials.

        Returns:
            True if the provider answered successfully
        """

    async def aclose(self) -> None:
        """Release network resources held by the adapter."""

    def count_tokens(self, text: str) -> int:
        """
        Estimate token count for a text string.

        Simple heuristic of ~4 characters per token; override for
        provider-specific tokenization.
        """
        return len(text) // 4


class LLMError(Exception):
    """Base exception for LLM adapter errors."""

    def __init__(self, message: str, provider: str, original_error: Optional[Exception] = None):
        """
        Initialize LLM error.

        Args:
            message: Error message
            provider: Provider name
            original_error: Original exception if wrapping another error
        """
        super().__init__(message)
        self.provider = provider
        self.original_error = original_error
