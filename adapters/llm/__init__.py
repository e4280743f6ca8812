"""
LLM adapter implementations for the model service.

Supported adapters:
- OllamaAdapter: Ollama local/remote servers (default)
- OpenAIAdapter: OpenAI and OpenAI-compatible servers
- MockLLMAdapter: Scripted adapter for tests and offline demos

Factory functions:
- create_adapter(): Create an adapter from parameters and env defaults
- get_default_provider(): Provider from SHELLAI_PROVIDER
- get_default_model(): Model from SHELLAI_MODEL or provider default
"""

from adapters.llm.base import LLMAdapter, LLMError, LLMMessage, LLMResponse, MessageRole
from adapters.llm.ollama import OllamaAdapter
from adapters.llm.openai import OpenAIAdapter
from adapters.llm.mock import MockLLMAdapter
from adapters.llm.factory import (
    LLMProvider,
    create_adapter,
    get_default_model,
    get_default_provider,
)

__all__ = [
    # Base classes
    "LLMAdapter",
    "LLMError",
    "LLMResponse",
    "LLMMessage",
    "MessageRole",
    # Adapters
    "OllamaAdapter",
    "OpenAIAdapter",
    "MockLLMAdapter",
    # Factory
    "LLMProvider",
    "create_adapter",
    "get_default_model",
    "get_default_provider",
]
