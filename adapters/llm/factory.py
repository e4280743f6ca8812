"""
LLM Adapter Factory with environment-based defaults.

Module: adapters/llm/factory.py

Creates model-service adapters from explicit parameters, falling back to
environment variables and then built-in defaults.
"""

import logging
import os
from enum import Enum
from typing import Any, Optional, Union

from .base import LLMAdapter

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    """Supported LLM providers."""

    OLLAMA = "ollama"
    OPENAI = "openai"
    MOCK = "mock"


# Environment variable mapping for each provider
PROVIDER_ENV_MAP = {
    LLMProvider.OLLAMA: {
        "api_key": None,
        "endpoint": "OLLAMA_ENDPOINT",
        "default_endpoint": "http://localhost:11434",
        "default_model": "llama3.2",
    },
    LLMProvider.OPENAI: {
        "api_key": "OPENAI_API_KEY",
        "endpoint": "OPENAI_BASE_URL",
        "default_endpoint": "https://api.openai.com/v1",
        "default_model": "gpt-4o",
    },
    LLMProvider.MOCK: {
        "api_key": None,
        "endpoint": None,
        "default_model": "mock-model",
    },
}


def get_default_provider() -> LLMProvider:
    """
    Get the default provider.

    Priority:
    1. SHELLAI_PROVIDER env var if set and valid
    2. Ollama
    """
    explicit_provider = os.getenv("SHELLAI_PROVIDER", "").lower()
    if explicit_provider:
        try:
            return LLMProvider(explicit_provider)
        except ValueError:
            logger.warning(f"Invalid SHELLAI_PROVIDER '{explicit_provider}', using ollama")

    return LLMProvider.OLLAMA


def get_default_model(provider: Optional[LLMProvider] = None) -> str:
    """Get the default model for a provider (SHELLAI_MODEL wins when set)."""
    if provider is None:
        provider = get_default_provider()

    env_model = os.getenv("SHELLAI_MODEL")
    if env_model:
        return env_model.strip()

    return PROVIDER_ENV_MAP[provider]["default_model"]


def create_adapter(
    provider: Optional[Union[str, LLMProvider]] = None,
    model: Optional[str] = None,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
    **kwargs: Any,
) -> LLMAdapter:
    """
    Create an LLM adapter with environment defaults and runtime overrides.

    Priority (highest to lowest):
    1. Explicit parameters passed to this function
    2. Environment variables
    3. Built-in defaults

    Args:
        provider: LLM provider (ollama, openai, mock)
        model: Model identifier
        base_url: Server endpoint override
        api_key: API key override
        **kwargs: Additional adapter options

    Returns:
        Configured LLM adapter instance

    Raises:
        ValueError: If the provider is unknown
    """
    if provider is None:
        provider = get_default_provider()
    elif isinstance(provider, str):
        try:
            provider = LLMProvider(provider.lower())
        except ValueError:
            raise ValueError(f"Unsupported provider: {provider}")

    if model is None:
        model = get_default_model(provider)

    env_config = PROVIDER_ENV_MAP[provider]

    if api_key is None and env_config.get("api_key"):
        api_key = os.getenv(env_config["api_key"])

    if base_url is None and env_config.get("endpoint"):
        base_url = os.getenv(env_config["endpoint"]) or env_config.get("default_endpoint")

    logger.info(f"Creating {provider.value} adapter with model: {model}")

    if provider == LLMProvider.OLLAMA:
        from .ollama import OllamaAdapter

        return OllamaAdapter(model=model, endpoint=base_url, api_key=api_key, **kwargs)

    if provider == LLMProvider.OPENAI:
        from .openai import OpenAIAdapter

        return OpenAIAdapter(model=model, api_key=api_key, base_url=base_url, **kwargs)

    from .mock import MockLLMAdapter

    return MockLLMAdapter(model=model, **kwargs)
