"""
Model service used by the agent core.

Module: shellai/agent/model_service.py

Thin wrapper over an LLM adapter: converts conversation turns into adapter
messages, applies the request timeout, and turns every transport failure
into ModelServiceError.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import httpx

from adapters.llm import LLMAdapter, LLMError, LLMMessage

from .errors import ModelServiceError
from .models import ChatMessage

logger = logging.getLogger(__name__)

MessageLike = Union[ChatMessage, LLMMessage, dict]


@dataclass
class CompletionOptions:
    """Sampling options for one completion request."""

    model: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 2000


def _to_llm_message(message: MessageLike) -> LLMMessage:
    if isinstance(message, LLMMessage):
        return message
    if isinstance(message, ChatMessage):
        return LLMMessage(role=message.role, content=message.content)
    return LLMMessage(role=message["role"], content=message["content"])


class ModelService:
    """Text completion over a configured LLM adapter."""

    def __init__(
        self,
        adapter: LLMAdapter,
        request_timeout: Optional[float] = 120.0,
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ):
        """
        Initialize the model service.

        Args:
            adapter: LLM adapter that talks to the provider
            request_timeout: Seconds before a request is abandoned (None for no limit)
            system_prompt: Optional system message prepended to every request
            max_tokens: Upper bound applied to every request
        """
        self.adapter = adapter
        self.request_timeout = request_timeout
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens

    @property
    def model(self) -> str:
        return self.adapter.model

    def set_model(self, model: str) -> None:
        """Switch the default model for subsequent requests."""
        logger.info(f"Switching model from {self.adapter.model} to {model}")
        self.adapter.model = model

    async def complete(
        self,
        messages: Sequence[MessageLike],
        options: Optional[CompletionOptions] = None,
    ) -> str:
        """
        Generate text for a conversation.

        Args:
            messages: Conversation turns, last one being the prompt
            options: Sampling options

        Returns:
            Generated text

        Raises:
            ModelServiceError: On transport, HTTP, provider or timeout failure
        """
        options = options or CompletionOptions()
        llm_messages: List[LLMMessage] = [_to_llm_message(m) for m in messages]
        if self.system_prompt:
            llm_messages.insert(0, LLMMessage(role="system", content=self.system_prompt))

        max_tokens = options.max_tokens
        if self.max_tokens is not None:
            max_tokens = min(max_tokens, self.max_tokens)

        kwargs = {}
        if options.model:
            kwargs["model"] = options.model

        try:
            response = await asyncio.wait_for(
                self.adapter.complete(
                    llm_messages,
                    temperature=options.temperature,
                    max_tokens=max_tokens,
                    timeout=self.request_timeout,
                    **kwargs,
                ),
                timeout=self.request_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"Model request timed out after {self.request_timeout}s")
            raise ModelServiceError(f"Model request timed out after {self.request_timeout}s", original_error=e)
        except LLMError as e:
            logger.warning(f"Model request failed ({e.provider}): {e}")
            raise ModelServiceError(str(e), original_error=e)
        except httpx.HTTPError as e:
            logger.warning(f"Model transport error: {e}")
            raise ModelServiceError(f"Model transport error: {e}", original_error=e)
        except Exception as e:
            logger.error(f"Unexpected model service failure: {e}")
            raise ModelServiceError(f"Model service failure: {e}", original_error=e)

        logger.debug(
            f"Model {response.model} returned {len(response.content)} chars "
            f"(tokens: {response.usage.get('total_tokens', 0)})"
        )
        return response.content
