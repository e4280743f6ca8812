"""
Mock LLM adapter for testing and development.

Replays scripted responses without making API calls, so planning,
reflection, recovery and synthesis can be exercised deterministically.
"""

from typing import Any, Iterable, List, Optional, Union

import anyio

from .base import LLMAdapter, LLMError, LLMMessage, LLMResponse

ScriptedReply = Union[str, Exception]


class MockLLMAdapter(LLMAdapter):
    """
    Mock LLM adapter for testing.

    Scripted replies are consumed in order; an ``Exception`` in the script is
    raised instead of answered. Once the script runs out, replies are built
    from ``response_template``.
    """

    provider: str = "mock"

    def __init__(
        self,
        model: str = "mock-model",
        api_key: Optional[str] = None,
        responses: Optional[Iterable[ScriptedReply]] = None,
        response_template: str = "Mock response to: {prompt}",
        delay_ms: int = 0,
        **kwargs: Any,
    ) -> None:
        """
        Initialize mock adapter.

        Args:
            model: Mock model identifier
            api_key: Not used, accepted for interface compatibility
            responses: Scripted replies returned in order
            response_template: Template used once the script is exhausted
            delay_ms: Simulated latency in milliseconds
            **kwargs: Additional configuration
        """
        super().__init__(model, api_key, **kwargs)
        self.responses: List[ScriptedReply] = list(responses or [])
        self.response_template = response_template
        self.delay_ms = delay_ms
        self.call_count = 0
        self.calls: List[List[LLMMessage]] = []

    def queue(self, *replies: ScriptedReply) -> None:
        """Append replies to the script."""
        self.responses.extend(replies)

    async def complete(
        self,
        messages: List[LLMMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Return the next scripted reply (or a templated one)."""
        if self.delay_ms:
            await anyio.sleep(self.delay_ms / 1000.0)

        self.call_count += 1
        self.calls.append(list(messages))

        if self.responses:
            reply = self.responses.pop(0)
            if isinstance(reply, LLMError):
                raise reply
            if isinstance(reply, Exception):
                raise LLMError(str(reply), provider=self.provider, original_error=reply)
            content = reply
        else:
            user_messages = [msg for msg in messages if msg.role == "user"]
            last_prompt = user_messages[-1].content if user_messages else "no prompt"
            content = self.response_template.format(prompt=last_prompt[:50])

        prompt_tokens = sum(self.count_tokens(msg.content) for msg in messages)
        completion_tokens = self.count_tokens(content)

        return LLMResponse(
            content=content,
            finish_reason="stop",
            model=kwargs.get("model") or self.model,
            usage={
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": prompt_tokens + completion_tokens,
            },
            raw_response={
                "mock": True,
                "call_count": self.call_count,
                "temperature": temperature,
            },
        )

    async def validate_api_key(self) -> bool:
        """Always succeeds."""
        return True
