"""
Notification sinks: how the agent core reports to its driver.

Module: shellai/agent/notifications.py

Calls are one-way and strictly ordered. CallbackSink and GuardedSink log and
ignore a handler that raises, so a rendering problem never breaks a running task.
"""

import logging
from typing import Any, Callable, Dict, Optional

from .models import ConfirmationRequest

logger = logging.getLogger(__name__)


class NotificationSink:
    """
    Base sink. Every callback is a no-op; subclasses override what they need.
    """

    def on_thinking(self, text: str) -> None:
        pass

    def on_tool_call(self, tool_name: str, parameters: Dict[str, Any]) -> None:
        pass

    def on_confirmation(self, request: ConfirmationRequest) -> None:
        pass

    def on_progress(self, label: str, current: int, total: int) -> None:
        pass

    def on_response(self, text: str) -> None:
        pass

    def on_error(self, text: str) -> None:
        pass


class NullSink(NotificationSink):
    """Discards every notification."""


class CallbackSink(NotificationSink):
    """Sink built from injected handler functions; missing handlers are skipped."""

    def __init__(
        self,
        on_thinking: Optional[Callable[[str], None]] = None,
        on_tool_call: Optional[Callable[[str, Dict[str, Any]], None]] = None,
        on_confirmation: Optional[Callable[[ConfirmationRequest], None]] = None,
        on_progress: Optional[Callable[[str, int, int], None]] = None,
        on_response: Optional[Callable[[str], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ):
        self._handlers: Dict[str, Optional[Callable[..., None]]] = {
            "on_thinking": on_thinking,
            "on_tool_call": on_tool_call,
            "on_confirmation": on_confirmation,
            "on_progress": on_progress,
            "on_response": on_response,
            "on_error": on_error,
        }

    def _dispatch(self, event: str, *args: Any) -> None:
        handler = self._handlers.get(event)
        if handler is None:
            return
        try:
            handler(*args)
        except Exception as e:
            logger.warning(f"Notification handler {event} failed: {e}")

    def on_thinking(self, text: str) -> None:
        self._dispatch("on_thinking", text)

    def on_tool_call(self, tool_name: str, parameters: Dict[str, Any]) -> None:
        self._dispatch("on_tool_call", tool_name, parameters)

    def on_confirmation(self, request: ConfirmationRequest) -> None:
        self._dispatch("on_confirmation", request)

    def on_progress(self, label: str, current: int, total: int) -> None:
        self._dispatch("on_progress", label, current, total)

    def on_response(self, text: str) -> None:
        self._dispatch("on_response", text)

    def on_error(self, text: str) -> None:
        self._dispatch("on_error", text)


class GuardedSink(NotificationSink):
    """Forwards to another sink, logging and ignoring anything it raises."""

    def __init__(self, inner: NotificationSink):
        self.inner = inner

    def _dispatch(self, event: str, *args: Any) -> None:
        try:
            getattr(self.inner, event)(*args)
        except Exception as e:
            logger.warning(f"Notification sink {type(self.inner).__name__}.{event} failed: {e}")

    def on_thinking(self, text: str) -> None:
        self._dispatch("on_thinking", text)

    def on_tool_call(self, tool_name: str, parameters: Dict[str, Any]) -> None:
        self._dispatch("on_tool_call", tool_name, parameters)

    def on_confirmation(self, request: ConfirmationRequest) -> None:
        self._dispatch("on_confirmation", request)

    def on_progress(self, label: str, current: int, total: int) -> None:
        self._dispatch("on_progress", label, current, total)

    def on_response(self, text: str) -> None:
        self._dispatch("on_response", text)

    def on_error(self, text: str) -> None:
        self._dispatch("on_error", text)
