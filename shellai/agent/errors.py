"""
Exceptions raised by the agent core.

Module: shellai/agent/errors.py
"""

from typing import Optional


class AgentError(Exception):
    """Base exception for agent core errors."""


class ModelServiceError(AgentError):
    """The model service failed, timed out, or could not be reached."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        """
        Initialize model service error.

        Args:
            message: Error message
            original_error: Original exception if wrapping another error
        """
        super().__init__(message)
        self.original_error = original_error


class TaskCancelledError(AgentError):
    """An in-flight model or tool call was cancelled by the caller."""

    def __init__(self, message: str = "Cancelled by user"):
        super().__init__(message)


class OrchestratorStateError(AgentError):
    """An orchestrator entry point was called in the wrong state."""
