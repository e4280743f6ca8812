"""
Recovery Planner for failed steps.

Module: shellai/agent/error_recovery.py

Classifies the failure and asks the model for one or two alternative steps.
An empty result means the failure is unrecoverable.
"""

import logging
import re
from enum import Enum
from typing import List, Optional, Union

from ..tools.base import ToolRegistry
from .errors import ModelServiceError
from .model_service import CompletionOptions, ModelService
from .models import ChatMessage, Step, Task, new_id
from .parsing import extract_json_object
from .prompts import build_recovery_prompt

logger = logging.getLogger(__name__)

MAX_RECOVERY_STEPS = 2


class ErrorCategory(Enum):
    """Categories of step failures."""

    FILE_NOT_FOUND = "file_not_found"
    PERMISSION_DENIED = "permission_denied"
    INVALID_INPUT = "invalid_input"
    TOOL_NOT_FOUND = "tool_not_found"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    PARSING_ERROR = "parsing_error"
    UNKNOWN = "unknown"


# Checked in order; the first matching category wins.
ERROR_PATTERNS = {
    ErrorCategory.TOOL_NOT_FOUND: [
        r"tool not found",
        r"tool '.*' not found",
        r"unknown tool",
        r"does not name a tool",
    ],
    ErrorCategory.FILE_NOT_FOUND: [
        r"file not found",
        r"directory not found",
        r"no such file",
        r"path does not exist",
        r"filenotfounderror",
        r"cannot find",
    ],
    ErrorCategory.PERMISSION_DENIED: [
        r"permission denied",
        r"access denied",
        r"not authorized",
        r"operation not permitted",
    ],
    ErrorCategory.TIMEOUT: [
        r"timeout",
        r"timed out",
        r"deadline exceeded",
    ],
    ErrorCategory.NETWORK_ERROR: [
        r"connection error",
        r"network error",
        r"connection refused",
        r"unreachable",
        r"name or service not known",
    ],
    ErrorCategory.PARSING_ERROR: [
        r"parse error",
        r"json",
        r"syntax error",
        r"malformed",
        r"decode error",
        r"not valid utf-8",
    ],
    ErrorCategory.INVALID_INPUT: [
        r"invalid",
        r"must be a",
        r"not a directory",
        r"is a directory",
        r"string not found",
    ],
}


def classify_error(error: Union[str, Exception]) -> ErrorCategory:
    """
    Classify an error message into a category.

    Args:
        error: Error text or exception

    Returns:
        ErrorCategory classification
    """
    if isinstance(error, Exception):
        text = f"{type(error).__name__} {error}".lower()
    else:
        text = str(error).lower()

    for category, patterns in ERROR_PATTERNS.items():
        for pattern in patterns:
            if re.search(pattern, text):
                return category

    if isinstance(error, FileNotFoundError):
        return ErrorCategory.FILE_NOT_FOUND
    if isinstance(error, PermissionError):
        return ErrorCategory.PERMISSION_DENIED
    if isinstance(error, (ValueError, TypeError)):
        return ErrorCategory.INVALID_INPUT
    if isinstance(error, TimeoutError):
        return ErrorCategory.TIMEOUT

    return ErrorCategory.UNKNOWN


class RecoveryPlanner:
    """Proposes substitute steps for a failed step."""

    def __init__(
        self,
        model_service: ModelService,
        tools: ToolRegistry,
        options: Optional[CompletionOptions] = None,
        max_steps: int = MAX_RECOVERY_STEPS,
    ):
        self.model_service = model_service
        self.tools = tools
        self.options = options or CompletionOptions(temperature=0.5, max_tokens=1000)
        self.max_steps = max_steps

    async def recover(self, task: Task, failed_step: Step, error: str) -> List[Step]:
        """
        Suggest alternative steps for a failure.

        Args:
            task: Task being executed
            failed_step: The step that failed
            error: Failure message

        Returns:
            Up to ``max_steps`` pending steps, one recovery level deeper than
            the failed step; empty when no recovery is possible
        """
        category = classify_error(error)
        logger.info(f"Recovering from {category.value} on step {failed_step.id}: {error}")

        prompt = build_recovery_prompt(task, failed_step, error, category.value, self.tools.list())
        try:
            response = await self.model_service.complete([ChatMessage(role="user", content=prompt)], self.options)
        except ModelServiceError as e:
            logger.warning(f"Recovery skipped, model unavailable: {e}")
            return []

        parsed = extract_json_object(response)
        if not parsed.ok:
            logger.warning(f"Recovery response not parseable: {parsed.error}")
            return []

        raw_steps = parsed.data.get("alternative_steps")
        if not isinstance(raw_steps, list):
            return []

        depth = failed_step.recovery_depth + 1
        steps = [
            Step.from_dict(entry, step_id=new_id("recovery_step"), recovery_depth=depth)
            for entry in raw_steps
            if isinstance(entry, dict)
        ][: self.max_steps]

        if steps:
            strategy = parsed.data.get("recovery_strategy")
            logger.info(f"Recovery strategy for {failed_step.id}: {strategy or 'unspecified'} ({len(steps)} steps)")
        return steps
