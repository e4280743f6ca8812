"""
Reflector.

Module: shellai/agent/reflector.py

After a tool step succeeds, asks the model whether the request is now
satisfied or which follow-up steps should be added. Any model or parse
problem degrades to "no further action".
"""

import logging
from typing import Any, List, Optional

from ..tools.base import ToolRegistry
from .errors import ModelServiceError
from .model_service import CompletionOptions, ModelService
from .models import ChatMessage, ReflectionResult, Step, StepStatus, Task, new_id
from .parsing import extract_json_object
from .prompts import build_reflection_prompt

logger = logging.getLogger(__name__)


def _is_true(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


class Reflector:
    """Decides whether a task needs more steps after a successful tool call."""

    def __init__(
        self,
        model_service: ModelService,
        tools: ToolRegistry,
        options: Optional[CompletionOptions] = None,
        max_result_chars: int = 4000,
    ):
        self.model_service = model_service
        self.tools = tools
        self.options = options or CompletionOptions(temperature=0.4, max_tokens=1500)
        self.max_result_chars = max_result_chars

    async def reflect(self, task: Task, completed_step: Step) -> ReflectionResult:
        """
        Reflect on a completed tool step.

        Args:
            task: Task being executed
            completed_step: The tool step that just succeeded

        Returns:
            ReflectionResult; ``new_steps`` are fresh pending steps to splice
            in right after the completed one
        """
        if (
            not completed_step.is_tool_call
            or completed_step.status != StepStatus.COMPLETED
            or completed_step.result is None
            or not completed_step.result.success
        ):
            return ReflectionResult()

        prompt = build_reflection_prompt(task, completed_step, self.tools.list(), self.max_result_chars)
        try:
            response = await self.model_service.complete([ChatMessage(role="user", content=prompt)], self.options)
        except ModelServiceError as e:
            logger.warning(f"Reflection skipped, model unavailable: {e}")
            return ReflectionResult()

        parsed = extract_json_object(response)
        if not parsed.ok:
            logger.warning(f"Reflection response not parseable: {parsed.error}")
            return ReflectionResult()

        data = parsed.data
        analysis = data.get("analysis")
        analysis = str(analysis) if analysis else None

        if _is_true(data.get("is_task_complete")):
            return ReflectionResult(should_continue=False, analysis=analysis)

        new_steps = self._build_steps(data.get("next_actions"))
        if not new_steps:
            return ReflectionResult(should_continue=False, analysis=analysis)

        logger.info(f"Reflection on {completed_step.id} added {len(new_steps)} steps")
        return ReflectionResult(should_continue=True, new_steps=new_steps, analysis=analysis)

    def _build_steps(self, actions) -> List[Step]:
        if not isinstance(actions, list):
            return []
        return [Step.from_dict(action, step_id=new_id("dynamic_step")) for action in actions if isinstance(action, dict)]
