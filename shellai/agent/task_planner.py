"""
Task Planner.

Module: shellai/agent/task_planner.py

Turns a user request plus recent conversation into a Task holding an
ordered list of steps. The planner never returns an empty plan: when the
model reply cannot be used, the task falls back to a single analysis step.
"""

import logging
from typing import List, Optional, Sequence

from ..tools.base import ToolRegistry
from .model_service import CompletionOptions, ModelService
from .models import ChatMessage, Step, StepAction, Task, new_id
from .parsing import extract_json_object
from .prompts import build_planning_prompt

logger = logging.getLogger(__name__)


class TaskPlanner:
    """Plans a task with the model."""

    def __init__(
        self,
        model_service: ModelService,
        tools: ToolRegistry,
        options: Optional[CompletionOptions] = None,
        history_window: int = 3,
    ):
        """
        Initialize task planner.

        Args:
            model_service: Model used to produce the plan
            tools: Registry whose tools are offered to the model
            options: Sampling options for planning requests
            history_window: Number of recent conversation turns to include
        """
        self.model_service = model_service
        self.tools = tools
        self.options = options or CompletionOptions(temperature=0.3, max_tokens=2000)
        self.history_window = history_window

    async def plan(self, user_input: str, history: Optional[Sequence[ChatMessage]] = None) -> Task:
        """
        Create a task for a user request.

        Args:
            user_input: The new user request
            history: Conversation so far, oldest first

        Returns:
            Task with at least one pending step

        Raises:
            ModelServiceError: If the model cannot be reached
        """
        prompt = build_planning_prompt(user_input, self.tools.list())
        window = list(history or [])[-self.history_window:] if self.history_window > 0 else []
        messages = window + [ChatMessage(role="user", content=prompt)]

        response = await self.model_service.complete(messages, self.options)

        parsed = extract_json_object(response)
        if not parsed.ok:
            logger.warning(f"Planning response not parseable ({parsed.error}), using single-step plan")
            return self._fallback_task(user_input)

        steps = self._build_steps(parsed.data.get("steps"))
        if not steps:
            logger.warning("Planning response contained no usable steps, using single-step plan")
            return self._fallback_task(user_input)

        data = parsed.data
        task = Task(
            id=new_id("task"),
            description=str(data.get("task_description") or f"Respond to: {user_input}"),
            steps=steps,
            strategy=str(data.get("strategy") or ""),
            expected_outcome=str(data.get("expected_outcome") or ""),
        )
        task.remember("user_request", user_input)
        task.remember("strategy", task.strategy)
        task.remember("expected_outcome", task.expected_outcome)

        logger.info(f"Planned task {task.id} with {len(steps)} steps")
        return task

    def _build_steps(self, raw_steps) -> List[Step]:
        if not isinstance(raw_steps, list):
            return []
        return [
            Step.from_dict(entry, step_id=f"step_{index}")
            for index, entry in enumerate(raw_steps)
            if isinstance(entry, dict)
        ]

    def _fallback_task(self, user_input: str) -> Task:
        task = Task(
            id=new_id("task"),
            description=f"Respond to: {user_input}",
            steps=[
                Step(
                    id="step_0",
                    action=StepAction.ANALYSIS,
                    description="Analyze and respond to user request",
                    reasoning="Direct response needed",
                )
            ],
        )
        task.remember("user_request", user_input)
        return task
