"""
Step Executor.

Module: shellai/agent/step_executor.py

Runs one step of a task. Tool steps go through the confirmation policy and
the tool registry; reasoning steps complete immediately. Tool problems
always end as a failed step, never as an exception.
"""

import logging
from typing import Optional

from ..tools.base import ToolRegistry, ToolResult
from .confirmation import ConfirmationPolicy
from .models import ConfirmationRequest, Step, StepStatus, Task
from .notifications import NotificationSink, NullSink

logger = logging.getLogger(__name__)


class StepExecutor:
    """Executes individual steps."""

    def __init__(
        self,
        tools: ToolRegistry,
        policy: Optional[ConfirmationPolicy] = None,
        sink: Optional[NotificationSink] = None,
    ):
        self.tools = tools
        self.policy = policy or ConfirmationPolicy()
        self.sink = sink or NullSink()

    async def execute_step(
        self,
        step: Step,
        task: Task,
        approved: bool = False,
    ) -> Optional[ConfirmationRequest]:
        """
        Execute one step.

        Args:
            step: Pending step to run
            task: Task owning the step; receives ``<tool>_result`` context
            approved: The user already approved this exact step

        Returns:
            A ConfirmationRequest when the step needs approval (the step stays
            pending and nothing runs), otherwise None
        """
        if step.status != StepStatus.PENDING:
            raise ValueError(f"Step {step.id} is {step.status.value}, expected pending")

        if not approved:
            self.sink.on_thinking(f"🔄 {step.reasoning}")

        if not step.is_tool_call:
            step.complete()
            return None

        if not step.tool:
            step.fail(ToolResult(success=False, error="Tool call step does not name a tool"))
            return None

        parameters = step.parameters or {}

        if not approved and self.policy.requires_confirmation(step.tool, parameters):
            request = ConfirmationRequest(
                task_id=task.id,
                step_id=step.id,
                tool=step.tool,
                parameters=dict(parameters),
                content=f"Execute {step.tool}? This will: {step.description}",
            )
            logger.info(f"Step {step.id} ({step.tool}) requires confirmation")
            self.sink.on_confirmation(request)
            return request

        if not self.tools.has(step.tool):
            logger.warning(f"Step {step.id} references unknown tool {step.tool}")
            step.fail(ToolResult(success=False, error=f"Tool not found: {step.tool}"))
            return None

        self.sink.on_tool_call(step.tool, parameters)
        result = await self.tools.execute(step.tool, parameters)

        task.remember(f"{step.tool}_result", result.data)
        if result.success:
            step.complete(result)
        else:
            logger.info(f"Step {step.id} ({step.tool}) failed: {result.error}")
            step.fail(result)
        return None
