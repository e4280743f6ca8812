"""
Task Orchestrator.

Module: shellai/agent/orchestrator.py

Drives one user request through planning, step execution, reflection,
recovery and final synthesis:

    PLANNING -> EXECUTING -> (REFLECTING | RECOVERING) -> EXECUTING -> ...
             -> SYNTHESIZING -> DONE

ABORTED ends a task with an error instead of an answer. A step that needs
approval suspends the loop in AWAITING_CONFIRMATION; ``resume()`` continues
from that exact step, or ends in CANCELLED when the user declines.

Steps live in a plain list walked with an integer cursor. Reflection and
recovery splice new steps in directly after the cursor.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Optional, Sequence, TypeVar

from ..config import AgentConfig
from ..tools.base import ToolRegistry, ToolResult
from .confirmation import ConfirmationPolicy
from .error_recovery import RecoveryPlanner
from .errors import ModelServiceError, OrchestratorStateError, TaskCancelledError
from .model_service import CompletionOptions, ModelService
from .models import ChatMessage, ConfirmationRequest, Step, StepStatus, Task, TaskStatus
from .notifications import GuardedSink, NotificationSink, NullSink
from .prompts import build_synthesis_prompt
from .reflector import Reflector
from .result_formatter import format_tool_result
from .step_executor import StepExecutor
from .task_planner import TaskPlanner

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OrchestratorState(str, Enum):
    """Orchestrator lifecycle states."""

    IDLE = "idle"
    PLANNING = "planning"
    EXECUTING = "executing"
    REFLECTING = "reflecting"
    RECOVERING = "recovering"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    SYNTHESIZING = "synthesizing"
    DONE = "done"
    ABORTED = "aborted"
    CANCELLED = "cancelled"


RUNNING_STATES = frozenset({
    OrchestratorState.PLANNING,
    OrchestratorState.EXECUTING,
    OrchestratorState.REFLECTING,
    OrchestratorState.RECOVERING,
    OrchestratorState.SYNTHESIZING,
})

TERMINAL_STATES = frozenset({
    OrchestratorState.DONE,
    OrchestratorState.ABORTED,
    OrchestratorState.CANCELLED,
})


@dataclass
class RunResult:
    """Where a call to the orchestrator left off."""

    state: OrchestratorState
    task: Optional[Task] = None
    response: Optional[str] = None
    error: Optional[str] = None
    confirmation: Optional[ConfirmationRequest] = None

    @property
    def awaiting_confirmation(self) -> bool:
        return self.state == OrchestratorState.AWAITING_CONFIRMATION


def _options(sampling: Any, model: Optional[str] = None) -> CompletionOptions:
    return CompletionOptions(model=model, temperature=sampling.temperature, max_tokens=sampling.max_tokens)


class TaskOrchestrator:
    """
    Runs tasks end to end. One task at a time; not reentrant.

    Example:
        orchestrator = TaskOrchestrator(model_service, registry, sink=ConsoleSink())
        result = await orchestrator.process_user_input("list the python files here")
        while result.awaiting_confirmation:
            result = await orchestrator.resume(approved=True)
    """

    def __init__(
        self,
        model_service: ModelService,
        tools: ToolRegistry,
        sink: Optional[NotificationSink] = None,
        config: Optional[AgentConfig] = None,
        policy: Optional[ConfirmationPolicy] = None,
        planner: Optional[TaskPlanner] = None,
        executor: Optional[StepExecutor] = None,
        reflector: Optional[Reflector] = None,
        recovery: Optional[RecoveryPlanner] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            model_service: Model used for planning, reflection, recovery and synthesis
            tools: Tool registry offered to the model and used for execution
            sink: Receives progress, confirmation, response and error notifications
            config: Iteration limits and per-phase sampling options
            policy: Confirmation policy for tool calls
            planner: Override the default TaskPlanner
            executor: Override the default StepExecutor
            reflector: Override the default Reflector
            recovery: Override the default RecoveryPlanner
        """
        self.model_service = model_service
        self.tools = tools
        self.sink = GuardedSink(sink or NullSink())
        self.config = config or AgentConfig()

        self.planner = planner or TaskPlanner(
            model_service, tools, _options(self.config.planning), history_window=self.config.history_window
        )
        self.executor = executor or StepExecutor(tools, policy or ConfirmationPolicy(), self.sink)
        self.reflector = reflector or Reflector(
            model_service, tools, _options(self.config.reflection), max_result_chars=self.config.max_result_chars
        )
        self.recovery = recovery or RecoveryPlanner(model_service, tools, _options(self.config.recovery))
        self.synthesis_options = _options(self.config.synthesis)

        self.state = OrchestratorState.IDLE
        self.task: Optional[Task] = None
        self._cursor = 0
        self._iterations = 0
        self._pending: Optional[ConfirmationRequest] = None
        self._approved_step_id: Optional[str] = None
        self._cancel_requested = False
        self._inflight: Optional[asyncio.Future] = None

    @property
    def pending_confirmation(self) -> Optional[ConfirmationRequest]:
        return self._pending

    @property
    def is_running(self) -> bool:
        return self.state in RUNNING_STATES

    @property
    def iterations(self) -> int:
        return self._iterations

    async def process_user_input(
        self,
        user_input: str,
        history: Optional[Sequence[ChatMessage]] = None,
    ) -> RunResult:
        """
        Plan and execute a new task.

        Args:
            user_input: The user's request
            history: Conversation so far, oldest first

        Returns:
            RunResult in DONE, ABORTED or AWAITING_CONFIRMATION

        Raises:
            OrchestratorStateError: If a task is already running
        """
        if self.is_running:
            raise OrchestratorStateError(f"A task is already running (state: {self.state.value})")
        if self._pending is not None:
            logger.info(f"Discarding pending confirmation for step {self._pending.step_id}")

        self._start()
        return await self._guarded(self._plan_and_run(user_input, history))

    async def resume(self, approved: bool) -> RunResult:
        """
        Resolve the pending confirmation and continue.

        Args:
            approved: True to run the suspended step, False to cancel the task

        Returns:
            RunResult; CANCELLED when declined

        Raises:
            OrchestratorStateError: If nothing is awaiting confirmation
        """
        if self.state != OrchestratorState.AWAITING_CONFIRMATION or self._pending is None or self.task is None:
            raise OrchestratorStateError("No confirmation is pending")

        request = self._pending
        self._pending = None
        self._cancel_requested = False

        if not approved:
            step = self.task.steps[self._cursor]
            step.fail(ToolResult(success=False, error="Declined by user"))
            self.task.status = TaskStatus.FAILED
            self._set_state(OrchestratorState.CANCELLED)
            message = f"🚫 Operation cancelled by user. {request.tool} was not executed."
            self.sink.on_response(message)
            return RunResult(state=self.state, task=self.task, response=message)

        logger.info(f"User approved {request.tool} for step {request.step_id}")
        self._approved_step_id = request.step_id
        return await self._guarded(self._run())

    def cancel(self) -> bool:
        """
        Cancel the running task. Safe to call from a signal handler on the loop thread.

        Returns:
            True if a running task was signalled, False if there was nothing to cancel
        """
        if not self.is_running:
            return False
        self._cancel_requested = True
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        logger.info("Cancellation requested")
        return True

    def reset(self) -> None:
        """Forget the current task. Not allowed while one is running."""
        if self.is_running:
            raise OrchestratorStateError("Cannot reset while a task is running")
        self.task = None
        self._pending = None
        self._approved_step_id = None
        self.state = OrchestratorState.IDLE

    async def _plan_and_run(self, user_input: str, history: Optional[Sequence[ChatMessage]]) -> RunResult:
        self._set_state(OrchestratorState.PLANNING)
        self.sink.on_thinking("🧠 Planning approach to your request...")

        try:
            task = await self._cancellable(self.planner.plan(user_input, history))
        except TaskCancelledError as e:
            return self._abort(str(e))
        except ModelServiceError as e:
            return self._abort(f"Planning failed: {e}")

        self.task = task
        task.status = TaskStatus.IN_PROGRESS
        self.sink.on_progress("Planning completed", 1, len(task.steps) + 1)
        return await self._run()

    async def _guarded(self, run: Awaitable[RunResult]) -> RunResult:
        """Turn an unexpected component failure into an ABORTED result."""
        try:
            return await run
        except Exception as e:
            logger.exception("Unexpected failure while running task")
            return self._abort(f"Unexpected error: {e}")

    async def _run(self) -> RunResult:
        task = self.task
        max_iterations = self.config.max_iterations

        while self._cursor < len(task.steps) and self._iterations < max_iterations:
            self._set_state(OrchestratorState.EXECUTING)
            step = task.steps[self._cursor]
            if step.status != StepStatus.PENDING:
                self._cursor += 1
                continue

            self.sink.on_progress(f"Executing: {step.description}", self._cursor + 2, len(task.steps) + 1)
            approved = self._approved_step_id == step.id
            self._approved_step_id = None

            try:
                request = await self._cancellable(self.executor.execute_step(step, task, approved=approved))
            except TaskCancelledError as e:
                if step.status == StepStatus.PENDING:
                    step.fail(ToolResult(success=False, error=str(e)))
                return self._abort(str(e))

            if request is not None:
                self._pending = request
                self._set_state(OrchestratorState.AWAITING_CONFIRMATION)
                return RunResult(state=self.state, task=task, confirmation=request)

            self._iterations += 1

            if step.status == StepStatus.COMPLETED:
                if step.is_tool_call:
                    if approved:
                        self.sink.on_response(
                            f"✅ Successfully executed {step.tool}.\n\n"
                            f"{format_tool_result(step.result)}\n\n"
                            "Continuing with the task..."
                        )
                    aborted = await self._reflect(step)
                    if aborted is not None:
                        return aborted
            else:
                aborted = await self._recover(step)
                if aborted is not None:
                    return aborted

            # After recovery this lands on the first substitute step.
            self._cursor += 1

        if self._iterations >= max_iterations and self._cursor < len(task.steps):
            logger.info(f"Iteration limit {max_iterations} reached with {len(task.steps) - self._cursor} steps left")

        return await self._synthesize()

    async def _reflect(self, step: Step) -> Optional[RunResult]:
        self._set_state(OrchestratorState.REFLECTING)
        self.sink.on_thinking("🤔 Analyzing results and planning next actions...")
        try:
            reflection = await self._cancellable(self.reflector.reflect(self.task, step))
        except TaskCancelledError as e:
            return self._abort(str(e))

        if reflection.should_continue and reflection.new_steps:
            self.task.insert_steps(self._cursor + 1, reflection.new_steps)
        return None

    async def _recover(self, step: Step) -> Optional[RunResult]:
        self._set_state(OrchestratorState.RECOVERING)
        error = step.error or "Unknown error"

        if step.recovery_depth >= self.config.max_recovery_attempts:
            return self._abort(f"Step failed: {error} (no recovery attempts left)")

        self.sink.on_thinking("🔧 Attempting to recover from error...")
        try:
            recovery_steps = await self._cancellable(self.recovery.recover(self.task, step, error))
        except TaskCancelledError as e:
            return self._abort(str(e))

        if not recovery_steps:
            return self._abort(f"Step failed: {error}")

        self.task.insert_steps(self._cursor + 1, recovery_steps)
        return None

    async def _synthesize(self) -> RunResult:
        self._set_state(OrchestratorState.SYNTHESIZING)
        prompt = build_synthesis_prompt(self.task, self.config.max_result_chars)
        messages = [ChatMessage(role="user", content=prompt)]

        try:
            response = await self._cancellable(self.model_service.complete(messages, self.synthesis_options))
        except TaskCancelledError as e:
            return self._abort(str(e))
        except ModelServiceError as e:
            return self._abort(f"Failed to generate response: {e}")

        self.task.status = TaskStatus.COMPLETED
        self._set_state(OrchestratorState.DONE)
        self.sink.on_response(response)
        return RunResult(state=self.state, task=self.task, response=response)

    async def _cancellable(self, awaitable: Awaitable[T]) -> T:
        """Await a model or tool call so that ``cancel()`` can interrupt it."""
        future = asyncio.ensure_future(awaitable)
        if self._cancel_requested:
            future.cancel()
        self._inflight = future
        try:
            return await future
        except asyncio.CancelledError:
            if self._cancel_requested and future.cancelled():
                raise TaskCancelledError()
            raise
        finally:
            self._inflight = None

    def _start(self) -> None:
        self.task = None
        self._cursor = 0
        self._iterations = 0
        self._pending = None
        self._approved_step_id = None
        self._cancel_requested = False

    def _abort(self, message: str) -> RunResult:
        if self.task is not None:
            self.task.status = TaskStatus.FAILED
        self._pending = None
        self._set_state(OrchestratorState.ABORTED)
        logger.error(f"Task aborted: {message}")
        self.sink.on_error(message)
        return RunResult(state=self.state, task=self.task, error=message)

    def _set_state(self, state: OrchestratorState) -> None:
        if state != self.state:
            logger.debug(f"Orchestrator state {self.state.value} -> {state.value}")
        self.state = state
