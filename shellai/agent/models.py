"""
Task and step data model for the agent core.

Module: shellai/agent/models.py

A Task is the execution unit for one user request. Its steps form a
mutable, ordered list: reflection and recovery splice new steps in while the
orchestrator walks it with an integer cursor.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..tools.base import ToolResult


class StepAction(str, Enum):
    """Kinds of planned work."""

    TOOL_CALL = "tool_call"
    ANALYSIS = "analysis"
    REFLECTION = "reflection"
    PLANNING = "planning"


class StepStatus(str, Enum):
    """Status of a step. Moves pending -> completed|failed only."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskStatus(str, Enum):
    """Status of a task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


def new_id(prefix: str) -> str:
    """Return a short unique identifier such as ``task_1f2e3d4c5b6a``."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


@dataclass
class Step:
    """A single unit of planned work."""

    id: str
    action: StepAction
    description: str
    reasoning: str = ""
    tool: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    result: Optional[ToolResult] = None
    status: StepStatus = StepStatus.PENDING
    recovery_depth: int = 0  # 0 for planned/reflected steps, n for the n-th recovery

    @property
    def is_tool_call(self) -> bool:
        return self.action == StepAction.TOOL_CALL

    def complete(self, result: Optional[ToolResult] = None) -> None:
        """Mark the step completed."""
        self._finish(StepStatus.COMPLETED, result)

    def fail(self, result: Optional[ToolResult] = None) -> None:
        """Mark the step failed."""
        self._finish(StepStatus.FAILED, result)

    def _finish(self, status: StepStatus, result: Optional[ToolResult]) -> None:
        if self.status != StepStatus.PENDING:
            raise ValueError(f"Step {self.id} already {self.status.value}")
        self.status = status
        if result is not None:
            self.result = result

    @property
    def error(self) -> Optional[str]:
        """Error message of a failed step, if any."""
        if self.result is not None and not self.result.success:
            return self.result.error
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], step_id: str, recovery_depth: int = 0) -> "Step":
        """
        Build a step from a model-produced plan entry.

        Unknown action names become analysis steps. A tool_call entry without
        a tool name cannot run and is demoted to analysis as well, so that
        ``tool``/``parameters`` are present exactly when action is tool_call.
        """
        raw_action = str(data.get("action") or "").strip().lower()
        try:
            action = StepAction(raw_action)
        except ValueError:
            action = StepAction.ANALYSIS

        tool = data.get("tool")
        tool = str(tool).strip() if tool else None
        if action == StepAction.TOOL_CALL and not tool:
            action = StepAction.ANALYSIS

        parameters = data.get("parameters")
        if action == StepAction.TOOL_CALL:
            if not isinstance(parameters, dict):
                parameters = {}
        else:
            tool = None
            parameters = None

        description = str(data.get("description") or "").strip()
        reasoning = str(data.get("reasoning") or "").strip()

        return cls(
            id=step_id,
            action=action,
            description=description or (f"Run {tool}" if tool else "Analyze the request"),
            reasoning=reasoning or description or "No reasoning provided",
            tool=tool,
            parameters=parameters,
            recovery_depth=recovery_depth,
        )


@dataclass
class Task:
    """The execution unit for one user request."""

    id: str
    description: str
    steps: List[Step] = field(default_factory=list)
    strategy: str = ""
    expected_outcome: str = ""
    status: TaskStatus = TaskStatus.PENDING
    context: Dict[str, Any] = field(default_factory=dict)

    @property
    def user_request(self) -> str:
        return str(self.context.get("user_request", ""))

    def remember(self, key: str, value: Any) -> None:
        """Record side information for later prompts. Context is never cleared."""
        self.context[key] = value

    def insert_steps(self, position: int, new_steps: List[Step]) -> None:
        """Splice steps in so that the first new step sits at ``position``."""
        self.steps[position:position] = new_steps

    def completed_steps(self) -> List[Step]:
        return [step for step in self.steps if step.status == StepStatus.COMPLETED]


@dataclass
class ConfirmationRequest:
    """A tool call waiting for human approval."""

    task_id: str
    step_id: str
    tool: str
    parameters: Dict[str, Any]
    content: str
    requires_confirmation: bool = True


@dataclass
class ReflectionResult:
    """Outcome of reflecting on a completed tool step."""

    should_continue: bool = False
    new_steps: List[Step] = field(default_factory=list)
    analysis: Optional[str] = None


@dataclass
class ChatMessage:
    """One conversation turn supplied by the caller."""

    role: str  # "system", "user", "assistant"
    content: str
    timestamp: datetime = field(default_factory=datetime.now)
