"""
Autonomous task-execution engine.

Plans a user request into steps, executes them with tools (pausing for
approval where needed), reflects on results, recovers from failures, and
synthesizes a final answer.
"""

from .confirmation import ConfirmationPolicy, requires_confirmation
from .error_recovery import ErrorCategory, RecoveryPlanner, classify_error
from .errors import AgentError, ModelServiceError, OrchestratorStateError, TaskCancelledError
from .model_service import CompletionOptions, ModelService
from .models import (
    ChatMessage,
    ConfirmationRequest,
    ReflectionResult,
    Step,
    StepAction,
    StepStatus,
    Task,
    TaskStatus,
)
from .notifications import CallbackSink, GuardedSink, NotificationSink, NullSink
from .orchestrator import OrchestratorState, RunResult, TaskOrchestrator
from .parsing import ParseResult, extract_json_object
from .reflector import Reflector
from .result_formatter import format_tool_result, format_tool_results
from .step_executor import StepExecutor
from .task_planner import TaskPlanner

__all__ = [
    # Data model
    "ChatMessage",
    "ConfirmationRequest",
    "ReflectionResult",
    "Step",
    "StepAction",
    "StepStatus",
    "Task",
    "TaskStatus",
    # Components
    "ConfirmationPolicy",
    "requires_confirmation",
    "format_tool_result",
    "format_tool_results",
    "ParseResult",
    "extract_json_object",
    "ModelService",
    "CompletionOptions",
    "TaskPlanner",
    "StepExecutor",
    "Reflector",
    "RecoveryPlanner",
    "ErrorCategory",
    "classify_error",
    # Orchestration
    "TaskOrchestrator",
    "OrchestratorState",
    "RunResult",
    # Notifications
    "NotificationSink",
    "CallbackSink",
    "GuardedSink",
    "NullSink",
    # Errors
    "AgentError",
    "ModelServiceError",
    "TaskCancelledError",
    "OrchestratorStateError",
]
