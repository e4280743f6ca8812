"""
Tests for RecoveryPlanner and error classification.

Module: tests/test_agent/test_error_recovery.py
"""

import json

import pytest

from adapters.llm import MockLLMAdapter
from shellai.agent.error_recovery import ErrorCategory, RecoveryPlanner, classify_error
from shellai.agent.model_service import ModelService
from shellai.agent.models import Step, StepAction, StepStatus, Task
from shellai.tools.base import ToolRegistry, ToolResult


class TestClassifyError:
    """Tests for classify_error."""

    @pytest.mark.parametrize(
        "message, category",
        [
            ("File not found: /tmp/a.txt", ErrorCategory.FILE_NOT_FOUND),
            ("cat: x: No such file or directory", ErrorCategory.FILE_NOT_FOUND),
            ("Permission denied", ErrorCategory.PERMISSION_DENIED),
            ("Tool not found: magic", ErrorCategory.TOOL_NOT_FOUND),
            ("Tool 'magic' not found", ErrorCategory.TOOL_NOT_FOUND),
            ("Command timed out after 30.0s", ErrorCategory.TIMEOUT),
            ("Connection refused", ErrorCategory.NETWORK_ERROR),
            ("Invalid regular expression: missing )", ErrorCategory.INVALID_INPUT),
            ("Expecting value: JSON decode error", ErrorCategory.PARSING_ERROR),
            ("Something odd happened", ErrorCategory.UNKNOWN),
        ],
    )
    def test_messages(self, message: str, category: ErrorCategory) -> None:
        assert classify_error(message) == category

    def test_exception_types(self) -> None:
        assert classify_error(PermissionError("nope")) == ErrorCategory.PERMISSION_DENIED
        assert classify_error(TimeoutError("late")) == ErrorCategory.TIMEOUT
        assert classify_error(Exception("Some random error")) == ErrorCategory.UNKNOWN


class TestRecoveryPlanner:
    """Tests for RecoveryPlanner.recover."""

    @pytest.fixture
    def task(self) -> Task:
        task = Task(id="task_1", description="Read the config")
        task.remember("user_request", "show me config.yaml")
        return task

    @pytest.fixture
    def failed_step(self) -> Step:
        step = Step(
            id="step_0",
            action=StepAction.TOOL_CALL,
            description="Read config.yaml",
            reasoning="Need it",
            tool="file-read",
            parameters={"path": "config.yaml"},
        )
        step.fail(ToolResult(success=False, error="File not found: config.yaml"))
        return step

    def _planner(self, *responses):
        adapter = MockLLMAdapter(responses=list(responses))
        return RecoveryPlanner(ModelService(adapter), ToolRegistry()), adapter

    @pytest.mark.asyncio
    async def test_returns_alternative_steps_one_level_deeper(self, task, failed_step) -> None:
        reply = json.dumps({
            "recovery_strategy": "Search for it",
            "alternative_steps": [
                {"action": "tool_call", "description": "Search for config", "tool": "file-search",
                 "parameters": {"pattern": "config"}, "reasoning": "It may be elsewhere"},
            ],
        })
        planner, _ = self._planner(reply)

        steps = await planner.recover(task, failed_step, failed_step.error)

        assert len(steps) == 1
        assert steps[0].tool == "file-search"
        assert steps[0].status == StepStatus.PENDING
        assert steps[0].recovery_depth == 1

    @pytest.mark.asyncio
    async def test_caps_at_two_steps(self, task, failed_step) -> None:
        alternatives = [{"action": "analysis", "description": f"Option {i}", "reasoning": "r"} for i in range(4)]
        planner, _ = self._planner(json.dumps({"alternative_steps": alternatives}))

        steps = await planner.recover(task, failed_step, "boom")

        assert [step.description for step in steps] == ["Option 0", "Option 1"]

    @pytest.mark.asyncio
    async def test_prompt_describes_failure(self, task, failed_step) -> None:
        planner, adapter = self._planner(json.dumps({"alternative_steps": []}))

        await planner.recover(task, failed_step, failed_step.error)

        prompt = adapter.calls[0][-1].content
        assert 'FAILED STEP: "Read config.yaml"' in prompt
        assert 'ERROR: "File not found: config.yaml"' in prompt
        assert "ERROR CATEGORY: file_not_found" in prompt
        assert 'ORIGINAL REQUEST: "show me config.yaml"' in prompt

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reply",
        ["no idea", json.dumps({"alternative_steps": []}), json.dumps({"alternative_steps": "retry"}), json.dumps({})],
    )
    async def test_unusable_reply_means_unrecoverable(self, task, failed_step, reply: str) -> None:
        planner, _ = self._planner(reply)

        assert await planner.recover(task, failed_step, "boom") == []

    @pytest.mark.asyncio
    async def test_model_failure_means_unrecoverable(self, task, failed_step) -> None:
        planner, _ = self._planner(RuntimeError("model down"))

        assert await planner.recover(task, failed_step, "boom") == []
