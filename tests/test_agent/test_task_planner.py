"""
Tests for TaskPlanner - model-driven task decomposition.

Module: tests/test_agent/test_task_planner.py
"""

import json

import pytest

from adapters.llm import MockLLMAdapter
from shellai.agent.errors import ModelServiceError
from shellai.agent.model_service import ModelService
from shellai.agent.models import ChatMessage, StepAction, StepStatus, TaskStatus
from shellai.agent.task_planner import TaskPlanner


PLAN = {
    "task_description": "List the project files and read the README",
    "strategy": "Look around first",
    "steps": [
        {
            "action": "tool_call",
            "description": "List files",
            "tool": "directory-list",
            "parameters": {"path": "."},
            "reasoning": "See what is there",
        },
        {
            "action": "analysis",
            "description": "Summarize",
            "reasoning": "Explain findings",
        },
    ],
    "expected_outcome": "A summary of the project",
}


class TestTaskPlanner:
    """Tests for TaskPlanner.plan."""

    @pytest.fixture
    def registry(self, make_registry, static_tool):
        return make_registry(
            static_tool("directory-list", description="List directory entries"),
            static_tool("file-read", description="Read a file"),
        )

    def _planner(self, registry, *responses, history_window: int = 3):
        adapter = MockLLMAdapter(responses=list(responses))
        return TaskPlanner(ModelService(adapter), registry, history_window=history_window), adapter

    @pytest.mark.asyncio
    async def test_parses_structured_plan(self, registry) -> None:
        """A well-formed plan becomes a pending task with ordered steps."""
        planner, _ = self._planner(registry, "Plan:\n" + json.dumps(PLAN))

        task = await planner.plan("what is in this project?")

        assert task.description == PLAN["task_description"]
        assert task.strategy == "Look around first"
        assert task.expected_outcome == "A summary of the project"
        assert task.status == TaskStatus.PENDING
        assert [step.action for step in task.steps] == [StepAction.TOOL_CALL, StepAction.ANALYSIS]
        assert task.steps[0].tool == "directory-list"
        assert task.steps[0].parameters == {"path": "."}
        assert task.steps[1].tool is None and task.steps[1].parameters is None
        assert all(step.status == StepStatus.PENDING for step in task.steps)
        assert len({step.id for step in task.steps}) == 2
        assert task.context["user_request"] == "what is in this project?"
        assert task.context["strategy"] == "Look around first"

    @pytest.mark.asyncio
    async def test_unparseable_response_falls_back(self, registry) -> None:
        """Free text yields exactly one analysis step with reasoning."""
        planner, _ = self._planner(registry, "I would just answer directly.")

        task = await planner.plan("hi")

        assert len(task.steps) == 1
        step = task.steps[0]
        assert step.action == StepAction.ANALYSIS
        assert step.tool is None
        assert step.reasoning
        assert task.description == "Respond to: hi"
        assert task.context["user_request"] == "hi"

    @pytest.mark.asyncio
    async def test_empty_step_list_falls_back(self, registry) -> None:
        planner, _ = self._planner(registry, json.dumps({"task_description": "x", "steps": []}))

        task = await planner.plan("hi")

        assert len(task.steps) == 1
        assert task.steps[0].description == "Analyze and respond to user request"

    @pytest.mark.asyncio
    async def test_prompt_lists_tools_and_request(self, registry) -> None:
        planner, adapter = self._planner(registry, json.dumps(PLAN))

        await planner.plan("count the files")

        prompt = adapter.calls[0][-1].content
        assert 'USER REQUEST: "count the files"' in prompt
        assert "- directory-list: List directory entries" in prompt
        assert "- file-read: Read a file" in prompt

    @pytest.mark.asyncio
    async def test_uses_recent_history_window(self, registry) -> None:
        """Only the last N history turns are sent before the planning prompt."""
        planner, adapter = self._planner(registry, json.dumps(PLAN), history_window=3)
        history = [ChatMessage(role="user" if i % 2 == 0 else "assistant", content=f"turn {i}") for i in range(5)]

        await planner.plan("next", history)

        sent = adapter.calls[0]
        assert [m.content for m in sent[:-1]] == ["turn 2", "turn 3", "turn 4"]
        assert sent[-1].role == "user"

    @pytest.mark.asyncio
    async def test_normalizes_bad_steps(self, registry) -> None:
        """Unknown actions and tool calls without a tool become analysis steps."""
        plan = {
            "steps": [
                {"action": "dance", "description": "Odd"},
                {"action": "tool_call", "description": "No tool named"},
                "not a step",
            ]
        }
        planner, _ = self._planner(registry, json.dumps(plan))

        task = await planner.plan("x")

        assert [step.action for step in task.steps] == [StepAction.ANALYSIS, StepAction.ANALYSIS]
        assert all(step.reasoning for step in task.steps)

    @pytest.mark.asyncio
    async def test_model_failure_propagates(self, registry) -> None:
        planner, _ = self._planner(registry, RuntimeError("connection refused"))

        with pytest.raises(ModelServiceError):
            await planner.plan("x")
