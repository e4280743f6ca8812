"""
Shared fixtures for the shell-ai test suite.

Module: tests/conftest.py
"""

import asyncio
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import pytest

from adapters.llm import MockLLMAdapter
from shellai.agent.model_service import ModelService
from shellai.agent.models import ConfirmationRequest
from shellai.agent.notifications import NotificationSink
from shellai.agent.orchestrator import TaskOrchestrator
from shellai.config import AgentConfig
from shellai.tools.base import BaseTool, ToolRegistry, ToolResult


class RecordingSink(NotificationSink):
    """Sink that records every notification in order."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, Any]] = []

    def on_thinking(self, text: str) -> None:
        self.events.append(("thinking", text))

    def on_tool_call(self, tool_name: str, parameters: Dict[str, Any]) -> None:
        self.events.append(("tool_call", (tool_name, parameters)))

    def on_confirmation(self, request: ConfirmationRequest) -> None:
        self.events.append(("confirmation", request))

    def on_progress(self, label: str, current: int, total: int) -> None:
        self.events.append(("progress", (label, current, total)))

    def on_response(self, text: str) -> None:
        self.events.append(("response", text))

    def on_error(self, text: str) -> None:
        self.events.append(("error", text))

    def of(self, kind: str) -> List[Any]:
        return [payload for event, payload in self.events if event == kind]


class StaticTool(BaseTool):
    """Tool that records its calls and returns a fixed result."""

    def __init__(self, name: str, result: Optional[ToolResult] = None, description: str = "Test tool") -> None:
        self.name = name
        self.description = description
        self.parameters = {}
        self.result = result or ToolResult(success=True, data=f"{name} output")
        self.calls: List[Dict[str, Any]] = []

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        self.calls.append(dict(params))
        return self.result


class SlowTool(BaseTool):
    """Tool that blocks until cancelled."""

    name = "slow-tool"
    description = "Takes a long time"

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.cancelled = False

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        self.started.set()
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return self.create_result(True, data="finished")


@pytest.fixture
def sink() -> RecordingSink:
    """Create a recording notification sink."""
    return RecordingSink()


@pytest.fixture
def static_tool() -> Callable[..., StaticTool]:
    """Factory for StaticTool instances."""
    return StaticTool


@pytest.fixture
def slow_tool() -> SlowTool:
    return SlowTool()


@pytest.fixture
def make_registry() -> Callable[..., ToolRegistry]:
    """Factory building a registry from tool instances."""

    def _make(*tools: BaseTool) -> ToolRegistry:
        registry = ToolRegistry()
        for tool in tools:
            registry.register(tool)
        return registry

    return _make


@pytest.fixture
def orchestrator_factory(sink: RecordingSink, make_registry) -> Callable[..., Tuple[TaskOrchestrator, MockLLMAdapter]]:
    """
    Factory for an orchestrator driven by a scripted mock model.

    Returns (orchestrator, adapter); extra keyword arguments become
    AgentConfig fields or orchestrator component overrides.
    """

    def _build(
        responses: Optional[Iterable[Any]] = None,
        tools: Iterable[BaseTool] = (),
        delay_ms: int = 0,
        reflector: Any = None,
        **agent_overrides: Any,
    ) -> Tuple[TaskOrchestrator, MockLLMAdapter]:
        adapter = MockLLMAdapter(responses=responses or [], delay_ms=delay_ms)
        model_service = ModelService(adapter, request_timeout=10)
        orchestrator = TaskOrchestrator(
            model_service,
            make_registry(*tools),
            sink=sink,
            config=AgentConfig(**agent_overrides),
            reflector=reflector,
        )
        return orchestrator, adapter

    return _build
