"""
Tool interface and registry.

Module: shellai/tools/base.py

Tools are the side-effecting (or read-only) actions the agent can invoke.
The registry is the Tool Executor seen by the agent core: ``execute`` never
raises, every failure comes back as ``ToolResult(success=False)``.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """Structured outcome of a tool invocation."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success}
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = self.error
        if self.metadata:
            result["metadata"] = self.metadata
        return result


class BaseTool(ABC):
    """Base class for tools."""

    name: str = ""
    description: str = ""
    # Parameter name -> description
    parameters: Mapping[str, str] = MappingProxyType({})

    @abstractmethod
    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        """
        Run the tool.

        Args:
            params: Tool parameters as produced by the planner

        Returns:
            Tool result
        """

    def create_result(
        self,
        success: bool,
        data: Any = None,
        error: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ToolResult:
        return ToolResult(success=success, data=data, error=error, metadata=metadata or {})


class ToolRegistry:
    """Registry of available tools."""

    def __init__(self) -> None:
        self._tools: Dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        """Register a tool, replacing any tool with the same name."""
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name}")

    def unregister(self, tool_name: str) -> None:
        self._tools.pop(tool_name, None)

    def get(self, tool_name: str) -> Optional[BaseTool]:
        """Look up a tool; ``None`` when it is not registered."""
        return self._tools.get(tool_name)

    def has(self, tool_name: str) -> bool:
        return tool_name in self._tools

    def list(self) -> List[BaseTool]:
        return list(self._tools.values())

    def names(self) -> List[str]:
        return list(self._tools.keys())

    def clear(self) -> None:
        self._tools.clear()

    async def execute(self, tool_name: str, params: Dict[str, Any]) -> ToolResult:
        """
        Execute a tool by name.

        Args:
            tool_name: Name of the tool to execute
            params: Tool parameters

        Returns:
            Tool result; unknown tools and raised exceptions become failures
        """
        tool = self._tools.get(tool_name)
        if tool is None:
            return ToolResult(success=False, error=f"Tool '{tool_name}' not found")

        try:
            result = await tool.execute(params)
        except Exception as e:
            logger.warning(f"Tool {tool_name} raised: {e}")
            return ToolResult(success=False, error=f"Tool execution failed: {str(e)}")

        if not isinstance(result, ToolResult):
            return ToolResult(success=False, error=f"Tool {tool_name} returned an invalid result")
        return result
