"""
Built-in tools for the shell assistant.

Module: shellai/tools/__init__.py
"""

import logging
from typing import Iterable, Optional

from .base import BaseTool, ToolRegistry, ToolResult
from .file_tools import FileEditTool, FileReadTool, FileSearchTool, FileWriteTool
from .memory_tools import (
    MemoryAddTool,
    MemoryDeleteTool,
    MemoryItem,
    MemoryListTool,
    MemoryRetrieveTool,
    MemoryStore,
)
from .system_tools import CurrentDirectoryTool, DirectoryListTool, ShellExecTool
from .web_search import WebSearchTool

logger = logging.getLogger(__name__)

BUILTIN_TOOLS = {
    "file-read": FileReadTool,
    "file-write": FileWriteTool,
    "file-edit": FileEditTool,
    "file-search": FileSearchTool,
    "shell-exec": ShellExecTool,
    "directory-list": DirectoryListTool,
    "current-directory": CurrentDirectoryTool,
    "web-search": WebSearchTool,
    "memory-add": MemoryAddTool,
    "memory-retrieve": MemoryRetrieveTool,
    "memory-list": MemoryListTool,
    "memory-delete": MemoryDeleteTool,
}

MEMORY_TOOLS = (MemoryAddTool, MemoryRetrieveTool, MemoryListTool, MemoryDeleteTool)

# Tools that write files or run commands.
SENSITIVE_TOOLS = frozenset({"file-write", "file-edit", "shell-exec"})


def create_default_registry(
    enabled_tools: Optional[Iterable[str]] = None,
    working_directory: Optional[str] = None,
    memory_store: Optional[MemoryStore] = None,
) -> ToolRegistry:
    """
    Build a registry holding the built-in tools.

    Args:
        enabled_tools: Names to register (default: all built-ins)
        working_directory: Base directory for path and shell tools
        memory_store: Store shared by the memory tools (default: in-process only)

    Returns:
        Populated tool registry
    """
    registry = ToolRegistry()
    names = list(enabled_tools) if enabled_tools is not None else list(BUILTIN_TOOLS)
    if memory_store is None:
        memory_store = MemoryStore()

    for name in names:
        tool_class = BUILTIN_TOOLS.get(name)
        if tool_class is None:
            logger.warning(f"Unknown tool in configuration: {name}")
            continue
        if tool_class is WebSearchTool:
            registry.register(tool_class())
        elif tool_class in MEMORY_TOOLS:
            registry.register(tool_class(store=memory_store))
        else:
            registry.register(tool_class(working_directory=working_directory))

    return registry


__all__ = [
    "BaseTool",
    "ToolRegistry",
    "ToolResult",
    "FileReadTool",
    "FileWriteTool",
    "FileEditTool",
    "FileSearchTool",
    "ShellExecTool",
    "DirectoryListTool",
    "CurrentDirectoryTool",
    "WebSearchTool",
    "MemoryItem",
    "MemoryStore",
    "MemoryAddTool",
    "MemoryRetrieveTool",
    "MemoryListTool",
    "MemoryDeleteTool",
    "BUILTIN_TOOLS",
    "SENSITIVE_TOOLS",
    "create_default_registry",
]
