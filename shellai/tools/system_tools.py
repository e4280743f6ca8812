"""
System tools: shell execution and directory inspection.

Module: shellai/tools/system_tools.py
"""

import asyncio
import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import BaseTool, ToolResult

logger = logging.getLogger(__name__)

MAX_OUTPUT_CHARS = 30000


def _truncate(text: str) -> str:
    if len(text) > MAX_OUTPUT_CHARS:
        return text[:MAX_OUTPUT_CHARS] + "\n... [output truncated]"
    return text


class ShellExecTool(BaseTool):
    """Run a shell command in a subprocess."""

    name = "shell-exec"
    description = "Execute a shell command and capture its output"
    parameters = {
        "command": "Shell command to execute",
        "working_directory": "Directory to run the command in (optional)",
        "timeout_ms": "Timeout in milliseconds (default: 120000)",
        "environment": "Extra environment variables (optional)",
    }

    def __init__(self, working_directory: Optional[str] = None) -> None:
        self.working_directory = working_directory or os.getcwd()

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        command = params.get("command")
        if not isinstance(command, str) or not command.strip():
            return self.create_result(False, error="Parameter 'command' must be a non-empty string")

        cwd = params.get("working_directory") or self.working_directory
        if not os.path.isdir(cwd):
            return self.create_result(False, error=f"Working directory does not exist: {cwd}")

        timeout_seconds = int(params.get("timeout_ms") or 120000) / 1000.0
        env = os.environ.copy()
        if params.get("environment"):
            env.update({str(k): str(v) for k, v in params["environment"].items()})

        start_time = time.time()
        process = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
            env=env,
        )

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            await self._kill(process)
            return self.create_result(
                False,
                data={"command": command, "exit_code": 124, "timed_out": True},
                error=f"Command timed out after {timeout_seconds}s",
            )
        except asyncio.CancelledError:
            # The orchestrator cancelled the step; do not leave the child running.
            await self._kill(process)
            raise

        execution_time_ms = round((time.time() - start_time) * 1000, 2)
        exit_code = process.returncode
        data = {
            "command": command,
            "stdout": _truncate(stdout.decode("utf-8", errors="replace")),
            "stderr": _truncate(stderr.decode("utf-8", errors="replace")),
            "exit_code": exit_code,
            "execution_time_ms": execution_time_ms,
        }

        if exit_code != 0:
            return self.create_result(
                False,
                data=data,
                error=data["stderr"].strip() or f"Command exited with code {exit_code}",
            )
        return self.create_result(True, data=data)

    async def _kill(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                return
            await process.wait()
            logger.debug(f"Killed subprocess {process.pid}")


class DirectoryListTool(BaseTool):
    """List the entries of a directory."""

    name = "directory-list"
    description = "List files and directories at a path"
    parameters = {
        "path": "Directory to list (default: working directory)",
        "show_hidden": "Include hidden entries (default: false)",
    }

    def __init__(self, working_directory: Optional[str] = None) -> None:
        self.working_directory = Path(working_directory or os.getcwd())

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        path = Path(params.get("path") or ".").expanduser()
        if not path.is_absolute():
            path = self.working_directory / path
        path = path.resolve()

        if not path.exists():
            return self.create_result(False, error=f"Directory not found: {path}")
        if not path.is_dir():
            return self.create_result(False, error=f"Not a directory: {path}")

        show_hidden = bool(params.get("show_hidden", False))
        entries: List[Dict[str, Any]] = []
        for entry in sorted(path.iterdir(), key=lambda p: (not p.is_dir(), p.name.lower())):
            if entry.name.startswith(".") and not show_hidden:
                continue
            is_dir = entry.is_dir()
            entries.append({
                "name": entry.name,
                "type": "directory" if is_dir else "file",
                "size": None if is_dir else entry.stat().st_size,
            })

        return self.create_result(True, data=entries, metadata={"path": str(path), "count": len(entries)})


class CurrentDirectoryTool(BaseTool):
    """Report the working directory."""

    name = "current-directory"
    description = "Get the current working directory"
    parameters: Dict[str, Any] = {}

    def __init__(self, working_directory: Optional[str] = None) -> None:
        self.working_directory = working_directory or os.getcwd()

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        return self.create_result(True, data=str(Path(self.working_directory).resolve()))
