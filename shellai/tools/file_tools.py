"""
File tools: read, write, edit and search.

Module: shellai/tools/file_tools.py

Relative paths resolve against the tool's working directory.
"""

import difflib
import re
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import anyio

from .base import BaseTool, ToolResult

SKIP_DIRECTORIES = {".git", "node_modules", "__pycache__", ".venv", "venv", ".mypy_cache", ".pytest_cache"}
MAX_SEARCH_FILE_BYTES = 1024 * 1024


class _FileTool(BaseTool):
    """Shared path handling for file tools."""

    def __init__(self, working_directory: Optional[str] = None) -> None:
        self.working_directory = Path(working_directory or Path.cwd())

    def _resolve(self, raw_path: Any) -> Path:
        if not isinstance(raw_path, str) or not raw_path.strip():
            raise ValueError("Parameter 'path' must be a non-empty string")
        path = Path(raw_path).expanduser()
        if not path.is_absolute():
            path = self.working_directory / path
        return path.resolve()


class FileReadTool(_FileTool):
    """Read a text file."""

    name = "file-read"
    description = "Read the contents of a text file"
    parameters = {
        "path": "Path to the file to read",
        "offset": "Line number to start reading from (1-based, optional)",
        "limit": "Maximum number of lines to read (default: 2000)",
    }

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        path = self._resolve(params.get("path"))
        offset = int(params.get("offset") or 1)
        limit = int(params.get("limit") or 2000)

        if not path.exists():
            return self.create_result(False, error=f"File not found: {path}")
        if path.is_dir():
            return self.create_result(False, error=f"Path is a directory: {path}")

        try:
            text = await anyio.to_thread.run_sync(_read_text, path)
            lines = text.splitlines(keepends=True)
        except UnicodeDecodeError:
            return self.create_result(False, error=f"File is not valid UTF-8 text: {path}")

        start = max(offset, 1) - 1
        selected = lines[start:start + limit]

        return self.create_result(
            True,
            data="".join(selected),
            metadata={
                "path": str(path),
                "lines_read": len(selected),
                "total_lines": len(lines),
                "truncated": start + limit < len(lines),
            },
        )


class FileWriteTool(_FileTool):
    """Write (create or overwrite) a file."""

    name = "file-write"
    description = "Write content to a file, creating parent directories as needed"
    parameters = {
        "path": "Path to the file to write",
        "content": "Content to write to the file",
        "create_directories": "Create missing parent directories (default: true)",
    }

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        path = self._resolve(params.get("path"))
        content = params.get("content")
        if not isinstance(content, str):
            return self.create_result(False, error="Parameter 'content' must be a string")

        if not path.parent.exists():
            if params.get("create_directories", True):
                path.parent.mkdir(parents=True, exist_ok=True)
            else:
                return self.create_result(False, error=f"Parent directory does not exist: {path.parent}")

        await anyio.to_thread.run_sync(_write_text, path, content)

        return self.create_result(
            True,
            data={"path": str(path), "bytes_written": len(content.encode("utf-8"))},
        )


class FileEditTool(_FileTool):
    """Replace text inside an existing file."""

    name = "file-edit"
    description = "Edit a file by replacing an exact string with a new string"
    parameters = {
        "path": "Path to the file to edit",
        "old_string": "Exact text to replace",
        "new_string": "Replacement text",
        "replace_all": "Replace every occurrence (default: false)",
    }

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        path = self._resolve(params.get("path"))
        old_string = params.get("old_string")
        new_string = params.get("new_string")
        replace_all = bool(params.get("replace_all", False))

        if not isinstance(old_string, str) or not old_string:
            return self.create_result(False, error="Parameter 'old_string' must be a non-empty string")
        if not isinstance(new_string, str):
            return self.create_result(False, error="Parameter 'new_string' must be a string")
        if not path.exists():
            return self.create_result(False, error=f"File not found: {path}")

        original = await anyio.to_thread.run_sync(_read_text, path)
        occurrences = original.count(old_string)

        if occurrences == 0:
            return self.create_result(False, error="String not found in file")
        if occurrences > 1 and not replace_all:
            return self.create_result(
                False,
                error=f"String found {occurrences} times. Use replace_all=true or provide more context.",
            )

        if replace_all:
            updated = original.replace(old_string, new_string)
            replacements = occurrences
        else:
            updated = original.replace(old_string, new_string, 1)
            replacements = 1

        diff = difflib.unified_diff(
            original.splitlines(keepends=True),
            updated.splitlines(keepends=True),
            fromfile=f"a/{path.name}",
            tofile=f"b/{path.name}",
        )
        await anyio.to_thread.run_sync(_write_text, path, updated)

        return self.create_result(
            True,
            data={
                "path": str(path),
                "replacements_made": replacements,
                "diff_preview": "".join(list(diff)[:30]),
            },
        )


class FileSearchTool(_FileTool):
    """Search for a text pattern across files."""

    name = "file-search"
    description = "Search for text patterns in a file or directory tree"
    parameters = {
        "pattern": "Text or regular expression to search for",
        "path": "File or directory to search in (default: working directory)",
        "use_regex": "Treat pattern as a regular expression (default: false)",
        "case_sensitive": "Case sensitive search (default: false)",
        "file_extensions": "Only search files with these extensions, e.g. [\".py\"]",
        "max_results": "Maximum number of matches (default: 100)",
    }

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        pattern = params.get("pattern")
        if not isinstance(pattern, str) or not pattern:
            return self.create_result(False, error="Parameter 'pattern' must be a non-empty string")

        root = self._resolve(params.get("path") or ".")
        if not root.exists():
            return self.create_result(False, error=f"Path does not exist: {root}")

        flags = 0 if params.get("case_sensitive") else re.IGNORECASE
        source = pattern if params.get("use_regex") else re.escape(pattern)
        try:
            regex = re.compile(source, flags)
        except re.error as e:
            return self.create_result(False, error=f"Invalid regular expression: {e}")

        extensions = params.get("file_extensions") or []
        max_results = int(params.get("max_results") or 100)

        # The walk runs in a worker thread; ``stop`` ends it early when the call is cancelled.
        stop = threading.Event()
        try:
            matches, truncated = await anyio.to_thread.run_sync(
                _search_files, root, regex, extensions, max_results, stop, abandon_on_cancel=True
            )
        finally:
            stop.set()

        return self.create_result(True, data=matches, metadata={"truncated": truncated})


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _write_text(path: Path, content: str) -> None:
    path.write_text(content, encoding="utf-8")


def _iter_files(root: Path, extensions: List[str]):
    if root.is_file():
        yield root
        return
    for path in sorted(root.rglob("*")):
        if any(part in SKIP_DIRECTORIES for part in path.relative_to(root).parts):
            continue
        if not path.is_file():
            continue
        if extensions and path.suffix not in extensions:
            continue
        if path.stat().st_size > MAX_SEARCH_FILE_BYTES:
            continue
        yield path


def _search_files(
    root: Path,
    regex: "re.Pattern",
    extensions: List[str],
    max_results: int,
    stop: threading.Event,
) -> Tuple[List[Dict[str, Any]], bool]:
    """Blocking search; returns (matches, truncated)."""
    matches: List[Dict[str, Any]] = []
    for file_path in _iter_files(root, extensions):
        if stop.is_set():
            break
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                for line_number, line in enumerate(f, 1):
                    if regex.search(line):
                        matches.append({
                            "file": str(file_path),
                            "line": line_number,
                            "content": line.rstrip("\n")[:200],
                        })
                        if len(matches) >= max_results:
                            return matches, True
        except (UnicodeDecodeError, OSError):
            continue
    return matches, False
