"""
Tests for the built-in tools and the tool registry.

Module: tests/test_tools/test_builtin_tools.py
"""

import asyncio
import json
import sys
import threading
from pathlib import Path

import pytest

from shellai.tools import (
    BUILTIN_TOOLS,
    SENSITIVE_TOOLS,
    CurrentDirectoryTool,
    DirectoryListTool,
    FileEditTool,
    FileReadTool,
    FileSearchTool,
    FileWriteTool,
    MemoryAddTool,
    MemoryDeleteTool,
    MemoryListTool,
    MemoryRetrieveTool,
    MemoryStore,
    ShellExecTool,
    WebSearchTool,
    create_default_registry,
)
from shellai.tools import file_tools
from shellai.tools.base import BaseTool, ToolRegistry, ToolResult


class TestToolRegistry:
    """Tests for ToolRegistry."""

    @pytest.mark.asyncio
    async def test_unknown_tool_is_a_failure(self) -> None:
        result = await ToolRegistry().execute("missing", {})

        assert result.success is False
        assert result.error == "Tool 'missing' not found"

    @pytest.mark.asyncio
    async def test_exceptions_become_failures(self) -> None:
        class Broken(BaseTool):
            name = "broken"

            async def execute(self, params):
                raise OSError("disk gone")

        registry = ToolRegistry()
        registry.register(Broken())

        result = await registry.execute("broken", {})

        assert result.success is False
        assert result.error == "Tool execution failed: disk gone"

    def test_register_lookup_unregister(self) -> None:
        registry = ToolRegistry()
        tool = CurrentDirectoryTool()

        registry.register(tool)
        assert registry.get("current-directory") is tool
        assert registry.has("current-directory")
        assert registry.names() == ["current-directory"]

        registry.unregister("current-directory")
        assert registry.get("current-directory") is None

    def test_default_registry_respects_enabled_tools(self, tmp_path: Path) -> None:
        registry = create_default_registry(["file-read", "shell-exec", "not-a-tool"], str(tmp_path))

        assert registry.names() == ["file-read", "shell-exec"]

    def test_default_registry_has_all_builtins(self) -> None:
        registry = create_default_registry()

        assert set(registry.names()) == set(BUILTIN_TOOLS)
        assert SENSITIVE_TOOLS == {"file-write", "file-edit", "shell-exec"}

    def test_default_registry_memory_tools_share_one_store(self) -> None:
        store = MemoryStore()
        registry = create_default_registry(["memory-add", "memory-list"], memory_store=store)

        assert registry.get("memory-add").store is store
        assert registry.get("memory-list").store is store

    def test_base_tool_parameters_are_not_shared_mutable_state(self) -> None:
        class Bare(BaseTool):
            name = "bare"

            async def execute(self, params):
                return self.create_result(True)

        with pytest.raises(TypeError):
            Bare().parameters["leak"] = "x"
        assert dict(CurrentDirectoryTool.parameters) == {}

    def test_tool_result_to_dict(self) -> None:
        assert ToolResult(success=True, data=[1]).to_dict() == {"success": True, "data": [1]}
        assert ToolResult(success=False, error="x").to_dict() == {"success": False, "error": "x"}


class TestFileTools:
    """Tests for file-read, file-write, file-edit and file-search."""

    @pytest.mark.asyncio
    async def test_write_then_read(self, tmp_path: Path) -> None:
        write = await FileWriteTool(str(tmp_path)).execute({"path": "notes/a.txt", "content": "one\ntwo\n"})

        assert write.success
        assert (tmp_path / "notes" / "a.txt").read_text() == "one\ntwo\n"

        read = await FileReadTool(str(tmp_path)).execute({"path": "notes/a.txt"})
        assert read.success
        assert read.data == "one\ntwo\n"
        assert read.metadata["total_lines"] == 2

    @pytest.mark.asyncio
    async def test_read_with_offset_and_limit(self, tmp_path: Path) -> None:
        (tmp_path / "lines.txt").write_text("".join(f"line {i}\n" for i in range(1, 11)))

        result = await FileReadTool(str(tmp_path)).execute({"path": "lines.txt", "offset": 3, "limit": 2})

        assert result.data == "line 3\nline 4\n"
        assert result.metadata["truncated"] is True

    @pytest.mark.asyncio
    async def test_read_missing_file(self, tmp_path: Path) -> None:
        result = await FileReadTool(str(tmp_path)).execute({"path": "nope.txt"})

        assert result.success is False
        assert "File not found" in result.error

    @pytest.mark.asyncio
    async def test_edit_single_occurrence(self, tmp_path: Path) -> None:
        target = tmp_path / "app.py"
        target.write_text("DEBUG = True\nNAME = 'app'\n")

        result = await FileEditTool(str(tmp_path)).execute(
            {"path": "app.py", "old_string": "DEBUG = True", "new_string": "DEBUG = False"}
        )

        assert result.success
        assert target.read_text() == "DEBUG = False\nNAME = 'app'\n"
        assert result.data["replacements_made"] == 1
        assert "-DEBUG = True" in result.data["diff_preview"]

    @pytest.mark.asyncio
    async def test_edit_ambiguous_requires_replace_all(self, tmp_path: Path) -> None:
        target = tmp_path / "x.txt"
        target.write_text("a a a")
        tool = FileEditTool(str(tmp_path))

        ambiguous = await tool.execute({"path": "x.txt", "old_string": "a", "new_string": "b"})
        assert ambiguous.success is False
        assert target.read_text() == "a a a"

        result = await tool.execute({"path": "x.txt", "old_string": "a", "new_string": "b", "replace_all": True})
        assert result.success
        assert target.read_text() == "b b b"

    @pytest.mark.asyncio
    async def test_edit_missing_string(self, tmp_path: Path) -> None:
        (tmp_path / "x.txt").write_text("hello")

        result = await FileEditTool(str(tmp_path)).execute({"path": "x.txt", "old_string": "bye", "new_string": "hi"})

        assert result.success is False
        assert result.error == "String not found in file"

    @pytest.mark.asyncio
    async def test_search(self, tmp_path: Path) -> None:
        (tmp_path / "a.py").write_text("import os\nTODO fix this\n")
        (tmp_path / "b.md").write_text("todo: docs\n")
        (tmp_path / ".git").mkdir()
        (tmp_path / ".git" / "HEAD").write_text("todo in git\n")

        result = await FileSearchTool(str(tmp_path)).execute({"pattern": "todo"})

        assert result.success
        found = {(Path(m["file"]).name, m["line"]) for m in result.data}
        assert found == {("a.py", 2), ("b.md", 1)}

    @pytest.mark.asyncio
    async def test_search_with_extension_filter_and_regex(self, tmp_path: Path) -> None:
        (tmp_path / "a.py").write_text("def main():\n    pass\n")
        (tmp_path / "b.txt").write_text("def main():\n")

        result = await FileSearchTool(str(tmp_path)).execute(
            {"pattern": r"def \w+\(", "use_regex": True, "file_extensions": [".py"]}
        )

        assert [Path(m["file"]).name for m in result.data] == ["a.py"]

    @pytest.mark.asyncio
    async def test_search_invalid_regex(self, tmp_path: Path) -> None:
        result = await FileSearchTool(str(tmp_path)).execute({"pattern": "(", "use_regex": True})

        assert result.success is False
        assert "Invalid regular expression" in result.error

    @pytest.mark.asyncio
    async def test_search_cancellation_stops_worker(self, tmp_path: Path, monkeypatch) -> None:
        entered = threading.Event()
        stopped = threading.Event()

        def blocking_search(root, regex, extensions, max_results, stop):
            entered.set()
            if stop.wait(5):
                stopped.set()
            return [], False

        monkeypatch.setattr(file_tools, "_search_files", blocking_search)
        task = asyncio.ensure_future(FileSearchTool(str(tmp_path)).execute({"pattern": "x"}))
        while not entered.is_set():
            await asyncio.sleep(0.01)

        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await asyncio.wait_for(task, timeout=1)
        assert stopped.wait(1)


class TestSystemTools:
    """Tests for shell-exec, directory-list and current-directory."""

    @pytest.mark.asyncio
    async def test_directory_list(self, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()
        (tmp_path / "README.md").write_text("hi")
        (tmp_path / ".hidden").write_text("x")

        result = await DirectoryListTool(str(tmp_path)).execute({})

        assert result.success
        assert result.data == [
            {"name": "src", "type": "directory", "size": None},
            {"name": "README.md", "type": "file", "size": 2},
        ]

    @pytest.mark.asyncio
    async def test_directory_list_missing(self, tmp_path: Path) -> None:
        result = await DirectoryListTool(str(tmp_path)).execute({"path": "nope"})

        assert result.success is False

    @pytest.mark.asyncio
    async def test_current_directory(self, tmp_path: Path) -> None:
        result = await CurrentDirectoryTool(str(tmp_path)).execute({})

        assert result.data == str(tmp_path.resolve())

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell required")
    @pytest.mark.asyncio
    async def test_shell_exec_success(self, tmp_path: Path) -> None:
        result = await ShellExecTool(str(tmp_path)).execute({"command": "echo hello && pwd"})

        assert result.success
        assert result.data["exit_code"] == 0
        assert result.data["stdout"].splitlines() == ["hello", str(tmp_path.resolve())]

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell required")
    @pytest.mark.asyncio
    async def test_shell_exec_nonzero_exit(self, tmp_path: Path) -> None:
        result = await ShellExecTool(str(tmp_path)).execute({"command": "echo oops >&2; exit 3"})

        assert result.success is False
        assert result.data["exit_code"] == 3
        assert result.error == "oops"

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell required")
    @pytest.mark.asyncio
    async def test_shell_exec_timeout(self, tmp_path: Path) -> None:
        result = await ShellExecTool(str(tmp_path)).execute({"command": "sleep 5", "timeout_ms": 100})

        assert result.success is False
        assert "timed out" in result.error

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell required")
    @pytest.mark.asyncio
    async def test_shell_exec_cancellation_propagates(self, tmp_path: Path) -> None:
        task = asyncio.ensure_future(ShellExecTool(str(tmp_path)).execute({"command": "sleep 5"}))
        await asyncio.sleep(0.2)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_shell_exec_requires_command(self, tmp_path: Path) -> None:
        result = await ShellExecTool(str(tmp_path)).execute({"command": "  "})

        assert result.success is False


class TestWebSearchTool:
    """Tests for web-search parameter handling (no network)."""

    @pytest.mark.asyncio
    async def test_requires_query(self) -> None:
        result = await WebSearchTool().execute({"query": ""})

        assert result.success is False
        assert "query" in result.error


class TestMemoryTools:
    """Tests for the memory-add/retrieve/list/delete tools."""

    @pytest.fixture
    def store(self, tmp_path: Path) -> MemoryStore:
        return MemoryStore(tmp_path / "memory.json")

    @pytest.mark.asyncio
    async def test_add_then_retrieve(self, store: MemoryStore) -> None:
        added = await MemoryAddTool(store).execute(
            {"content": "The deploy script lives in scripts/deploy.sh", "metadata": {"topic": "deploy"}}
        )
        await MemoryAddTool(store).execute({"content": "User prefers tabs", "type": "context"})

        result = await MemoryRetrieveTool(store).execute({"query": "deploy script"})

        assert added.success
        assert result.success
        assert result.data["count"] == 1
        assert result.data["results"][0]["id"] == added.data["id"]
        assert result.data["results"][0]["metadata"] == {"topic": "deploy"}

    @pytest.mark.asyncio
    async def test_add_validates_input(self, store: MemoryStore) -> None:
        empty = await MemoryAddTool(store).execute({"content": "  "})
        bad_type = await MemoryAddTool(store).execute({"content": "x", "type": "dream"})

        assert empty.success is False
        assert bad_type.success is False
        assert store.items == []

    @pytest.mark.asyncio
    async def test_retrieve_filters_by_type_and_ranks_by_matches(self, store: MemoryStore) -> None:
        await MemoryAddTool(store).execute({"content": "git push failed", "type": "command"})
        await MemoryAddTool(store).execute({"content": "git git git notes", "type": "context"})
        await MemoryAddTool(store).execute({"content": "git log output", "type": "command"})

        ranked = await MemoryRetrieveTool(store).execute({"query": "git"})
        commands = await MemoryRetrieveTool(store).execute({"query": "git", "type": "command"})

        assert ranked.data["results"][0]["content"] == "git git git notes"
        assert {r["type"] for r in commands.data["results"]} == {"command"}
        assert commands.data["count"] == 2

    @pytest.mark.asyncio
    async def test_list_newest_first_with_limit(self, store: MemoryStore) -> None:
        for text in ("first", "second", "third"):
            await MemoryAddTool(store).execute({"content": text})

        result = await MemoryListTool(store).execute({"limit": 2})
        oldest = await MemoryListTool(store).execute({"sort_direction": "asc", "limit": 1})

        assert [r["content"] for r in result.data["results"]] == ["third", "second"]
        assert result.data["total_count"] == 3
        assert oldest.data["results"][0]["content"] == "first"

    @pytest.mark.asyncio
    async def test_delete_by_id_type_and_all(self, store: MemoryStore) -> None:
        keep = await MemoryAddTool(store).execute({"content": "keep", "type": "context"})
        drop = await MemoryAddTool(store).execute({"content": "drop", "type": "context"})
        await MemoryAddTool(store).execute({"content": "ls", "type": "command"})
        delete = MemoryDeleteTool(store)

        by_id = await delete.execute({"id": drop.data["id"]})
        missing = await delete.execute({"id": "nope"})
        by_type = await delete.execute({"type": "command"})

        assert by_id.success and missing.success is False
        assert by_type.data["message"] == "1 memory items of type command deleted successfully"
        assert [item.id for item in store.items] == [keep.data["id"]]

        cleared = await delete.execute({"clear_all": True})
        nothing = await delete.execute({})

        assert cleared.success and store.items == []
        assert nothing.success is False

    @pytest.mark.asyncio
    async def test_store_persists_to_json_and_caps_size(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "memory.json"
        store = MemoryStore(path, max_items=2)
        for text in ("a", "b", "c"):
            await MemoryAddTool(store).execute({"content": text})

        reloaded = MemoryStore(path)

        assert [item.content for item in reloaded.items] == ["c", "b"]
        assert len(json.loads(path.read_text())) == 2

    def test_corrupt_memory_file_yields_empty_store(self, tmp_path: Path) -> None:
        path = tmp_path / "memory.json"
        path.write_text("{not json")

        assert MemoryStore(path).items == []
