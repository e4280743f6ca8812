"""
Tests for tool result formatting.

Module: tests/test_agent/test_result_formatter.py
"""

from shellai.agent.result_formatter import format_tool_result, format_tool_results
from shellai.tools.base import ToolResult


class TestFormatToolResult:
    """Tests for format_tool_result."""

    def test_failure_renders_error_line(self) -> None:
        result = ToolResult(success=False, error="File not found: a.txt")

        assert format_tool_result(result) == "❌ Error: File not found: a.txt"

    def test_string_data_is_verbatim(self) -> None:
        text = "line one\n  line two\n"

        assert format_tool_result(ToolResult(success=True, data=text)) == text

    def test_empty_list(self) -> None:
        assert format_tool_result(ToolResult(success=True, data=[])) == "No items found."

    def test_long_list_is_truncated_to_twenty(self) -> None:
        """25 generic items render as 20 entries plus a notice."""
        items = [{"value": i} for i in range(25)]

        lines = format_tool_result(ToolResult(success=True, data=items)).split("\n")

        assert len(lines) == 21
        assert lines[0] == '1. {"value": 0}'
        assert lines[19] == '20. {"value": 19}'
        assert lines[20] == "... (showing first 20 of 25 items)"

    def test_directory_entries_use_icons(self) -> None:
        entries = [
            {"name": "src", "type": "directory", "size": None},
            {"name": "setup.cfg", "type": "file", "size": 120},
        ]

        assert format_tool_result(ToolResult(success=True, data=entries)) == "📁 src\n📄 setup.cfg"

    def test_scalar_list_items(self) -> None:
        assert format_tool_result(ToolResult(success=True, data=["a", 2])) == "1. a\n2. 2"

    def test_mapping_is_indented_json(self) -> None:
        rendered = format_tool_result(ToolResult(success=True, data={"exit_code": 0, "stdout": "ok"}))

        assert rendered == '{\n  "exit_code": 0,\n  "stdout": "ok"\n}'

    def test_scalars(self) -> None:
        assert format_tool_result(ToolResult(success=True, data=42)) == "42"
        assert format_tool_result(ToolResult(success=True, data=None)) == "(no output)"

    def test_deterministic(self) -> None:
        result = ToolResult(success=True, data={"b": [1, 2], "a": "x"})

        assert format_tool_result(result) == format_tool_result(result)


class TestFormatToolResults:
    """Tests for format_tool_results."""

    def test_labelled_blocks(self) -> None:
        rendered = format_tool_results([
            ("Read config", "file-read", ToolResult(success=True, data="key: value")),
            ("Think", None, ToolResult(success=False, error="nope")),
        ])

        assert rendered == "Read config (file-read):\nkey: value\n\nThink:\n❌ Error: nope"

    def test_truncates_each_result(self) -> None:
        rendered = format_tool_results(
            [("Dump", "file-read", ToolResult(success=True, data="x" * 50))],
            max_chars=10,
        )

        assert rendered == "Dump (file-read):\n" + "x" * 10 + "\n... [truncated]"
