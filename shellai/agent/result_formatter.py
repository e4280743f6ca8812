"""
Human-readable rendering of tool results.

Module: shellai/agent/result_formatter.py

Used both for intermediate messages and for the final synthesis prompt, so
output must be deterministic.
"""

import json
from typing import Any, Iterable, Optional, Tuple

from ..tools.base import ToolResult

MAX_LIST_ITEMS = 20


def _dump(value: Any, indent: Optional[int] = None) -> str:
    return json.dumps(value, indent=indent, ensure_ascii=False, default=str)


def _format_list(items: list) -> str:
    if not items:
        return "No items found."

    lines = []
    for index, item in enumerate(items[:MAX_LIST_ITEMS], 1):
        if isinstance(item, dict):
            if "name" in item and "type" in item:
                icon = "📁" if item["type"] == "directory" else "📄"
                lines.append(f"{icon} {item['name']}")
            else:
                lines.append(f"{index}. {_dump(item)}")
        else:
            lines.append(f"{index}. {item}")

    if len(items) > MAX_LIST_ITEMS:
        lines.append(f"... (showing first {MAX_LIST_ITEMS} of {len(items)} items)")
    return "\n".join(lines)


def format_tool_result(result: ToolResult) -> str:
    """
    Render a tool result as text.

    Failures become a single error line, strings pass through verbatim,
    lists become numbered (or icon) entries capped at 20, other mappings
    are dumped as indented JSON.

    Args:
        result: Tool result to render

    Returns:
        Rendered text
    """
    if not result.success:
        return f"❌ Error: {result.error or 'Unknown error'}"

    data = result.data
    if isinstance(data, str):
        return data
    if isinstance(data, (list, tuple)):
        return _format_list(list(data))
    if isinstance(data, dict):
        return _dump(data, indent=2)
    if data is None:
        return "(no output)"
    return str(data)


def format_tool_results(
    entries: Iterable[Tuple[str, Optional[str], ToolResult]],
    max_chars: Optional[int] = None,
) -> str:
    """
    Render several results as labelled blocks.

    Args:
        entries: (step description, tool name, result) triples
        max_chars: Truncate each rendered result to this many characters

    Returns:
        Blocks separated by blank lines
    """
    blocks = []
    for description, tool, result in entries:
        text = format_tool_result(result)
        if max_chars is not None and len(text) > max_chars:
            text = text[:max_chars] + "\n... [truncated]"
        header = f"{description} ({tool})" if tool else description
        blocks.append(f"{header}:\n{text}")
    return "\n\n".join(blocks)
