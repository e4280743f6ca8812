"""
Web search via DuckDuckGo.

Module: shellai/tools/web_search.py

Free search, no API key required.
"""

from typing import Any, Dict

import anyio
from ddgs import DDGS

from .base import BaseTool, ToolResult


def _search(query: str, max_results: int):
    with DDGS() as ddgs:
        return list(ddgs.text(query, max_results=max_results))


class WebSearchTool(BaseTool):
    """Search the web using DuckDuckGo."""

    name = "web-search"
    description = "Search the web and return titles, URLs and snippets"
    parameters = {
        "query": "Search query",
        "max_results": "Maximum number of results (default: 5)",
    }

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        query = params.get("query")
        if not isinstance(query, str) or not query.strip():
            return self.create_result(False, error="Parameter 'query' must be a non-empty string")
        max_results = int(params.get("max_results") or 5)

        results = await anyio.to_thread.run_sync(_search, query, max_results)

        formatted = [
            {
                "title": r.get("title", ""),
                "url": r.get("href", ""),
                "snippet": r.get("body", ""),
            }
            for r in results
        ]
        return self.create_result(True, data=formatted, metadata={"query": query, "provider": "duckduckgo"})
