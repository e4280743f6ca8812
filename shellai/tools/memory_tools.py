"""
Memory tools: add, retrieve, list and delete long-term memory items.

Module: shellai/tools/memory_tools.py

All four tools share one MemoryStore. The store keeps the newest items
first, drops the oldest beyond ``max_items``, and optionally persists to a
JSON file.
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import BaseTool, ToolResult

logger = logging.getLogger(__name__)

MEMORY_TYPES = ("conversation", "file", "context", "command")


@dataclass
class MemoryItem:
    """A single remembered item."""

    content: str
    type: str = "context"
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self, include_metadata: bool = True) -> Dict[str, Any]:
        d = {
            "id": self.id,
            "type": self.type,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }
        if include_metadata and self.metadata:
            d["metadata"] = self.metadata
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MemoryItem":
        return cls(
            content=d["content"],
            type=d.get("type", "context"),
            id=d.get("id") or str(uuid.uuid4()),
            timestamp=datetime.fromisoformat(d["timestamp"]) if d.get("timestamp") else datetime.now(),
            metadata=d.get("metadata") or {},
        )


class MemoryStore:
    """Newest-first list of memory items with optional JSON persistence."""

    def __init__(self, path: Optional[Path] = None, max_items: int = 100):
        """
        Initialize the store.

        Args:
            path: JSON file to load from and save to (None keeps memory in process only)
            max_items: Oldest items beyond this count are dropped
        """
        self.path = Path(path) if path else None
        self.max_items = max_items
        self.items: List[MemoryItem] = []
        self._load()

    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            self.items = [MemoryItem.from_dict(d) for d in data]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Failed to load memory from {self.path}: {e}")
            self.items = []

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps([item.to_dict() for item in self.items], indent=2, ensure_ascii=False, default=str),
            encoding="utf-8",
        )

    def add(self, item: MemoryItem) -> str:
        self.items.insert(0, item)
        del self.items[self.max_items:]
        self._save()
        return item.id

    def get(self, item_id: str) -> Optional[MemoryItem]:
        return next((item for item in self.items if item.id == item_id), None)

    def search(self, query: str, type: Optional[str] = None, limit: int = 10) -> List[MemoryItem]:
        """
        Rank items by how often the query's words occur in them.

        Matches in content count 1, matches in metadata count 0.5. Items
        with no match are left out.
        """
        terms = [t for t in query.lower().split() if t]
        scored = []
        for item in self.items:
            if type and item.type != type:
                continue
            content = item.content.lower()
            metadata = json.dumps(item.metadata, default=str).lower()
            score = sum(content.count(t) + metadata.count(t) * 0.5 for t in terms)
            if score > 0:
                scored.append((score, item))
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [item for _, item in scored[:limit]]

    def delete(self, item_id: str) -> bool:
        before = len(self.items)
        self.items = [item for item in self.items if item.id != item_id]
        if len(self.items) == before:
            return False
        self._save()
        return True

    def delete_type(self, type: str) -> int:
        before = len(self.items)
        self.items = [item for item in self.items if item.type != type]
        self._save()
        return before - len(self.items)

    def clear(self) -> None:
        self.items = []
        self._save()


class _MemoryTool(BaseTool):
    """Shared store handling for memory tools."""

    def __init__(self, store: Optional[MemoryStore] = None) -> None:
        self.store = store if store is not None else MemoryStore()


class MemoryAddTool(_MemoryTool):
    """Remember a piece of information."""

    name = "memory-add"
    description = "Add an item to long-term memory"
    parameters = {
        "content": "The content to remember",
        "type": "One of conversation, file, context, command (default: context)",
        "metadata": "Additional metadata for the memory item (optional object)",
    }

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        content = params.get("content")
        if not isinstance(content, str) or not content.strip():
            return self.create_result(False, error="Parameter 'content' must be a non-empty string")

        memory_type = params.get("type") or "context"
        if memory_type not in MEMORY_TYPES:
            return self.create_result(False, error=f"Invalid memory type: {memory_type}")

        metadata = params.get("metadata") or {}
        if not isinstance(metadata, dict):
            return self.create_result(False, error="Parameter 'metadata' must be an object")

        item_id = self.store.add(MemoryItem(content=content, type=memory_type, metadata=metadata))
        return self.create_result(True, data={"id": item_id, "message": "Memory item added successfully"})


class MemoryRetrieveTool(_MemoryTool):
    """Search memory for items relevant to a query."""

    name = "memory-retrieve"
    description = "Retrieve items from long-term memory matching a query"
    parameters = {
        "query": "Search query for memory retrieval",
        "type": "Filter by type, or 'all' (default: all)",
        "limit": "Maximum number of results (default: 5)",
        "include_metadata": "Include metadata in the results (default: true)",
    }

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        query = params.get("query")
        if not isinstance(query, str) or not query.strip():
            return self.create_result(False, error="Parameter 'query' must be a non-empty string")

        memory_type = params.get("type") or "all"
        limit = int(params.get("limit") or 5)
        include_metadata = params.get("include_metadata", True) is not False

        items = self.store.search(query, type=None if memory_type == "all" else memory_type, limit=limit)
        results = [item.to_dict(include_metadata) for item in items]
        return self.create_result(True, data={"results": results, "count": len(results), "query": query})


class MemoryListTool(_MemoryTool):
    """List remembered items, newest first by default."""

    name = "memory-list"
    description = "List items in long-term memory"
    parameters = {
        "type": "Filter by type, or 'all' (default: all)",
        "limit": "Maximum number of items (default: 20)",
        "include_metadata": "Include metadata in the results (default: true)",
        "sort_direction": "'desc' for newest first, 'asc' for oldest first (default: desc)",
    }

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        memory_type = params.get("type") or "all"
        limit = int(params.get("limit") or 20)
        include_metadata = params.get("include_metadata", True) is not False
        newest_first = (params.get("sort_direction") or "desc") != "asc"

        items = [i for i in self.store.items if memory_type == "all" or i.type == memory_type]
        if not newest_first:
            items.reverse()
        items.sort(key=lambda i: i.timestamp, reverse=newest_first)
        total = len(items)
        results = [item.to_dict(include_metadata) for item in items[:limit]]
        return self.create_result(True, data={"results": results, "count": len(results), "total_count": total})


class MemoryDeleteTool(_MemoryTool):
    """Delete one item, every item of a type, or everything."""

    name = "memory-delete"
    description = "Delete items from long-term memory"
    parameters = {
        "id": "ID of the memory item to delete",
        "type": "Delete every item of this type",
        "clear_all": "Delete all memory items (default: false)",
    }

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        item_id = params.get("id")
        memory_type = params.get("type")

        if item_id:
            if not self.store.delete(str(item_id)):
                return self.create_result(False, error=f"Memory item not found: {item_id}")
            return self.create_result(True, data={"message": f"Memory item with ID {item_id} deleted successfully"})

        if params.get("clear_all"):
            self.store.clear()
            return self.create_result(True, data={"message": "All memory items cleared successfully"})

        if memory_type:
            if memory_type not in MEMORY_TYPES:
                return self.create_result(False, error=f"Invalid memory type: {memory_type}")
            deleted = self.store.delete_type(memory_type)
            return self.create_result(
                True, data={"message": f"{deleted} memory items of type {memory_type} deleted successfully"}
            )

        return self.create_result(False, error="Either id, clear_all, or type parameter must be provided")
