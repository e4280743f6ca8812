"""
Best-effort extraction of JSON objects from model output.

Module: shellai/agent/parsing.py

Models wrap JSON in prose, code fences, or both. Parsing never raises: the
result is tagged ok/error and callers pick their own fallback.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

FENCED_BLOCK = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```", re.IGNORECASE)


@dataclass
class ParseResult:
    """Tagged outcome of parsing model text."""

    ok: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def success(cls, data: Dict[str, Any]) -> "ParseResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: str) -> "ParseResult":
        return cls(ok=False, error=error)


def extract_json_object(text: Optional[str]) -> ParseResult:
    """
    Find the first well-formed JSON object in text.

    Fenced ```json blocks are tried first, then every ``{`` in the text is
    tried as the start of an object.

    Args:
        text: Raw model output

    Returns:
        ParseResult holding the decoded dict, or the reason none was found
    """
    if not text or not text.strip():
        return ParseResult.failure("Empty response")

    for match in FENCED_BLOCK.finditer(text):
        try:
            data = json.loads(match.group(1))
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return ParseResult.success(data)

    decoder = json.JSONDecoder()
    position = text.find("{")
    while position != -1:
        try:
            data, _ = decoder.raw_decode(text, position)
        except json.JSONDecodeError:
            data = None
        if isinstance(data, dict):
            return ParseResult.success(data)
        position = text.find("{", position + 1)

    return ParseResult.failure("No JSON object found in response")
