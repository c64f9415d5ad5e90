"""Lenient JSON extraction from LLM replies.

Models asked for "only JSON" still wrap it in markdown fences or prose now and then;
these helpers dig the first object out without raising.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterator

from arec.logging import get_logger

logger = get_logger(__name__)

_JSON_FENCE_RE = re.compile(r"```json\s*\n?(.*?)\n?```", re.DOTALL | re.IGNORECASE)
_ANY_FENCE_RE = re.compile(r"```\s*\n?(.*?)\n?```", re.DOTALL)


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        obj = json.loads(text)
    except ValueError:
        return None
    return obj if isinstance(obj, dict) else None


def _balanced_objects(text: str) -> Iterator[str]:
    """Yield every brace-balanced ``{...}`` span, left to right, skipping braces inside strings."""

    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    yield text[start : i + 1]
                    break
        start = text.find("{", start + 1)


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Extract one JSON object from ``text``.

    Strategies, strictest first:
        1. a ```json fenced block (or any fenced block holding an object);
        2. the whole text;
        3. the first balanced ``{...}`` span that decodes to an object.

    Returns:
        The decoded object, or ``None`` when nothing parses.
    """

    if not text:
        return None

    cleaned = text.strip()

    m = _JSON_FENCE_RE.search(cleaned) or _ANY_FENCE_RE.search(cleaned)
    if m:
        obj = _loads_object(m.group(1).strip())
        if obj is not None:
            return obj
        logger.debug("extract_json_object: fenced block is not a JSON object")

    obj = _loads_object(cleaned)
    if obj is not None:
        return obj

    for candidate in _balanced_objects(cleaned):
        obj = _loads_object(candidate)
        if obj is not None:
            return obj

    logger.debug("extract_json_object: no JSON object found")
    return None
