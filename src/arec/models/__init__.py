"""Pydantic models used across the project."""

from __future__ import annotations

from arec.models.document import ScrapedPage
from arec.models.observation import TOOL_ERROR_PREFIX, Observation
from arec.models.search import SearchResult

__all__ = [
    "Observation",
    "ScrapedPage",
    "SearchResult",
    "TOOL_ERROR_PREFIX",
]
