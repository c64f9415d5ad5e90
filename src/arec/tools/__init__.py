"""Tools used by the agent."""

from __future__ import annotations

from arec.tools.mock import MockScrapeTool, MockSearchTool
from arec.tools.protocol import ScrapeTool, SearchTool
from arec.tools.scraper import WebScrapeTool
from arec.tools.web_search import WebSearchTool, get_search_provider

__all__ = [
    "SearchTool",
    "ScrapeTool",
    "WebSearchTool",
    "WebScrapeTool",
    "MockSearchTool",
    "MockScrapeTool",
    "get_search_provider",
]
