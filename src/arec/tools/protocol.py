"""Collaborator interfaces the dispatcher depends on."""

from __future__ import annotations

from typing import Protocol

from arec.models.observation import Observation


class SearchTool(Protocol):
    """Web search collaborator.

    When the results point at a page worth reading, the observation carries a
    ``Found URL: <absolute-url>`` line.
    """

    async def search(self, query: str) -> Observation:
        """Run a search.

        Raises:
            ToolError: If the search could not be performed.
        """

    def close(self) -> None:
        """Release any connections held by the tool."""


class ScrapeTool(Protocol):
    """Page scraping collaborator.

    Successful observations look like
    ``SCRAPED CONTENT (Snippet): <snippet>... (Total chars: <n>)``.
    """

    async def scrape(self, url: str) -> Observation:
        """Fetch and extract a page.

        Raises:
            ToolError: If the page could not be fetched or parsed.
        """

    def close(self) -> None:
        """Release any connections held by the tool."""
