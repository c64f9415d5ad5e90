"""Offline stand-ins for the search and scrape tools.

Both keep their call counters on the instance, so separate runs (and tests) never
share failure state.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from arec.errors import ScrapeError, WebSearchError
from arec.logging import get_logger
from arec.models.document import ScrapedPage
from arec.models.observation import Observation
from arec.models.search import SearchResult
from arec.tools.scraper import format_scraped_page
from arec.tools.web_search import format_search_results

logger = get_logger(__name__)

DEFAULT_RESULTS: tuple[dict[str, str], ...] = (
    {
        "title": "List of sovereign states",
        "snippet": "An overview of every sovereign state recognised today.",
        "url": "https://en.wikipedia.org/wiki/List_of_sovereign_states",
    },
    {
        "title": "Countries of the world",
        "snippet": "Population, area and capitals by country.",
        "url": "https://example.com/countries",
    },
)

DEFAULT_PAGES: dict[str, str] = {
    "https://en.wikipedia.org/wiki/List_of_sovereign_states": (
        "This list covers all the countries generally recognised as sovereign states, "
        "together with states whose sovereignty is disputed."
    ),
    "https://example.com/countries": "Country facts and figures.",
}


@dataclass
class MockSearchTool:
    """Canned search results.

    ``fail_on_calls`` holds 1-based call numbers that raise :class:`WebSearchError`
    instead of answering.
    """

    results: tuple[dict[str, str], ...] = DEFAULT_RESULTS
    fail_on_calls: frozenset[int] = frozenset()
    calls: int = field(default=0, init=False)
    closed: bool = field(default=False, init=False)

    async def search(self, query: str) -> Observation:
        self.calls += 1
        if self.calls in self.fail_on_calls:
            logger.warning("Mock search failing on purpose", extra={"call": self.calls})
            raise WebSearchError(f"API key invalid or quota exceeded on call {self.calls}")

        items = [
            SearchResult(title=r["title"], snippet=r["snippet"], url=r["url"], source="mock", rank=i)
            for i, r in enumerate(self.results, start=1)
        ]
        return Observation(content=format_search_results(query, items))

    def close(self) -> None:
        self.closed = True


@dataclass
class MockScrapeTool:
    """Canned pages keyed by URL; unknown or ``broken_urls`` raise :class:`ScrapeError`."""

    pages: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PAGES))
    broken_urls: frozenset[str] = frozenset()
    snippet_chars: int = 500
    calls: int = field(default=0, init=False)
    closed: bool = field(default=False, init=False)

    async def scrape(self, url: str) -> Observation:
        self.calls += 1
        if url in self.broken_urls:
            raise ScrapeError(f"connection to {url} failed")
        if url not in self.pages:
            raise ScrapeError(f"{url} returned status 404")

        text = f"{self.pages[url]} "
        page = ScrapedPage(url=url, text=text, total_chars=len(text))
        return Observation(content=format_scraped_page(page, snippet_chars=self.snippet_chars))

    def close(self) -> None:
        self.closed = True
