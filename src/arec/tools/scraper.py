"""Page scraping tool."""

from __future__ import annotations

import asyncio

import httpx

from arec.errors import ScrapeError
from arec.logging import get_logger
from arec.models.document import ScrapedPage
from arec.models.observation import Observation
from arec.tools.page_fetcher import PageFetcher
from arec.tools.page_parser import PageParser

logger = get_logger(__name__)


def format_scraped_page(page: ScrapedPage, *, snippet_chars: int) -> str:
    return (
        f"SCRAPED CONTENT (Snippet): {page.snippet(snippet_chars)}... "
        f"(Total chars: {page.total_chars})"
    )


class WebScrapeTool:
    """Scrape collaborator: fetch a page and report a snippet of its paragraph text."""

    def __init__(
        self,
        fetcher: PageFetcher,
        parser: PageParser | None = None,
        *,
        snippet_chars: int = 500,
    ) -> None:
        self._fetcher = fetcher
        self._parser = parser or PageParser()
        self._snippet_chars = snippet_chars

    def scrape_page(self, url: str) -> ScrapedPage:
        """Fetch and parse ``url`` (synchronous).

        Raises:
            ScrapeError: On network failure or a non-2xx response.
        """

        try:
            fetched = self._fetcher.fetch(url)
        except httpx.HTTPStatusError as e:
            raise ScrapeError(f"{url} returned status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ScrapeError(f"request to {url} failed: {e}") from e

        page = self._parser.parse_html(fetched.url, fetched.text)
        logger.info(
            "Scrape finished",
            extra={"url": fetched.url, "total_chars": page.total_chars},
        )
        return page

    async def scrape(self, url: str) -> Observation:
        logger.info("Scraping", extra={"url": url})
        page = await asyncio.to_thread(self.scrape_page, url)
        return Observation(content=format_scraped_page(page, snippet_chars=self._snippet_chars))

    def close(self) -> None:
        self._fetcher.close()
