"""Page fetching utilities."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from arec.config import Settings
from arec.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FetchedPage:
    """Fetched page payload."""

    url: str
    text: str


class PageFetcher:
    """Fetch pages over HTTP with a browser User-Agent."""

    def __init__(self, settings: Settings, *, transport: httpx.BaseTransport | None = None) -> None:
        self._client = httpx.Client(
            timeout=httpx.Timeout(settings.http_timeout_s),
            headers={"User-Agent": settings.http_user_agent},
            follow_redirects=True,
            transport=transport,
        )

    def fetch(self, url: str) -> FetchedPage:
        """Fetch a URL (synchronous).

        Raises:
            httpx.HTTPError: On transport failure or a non-2xx status.
        """

        resp = self._client.get(url)
        resp.raise_for_status()
        logger.debug("Fetched page", extra={"url": str(resp.url), "status": resp.status_code})
        return FetchedPage(
            url=str(resp.url),
            text=resp.text,
        )

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    def close(self) -> None:
        self._client.close()
