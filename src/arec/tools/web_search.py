"""Web search tool and providers."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Protocol

import httpx
from duckduckgo_search import DDGS

from arec.config import Settings
from arec.errors import ConfigError, WebSearchError
from arec.logging import get_logger
from arec.models.observation import Observation
from arec.models.search import SearchResult

logger = get_logger(__name__)

_TRANSIENT_STATUSES = frozenset({429, 500, 502, 503, 504})


class WebSearchProvider(Protocol):
    """Search provider interface."""

    def search(self, query: str, *, max_results: int) -> list[SearchResult]:
        """Search web."""


@dataclass(frozen=True)
class TavilySearchProvider:
    """Tavily API search provider.

    Transient statuses (429/5xx) and transport errors are retried with exponential
    backoff; anything else fails immediately with :class:`WebSearchError`.
    """

    api_key: str
    base_url: str = "https://api.tavily.com"
    search_depth: str = "basic"
    timeout_s: float = 30.0
    max_retries: int = 2
    retry_backoff_s: float = 0.75
    source_name: str = "tavily"
    transport: httpx.BaseTransport | None = None

    def search(self, query: str, *, max_results: int) -> list[SearchResult]:
        url = f"{self.base_url.rstrip('/')}/search"
        payload = {
            "api_key": self.api_key,
            "query": query,
            "max_results": max_results,
            "search_depth": self.search_depth,
            "include_answer": False,
            "include_raw_content": False,
            "include_images": False,
        }

        last_err: Exception | None = None
        started = time.monotonic()

        with httpx.Client(
            timeout=httpx.Timeout(self.timeout_s),
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            for attempt in range(self.max_retries + 1):
                try:
                    resp = client.post(url, json=payload)
                    if resp.status_code in _TRANSIENT_STATUSES:
                        last_err = WebSearchError(f"tavily transient status={resp.status_code}")
                    else:
                        resp.raise_for_status()
                        results = self._parse(resp.json())
                        logger.info(
                            "Tavily search ok",
                            extra={
                                "query_len": len(query),
                                "attempt": attempt,
                                "result_count": len(results),
                                "latency_ms": int((time.monotonic() - started) * 1000),
                            },
                        )
                        return results
                except httpx.HTTPStatusError as e:
                    raise WebSearchError(
                        f"tavily returned status {e.response.status_code}"
                    ) from e
                except httpx.RequestError as e:
                    last_err = e
                except ValueError as e:
                    raise WebSearchError(f"tavily returned invalid JSON: {e}") from e

                if attempt < self.max_retries:
                    sleep_s = self.retry_backoff_s * (2**attempt)
                    logger.warning(
                        "Tavily search retry",
                        extra={"attempt": attempt, "sleep_s": sleep_s, "error": str(last_err)},
                    )
                    time.sleep(sleep_s)

        raise WebSearchError(
            f"tavily search failed after {self.max_retries + 1} attempt(s): {last_err}"
        ) from last_err

    def _parse(self, data: object) -> list[SearchResult]:
        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            raise WebSearchError("tavily response missing results list")

        results: list[SearchResult] = []
        for i, item in enumerate(data["results"], start=1):
            if not isinstance(item, dict) or not item.get("url"):
                continue
            try:
                results.append(
                    SearchResult(
                        title=item.get("title"),
                        snippet=item.get("content") or item.get("snippet"),
                        url=item["url"],
                        source=self.source_name,
                        rank=i,
                    )
                )
            except ValueError:
                # Skip URLs that pydantic's HttpUrl rejects
                continue
        return results


@dataclass(frozen=True)
class DuckDuckGoSearchProvider:
    """DuckDuckGo search provider."""

    source_name: str = "duckduckgo"

    def search(self, query: str, *, max_results: int) -> list[SearchResult]:
        results: list[SearchResult] = []
        try:
            with DDGS() as ddgs:
                hits = list(ddgs.text(query, max_results=max_results))
        except Exception as e:
            raise WebSearchError(f"duckduckgo search failed: {e}") from e

        for i, r in enumerate(hits, start=1):
            url = r.get("href") or r.get("url")
            if not url:
                continue
            try:
                results.append(
                    SearchResult(
                        title=r.get("title"),
                        snippet=r.get("body") or r.get("snippet"),
                        url=url,
                        source=self.source_name,
                        rank=i,
                    )
                )
            except ValueError:
                continue
        return results


def format_search_results(query: str, results: list[SearchResult]) -> str:
    """Render results as observation text.

    The top result's link is announced on its own ``Found URL:`` line so the planner
    can pick it up without parsing the rest.
    """

    lines = [f"Search results for query: '{query}'"]
    if not results:
        lines.append("No relevant search results found.")
        return "\n".join(lines)

    lines.append(f"Found URL: {results[0].url}")
    for i, item in enumerate(results, start=1):
        lines.append(item.describe(i))
    return "\n".join(lines)


class WebSearchTool:
    """Search collaborator backed by a :class:`WebSearchProvider`."""

    def __init__(self, provider: WebSearchProvider, *, max_results: int = 5) -> None:
        self._provider = provider
        self._max_results = max_results

    async def search(self, query: str) -> Observation:
        logger.info("Searching", extra={"query": query})
        results = await asyncio.to_thread(
            self._provider.search, query, max_results=self._max_results
        )
        logger.info("Search finished", extra={"result_count": len(results)})
        return Observation(content=format_search_results(query, results))

    def close(self) -> None:
        # Providers open a client per request; nothing is held between calls.
        pass


def get_search_provider(settings: Settings) -> WebSearchProvider:
    """Factory to create a search provider based on settings."""

    if settings.search_provider == "tavily":
        if not settings.tavily_api_key:
            raise ConfigError(
                "Missing AREC_TAVILY_API_KEY while search_provider=tavily. "
                "Set it in environment variables or .env."
            )
        return TavilySearchProvider(
            api_key=settings.tavily_api_key,
            base_url=settings.tavily_api_base_url,
            search_depth=settings.tavily_search_depth,
            timeout_s=settings.tavily_timeout_s,
            max_retries=settings.tavily_max_retries,
            retry_backoff_s=settings.tavily_retry_backoff_s,
        )

    return DuckDuckGoSearchProvider()
