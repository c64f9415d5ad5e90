"""Tests for the Dispatcher."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from arec.agents.actions import ActionPlan, FinishAction, ScrapeAction, SearchAction
from arec.agents.dispatcher import Dispatcher
from arec.errors import CollaboratorContractError, WebSearchError
from arec.models.observation import Observation


class StubTool:
    """Records calls and either answers or raises."""

    def __init__(self, result: object = None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[str] = []
        self.closed = False

    async def _call(self, arg: str) -> object:
        self.calls.append(arg)
        if self.error is not None:
            raise self.error
        return self.result

    async def search(self, query: str) -> object:
        return await self._call(query)

    async def scrape(self, url: str) -> object:
        return await self._call(url)

    def close(self) -> None:
        self.closed = True


def _plan(action: SearchAction | ScrapeAction | FinishAction) -> ActionPlan:
    return ActionPlan(reasoning="because", action=action)


def test_finish_returns_none_without_tool_calls() -> None:
    search, scrape = StubTool(), StubTool()
    dispatcher = Dispatcher(search, scrape)

    out = asyncio.run(dispatcher.dispatch(_plan(FinishAction.create("answer"))))

    assert out is None
    assert search.calls == []
    assert scrape.calls == []


def test_search_result_is_passed_through() -> None:
    obs = Observation(content="Search results for query: 'q'")
    search = StubTool(result=obs)

    out = asyncio.run(Dispatcher(search, StubTool()).dispatch(_plan(SearchAction.create("q"))))

    assert out == obs
    assert search.calls == ["q"]


def test_search_failure_becomes_tool_error_observation() -> None:
    search = StubTool(error=WebSearchError("quota exceeded"))

    out = asyncio.run(Dispatcher(search, StubTool()).dispatch(_plan(SearchAction.create("q"))))

    assert out is not None
    assert out.is_tool_error
    assert out.content == "TOOL_ERROR: Search failed. Reason: quota exceeded"


def test_scrape_network_error_becomes_tool_error_observation() -> None:
    """Scenario: the scrape tool hits a network error for a broken host."""

    scrape = StubTool(error=httpx.ConnectError("connection refused"))

    out = asyncio.run(
        Dispatcher(StubTool(), scrape).dispatch(_plan(ScrapeAction.create("https://broken.test")))
    )

    assert out == Observation(content="TOOL_ERROR: Scrape failed. Reason: connection refused")
    assert scrape.calls == ["https://broken.test"]


def test_tool_returning_wrong_type_violates_contract() -> None:
    search = StubTool(result="plain string")

    with pytest.raises(CollaboratorContractError):
        asyncio.run(Dispatcher(search, StubTool()).dispatch(_plan(SearchAction.create("q"))))


def test_close_closes_both_tools() -> None:
    search, scrape = StubTool(), StubTool()

    Dispatcher(search, scrape).close()

    assert search.closed and scrape.closed
