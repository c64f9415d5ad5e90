"""Tests for the loop controller."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Sequence

import httpx
import pytest

from arec.agents.actions import ActionPlan, FinishAction, ScrapeAction, SearchAction
from arec.agents.context import AgentContext
from arec.agents.dispatcher import Dispatcher
from arec.agents.planner import MockPlanner
from arec.config import Settings
from arec.errors import ConfigError, PlanError
from arec.events import ContentType
from arec.models.observation import Observation
from arec.orchestrator.runner import AgentLoop, build_loop, run_agent
from arec.orchestrator.state import LoopStatus, TerminationReason
from arec.recording.file_recorder import FileEventRecorder, iter_events
from arec.tools.mock import MockScrapeTool, MockSearchTool
from arec.tools.page_fetcher import PageFetcher
from arec.tools.scraper import WebScrapeTool

GOAL = "Find a list of sovereign states."


class ScriptedPlanner:
    """Returns the given plans in order and records what it was shown."""

    def __init__(self, plans: Sequence[ActionPlan]) -> None:
        self._plans = list(plans)
        self.seen: list[tuple[int, str]] = []

    async def plan(self, context: AgentContext, observation: Observation) -> ActionPlan:
        self.seen.append((context.history_length, observation.content))
        return self._plans.pop(0)


class FailingPlanner:
    async def plan(self, context: AgentContext, observation: Observation) -> ActionPlan:
        raise PlanError("Reply does not contain a JSON object")


def _loop(planner, search=None, scrape=None, **kwargs) -> AgentLoop:
    return AgentLoop(
        goal=GOAL,
        planner=planner,
        dispatcher=Dispatcher(search or MockSearchTool(), scrape or MockScrapeTool()),
        **kwargs,
    )


def _search(query: str) -> ActionPlan:
    return ActionPlan(reasoning="search", action=SearchAction.create(query))


def _finish(answer: str = "done") -> ActionPlan:
    return ActionPlan(reasoning="finish", action=FinishAction.create(answer))


def test_mock_run_searches_scrapes_and_finishes() -> None:
    """The canned tools lead the mock planner from search to scrape to finish."""

    result = asyncio.run(_loop(MockPlanner()).run())

    assert result.reason is TerminationReason.FINISHED
    assert result.exit_code == 0
    assert result.cycle_count == 3
    assert [e.action.type for e in result.context.history] == ["Search", "Scrape"]
    assert result.context.history[1].action == ScrapeAction.create(
        "https://en.wikipedia.org/wiki/List_of_sovereign_states"
    )
    assert result.final_answer


def test_first_observation_is_seeded_from_goal() -> None:
    planner = ScriptedPlanner([_finish()])

    asyncio.run(_loop(planner).run())

    assert planner.seen == [(0, f"The user wants to find information on: {GOAL}")]


@pytest.mark.parametrize("n", [1, 2, 3, 4, 5])
def test_history_length_matches_completed_cycles(n: int) -> None:
    planner = ScriptedPlanner([_search(f"q{i}") for i in range(n)] + [_finish()])

    result = asyncio.run(_loop(planner, max_cycles=n + 1).run())

    assert result.reason is TerminationReason.FINISHED
    assert result.context.history_length == n
    assert [h for h, _ in planner.seen] == list(range(n + 1))


def test_finish_adds_no_history_entry() -> None:
    result = asyncio.run(_loop(ScriptedPlanner([_finish("answer")])).run())

    assert result.cycle_count == 1
    assert result.context.history_length == 0
    assert result.final_answer == "answer"


def test_safety_limit_stops_non_converging_run() -> None:
    """Without a Finish by cycle 5, cycle 6 terminates without calling the planner."""

    planner = ScriptedPlanner([_search(f"q{i}") for i in range(10)])
    loop = _loop(planner, search=MockSearchTool(results=()))

    result = asyncio.run(loop.run())

    assert loop.state.status is LoopStatus.TERMINATED
    assert result.reason is TerminationReason.SAFETY_LIMIT
    assert result.cycle_count == 6
    assert len(planner.seen) == 5
    assert result.context.history_length == 5
    assert result.exit_code == 2


def test_tool_failure_is_fed_back_and_run_continues() -> None:
    search = MockSearchTool(fail_on_calls=frozenset({1}))

    result = asyncio.run(_loop(MockPlanner(), search=search).run())

    assert result.reason is TerminationReason.FINISHED
    first = result.context.history[0]
    assert first.observation == (
        "TOOL_ERROR: Search failed. Reason: API key invalid or quota exceeded on call 1"
    )
    assert [e.action.type for e in result.context.history] == ["Search", "Search", "Scrape"]


def test_scrape_error_is_recorded_verbatim() -> None:
    planner = ScriptedPlanner(
        [ActionPlan(reasoning="read it", action=ScrapeAction.create("https://broken.test")), _finish()]
    )
    scrape = MockScrapeTool(broken_urls=frozenset({"https://broken.test"}))

    result = asyncio.run(_loop(planner, scrape=scrape).run())

    assert result.context.history[0].observation == (
        "TOOL_ERROR: Scrape failed. Reason: connection to https://broken.test failed"
    )
    assert planner.seen[1][1] == result.context.history[0].observation


def test_plan_error_is_fatal() -> None:
    result = asyncio.run(_loop(FailingPlanner()).run())

    assert result.reason is TerminationReason.FATAL
    assert result.exit_code == 1
    assert result.context.history_length == 0
    assert result.error is not None and result.error.startswith("PlanError")


def test_terminated_loop_cannot_resume() -> None:
    loop = _loop(ScriptedPlanner([_finish()]))
    asyncio.run(loop.run())

    with pytest.raises(RuntimeError):
        asyncio.run(loop.run())


def test_events_are_streamed_and_recorded(tmp_path: Path) -> None:
    recorder = FileEventRecorder(tmp_path / "events.jsonl")
    loop = _loop(MockPlanner(), recorder=recorder)

    async def collect():
        return [ev async for ev in loop.stream()]

    streamed = asyncio.run(collect())
    recorded = list(iter_events(recorder.path))

    assert [e.seq for e in recorded] == [e.seq for e in streamed]
    assert [e.seq for e in streamed] == list(range(1, len(streamed) + 1))
    assert streamed[0].content_type is ContentType.RUN_STARTED
    assert streamed[-1].content_type is ContentType.FINISHED
    assert sum(e.content_type is ContentType.PLAN for e in streamed) == 3
    assert streamed[0].metadata == {"status": "running", "reason": None, "cycle_count": 0}
    assert streamed[-1].metadata == {"status": "terminated", "reason": "finished", "cycle_count": 3}


def test_run_agent_offline() -> None:
    result = run_agent(GOAL, Settings(), offline=True)

    assert result.finished
    assert result.to_dict()["history"][0]["action"].startswith('{"type": "Search"')


def test_build_loop_requires_llm_credentials() -> None:
    """Missing credentials fail before any cycle runs."""

    settings = Settings(planner="llm", openai_api_key=None, search_provider="mock")

    with pytest.raises(ConfigError):
        build_loop(GOAL, settings)


def test_build_loop_requires_tavily_key() -> None:
    settings = Settings(planner="mock", search_provider="tavily", tavily_api_key=None)

    with pytest.raises(ConfigError):
        build_loop(GOAL, settings)


def test_build_loop_records_events_when_enabled(tmp_path: Path) -> None:
    settings = Settings(planner="mock", search_provider="mock", record_events=True, artifacts_dir=tmp_path)
    loop = build_loop(GOAL, settings, offline=True, max_cycles=2)

    result = asyncio.run(loop.run())

    assert loop.max_cycles == 2
    assert loop.recorder is not None
    events = list(iter_events(loop.recorder.path))
    assert events[-1].run_id == result.run_id


def test_run_closes_scrape_connections() -> None:
    """The scraper's HTTP client is released once the run terminates."""

    html = "<html><body><article><p>Here are all the countries recognised today.</p></article></body></html>"
    fetcher = PageFetcher(Settings(), transport=httpx.MockTransport(lambda request: httpx.Response(200, html=html)))
    search = MockSearchTool()
    loop = _loop(MockPlanner(), search=search, scrape=WebScrapeTool(fetcher))

    result = asyncio.run(loop.run())

    assert result.finished
    assert fetcher.closed
    assert search.closed


def test_built_loop_releases_page_fetcher(monkeypatch: pytest.MonkeyPatch) -> None:
    """Loops wired from settings close the fetcher's connection pool after the run."""

    closed: list[PageFetcher] = []
    original_close = PageFetcher.close

    def close(self: PageFetcher) -> None:
        closed.append(self)
        original_close(self)

    monkeypatch.setattr(PageFetcher, "close", close)
    loop = build_loop(GOAL, Settings(planner="mock", search_provider="mock"), max_cycles=1)

    result = asyncio.run(loop.run())

    assert result.reason is TerminationReason.SAFETY_LIMIT
    assert len(closed) == 1
    assert closed[0].closed


def test_stream_closed_from_another_task_terminates_run() -> None:
    """A consumer that goes away mid-run leaves a terminated loop and closed tools."""

    search, scrape = MockSearchTool(), MockScrapeTool()
    loop = _loop(MockPlanner(), search=search, scrape=scrape)

    async def consume_then_abandon() -> None:
        stream = loop.stream()
        await stream.__anext__()
        await stream.__anext__()

        async def close() -> None:
            await stream.aclose()

        await asyncio.create_task(close())

    asyncio.run(consume_then_abandon())

    assert loop.state.reason is TerminationReason.FATAL
    assert loop.result().error == "run abandoned before termination"
    assert search.closed and scrape.closed
