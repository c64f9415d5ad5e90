"""Observe-Reason-Act loop controller.

Each cycle asks the planner for a plan, hands it to the dispatcher and records the
resulting observation. The run ends when the planner finishes, when the cycle ceiling
is exceeded, or on a fatal error.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncIterator

from arec.agents.actions import ActionPlan, FinishAction
from arec.agents.context import AgentContext, HistoryEntry
from arec.agents.dispatcher import Dispatcher
from arec.agents.planner import LLMPlanner, MockPlanner, Planner
from arec.config import Settings
from arec.events import ContentType, EventType, RunEvent
from arec.llm.client import LLMClient
from arec.logging import get_logger, log_exception, run_context, set_cycle
from arec.models.observation import Observation
from arec.orchestrator.state import LoopState, TerminationReason
from arec.recording.file_recorder import FileEventRecorder
from arec.tools.mock import MockScrapeTool, MockSearchTool
from arec.tools.page_fetcher import PageFetcher
from arec.tools.protocol import ScrapeTool, SearchTool
from arec.tools.scraper import WebScrapeTool
from arec.tools.web_search import WebSearchTool, get_search_provider

logger = get_logger(__name__)

DEFAULT_MAX_CYCLES = 5

_EXIT_CODES = {
    TerminationReason.FINISHED: 0,
    TerminationReason.FATAL: 1,
    TerminationReason.SAFETY_LIMIT: 2,
}


def new_run_id() -> str:
    # Time-based for readability plus a short random suffix to avoid collisions.
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return f"{ts}_{uuid.uuid4().hex[:8]}"


@dataclass(frozen=True)
class RunResult:
    """Outcome of one run."""

    run_id: str
    reason: TerminationReason
    cycle_count: int
    context: AgentContext
    final_answer: str | None = None
    error: str | None = None

    @property
    def finished(self) -> bool:
        return self.reason is TerminationReason.FINISHED

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self.reason]

    def to_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "goal": self.context.goal,
            "reason": self.reason.value,
            "cycle_count": self.cycle_count,
            "final_answer": self.final_answer,
            "error": self.error,
            "history": self.context.transcript(),
        }


@dataclass
class AgentLoop:
    """Drive one agent run.

    The loop owns the :class:`AgentContext`; the planner only reads it. A loop runs
    once; a terminated loop cannot be resumed.
    """

    goal: str
    planner: Planner
    dispatcher: Dispatcher
    max_cycles: int = DEFAULT_MAX_CYCLES
    run_id: str = field(default_factory=new_run_id)
    recorder: FileEventRecorder | None = None

    def __post_init__(self) -> None:
        self.context = AgentContext(self.goal)
        self.state = LoopState()
        self.final_answer: str | None = None
        self.error: str | None = None
        self._started = False
        self._seq = 0
        self._observation = Observation.for_goal(self.goal)
        self._pending_plan: ActionPlan | None = None
        self._cycle_open = False

    async def run(self) -> RunResult:
        """Run to a terminal state and return the result."""

        async for _ in self.stream():
            pass
        return self.result()

    def result(self) -> RunResult:
        if self.state.reason is None:
            raise RuntimeError("run has not terminated yet")
        return RunResult(
            run_id=self.run_id,
            reason=self.state.reason,
            cycle_count=self.state.cycle_count,
            context=self.context,
            final_answer=self.final_answer,
            error=self.error,
        )

    async def stream(self) -> AsyncIterator[RunEvent]:
        """Run the loop, yielding an event for every state change.

        The log context is bound around each step and released before every yield, so
        the generator may be resumed or closed from a different task. The tools are
        closed when the stream ends; a stream closed before termination ends the run
        as fatal.
        """

        if self._started:
            raise RuntimeError("AgentLoop instances run once; create a new loop")
        self._started = True

        try:
            while True:
                with run_context(run_id=self.run_id, cycle=str(self.state.cycle_count)):
                    event = await self._step()
                if event is None:
                    break
                yield event
        finally:
            with run_context(run_id=self.run_id, cycle=str(self.state.cycle_count)):
                if self.state.is_running:
                    logger.warning("Event stream closed before the run terminated")
                    self.error = "run abandoned before termination"
                    self.state.terminate(TerminationReason.FATAL)
                self.dispatcher.close()
                logger.info("Run terminated", extra=self.state.snapshot())

    async def _step(self) -> RunEvent | None:
        """Advance the loop by one event; ``None`` once the run has terminated."""

        if self._seq == 0:
            logger.info("Run started", extra={"goal": self.goal, "max_cycles": self.max_cycles})
            return self._emit(
                EventType.SYSTEM,
                ContentType.RUN_STARTED,
                {"goal": self.goal, "max_cycles": self.max_cycles},
            )

        if not self.state.is_running:
            return None

        if not self._cycle_open:
            return self._begin_cycle()

        if self._pending_plan is None:
            try:
                self._pending_plan = await self.planner.plan(self.context, self._observation)
            except Exception as e:
                return self._fail("Planner failed", e)
            plan = self._pending_plan
            logger.info("Planned action: %s", plan.action.type, extra={"reasoning": plan.reasoning})
            return self._emit(EventType.LLM, ContentType.PLAN, plan.model_dump(mode="json"))

        plan, self._pending_plan = self._pending_plan, None
        self._cycle_open = False
        try:
            next_observation = await self.dispatcher.dispatch(plan)
        except Exception as e:
            return self._fail("Dispatcher failed", e)

        if next_observation is None:
            return self._finish(plan)

        self.context.append(
            HistoryEntry(
                action=plan.action,
                observation=next_observation.content,
                reasoning=plan.reasoning,
            )
        )
        self._observation = next_observation

        if next_observation.is_tool_error:
            logger.warning("Tool failure detected; feeding the error back to the planner")
            return self._emit(EventType.TOOL, ContentType.TOOL_ERROR, next_observation.content)
        return self._emit(EventType.TOOL, ContentType.OBSERVATION, next_observation.content)

    def _begin_cycle(self) -> RunEvent:
        self.state.cycle_count += 1
        cycle = self.state.cycle_count
        set_cycle(cycle)

        if cycle > self.max_cycles:
            logger.warning("Safety break: agent exceeded %d cycles. Halting.", self.max_cycles)
            self.state.terminate(TerminationReason.SAFETY_LIMIT)
            return self._emit(EventType.SYSTEM, ContentType.SAFETY_LIMIT, self.context.snapshot())

        self._cycle_open = True
        logger.info("Cycle %d start, agent has %d history steps", cycle, self.context.history_length)
        return self._emit(EventType.SYSTEM, ContentType.CYCLE_STARTED, self.context.snapshot())

    def _finish(self, plan: ActionPlan) -> RunEvent:
        if isinstance(plan.action, FinishAction):
            self.final_answer = plan.action.final_answer
        self.state.terminate(TerminationReason.FINISHED)
        logger.info("Research complete in %d cycles", self.state.cycle_count)
        return self._emit(EventType.SYSTEM, ContentType.FINISHED, self.final_answer)

    def _fail(self, msg: str, exc: Exception) -> RunEvent:
        log_exception(logger, msg, cycle=self.state.cycle_count)
        self.error = f"{type(exc).__name__}: {exc}"
        self.state.terminate(TerminationReason.FATAL)
        return self._emit(EventType.ERROR, ContentType.FATAL, self.error)

    def _emit(
        self,
        event_type: EventType,
        content_type: ContentType,
        data: str | dict | list | None = None,
    ) -> RunEvent:
        self._seq += 1
        ev = RunEvent(
            run_id=self.run_id,
            seq=self._seq,
            event_type=event_type,
            content_type=content_type,
            data=data,
            metadata=self.state.snapshot(),
        )
        if self.recorder is not None:
            self.recorder.append(ev)
        return ev


def build_tools(settings: Settings, *, offline: bool = False) -> tuple[SearchTool, ScrapeTool]:
    """Create the search and scrape collaborators.

    Raises:
        ConfigError: If a configured provider lacks its credentials.
    """

    if offline:
        return MockSearchTool(), MockScrapeTool(snippet_chars=settings.scrape_snippet_chars)

    if settings.search_provider == "mock":
        search_tool: SearchTool = MockSearchTool()
    else:
        search_tool = WebSearchTool(
            get_search_provider(settings), max_results=settings.search_max_results
        )
    scrape_tool = WebScrapeTool(PageFetcher(settings), snippet_chars=settings.scrape_snippet_chars)
    return search_tool, scrape_tool


def build_planner(settings: Settings, *, offline: bool = False) -> Planner:
    """Create the planner.

    Raises:
        ConfigError: If the LLM planner is selected without an API key.
    """

    if offline or settings.planner == "mock":
        return MockPlanner()
    return LLMPlanner(LLMClient(settings), max_retries=settings.plan_max_retries)


def build_loop(
    goal: str,
    settings: Settings,
    *,
    offline: bool = False,
    max_cycles: int | None = None,
) -> AgentLoop:
    """Wire a loop from settings. Configuration errors surface here, before any cycle runs."""

    search_tool, scrape_tool = build_tools(settings, offline=offline)
    planner = build_planner(settings, offline=offline)
    run_id = new_run_id()
    recorder = FileEventRecorder.for_run(settings.artifacts_dir, run_id) if settings.record_events else None
    return AgentLoop(
        goal=goal,
        planner=planner,
        dispatcher=Dispatcher(search_tool, scrape_tool),
        max_cycles=max_cycles or settings.max_cycles,
        run_id=run_id,
        recorder=recorder,
    )


def run_agent(
    goal: str,
    settings: Settings,
    *,
    offline: bool = False,
    max_cycles: int | None = None,
) -> RunResult:
    """Synchronous convenience wrapper around :meth:`AgentLoop.run`."""

    loop = build_loop(goal, settings, offline=offline, max_cycles=max_cycles)
    return asyncio.run(loop.run())
