"""Planner agents.

A planner looks at the goal, the full history and the latest observation and returns
exactly one :class:`ActionPlan`. Two implementations live here: a deterministic
rule-based stand-in and an LLM-backed planner.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Protocol

from arec.agents.actions import (
    ActionPlan,
    FinishAction,
    ScrapeAction,
    SearchAction,
    action_plan_schema,
)
from arec.agents.context import AgentContext
from arec.errors import PlanError
from arec.llm.client import ChatMessage, ChatModel
from arec.logging import get_logger
from arec.models.observation import Observation
from arec.prompts import PLANNER_CORRECTION_PROMPT, PLANNER_SYSTEM_PROMPT
from arec.utils.json_extract import extract_json_object

logger = get_logger(__name__)

FOUND_URL_MARKER = "Found URL: "
DEFAULT_COMPLETION_MARKERS: tuple[str, ...] = ("all the countries", "self-governing")


class Planner(Protocol):
    """Reasoning step of the loop."""

    async def plan(self, context: AgentContext, observation: Observation) -> ActionPlan:
        """Choose the next action.

        Raises:
            PlanError: If no valid plan could be produced.
        """


def extract_found_url(content: str) -> str | None:
    """Return the URL after the first ``Found URL:`` marker, up to the end of its line."""

    start = content.find(FOUND_URL_MARKER)
    if start == -1:
        return None
    rest = content[start + len(FOUND_URL_MARKER) :]
    url = rest.split("\n", 1)[0].strip()
    return url or None


@dataclass(frozen=True)
class MockPlanner:
    """Deterministic planner that follows fixed rules on the observation text.

    Same context and observation in, same plan out.
    """

    completion_markers: tuple[str, ...] = DEFAULT_COMPLETION_MARKERS

    async def plan(self, context: AgentContext, observation: Observation) -> ActionPlan:
        logger.info(
            "Mock planner analysing observation",
            extra={"history_length": context.history_length},
        )
        return self.decide(context, observation)

    def decide(self, context: AgentContext, observation: Observation) -> ActionPlan:
        content = observation.content

        if any(marker in content for marker in self.completion_markers):
            excerpt = " ".join(content.split())[:200]
            return ActionPlan(
                reasoning=(
                    "The latest observation contains the information the goal asks for, "
                    "so the research can be concluded."
                ),
                action=FinishAction.create(
                    f"Research for '{context.goal}' is complete. Supporting excerpt: {excerpt}"
                ),
            )

        url = extract_found_url(content)
        if url is not None:
            return ActionPlan(
                reasoning=(
                    f"The search returned a relevant URL ({url}). "
                    "The page must be scraped for detailed content."
                ),
                action=ScrapeAction.create(url),
            )

        if observation.is_tool_error:
            return ActionPlan(
                reasoning=(
                    "The previous tool call failed. Retrying with a broader search "
                    "to find another source."
                ),
                action=SearchAction.create(f"{context.goal} overview"),
            )

        return ActionPlan(
            reasoning=(
                f"Starting research for goal: {context.goal}. "
                "Beginning with a targeted search."
            ),
            action=SearchAction.create(context.goal),
        )


class LLMPlanner:
    """Planner that asks a chat model for the next action as JSON.

    A reply that does not parse into an :class:`ActionPlan` is answered with a
    corrective message up to ``max_retries`` times before :class:`PlanError` is raised.
    """

    def __init__(self, llm: ChatModel, *, max_retries: int = 1) -> None:
        self._llm = llm
        self._max_retries = max_retries

    async def plan(self, context: AgentContext, observation: Observation) -> ActionPlan:
        # The SDK call is blocking; keep the event loop free while it runs.
        return await asyncio.to_thread(self.plan_sync, context, observation)

    def plan_sync(self, context: AgentContext, observation: Observation) -> ActionPlan:
        """Blocking variant of :meth:`plan`."""

        messages = self.build_messages(context, observation)
        last_error: PlanError | None = None

        for attempt in range(self._max_retries + 1):
            raw = self._llm.complete(messages, temperature=0.0, json_mode=True)
            try:
                return self.parse_plan(raw)
            except PlanError as e:
                last_error = e
                logger.warning(
                    "Planner reply rejected",
                    extra={"attempt": attempt, "error": str(e), "raw": raw[:200]},
                )
                messages = [
                    *messages,
                    ChatMessage(role="assistant", content=raw),
                    ChatMessage(role="user", content=PLANNER_CORRECTION_PROMPT.format(error=e)),
                ]

        raise PlanError(
            f"No valid plan after {self._max_retries + 1} attempt(s): {last_error}"
        ) from last_error

    @staticmethod
    def build_messages(context: AgentContext, observation: Observation) -> list[ChatMessage]:
        """System prompt, then history as assistant/user turns, then the new observation."""

        schema = json.dumps(action_plan_schema(), ensure_ascii=False)
        messages = [
            ChatMessage(
                role="system",
                content=PLANNER_SYSTEM_PROMPT.format(goal=context.goal, schema=schema),
            )
        ]
        for entry in context.history:
            turn = {
                "reasoning": entry.reasoning or "...",
                "action": entry.action.model_dump(mode="json"),
            }
            messages.append(ChatMessage(role="assistant", content=json.dumps(turn, ensure_ascii=False)))
            messages.append(ChatMessage(role="user", content=f"Observation: {entry.observation}"))

        messages.append(ChatMessage(role="user", content=f"NEW OBSERVATION: {observation.content}"))
        return messages

    @staticmethod
    def parse_plan(raw: str) -> ActionPlan:
        """Parse a model reply.

        Raises:
            PlanError: If the reply holds no JSON object or the object is not a valid plan.
        """

        data = extract_json_object(raw)
        if data is None:
            raise PlanError("Reply does not contain a JSON object")
        return ActionPlan.from_payload(data)
