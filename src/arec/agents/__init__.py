"""Agents."""

from __future__ import annotations

from arec.agents.actions import (
    ActionPlan,
    AgentAction,
    FinishAction,
    ScrapeAction,
    SearchAction,
    render_action,
)
from arec.agents.context import AgentContext, HistoryEntry
from arec.agents.dispatcher import Dispatcher
from arec.agents.planner import LLMPlanner, MockPlanner, Planner

__all__ = [
    "ActionPlan",
    "AgentAction",
    "AgentContext",
    "Dispatcher",
    "FinishAction",
    "HistoryEntry",
    "LLMPlanner",
    "MockPlanner",
    "Planner",
    "ScrapeAction",
    "SearchAction",
    "render_action",
]
