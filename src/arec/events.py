"""Event model used for streaming output and run inspection.

A run produces a sequence of events: one per state change of the loop. They can be
streamed to API clients and, when enabled, written to ``events.jsonl``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """High-level event categories."""

    SYSTEM = "system"
    TOOL = "tool"
    LLM = "llm"
    ERROR = "error"


class ContentType(str, Enum):
    """Semantic types within event streams."""

    RUN_STARTED = "run_started"
    CYCLE_STARTED = "cycle_started"
    PLAN = "plan"
    OBSERVATION = "observation"
    TOOL_ERROR = "tool_error"
    FINISHED = "finished"
    SAFETY_LIMIT = "safety_limit"
    FATAL = "fatal"


class RunEvent(BaseModel):
    """A single event in a run."""

    run_id: str
    seq: int = Field(ge=1)
    ts: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    event_type: EventType
    content_type: ContentType

    data: str | dict | list | None = None
    metadata: dict[str, str | int | float | bool | None] = Field(default_factory=dict)
