from __future__ import annotations

from arec.prompts.planner import PLANNER_CORRECTION_PROMPT, PLANNER_SYSTEM_PROMPT

__all__ = [
    "PLANNER_SYSTEM_PROMPT",
    "PLANNER_CORRECTION_PROMPT",
]
