"""Observation model fed back into each reasoning step."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

TOOL_ERROR_PREFIX = "TOOL_ERROR:"


class Observation(BaseModel):
    """Normalized textual result of one cycle.

    Content starting with ``TOOL_ERROR:`` marks a tool failure that was recovered and is
    handed to the planner like any other observation.
    """

    model_config = ConfigDict(frozen=True)

    content: str

    @property
    def is_tool_error(self) -> bool:
        return self.content.startswith(TOOL_ERROR_PREFIX)

    @classmethod
    def tool_error(cls, tool: str, cause: BaseException | str) -> Observation:
        """Build the observation for a failed ``tool`` call."""

        return cls(content=f"{TOOL_ERROR_PREFIX} {tool} failed. Reason: {cause}")

    @classmethod
    def for_goal(cls, goal: str) -> Observation:
        """Seed observation for the first cycle of a run."""

        return cls(content=f"The user wants to find information on: {goal}")
