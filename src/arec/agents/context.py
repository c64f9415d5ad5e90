"""Agent memory: the goal and the chronological history of completed cycles."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from arec.agents.actions import AgentAction, render_action


class HistoryEntry(BaseModel):
    """A completed cycle: the action taken and what it produced."""

    model_config = ConfigDict(frozen=True)

    action: AgentAction
    observation: str
    reasoning: str = ""

    @property
    def action_repr(self) -> str:
        return render_action(self.action)


class AgentContext:
    """Goal plus append-only history.

    The history is replayed to the planner in insertion order, so entries are never
    removed or reordered. Only the loop controller calls :meth:`append`.
    """

    def __init__(self, goal: str) -> None:
        if not goal.strip():
            raise ValueError("goal must be non-empty")
        self._goal = goal
        self._history: list[HistoryEntry] = []

    @property
    def goal(self) -> str:
        return self._goal

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._history)

    @property
    def history_length(self) -> int:
        return len(self._history)

    def __len__(self) -> int:
        return len(self._history)

    def append(self, entry: HistoryEntry) -> None:
        """Record a completed cycle."""

        self._history.append(entry)

    def snapshot(self) -> dict[str, str | int]:
        return {"goal": self._goal, "history_length": len(self._history)}

    def transcript(self) -> list[dict[str, str]]:
        """History as plain dicts, oldest first."""

        return [
            {
                "action": e.action_repr,
                "reasoning": e.reasoning,
                "observation": e.observation,
            }
            for e in self._history
        ]
