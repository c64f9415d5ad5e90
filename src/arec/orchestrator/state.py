from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LoopStatus(str, Enum):
    RUNNING = "running"
    TERMINATED = "terminated"


class TerminationReason(str, Enum):
    FINISHED = "finished"
    SAFETY_LIMIT = "safety_limit"
    FATAL = "fatal"


@dataclass
class LoopState:
    """Loop controller state: running until one terminal transition, then frozen."""

    status: LoopStatus = LoopStatus.RUNNING
    reason: TerminationReason | None = None
    cycle_count: int = 0

    @property
    def is_running(self) -> bool:
        return self.status is LoopStatus.RUNNING

    def terminate(self, reason: TerminationReason) -> None:
        if not self.is_running:
            raise RuntimeError(f"loop already terminated ({self.reason.value})")
        self.status = LoopStatus.TERMINATED
        self.reason = reason

    def snapshot(self) -> dict[str, str | int | None]:
        return {
            "status": self.status.value,
            "reason": self.reason.value if self.reason is not None else None,
            "cycle_count": self.cycle_count,
        }
