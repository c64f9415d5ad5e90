"""File-based event recorder.

Each run writes its events to ``<artifacts_dir>/run_<run_id>/events.jsonl``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from arec.events import RunEvent


def run_events_path(artifacts_dir: Path, run_id: str) -> Path:
    return artifacts_dir / f"run_{run_id}" / "events.jsonl"


@dataclass
class FileEventRecorder:
    """Append-only JSONL recorder for a single run."""

    path: Path

    def __post_init__(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def for_run(cls, artifacts_dir: Path, run_id: str) -> FileEventRecorder:
        return cls(run_events_path(artifacts_dir, run_id))

    def append(self, event: RunEvent) -> None:
        with self.path.open("a", encoding="utf-8") as f:
            f.write(event.model_dump_json() + "\n")


def iter_events(path: Path) -> Iterator[RunEvent]:
    """Yield the events stored in a JSONL file, oldest first.

    A missing file yields nothing.
    """

    if not path.exists():
        return
    with path.open(encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                yield RunEvent.model_validate_json(line)
