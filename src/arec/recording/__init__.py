"""Recording utilities for run events."""

from __future__ import annotations

from arec.recording.file_recorder import FileEventRecorder, iter_events, run_events_path

__all__ = ["FileEventRecorder", "iter_events", "run_events_path"]
