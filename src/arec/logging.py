"""Logging utilities."""

from __future__ import annotations

import contextlib
import contextvars
import logging
from typing import Any, Iterator

from rich.logging import RichHandler


_run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("arec_run_id", default="-")
_cycle_var: contextvars.ContextVar[str] = contextvars.ContextVar("arec_cycle", default="-")


class _RunContextFilter(logging.Filter):
    """Stamp run id and cycle number onto log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.run_id = _run_id_var.get()  # type: ignore[attr-defined]
        record.cycle = _cycle_var.get()  # type: ignore[attr-defined]
        return True


@contextlib.contextmanager
def run_context(*, run_id: str, cycle: str | None = None) -> Iterator[None]:
    """Bind the run id (and optionally a cycle label) for the duration of the block."""

    token_run = _run_id_var.set(run_id)
    token_cycle = _cycle_var.set(cycle or _cycle_var.get())
    try:
        yield
    finally:
        _run_id_var.reset(token_run)
        _cycle_var.reset(token_cycle)


def set_cycle(cycle: int | str) -> None:
    """Update the cycle label of the current run context."""

    _cycle_var.set(str(cycle))


def configure_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Args:
        level: Logging level name.
    """

    formatter = logging.Formatter(
        fmt="run=%(run_id)s cycle=%(cycle)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.setLevel(level)
    rich_handlers = [h for h in root.handlers if isinstance(h, RichHandler)]
    if not rich_handlers:
        handler = RichHandler(rich_tracebacks=True, show_time=True, show_level=True)
        root.addHandler(handler)
        rich_handlers = [handler]

    for h in rich_handlers:
        if not any(isinstance(f, _RunContextFilter) for f in h.filters):
            h.addFilter(_RunContextFilter())
        h.setFormatter(formatter)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""

    return logging.getLogger(name)


def log_exception(logger: logging.Logger, msg: str, **context: Any) -> None:
    """Log an exception with optional structured context."""

    if context:
        logger.exception("%s | context=%s", msg, context)
    else:
        logger.exception("%s", msg)
