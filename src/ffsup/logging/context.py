"""Run context for structured logging.

Provides context propagation using contextvars so every log record
emitted while a supervised run is active carries its run id and output
path. Tasks created inside the context (the stream readers) inherit it.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_output_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "output_path", default=None
)


def set_run_context(run_id: str, output_path: Path | str | None = None) -> None:
    """Set the current run context.

    Args:
        run_id: Short identifier of the run (e.g., "3f9a1c2e").
        output_path: Output file of the run, or None.
    """
    _run_id.set(run_id)
    _output_path.set(str(output_path) if output_path is not None else None)


def clear_run_context() -> None:
    """Clear the current run context."""
    _run_id.set(None)
    _output_path.set(None)


@contextmanager
def run_context(
    run_id: str,
    output_path: Path | str | None = None,
) -> Generator[None, None, None]:
    """Context manager for a supervised run.

    Sets the run context on entry and restores the previous one on exit.

    Example:
        with run_context("3f9a1c2e", "/videos/out.mkv"):
            logger.info("Starting ffmpeg")  # record carries run_id
    """
    old_run_id = _run_id.get()
    old_output_path = _output_path.get()
    try:
        set_run_context(run_id, output_path)
        yield
    finally:
        _run_id.set(old_run_id)
        _output_path.set(old_output_path)


def get_run_context() -> tuple[str | None, str | None]:
    """Get current run context.

    Returns:
        Tuple of (run_id, output_path), either may be None.
    """
    return _run_id.get(), _output_path.get()


class RunContextFilter(logging.Filter):
    """Logging filter that injects run context into log records.

    Adds run_id and output_path attributes for the JSON format, and a
    compact run_tag like "[3f9a1c2e] " for the text format.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject run context into log record.

        Returns:
            Always True (does not filter, only enriches).
        """
        run_id, output_path = get_run_context()

        record.run_id = run_id
        record.output_path = output_path
        record.run_tag = f"[{run_id}] " if run_id else ""

        return True
