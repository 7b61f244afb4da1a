"""Progress reporting for supervised ffmpeg runs.

ProcessSupervisor exposes plain callables for progress, errors and raw
lines. A ProgressReporter bundles those callables with start/complete
hooks so a caller can plug in one object per display context:

- CLI: stderr status line
- Tests, JSON output: null/silent reporter
"""

from __future__ import annotations

import logging
import sys
import threading
from typing import TYPE_CHECKING, Protocol, TextIO

from ffsup.tools.ffmpeg_progress import FFmpegProgress, parse_stderr_progress

if TYPE_CHECKING:
    from ffsup.domain import EncodeRequest, ProgressEvent, RunResult
    from ffsup.executor.supervisor import ProcessSupervisor

logger = logging.getLogger(__name__)


class ProgressReporter(Protocol):
    """Protocol for reporting the progress of one encode run."""

    def on_start(self, request: EncodeRequest) -> None:
        """Signal that a run is about to start.

        Args:
            request: The request being encoded.
        """
        ...

    def on_progress(self, event: ProgressEvent) -> None:
        """Update progress from a parsed status line.

        Args:
            event: Progress derived from ffmpeg output.
        """
        ...

    def on_line(self, line: str) -> None:
        """Observe a raw ffmpeg output line.

        Args:
            line: One output line without its terminator.
        """
        ...

    def on_error(self, message: str) -> None:
        """Report a user-facing error message.

        Args:
            message: Error text suitable for display.
        """
        ...

    def on_complete(self, result: RunResult) -> None:
        """Signal that the run has ended.

        Args:
            result: How the run ended.
        """
        ...


def attach_reporter(supervisor: ProcessSupervisor, reporter: ProgressReporter) -> None:
    """Route a supervisor's sinks to a reporter."""
    supervisor.set_reporters(
        progress=reporter.on_progress,
        error=reporter.on_error,
        line=reporter.on_line,
    )


class StderrProgressReporter:
    """Progress reporter that writes to stderr with in-place updates.

    The status line shows the percentage from ProgressEvent plus fps and
    speed taken from the most recent raw status line.
    """

    def __init__(self, enabled: bool = True, stream: TextIO | None = None) -> None:
        """Initialize stderr progress reporter.

        Args:
            enabled: If False, suppresses output (for JSON mode or tests).
            stream: Output stream. None uses sys.stderr at write time.
        """
        self.enabled = enabled
        self._stream = stream
        self.percent = 0.0
        self.stats = FFmpegProgress()
        self.errors: list[str] = []
        self._lock = threading.Lock()

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def on_start(self, request: EncodeRequest) -> None:
        """Reset counters for a new run."""
        with self._lock:
            self.percent = 0.0
            self.stats = FFmpegProgress()
            self.errors = []
        if self.enabled:
            self.stream.write(f"Encoding {request.output}\n")
            self.stream.flush()

    def on_progress(self, event: ProgressEvent) -> None:
        """Redraw the status line."""
        with self._lock:
            self.percent = event.percent
        self._update_display()

    def on_line(self, line: str) -> None:
        """Pick up fps and speed from ffmpeg status lines."""
        stats = parse_stderr_progress(line)
        if stats is None:
            return
        with self._lock:
            self.stats = stats

    def on_error(self, message: str) -> None:
        """Print the error on its own line."""
        with self._lock:
            self.errors.append(message)
        if self.enabled:
            self.stream.write(f"\nError: {message}\n")
            self.stream.flush()

    def on_complete(self, result: RunResult) -> None:
        """Finish the status line with the run outcome."""
        if self.enabled:
            self.stream.write(f"\n{result.status.value.capitalize()}: {result.output_path}\n")
            self.stream.flush()

    def _update_display(self) -> None:
        if not self.enabled:
            return

        with self._lock:
            percent = self.percent
            stats = self.stats

        msg = f"\rProgress: {percent:5.1f}%"
        if stats.frame is not None:
            msg += f" frame={stats.frame}"
        if stats.fps is not None:
            msg += f" fps={stats.fps:g}"
        if stats.speed is not None:
            msg += f" speed={stats.speed}"
        self.stream.write(msg)
        self.stream.flush()


class NullProgressReporter:
    """No-op progress reporter for dry-run mode or tests."""

    def on_start(self, request: EncodeRequest) -> None:
        """No-op."""
        pass

    def on_progress(self, event: ProgressEvent) -> None:
        """No-op."""
        pass

    def on_line(self, line: str) -> None:
        """No-op."""
        pass

    def on_error(self, message: str) -> None:
        """No-op."""
        pass

    def on_complete(self, result: RunResult) -> None:
        """No-op."""
        pass
