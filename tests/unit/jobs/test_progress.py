"""Unit tests for progress reporters."""

import io
from datetime import timedelta
from pathlib import Path
from unittest.mock import MagicMock

from ffsup.domain import (
    EncodeRequest,
    ErrorEvent,
    ErrorKind,
    ProgressEvent,
    RunResult,
    RunStatus,
)
from ffsup.jobs.progress import (
    NullProgressReporter,
    StderrProgressReporter,
    attach_reporter,
)

STATUS_LINE = (
    "frame= 7500 fps= 25 q=28.0 size=   40960kB time=00:05:00.00 "
    "bitrate=1118.5kbits/s speed=1.02x"
)


def _event(percent: float) -> ProgressEvent:
    return ProgressEvent(
        percent=percent,
        current_time=timedelta(minutes=5),
        total_duration=timedelta(minutes=10),
        frame=7500,
    )


class TestStderrProgressReporter:
    """Tests for StderrProgressReporter."""

    def test_progress_line_includes_stats(self):
        stream = io.StringIO()
        reporter = StderrProgressReporter(stream=stream)

        reporter.on_line(STATUS_LINE)
        reporter.on_progress(_event(50.0))

        output = stream.getvalue()
        assert "\rProgress:  50.0%" in output
        assert "frame=7500" in output
        assert "fps=25" in output
        assert "speed=1.02x" in output

    def test_non_status_lines_ignored(self):
        reporter = StderrProgressReporter(stream=io.StringIO())
        reporter.on_line("Press [q] to stop")
        assert reporter.stats.frame is None

    def test_errors_recorded(self):
        stream = io.StringIO()
        reporter = StderrProgressReporter(stream=stream)

        reporter.on_error("Process failed.\nError message: disk full")

        assert reporter.errors == ["Process failed.\nError message: disk full"]
        assert "Error: Process failed." in stream.getvalue()

    def test_start_resets_and_complete_prints_status(self):
        stream = io.StringIO()
        reporter = StderrProgressReporter(stream=stream)
        reporter.on_progress(_event(80.0))
        request = EncodeRequest(inputs=(Path("a.mkv"),), output=Path("b.mkv"))

        reporter.on_start(request)
        reporter.on_complete(RunResult(RunStatus.COMPLETED, 0, Path("b.mkv")))

        assert reporter.percent == 0.0
        output = stream.getvalue()
        assert "Encoding b.mkv" in output
        assert output.endswith("Completed: b.mkv\n")

    def test_disabled_writes_nothing(self):
        stream = io.StringIO()
        reporter = StderrProgressReporter(enabled=False, stream=stream)

        reporter.on_start(EncodeRequest(inputs=(Path("a.mkv"),), output=Path("b.mkv")))
        reporter.on_progress(_event(10.0))
        reporter.on_error("boom")
        reporter.on_complete(
            RunResult(
                RunStatus.FAILED,
                1,
                Path("b.mkv"),
                errors=(ErrorEvent(ErrorKind.NON_ZERO_EXIT, "boom"),),
            )
        )

        assert stream.getvalue() == ""
        assert reporter.percent == 10.0


class TestAttachReporter:
    """Tests for attach_reporter()."""

    def test_routes_sinks(self):
        supervisor = MagicMock()
        reporter = NullProgressReporter()

        attach_reporter(supervisor, reporter)

        supervisor.set_reporters.assert_called_once_with(
            progress=reporter.on_progress,
            error=reporter.on_error,
            line=reporter.on_line,
        )
