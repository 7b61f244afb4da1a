"""Unit tests for run_encode() interrupt and failure handling."""

import asyncio
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ffsup.cli.encode import run_encode
from ffsup.domain import EncodeRequest, RunResult, RunStatus
from ffsup.executor import ProcessSupervisor
from ffsup.jobs import NullProgressReporter


class FakeSupervisor:
    """Supervisor whose start() blocks until cancel() is awaited."""

    def __init__(self, fail=False):
        self._stop = asyncio.Event()
        self.cancelled = False
        self.fail = fail
        self.discarded = 0

    def set_reporters(self, progress=None, error=None, line=None):
        pass

    async def start(self, request):
        await self._stop.wait()
        if self.cancelled:
            return RunResult(RunStatus.CANCELLED, -9, request.output)
        if self.fail:
            return RunResult(RunStatus.FAILED, 1, request.output)
        return RunResult(RunStatus.COMPLETED, 0, request.output)

    async def cancel(self):
        self.cancelled = True
        self._stop.set()

    async def discard_output(self):
        self.discarded += 1
        return True


@pytest.fixture
def request_obj():
    return EncodeRequest(inputs=(Path("a.mkv"),), output=Path("b.mkv"))


@pytest.mark.asyncio
class TestRunEncode:
    """Tests for run_encode()."""

    async def test_interrupt_cancels_supervisor(self, request_obj):
        supervisor = FakeSupervisor()
        reporter = MagicMock()

        task = asyncio.create_task(run_encode(supervisor, request_obj, reporter))
        await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert supervisor.cancelled
        result = reporter.on_complete.call_args.args[0]
        assert result.status is RunStatus.CANCELLED

    async def test_normal_completion(self, request_obj):
        supervisor = FakeSupervisor()
        reporter = MagicMock()

        task = asyncio.create_task(run_encode(supervisor, request_obj, reporter))
        await asyncio.sleep(0.01)
        supervisor._stop.set()

        result = await task

        assert result.status is RunStatus.COMPLETED
        assert supervisor.discarded == 0
        reporter.on_start.assert_called_once_with(request_obj)
        reporter.on_complete.assert_called_once_with(result)

    async def test_failed_run_discards_output(self, request_obj):
        """A failed encode does not leave its partial output behind."""
        supervisor = FakeSupervisor(fail=True)
        reporter = MagicMock()
        supervisor._stop.set()

        result = await run_encode(supervisor, request_obj, reporter)

        assert result.status is RunStatus.FAILED
        assert supervisor.discarded == 1
        reporter.on_complete.assert_called_once_with(result)


@pytest.mark.asyncio
@pytest.mark.skipif(
    sys.platform == "win32", reason="fake ffmpeg wrapper relies on exec"
)
class TestRunEncodeWithProcess:
    """run_encode() against the fake ffmpeg script."""

    async def test_failed_encode_leaves_no_output(
        self, fake_ffmpeg, temp_dir, monkeypatch
    ):
        monkeypatch.setenv(
            "FAKE_FFMPEG_LINES",
            "  Duration: 00:10:00.00, start: 0.000000|Conversion failed!",
        )
        monkeypatch.setenv("FAKE_FFMPEG_EXIT", "1")
        request = EncodeRequest(
            inputs=(temp_dir / "in.mkv",), output=temp_dir / "out.mkv"
        )
        supervisor = ProcessSupervisor(
            fake_ffmpeg, cleanup_attempts=3, cleanup_delay=0.01
        )

        result = await run_encode(supervisor, request, NullProgressReporter())

        assert result.status is RunStatus.FAILED
        assert not request.output.exists()
