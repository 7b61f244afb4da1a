"""Supervision of a single ffmpeg process.

ProcessSupervisor owns at most one running ffmpeg at a time. It launches
the process, reads stdout and stderr concurrently, feeds every line to a
ProgressParser and forwards the resulting events to caller-registered
sinks. While the process runs, callers can pause, resume or cancel it.

State machine:

    IDLE -> RUNNING <-> PAUSED -> IDLE

Each run ends as COMPLETED, FAILED or CANCELLED in its RunResult; the
supervisor itself always returns to IDLE and can be reused.

Sinks are called on the event loop thread, in line order per stream. A
sink that raises is logged and otherwise ignored.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import platform
import subprocess  # nosec B404 - subprocess is required to open the file manager
import uuid
from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any

from ffsup.core.exceptions import SupervisorBusyError
from ffsup.core.file_utils import (
    DEFAULT_CLEANUP_ATTEMPTS,
    DEFAULT_CLEANUP_DELAY,
    remove_output,
)
from ffsup.domain import (
    EncodeRequest,
    ErrorEvent,
    ErrorKind,
    ProgressEvent,
    RunResult,
    RunStatus,
    SupervisorState,
)
from ffsup.executor.interface import require_tool
from ffsup.executor.suspension import ThreadSuspender, get_thread_suspender
from ffsup.logging.context import run_context
from ffsup.tools.encoders import build_encode_command, format_command
from ffsup.tools.ffmpeg_progress import ProgressParser

logger = logging.getLogger(__name__)

ProgressSink = Callable[[ProgressEvent], None]
ErrorSink = Callable[[str], None]
LineWatcher = Callable[[str], None]

# Bytes read per chunk from the child's pipes
READ_CHUNK_SIZE = 64 * 1024


def _ignore(_: Any) -> None:
    return None


async def read_lines(stream: asyncio.StreamReader) -> AsyncIterator[str]:
    """Yield decoded lines from a stream, splitting on CR or LF.

    ffmpeg redraws its status line with a bare carriage return, so
    readline() alone would hold every update until the run finished.

    Args:
        stream: Pipe to read until EOF.

    Yields:
        Lines without their terminators. Empty segments are skipped.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buffer = ""
    while True:
        chunk = await stream.read(READ_CHUNK_SIZE)
        # A multi-byte character may straddle two reads
        buffer += decoder.decode(chunk, final=not chunk)
        buffer = buffer.replace("\r\n", "\n").replace("\r", "\n")
        *lines, buffer = buffer.split("\n")
        for line in lines:
            if line:
                yield line
        if not chunk:
            break
    if buffer:
        yield buffer


class ProcessSupervisor:
    """Runs one ffmpeg process at a time with pause/resume/cancel control.

    Usage:
        supervisor = ProcessSupervisor()
        supervisor.set_reporters(progress=show_progress, error=show_error)
        result = await supervisor.start(request)
        # from elsewhere, while start() is pending:
        supervisor.pause()
        supervisor.resume()
        await supervisor.cancel()
    """

    def __init__(
        self,
        ffmpeg_path: Path | None = None,
        *,
        suspender: ThreadSuspender | None = None,
        cleanup_attempts: int = DEFAULT_CLEANUP_ATTEMPTS,
        cleanup_delay: float = DEFAULT_CLEANUP_DELAY,
    ) -> None:
        """Initialize the supervisor.

        Args:
            ffmpeg_path: Path to ffmpeg. None resolves it on first start().
            suspender: Pause primitive. None picks one for the platform.
            cleanup_attempts: Output deletion attempts in discard_output().
            cleanup_delay: Seconds between deletion attempts.
        """
        self._tool_path = ffmpeg_path
        self._suspender = suspender if suspender is not None else get_thread_suspender()
        self._cleanup_attempts = cleanup_attempts
        self._cleanup_delay = cleanup_delay

        self._process: asyncio.subprocess.Process | None = None
        self._parser = ProgressParser()
        self._has_been_killed = False
        self._paused = False
        self._output_file: Path | None = None
        self._errors: list[ErrorEvent] = []

        self._progress_sink: ProgressSink = _ignore
        self._error_sink: ErrorSink = _ignore
        self._line_watcher: LineWatcher = _ignore

    @classmethod
    def from_config(cls, config: Any = None, **kwargs: Any) -> ProcessSupervisor:
        """Build a supervisor from the loaded configuration.

        Args:
            config: FFsupConfig to use. None loads the default configuration.
            **kwargs: Passed through to the constructor.

        Returns:
            Configured ProcessSupervisor.
        """
        if config is None:
            from ffsup.config import get_config

            config = get_config()
        kwargs.setdefault("cleanup_attempts", config.supervisor.cleanup_attempts)
        kwargs.setdefault("cleanup_delay", config.supervisor.cleanup_delay_seconds)
        return cls(config.tools.ffmpeg, **kwargs)

    @property
    def tool_path(self) -> Path:
        """Get path to ffmpeg, verifying availability.

        Raises:
            ToolNotFoundError: If ffmpeg is not available.
        """
        if self._tool_path is None or not self._tool_path.is_file():
            self._tool_path = require_tool("ffmpeg", self._tool_path)
        return self._tool_path

    @property
    def state(self) -> SupervisorState:
        """Current lifecycle state."""
        if self._process is None:
            return SupervisorState.IDLE
        if self._paused:
            return SupervisorState.PAUSED
        return SupervisorState.RUNNING

    @property
    def is_running(self) -> bool:
        """True while a process is active (running or paused)."""
        return self._process is not None

    @property
    def output_file(self) -> Path | None:
        """Output path of the current or most recent run."""
        return self._output_file

    def set_reporters(
        self,
        progress: ProgressSink | None = None,
        error: ErrorSink | None = None,
        line: LineWatcher | None = None,
    ) -> None:
        """Register the sinks that receive run events.

        Args:
            progress: Called with each ProgressEvent.
            error: Called with the message of each error.
            line: Called with every raw output line.
        """
        self._progress_sink = progress or _ignore
        self._error_sink = error or _ignore
        self._line_watcher = line or _ignore

    async def start(self, request: EncodeRequest) -> RunResult:
        """Launch ffmpeg for a request and wait for it to exit.

        Args:
            request: What to encode and how.

        Returns:
            RunResult describing how the run ended.

        Raises:
            SupervisorBusyError: If a process is already active.
            InvalidPresetIndexError: If the request's preset is invalid.
            ToolNotFoundError: If ffmpeg cannot be located.
            OSError: If the process cannot be launched.
        """
        if self._process is not None:
            raise SupervisorBusyError(
                f"A process is already running (pid {self._process.pid})"
            )

        cmd = build_encode_command(request, self.tool_path)

        self._output_file = request.output
        self._parser.reset()
        self._errors = []
        self._has_been_killed = False
        self._paused = False

        with run_context(uuid.uuid4().hex[:8], request.output):
            logger.info("Starting ffmpeg: %s", format_command(cmd))
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            self._process = process
            logger.debug("ffmpeg started with pid %d", process.pid)

            try:
                assert process.stdout is not None
                assert process.stderr is not None
                await asyncio.gather(
                    self._consume(process.stdout),
                    self._consume(process.stderr),
                )
                return_code = await process.wait()
            except asyncio.CancelledError:
                logger.warning("Run interrupted; killing ffmpeg (pid %d)", process.pid)
                self._has_been_killed = True
                await self._terminate(process)
                raise
            finally:
                if self._process is process:
                    self._process = None
                self._paused = False

            return self._finish(request, return_code)

    def pause(self) -> None:
        """Freeze the running process. No-op if idle or already exited."""
        process = self._process
        if process is None or process.returncode is not None:
            return
        # An exited but not yet reaped process cannot be frozen
        if not self._suspender.suspend(process.pid):
            logger.debug("ffmpeg (pid %d) could not be paused", process.pid)
            return
        self._paused = True
        logger.info("Paused ffmpeg (pid %d)", process.pid)

    def resume(self) -> None:
        """Thaw a paused process. No-op if idle or already exited."""
        process = self._process
        if process is None or process.returncode is not None:
            return
        self._suspender.resume(process.pid)
        self._paused = False
        logger.info("Resumed ffmpeg (pid %d)", process.pid)

    async def cancel(self) -> None:
        """Kill the running process and delete its partial output.

        No-op if no process is active. Works on paused processes too.
        Output deletion is retried; if every attempt fails the failure is
        logged and sent to the error sink, and the file is left on disk.
        """
        process = self._process
        if process is None:
            return

        logger.info("Cancelling ffmpeg (pid %d)", process.pid)
        # Lines still in flight after the kill must not be reported
        self._has_been_killed = True
        await self._terminate(process)
        if self._process is process:
            self._process = None
        self._paused = False

        await self.discard_output()

    async def discard_output(self) -> bool:
        """Delete the output of the most recent run.

        Used after cancel() and after a failed run, when whatever ffmpeg
        wrote is incomplete.

        Returns:
            True if the output is gone (or there was none). False if every
            deletion attempt failed; the failure is also sent to the error
            sink as CLEANUP_INCOMPLETE.

        Raises:
            SupervisorBusyError: If a process is still active.
        """
        if self._process is not None:
            raise SupervisorBusyError(
                "Cannot discard output while ffmpeg is running "
                f"(pid {self._process.pid})"
            )
        output = self._output_file
        if output is None:
            return True
        removed = await remove_output(
            output, attempts=self._cleanup_attempts, delay=self._cleanup_delay
        )
        if not removed:
            logger.warning(
                "Could not remove partial output %s after %d attempts",
                output,
                self._cleanup_attempts,
            )
            self._report_error(
                ErrorEvent(
                    kind=ErrorKind.CLEANUP_INCOMPLETE,
                    message=f"Could not delete partial output: {output}",
                )
            )
        return removed

    def view_output(self) -> bool:
        """Reveal the output in the platform's file manager.

        Returns:
            True if the file manager was launched.
        """
        output = self._output_file
        if output is None:
            return False

        system = platform.system()
        if system == "Windows":
            cmd = ["explorer", "/e,", "/select,", str(output)]
        elif system == "Darwin":
            cmd = ["open", "-R", str(output)]
        else:
            target = output if output.is_dir() else output.parent
            cmd = ["xdg-open", str(target)]

        try:
            subprocess.Popen(cmd)  # nosec B603 - fixed command with output path
        except OSError as e:
            logger.warning("Could not open file manager for %s: %s", output, e)
            return False
        return True

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        """Kill a process and wait until the OS confirms it exited."""
        try:
            process.kill()
        except ProcessLookupError:
            logger.debug("ffmpeg (pid %d) already exited", process.pid)
        await process.wait()

    async def _consume(self, stream: asyncio.StreamReader) -> None:
        async for line in read_lines(stream):
            self._handle_line(line)

    def _handle_line(self, line: str) -> None:
        """Route one output line through the parser to the sinks."""
        if self._has_been_killed or not line.strip():
            return
        logger.debug("ffmpeg: %s", line)
        self._notify(self._line_watcher, line)

        event = self._parser.feed(line)
        if event is None:
            return
        if isinstance(event, ErrorEvent):
            self._report_error(event)
        else:
            self._notify(self._progress_sink, event)

    def _report_error(self, event: ErrorEvent) -> None:
        self._errors.append(event)
        if event.pauses_process:
            self.pause()
        logger.error("ffmpeg error (%s): %s", event.kind.value, event.message)
        self._notify(self._error_sink, event.message)

    def _notify(self, sink: Callable[[Any], None], value: Any) -> None:
        try:
            sink(value)
        except Exception as e:
            logger.warning("Reporter callback error: %s", e)

    def _finish(self, request: EncodeRequest, return_code: int) -> RunResult:
        """Classify a finished run."""
        if self._has_been_killed:
            status = RunStatus.CANCELLED
        elif return_code == 0:
            status = RunStatus.COMPLETED
        else:
            status = RunStatus.FAILED
            if not self._errors:
                self._report_error(
                    ErrorEvent(
                        kind=ErrorKind.NON_ZERO_EXIT,
                        message=f"Process failed with exit code {return_code}.",
                    )
                )

        logger.info("ffmpeg finished: %s (exit code %d)", status.value, return_code)
        return RunResult(
            status=status,
            return_code=return_code,
            output_path=request.output,
            errors=tuple(self._errors),
        )
