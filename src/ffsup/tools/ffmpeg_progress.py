"""FFmpeg progress parsing utilities.

FFmpeg has no structured progress channel on stderr; it prints a banner
containing the input duration, then a status line per update:

    Duration: 00:10:00.00, start: 0.000000, bitrate: 5000 kb/s
    frame= 1234 fps= 30 q=28.0 size= 1024kB time=00:00:41.13 bitrate=...

ProgressParser turns those lines into ProgressEvent/ErrorEvent values.
parse_stderr_progress extracts the secondary fields (fps, bitrate,
speed) for display.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from ffsup.domain import ErrorEvent, ErrorKind, ProgressEvent

logger = logging.getLogger(__name__)

PROGRESS_MAX = 100.0

# Trailing markers ffmpeg prints when the destination runs out of space
NO_SPACE_MARKERS = ("No space left on device", "I/O error")
NO_SUCH_FILE_MARKER = ": No such file or directory"

FILE_NAME_TOO_LONG_MESSAGE = (
    "The source file name is too long. Shorten it to get the total number "
    "of characters in the destination directory lower than 256.\n\n"
    "Destination directory: "
)

_TIMESTAMP = r"(\d{2}):(\d{2}):(\d{2})\.(\d{2})"
DURATION_PATTERN = re.compile(r"\s*Duration:\s" + _TIMESTAMP)
FRAME_PATTERN = re.compile(r"^frame=\s*(\d+)\s.*?time=" + _TIMESTAMP)


def parse_timestamp(hours: str, minutes: str, seconds: str, centis: str) -> timedelta:
    """Convert the HH, MM, SS and ff groups of an ffmpeg timestamp."""
    return timedelta(
        hours=int(hours),
        minutes=int(minutes),
        seconds=int(seconds),
        milliseconds=int(centis) * 10,
    )


def compute_percent(current: timedelta, duration: timedelta) -> float:
    """Compute progress percentage, clamped to 0..100.

    Container metadata can under-report the duration, so elapsed time may
    run past it; the result never exceeds 100.

    Args:
        current: Elapsed output time.
        duration: Total input duration.

    Returns:
        Progress percentage, or 0.0 if the duration is zero.
    """
    if duration <= timedelta(0):
        return 0.0
    percent = current / duration * PROGRESS_MAX
    return max(0.0, min(PROGRESS_MAX, percent))


class ParserPhase(Enum):
    """Phase of a ProgressParser."""

    AWAITING_DURATION = "awaiting_duration"
    STREAMING = "streaming"


class ProgressParser:
    """Line-at-a-time parser for one ffmpeg run.

    Emits at most one event per line. Error signatures are checked first
    regardless of phase. Progress lines are ignored until a Duration
    header has been seen. Malformed lines are dropped, never raised.

    Example:
        parser = ProgressParser()
        for line in lines:
            event = parser.feed(line)
            if isinstance(event, ProgressEvent):
                print(event.percent)
    """

    def __init__(self) -> None:
        self._duration: timedelta | None = None

    @property
    def duration(self) -> timedelta | None:
        """Total duration of the input, once reported."""
        return self._duration

    @property
    def phase(self) -> ParserPhase:
        """Current parser phase."""
        if self._duration is None:
            return ParserPhase.AWAITING_DURATION
        return ParserPhase.STREAMING

    def reset(self) -> None:
        """Forget the duration so the parser can be used for a new run."""
        self._duration = None

    def feed(self, line: str) -> ProgressEvent | ErrorEvent | None:
        """Parse one line of ffmpeg output.

        Args:
            line: A single output line, with or without its terminator.

        Returns:
            A ProgressEvent, an ErrorEvent, or None if the line carries
            nothing of interest.
        """
        line = line.rstrip("\r\n")
        if not line.strip():
            return None

        error = self._check_errors(line)
        if error is not None:
            return error

        if self._duration is None:
            match = DURATION_PATTERN.match(line)
            if match:
                self._duration = parse_timestamp(*match.groups())
                logger.debug("Input duration: %s", self._duration)
            return None

        if not line.startswith("frame"):
            return None

        match = FRAME_PATTERN.match(line)
        if not match:
            return None

        frame = int(match.group(1))
        current = parse_timestamp(*match.groups()[1:])
        return ProgressEvent(
            percent=compute_percent(current, self._duration),
            current_time=current,
            total_duration=self._duration,
            frame=frame,
        )

    @staticmethod
    def _check_errors(line: str) -> ErrorEvent | None:
        if line.endswith(NO_SPACE_MARKERS):
            return ErrorEvent(
                kind=ErrorKind.NO_SPACE_LEFT,
                message=f"Process failed.\nError message: {line}",
            )
        if line.endswith(NO_SUCH_FILE_MARKER):
            path = line[: -len(NO_SUCH_FILE_MARKER)]
            return ErrorEvent(
                kind=ErrorKind.PATH_TOO_LONG,
                message=FILE_NAME_TOO_LONG_MESSAGE + path,
            )
        return None


@dataclass
class FFmpegProgress:
    """Secondary fields of an ffmpeg status line."""

    frame: int | None = None
    fps: float | None = None
    bitrate: str | None = None
    out_time_us: int | None = None  # Output time in microseconds
    speed: str | None = None

    @property
    def out_time_seconds(self) -> float | None:
        """Get output time in seconds."""
        if self.out_time_us is not None:
            return self.out_time_us / 1_000_000
        return None


# Regex patterns for the key=value fields of a status line
PROGRESS_PATTERNS = {
    "frame": re.compile(r"frame=\s*(\d+)"),
    "fps": re.compile(r"fps=\s*([\d.]+)"),
    "bitrate": re.compile(r"bitrate=\s*([^\s]+)"),
    "speed": re.compile(r"speed=\s*([^\s]+)"),
}

_TIME_PATTERN = re.compile(r"time=" + _TIMESTAMP)


def _convert_progress_value(key: str, value: str) -> int | float | str | None:
    """Convert a progress value to the appropriate type.

    Args:
        key: The field name.
        value: The string value to convert.

    Returns:
        Converted value or None.
    """
    if key == "frame":
        try:
            return int(value)
        except ValueError:
            return None
    if key == "fps":
        try:
            return float(value)
        except ValueError:
            return None
    return value if value != "N/A" else None


def parse_stderr_progress(line: str) -> FFmpegProgress | None:
    """Parse an ffmpeg stderr status line.

    Args:
        line: A line from ffmpeg stderr.

    Returns:
        Parsed FFmpegProgress or None if not a status line.
    """
    if "frame=" not in line:
        return None

    result = FFmpegProgress()

    for key, pattern in PROGRESS_PATTERNS.items():
        match = pattern.search(line)
        if match:
            converted = _convert_progress_value(key, match.group(1))
            if converted is not None:
                setattr(result, key, converted)

    time_match = _TIME_PATTERN.search(line)
    if time_match:
        elapsed = parse_timestamp(*time_match.groups())
        result.out_time_us = elapsed // timedelta(microseconds=1)

    return result
