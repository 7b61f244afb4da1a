"""Process execution for ffsup.

ProcessSupervisor runs one ffmpeg process and reports its progress;
the suspension module provides the OS-level pause primitive.
"""

from ffsup.executor.interface import find_tool, require_tool
from ffsup.executor.supervisor import (
    ProcessSupervisor,
    read_lines,
)
from ffsup.executor.suspension import (
    SignalSuspender,
    ThreadSuspender,
    Win32ThreadSuspender,
    get_thread_suspender,
)

__all__ = [
    "ProcessSupervisor",
    "SignalSuspender",
    "ThreadSuspender",
    "Win32ThreadSuspender",
    "find_tool",
    "get_thread_suspender",
    "read_lines",
    "require_tool",
]
