"""Process suspension used to pause a running encoder.

ffmpeg has no pause command, so pausing freezes the process at the OS
level: the child receives no notification and cannot flush anything; it
just stops being scheduled until resumed.

Two implementations share the ThreadSuspender protocol:

- Win32ThreadSuspender suspends each thread through kernel32. Windows
  keeps a per-thread suspend count, so resume keeps calling ResumeThread
  until the count is back to zero.
- SignalSuspender sends SIGSTOP/SIGCONT on POSIX. One SIGCONT undoes any
  number of stops, which gives the same "resume fully undoes" contract.

Both are no-ops for a process that does not exist or has exited, in
which case suspend returns False.
"""

from __future__ import annotations

import ctypes
import logging
import sys
from typing import Protocol

import psutil

logger = logging.getLogger(__name__)

# Access right required by SuspendThread/ResumeThread
THREAD_SUSPEND_RESUME = 0x0002

# SuspendThread/ResumeThread return (DWORD)-1 on failure
_WIN32_FAILURE = 0xFFFFFFFF


class ThreadSuspender(Protocol):
    """Protocol for freezing and thawing a process by pid."""

    def suspend(self, pid: int) -> bool:
        """Stop every thread of the process; False if nothing was stopped."""
        ...

    def resume(self, pid: int) -> None:
        """Undo every outstanding suspension of the process."""
        ...


def _live_process(pid: int) -> psutil.Process | None:
    """Return a psutil handle for pid, or None if it is gone or a zombie."""
    try:
        proc = psutil.Process(pid)
        if not proc.is_running() or proc.status() == psutil.STATUS_ZOMBIE:
            return None
        return proc
    except psutil.NoSuchProcess:
        return None


class Win32ThreadApi:
    """Thin wrapper over the kernel32 thread functions.

    Kept separate from Win32ThreadSuspender so tests can substitute a
    fake with the same four methods.
    """

    def __init__(self) -> None:
        kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)  # type: ignore[attr-defined]

        self._open_thread = kernel32.OpenThread
        self._open_thread.argtypes = [ctypes.c_uint32, ctypes.c_int, ctypes.c_uint32]
        self._open_thread.restype = ctypes.c_void_p

        self._suspend_thread = kernel32.SuspendThread
        self._suspend_thread.argtypes = [ctypes.c_void_p]
        self._suspend_thread.restype = ctypes.c_uint32

        self._resume_thread = kernel32.ResumeThread
        self._resume_thread.argtypes = [ctypes.c_void_p]
        self._resume_thread.restype = ctypes.c_uint32

        self._close_handle = kernel32.CloseHandle
        self._close_handle.argtypes = [ctypes.c_void_p]
        self._close_handle.restype = ctypes.c_int

    def open_thread(self, thread_id: int) -> int | None:
        """Open a thread for suspend/resume; None if it cannot be opened."""
        handle = self._open_thread(THREAD_SUSPEND_RESUME, False, thread_id)
        return handle or None

    def suspend_thread(self, handle: int) -> int:
        """Suspend a thread; returns the previous suspend count or -1."""
        result = self._suspend_thread(handle)
        return -1 if result == _WIN32_FAILURE else result

    def resume_thread(self, handle: int) -> int:
        """Resume a thread once; returns the previous suspend count or -1."""
        result = self._resume_thread(handle)
        return -1 if result == _WIN32_FAILURE else result

    def close_handle(self, handle: int) -> None:
        """Close a thread handle."""
        self._close_handle(handle)


class Win32ThreadSuspender:
    """Suspend/resume every thread of a process through kernel32."""

    def __init__(self, api: Win32ThreadApi | None = None) -> None:
        self._api = api

    @property
    def api(self) -> Win32ThreadApi:
        """kernel32 wrapper, created on first use."""
        if self._api is None:
            self._api = Win32ThreadApi()
        return self._api

    def _thread_ids(self, pid: int) -> list[int]:
        proc = _live_process(pid)
        if proc is None:
            return []
        try:
            return [t.id for t in proc.threads()]
        except psutil.NoSuchProcess:
            return []

    def suspend(self, pid: int) -> bool:
        """Suspend every thread; threads that cannot be opened are skipped.

        Returns:
            True if at least one thread was suspended.
        """
        suspended = 0
        for thread_id in self._thread_ids(pid):
            handle = self.api.open_thread(thread_id)
            if handle is None:
                logger.debug("Could not open thread %d of pid %d", thread_id, pid)
                continue
            try:
                if self.api.suspend_thread(handle) >= 0:
                    suspended += 1
            finally:
                self.api.close_handle(handle)
        logger.debug("Suspended %d threads of pid %d", suspended, pid)
        return suspended > 0

    def resume(self, pid: int) -> None:
        """Resume every thread until its suspend count reaches zero."""
        for thread_id in self._thread_ids(pid):
            handle = self.api.open_thread(thread_id)
            if handle is None:
                logger.debug("Could not open thread %d of pid %d", thread_id, pid)
                continue
            try:
                # Returns the count before the call: stop once it was 0
                # (already running) or -1 (failure).
                while self.api.resume_thread(handle) > 0:
                    pass
            finally:
                self.api.close_handle(handle)
        logger.debug("Resumed pid %d", pid)


class SignalSuspender:
    """Suspend/resume a process with SIGSTOP/SIGCONT."""

    def suspend(self, pid: int) -> bool:
        """Send SIGSTOP to the process; False if it is already gone."""
        proc = _live_process(pid)
        if proc is None:
            return False
        try:
            proc.suspend()
        except psutil.NoSuchProcess:
            logger.debug("Process %d exited before it could be suspended", pid)
            return False
        logger.debug("Sent SIGSTOP to pid %d", pid)
        return True

    def resume(self, pid: int) -> None:
        """Send SIGCONT to the process."""
        proc = _live_process(pid)
        if proc is None:
            return
        try:
            proc.resume()
            logger.debug("Sent SIGCONT to pid %d", pid)
        except psutil.NoSuchProcess:
            logger.debug("Process %d exited before it could be resumed", pid)


def get_thread_suspender() -> ThreadSuspender:
    """Get the suspender appropriate for the current platform."""
    if sys.platform == "win32":
        return Win32ThreadSuspender()
    return SignalSuspender()
