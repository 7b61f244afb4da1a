"""Output file cleanup utilities.

ffmpeg may keep a partial output open for a moment after it is killed,
especially on Windows, so deletion is retried a bounded number of times.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CLEANUP_ATTEMPTS = 5
DEFAULT_CLEANUP_DELAY = 0.1  # seconds between attempts


def remove_path(path: Path) -> None:
    """Delete a file or a directory tree if it exists.

    Args:
        path: File or directory to delete.

    Raises:
        OSError: If the path exists but could not be removed.
    """
    if path.is_dir():
        shutil.rmtree(path)
    elif path.exists():
        path.unlink()


async def remove_output(
    path: Path,
    attempts: int = DEFAULT_CLEANUP_ATTEMPTS,
    delay: float = DEFAULT_CLEANUP_DELAY,
) -> bool:
    """Delete a partial output, retrying while the OS still holds it.

    Args:
        path: Output file or directory to delete.
        attempts: Maximum number of deletion attempts.
        delay: Seconds to sleep between attempts.

    Returns:
        True if the path no longer exists, False if every attempt failed.
    """
    for attempt in range(1, attempts + 1):
        try:
            remove_path(path)
            logger.debug("Removed output %s (attempt %d)", path, attempt)
            return True
        except OSError as e:
            logger.debug(
                "Could not remove output %s (attempt %d/%d): %s",
                path,
                attempt,
                attempts,
                e,
            )
            if attempt < attempts:
                await asyncio.sleep(delay)
    return False
