"""External tool resolution.

Tool paths are resolved in this order:
- Configured path (config file or FFSUP_FFMPEG_PATH)
- System PATH
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ffsup.core.exceptions import ToolNotFoundError

logger = logging.getLogger(__name__)


def find_tool(name: str, configured_path: Path | None = None) -> Path | None:
    """Find a tool executable.

    Args:
        name: Tool name (e.g., "ffmpeg").
        configured_path: Optional configured path override.

    Returns:
        Path to tool executable, or None if not found.
    """
    if configured_path:
        if configured_path.is_file():
            return configured_path
        logger.warning(
            "Configured path for %s is not a file: %s", name, configured_path
        )

    which_result = shutil.which(name)
    if which_result:
        return Path(which_result)

    return None


def require_tool(name: str, configured_path: Path | None = None) -> Path:
    """Get path to a required tool, raising an error if not available.

    When no configured_path is given, the tool path from the loaded
    configuration is used.

    Args:
        name: Name of the tool to find.
        configured_path: Explicit path override.

    Returns:
        Path to the tool executable.

    Raises:
        ToolNotFoundError: If the tool is not available.
    """
    if configured_path is None:
        from ffsup.config import get_config

        configured_path = getattr(get_config().tools, name, None)

    path = find_tool(name, configured_path)
    if path is None:
        raise ToolNotFoundError(name)
    return path
