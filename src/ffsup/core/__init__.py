"""Core utilities package.

Exceptions and small file-system helpers with no dependency on the
rest of ffsup.
"""

from ffsup.core.exceptions import (
    ConfigError,
    FFsupError,
    InvalidPresetIndexError,
    SupervisorBusyError,
    ToolNotFoundError,
)
from ffsup.core.file_utils import (
    DEFAULT_CLEANUP_ATTEMPTS,
    DEFAULT_CLEANUP_DELAY,
    remove_output,
    remove_path,
)

__all__ = [
    "ConfigError",
    "FFsupError",
    "InvalidPresetIndexError",
    "SupervisorBusyError",
    "ToolNotFoundError",
    "DEFAULT_CLEANUP_ATTEMPTS",
    "DEFAULT_CLEANUP_DELAY",
    "remove_output",
    "remove_path",
]
