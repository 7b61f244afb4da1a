"""Custom exceptions for ffsup.

All exceptions raised by the package inherit from FFsupError, so callers
can catch every package error with a single except clause.
"""

from __future__ import annotations


class FFsupError(Exception):
    """Base exception for ffsup errors."""


class InvalidPresetIndexError(FFsupError, IndexError):
    """Raised when a preset index is outside the vendor's preset table.

    Attributes:
        vendor: Name of the vendor whose table was consulted.
        index: The rejected index.
        table_size: Number of presets the vendor offers.
    """

    def __init__(self, vendor: str, index: int, table_size: int) -> None:
        self.vendor = vendor
        self.index = index
        self.table_size = table_size
        super().__init__(
            f"Preset level {index} does not exist for {vendor} "
            f"(valid range 0-{table_size - 1})"
        )


class SupervisorBusyError(FFsupError):
    """Raised when start() is called while a process is already active."""


class ToolNotFoundError(FFsupError, RuntimeError):
    """Raised when a required external tool cannot be located."""

    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(f"Required tool not available: {tool}")


class ConfigError(FFsupError, ValueError):
    """Raised when configuration values cannot be parsed or are invalid."""
