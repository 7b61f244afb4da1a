"""Domain enums for ffsup.

This module contains the enums shared by parameter selection, progress
parsing and process supervision.
"""

from enum import Enum


class GpuVendor(Enum):
    """Hardware encoder family used for a run.

    NONE is the software fallback and is always valid.
    """

    NONE = "none"
    NVIDIA = "nvidia"
    AMD = "amd"
    INTEL = "intel"

    @classmethod
    def from_name(cls, name: str) -> "GpuVendor":
        """Look up a vendor by case-insensitive name.

        Args:
            name: Vendor name such as "nvidia" or "NONE".

        Returns:
            Matching GpuVendor.

        Raises:
            ValueError: If the name is not a known vendor.
        """
        try:
            return cls(name.strip().casefold())
        except ValueError:
            valid = ", ".join(v.value for v in cls)
            raise ValueError(
                f"Unknown GPU vendor {name!r}; expected one of: {valid}"
            ) from None

    @property
    def is_hardware(self) -> bool:
        """True for vendors that use a hardware encoder."""
        return self is not GpuVendor.NONE


class ErrorKind(Enum):
    """Classification of errors raised or reported during a run."""

    INVALID_PRESET_INDEX = "invalid_preset_index"
    NO_SPACE_LEFT = "no_space_left"
    PATH_TOO_LONG = "path_too_long"
    NON_ZERO_EXIT = "non_zero_exit"
    CLEANUP_INCOMPLETE = "cleanup_incomplete"


class SupervisorState(Enum):
    """Lifecycle state of a ProcessSupervisor."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


class RunStatus(Enum):
    """Terminal outcome of a single supervised run."""

    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
