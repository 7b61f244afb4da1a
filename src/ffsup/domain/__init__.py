"""Domain models and enums for ffsup.

Usage:
    from ffsup.domain import EncodeRequest, GpuVendor, ProgressEvent
"""

from .enums import (
    ErrorKind,
    GpuVendor,
    RunStatus,
    SupervisorState,
)
from .models import (
    DEFAULT_QUALITY,
    EncodeRequest,
    ErrorEvent,
    GpuInfo,
    ProgressEvent,
    RunResult,
)

__all__ = [
    # Models
    "DEFAULT_QUALITY",
    "EncodeRequest",
    "ErrorEvent",
    "GpuInfo",
    "ProgressEvent",
    "RunResult",
    # Enums
    "ErrorKind",
    "GpuVendor",
    "RunStatus",
    "SupervisorState",
]
