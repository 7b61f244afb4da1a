"""Domain models for ffsup.

These are plain immutable values passed between the parameter selector,
the progress parser and the supervisor. None of them hold OS resources.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

from .enums import ErrorKind, GpuVendor, RunStatus

# Default quality used when the caller does not choose one
DEFAULT_QUALITY = 18


@dataclass(frozen=True)
class GpuInfo:
    """An accelerator reported by the operating system.

    device_index is zero-based, as expected by ffmpeg's -hwaccel_device.
    """

    name: str
    device_index: int
    vendor: GpuVendor

    @classmethod
    def from_os_device_id(cls, name: str, device_id: int, vendor: GpuVendor) -> GpuInfo:
        """Build a GpuInfo from a one-based OS device id."""
        return cls(name=name, device_index=device_id - 1, vendor=vendor)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class EncodeRequest:
    """Everything needed to build and run one ffmpeg invocation.

    Immutable once constructed. inputs keeps the caller's order, which is
    also the order of the -i arguments.
    """

    inputs: tuple[Path, ...]
    output: Path
    vendor: GpuVendor = GpuVendor.NONE
    quality: int = DEFAULT_QUALITY
    preset_index: int | None = None
    device_index: int = 0
    extra_args_before_input: tuple[str, ...] = field(default_factory=tuple)
    extra_args_after_input: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Normalize paths and validate basic shape."""
        inputs = tuple(Path(p) for p in self.inputs)
        if not inputs:
            raise ValueError("EncodeRequest requires at least one input")
        if self.device_index < 0:
            raise ValueError(
                f"device_index must be non-negative, got {self.device_index}"
            )
        object.__setattr__(self, "inputs", inputs)
        object.__setattr__(self, "output", Path(self.output))
        object.__setattr__(
            self, "extra_args_before_input", tuple(self.extra_args_before_input)
        )
        object.__setattr__(
            self, "extra_args_after_input", tuple(self.extra_args_after_input)
        )

    @classmethod
    def for_gpu(
        cls,
        inputs: Iterable[Path | str],
        output: Path | str,
        gpu: GpuInfo | None,
        quality: int = DEFAULT_QUALITY,
        preset_index: int | None = None,
    ) -> EncodeRequest:
        """Build a request targeting a detected GPU, or software if None."""
        return cls(
            inputs=tuple(Path(p) for p in inputs),
            output=Path(output),
            vendor=gpu.vendor if gpu is not None else GpuVendor.NONE,
            quality=quality,
            preset_index=preset_index,
            device_index=gpu.device_index if gpu is not None else 0,
        )


@dataclass(frozen=True)
class ProgressEvent:
    """A single progress update parsed from ffmpeg output."""

    percent: float
    current_time: timedelta
    total_duration: timedelta
    frame: int


@dataclass(frozen=True)
class ErrorEvent:
    """An error signal recognised in ffmpeg output or raised by the run."""

    kind: ErrorKind
    message: str

    @property
    def pauses_process(self) -> bool:
        """True if the supervisor should freeze the process before reporting."""
        return self.kind is ErrorKind.NO_SPACE_LEFT


@dataclass(frozen=True)
class RunResult:
    """Outcome of ProcessSupervisor.start()."""

    status: RunStatus
    return_code: int | None
    output_path: Path
    errors: tuple[ErrorEvent, ...] = ()

    @property
    def success(self) -> bool:
        """True if the process exited cleanly."""
        return self.status is RunStatus.COMPLETED
