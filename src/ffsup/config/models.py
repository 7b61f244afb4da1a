"""Configuration data models.

This module defines dataclasses for ffsup configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path

from ffsup.core.file_utils import DEFAULT_CLEANUP_ATTEMPTS, DEFAULT_CLEANUP_DELAY
from ffsup.domain import DEFAULT_QUALITY, GpuVendor


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None


@dataclass
class SupervisorConfig:
    """Configuration for process supervision."""

    # Attempts to delete a partial output after cancel
    cleanup_attempts: int = DEFAULT_CLEANUP_ATTEMPTS

    # Seconds between deletion attempts
    cleanup_delay_seconds: float = DEFAULT_CLEANUP_DELAY

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.cleanup_attempts < 1:
            raise ValueError(
                f"cleanup_attempts must be at least 1, got {self.cleanup_attempts}"
            )
        if self.cleanup_delay_seconds < 0:
            raise ValueError(
                "cleanup_delay_seconds must be non-negative, "
                f"got {self.cleanup_delay_seconds}"
            )


@dataclass
class EncodeDefaultsConfig:
    """Defaults applied to encode requests when the CLI does not set them."""

    # Vendor name: none, nvidia, amd, intel
    vendor: str = "none"

    quality: int = DEFAULT_QUALITY

    # None means ffmpeg's own default preset
    preset_index: int | None = None

    # Zero-based accelerator index
    device_index: int = 0

    def __post_init__(self) -> None:
        """Validate configuration."""
        GpuVendor.from_name(self.vendor)
        if self.device_index < 0:
            raise ValueError(
                f"device_index must be non-negative, got {self.device_index}"
            )

    @property
    def gpu_vendor(self) -> GpuVendor:
        """Vendor as an enum value."""
        return GpuVendor.from_name(self.vendor)


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class FFsupConfig:
    """Main configuration container."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    supervisor: SupervisorConfig = field(default_factory=SupervisorConfig)
    encode: EncodeDefaultsConfig = field(default_factory=EncodeDefaultsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
