"""FFmpeg argument selection, progress parsing and GPU enumeration."""

# Encoder argument selection
from ffsup.tools.encoders import (
    HEVC_ENCODERS,
    PRESETS,
    build_encode_args,
    build_encode_command,
    codec_name,
    encoding_args,
    format_command,
    get_presets,
    input_args,
    preset_args,
    quality_args,
)

# FFmpeg progress parsing
from ffsup.tools.ffmpeg_progress import (
    PROGRESS_PATTERNS,
    FFmpegProgress,
    ParserPhase,
    ProgressParser,
    compute_percent,
    parse_stderr_progress,
    parse_timestamp,
)

# GPU enumeration
from ffsup.tools.gpus import (
    list_gpus,
    parse_video_controller_line,
    parse_video_controllers,
    vendor_from_adapter,
)

__all__ = [
    # Encoders
    "HEVC_ENCODERS",
    "PRESETS",
    "build_encode_args",
    "build_encode_command",
    "codec_name",
    "encoding_args",
    "format_command",
    "get_presets",
    "input_args",
    "preset_args",
    "quality_args",
    # Progress
    "PROGRESS_PATTERNS",
    "FFmpegProgress",
    "ParserPhase",
    "ProgressParser",
    "compute_percent",
    "parse_stderr_progress",
    "parse_timestamp",
    # GPUs
    "list_gpus",
    "parse_video_controller_line",
    "parse_video_controllers",
    "vendor_from_adapter",
]
