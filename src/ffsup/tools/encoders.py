"""Hardware encoder argument selection.

Maps an abstract (vendor, quality, preset) choice onto concrete ffmpeg
arguments. Every function here is pure: no I/O and no state beyond the
module-level tables, which are never mutated.

All encoders target HEVC; the vendor only decides which implementation
(libx265, NVENC, AMF or QSV) does the work.
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from ffsup.core.exceptions import InvalidPresetIndexError
from ffsup.domain import EncodeRequest, GpuVendor

logger = logging.getLogger(__name__)

# One HEVC encoder per vendor
HEVC_ENCODERS: Mapping[GpuVendor, str] = MappingProxyType(
    {
        GpuVendor.NONE: "libx265",
        GpuVendor.NVIDIA: "hevc_nvenc",
        GpuVendor.AMD: "hevc_amf",
        GpuVendor.INTEL: "hevc_qsv",
    }
)

# Preset names in the order the encoders rank them. Indices are stable and
# vendor-specific; the tables intentionally differ in length.
PRESETS: Mapping[GpuVendor, tuple[str, ...]] = MappingProxyType(
    {
        GpuVendor.NONE: (
            "ultrafast",
            "superfast",
            "veryfast",
            "faster",
            "fast",
            "medium",
            "slow",
            "slower",
            "veryslow",
            "placebo",
        ),
        GpuVendor.NVIDIA: (
            "default",
            "slow",
            "medium",
            "fast",
            "hp",
            "hq",
            "bd",
            "ll",
            "llhq",
            "llhp",
            "lossless",
            "losslesshp",
        ),
        GpuVendor.AMD: ("speed", "balanced", "quality"),
        GpuVendor.INTEL: ("veryfast", "fast", "medium", "slow", "veryslow"),
    }
)

# (hwaccel, hwaccel_output_format) for decode acceleration
_HWACCEL_DECODERS: Mapping[GpuVendor, tuple[str, str]] = MappingProxyType(
    {
        GpuVendor.NVIDIA: ("cuda", "cuda"),
        GpuVendor.AMD: ("d3d11va", "d3d11"),
        GpuVendor.INTEL: ("qsv", "qsv"),
    }
)


def codec_name(vendor: GpuVendor) -> str:
    """Get the ffmpeg encoder name for a vendor.

    Args:
        vendor: Target vendor.

    Returns:
        Encoder name such as "hevc_nvenc" or "libx265".
    """
    return HEVC_ENCODERS[vendor]


def get_presets(vendor: GpuVendor) -> tuple[str, ...]:
    """Get the ordered preset names a vendor's encoder accepts."""
    return PRESETS[vendor]


def input_args(vendor: GpuVendor, path: Path | str, device_index: int = 0) -> list[str]:
    """Build the arguments that open one input file.

    Accelerated vendors decode on the selected device and keep frames in
    device memory; the software path is a plain -i.

    Args:
        vendor: Target vendor.
        path: Input file path.
        device_index: Zero-based accelerator index.

    Returns:
        List of FFmpeg arguments ending with "-i PATH".
    """
    if vendor is GpuVendor.NONE:
        return ["-i", str(path)]

    hwaccel, output_format = _HWACCEL_DECODERS[vendor]
    return [
        "-hwaccel",
        hwaccel,
        "-hwaccel_output_format",
        output_format,
        "-hwaccel_device",
        str(device_index),
        "-i",
        str(path),
    ]


def quality_args(vendor: GpuVendor, quality: int) -> list[str]:
    """Build rate-control arguments for a quality value.

    The value is passed through unmodified. Each encoder has its own valid
    range (e.g. 0-51 for libx265 CRF); keeping inside it is the caller's
    responsibility.

    Args:
        vendor: Target vendor.
        quality: Quality value (lower is better for every encoder here).

    Returns:
        List of FFmpeg arguments.
    """
    if vendor is GpuVendor.NVIDIA:
        return ["-rc", "vbr", "-b:v", "0", "-cq", str(quality)]
    if vendor is GpuVendor.AMD:
        return ["-rc", "cqp", "-qp", str(quality)]
    if vendor is GpuVendor.INTEL:
        return ["-rc", "icq", "-global_quality", str(quality)]
    return ["-crf", str(quality)]


def preset_args(vendor: GpuVendor, preset_index: int) -> list[str]:
    """Build the preset argument for a vendor's preset table entry.

    AMF names the option -quality; every other encoder uses -preset.

    Args:
        vendor: Target vendor.
        preset_index: Index into PRESETS[vendor].

    Returns:
        List of FFmpeg arguments.

    Raises:
        InvalidPresetIndexError: If preset_index is negative or past the
            end of the vendor's table.
    """
    presets = PRESETS[vendor]
    if preset_index < 0 or preset_index >= len(presets):
        raise InvalidPresetIndexError(vendor.value, preset_index, len(presets))
    flag = "-quality" if vendor is GpuVendor.AMD else "-preset"
    return [flag, presets[preset_index]]


def encoding_args(vendor: GpuVendor) -> list[str]:
    """Build codec selection arguments (video encoder, audio copied)."""
    return ["-c:v", codec_name(vendor), "-c:a", "copy"]


def build_encode_args(request: EncodeRequest) -> list[str]:
    """Build the complete ffmpeg argument list for a request.

    Layout: -y [threads] {extra before} {inputs} {codec} [fps mode]
    {quality} [preset] {extra after} OUTPUT

    Hardware runs pin ffmpeg to one CPU thread for filters since the heavy
    work happens on the GPU. Software runs pass frames through untouched
    so variable frame rate sources are not resampled.

    Args:
        request: The encode request.

    Returns:
        List of arguments, not including the ffmpeg binary.

    Raises:
        InvalidPresetIndexError: If the request's preset index is invalid.
    """
    vendor = request.vendor
    args: list[str] = ["-y"]

    if vendor.is_hardware:
        args.extend(["-threads", "1"])
    args.extend(request.extra_args_before_input)

    for path in request.inputs:
        args.extend(input_args(vendor, path, request.device_index))

    args.extend(encoding_args(vendor))
    if not vendor.is_hardware:
        args.extend(["-fps_mode", "passthrough"])
    args.extend(quality_args(vendor, request.quality))

    if request.preset_index is not None:
        args.extend(preset_args(vendor, request.preset_index))

    args.extend(request.extra_args_after_input)
    args.append(str(request.output))
    return args


def build_encode_command(request: EncodeRequest, ffmpeg_path: Path | str) -> list[str]:
    """Build the full command (binary plus arguments) for a request."""
    cmd = [str(ffmpeg_path), *build_encode_args(request)]
    logger.debug("Built encode command: %s", format_command(cmd))
    return cmd


def format_command(cmd: list[str]) -> str:
    """Render a command as a copy-pasteable shell string."""
    return shlex.join(cmd)
