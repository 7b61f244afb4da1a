"""Accelerator enumeration.

Lists the video controllers the operating system reports so a caller can
pick a GpuInfo for EncodeRequest.for_gpu(). Only Windows exposes the
device ids ffmpeg's d3d11va/cuda/qsv device selection expects; on other
platforms the list is empty and callers fall back to device 0.
"""

from __future__ import annotations

import logging
import platform
import subprocess  # nosec B404 - subprocess is required for device enumeration

from ffsup.domain import GpuInfo, GpuVendor

logger = logging.getLogger(__name__)

# Timeout for the PowerShell query (seconds)
ENUMERATION_TIMEOUT = 15

_DEVICE_ID_PREFIX = "VideoController"

_POWERSHELL_QUERY = (
    "Get-CimInstance Win32_VideoController | ForEach-Object "
    '{ "$($_.Caption);$($_.DeviceID);$($_.AdapterCompatibility)" }'
)


def vendor_from_adapter(adapter_compatibility: str) -> GpuVendor:
    """Map a Win32 AdapterCompatibility string to a vendor."""
    if "NVIDIA" in adapter_compatibility:
        return GpuVendor.NVIDIA
    if "AMD" in adapter_compatibility or "Advanced Micro Devices" in adapter_compatibility:
        return GpuVendor.AMD
    if "Intel" in adapter_compatibility:
        return GpuVendor.INTEL
    return GpuVendor.NONE


def parse_video_controller_line(line: str) -> GpuInfo | None:
    """Parse one "Caption;DeviceID;AdapterCompatibility" line.

    DeviceID looks like "VideoController1"; the OS counts from one while
    ffmpeg counts from zero, so the index is shifted down by one.

    Args:
        line: A line of PowerShell output.

    Returns:
        GpuInfo, or None if the line is not in the expected shape.
    """
    parts = line.strip().split(";")
    if len(parts) != 3:
        return None
    caption, device_id, adapter = parts
    try:
        os_id = int(device_id[len(_DEVICE_ID_PREFIX) :])
    except ValueError:
        return None
    return GpuInfo.from_os_device_id(caption, os_id, vendor_from_adapter(adapter))


def parse_video_controllers(output: str) -> list[GpuInfo]:
    """Parse the full PowerShell output into GpuInfo values."""
    gpus = []
    for line in output.splitlines():
        if not line.strip():
            continue
        gpu = parse_video_controller_line(line)
        if gpu is not None:
            gpus.append(gpu)
    return gpus


def list_gpus() -> list[GpuInfo]:
    """Enumerate the machine's video controllers.

    Returns:
        Detected GPUs, or an empty list if enumeration is unsupported or
        fails.
    """
    if platform.system() != "Windows":
        logger.debug("GPU enumeration is only supported on Windows")
        return []

    try:
        result = subprocess.run(  # nosec B603 B607 - fixed command line
            ["powershell", "-NoProfile", "-Command", _POWERSHELL_QUERY],
            capture_output=True,
            text=True,
            errors="replace",
            timeout=ENUMERATION_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning("GPU enumeration failed: %s", e)
        return []

    if result.returncode != 0:
        logger.warning(
            "GPU enumeration exited with code %d: %s",
            result.returncode,
            result.stderr.strip(),
        )
        return []

    return parse_video_controllers(result.stdout)
