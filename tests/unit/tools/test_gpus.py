"""Unit tests for GPU enumeration."""

import subprocess
from unittest.mock import MagicMock, patch

from ffsup.domain import GpuInfo, GpuVendor
from ffsup.tools.gpus import (
    list_gpus,
    parse_video_controller_line,
    parse_video_controllers,
    vendor_from_adapter,
)

SAMPLE_OUTPUT = (
    "NVIDIA GeForce RTX 3080;VideoController1;NVIDIA\r\n"
    "Intel(R) UHD Graphics 770;VideoController2;Intel Corporation\r\n"
    "\r\n"
    "Microsoft Basic Display Adapter;VideoController3;(Standard display types)\r\n"
)


class TestVendorFromAdapter:
    """Tests for vendor_from_adapter()."""

    def test_known_vendors(self):
        assert vendor_from_adapter("NVIDIA") is GpuVendor.NVIDIA
        assert vendor_from_adapter("Advanced Micro Devices, Inc.") is GpuVendor.AMD
        assert vendor_from_adapter("AMD") is GpuVendor.AMD
        assert vendor_from_adapter("Intel Corporation") is GpuVendor.INTEL

    def test_unknown_is_software(self):
        assert vendor_from_adapter("(Standard display types)") is GpuVendor.NONE


class TestParseVideoControllers:
    """Tests for parsing PowerShell output."""

    def test_device_index_is_zero_based(self):
        gpu = parse_video_controller_line("RTX;VideoController1;NVIDIA")
        assert gpu == GpuInfo("RTX", 0, GpuVendor.NVIDIA)
        assert str(gpu) == "RTX"

    def test_malformed_line(self):
        assert parse_video_controller_line("no separators here") is None
        assert parse_video_controller_line("a;VideoControllerX;NVIDIA") is None

    def test_full_output(self):
        gpus = parse_video_controllers(SAMPLE_OUTPUT)

        assert [g.device_index for g in gpus] == [0, 1, 2]
        assert [g.vendor for g in gpus] == [
            GpuVendor.NVIDIA,
            GpuVendor.INTEL,
            GpuVendor.NONE,
        ]


class TestListGpus:
    """Tests for list_gpus()."""

    def test_non_windows_returns_empty(self):
        with patch("ffsup.tools.gpus.platform.system", return_value="Linux"):
            assert list_gpus() == []

    def test_windows_parses_output(self):
        completed = MagicMock(returncode=0, stdout=SAMPLE_OUTPUT, stderr="")
        with (
            patch("ffsup.tools.gpus.platform.system", return_value="Windows"),
            patch("ffsup.tools.gpus.subprocess.run", return_value=completed) as run,
        ):
            gpus = list_gpus()

        assert len(gpus) == 3
        assert run.call_args.args[0][0] == "powershell"

    def test_windows_failure_returns_empty(self):
        with (
            patch("ffsup.tools.gpus.platform.system", return_value="Windows"),
            patch(
                "ffsup.tools.gpus.subprocess.run",
                side_effect=subprocess.TimeoutExpired("powershell", 15),
            ),
        ):
            assert list_gpus() == []

    def test_windows_nonzero_exit_returns_empty(self):
        completed = MagicMock(returncode=1, stdout="", stderr="denied")
        with (
            patch("ffsup.tools.gpus.platform.system", return_value="Windows"),
            patch("ffsup.tools.gpus.subprocess.run", return_value=completed),
        ):
            assert list_gpus() == []
