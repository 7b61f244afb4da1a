"""Unit tests for the ffsup CLI."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from ffsup.cli import main
from ffsup.cli.exit_codes import ExitCode
from ffsup.core.exceptions import ToolNotFoundError
from ffsup.domain import ErrorEvent, ErrorKind, GpuInfo, GpuVendor, RunResult, RunStatus


@pytest.fixture(autouse=True)
def reset_root_logger():
    """The CLI reconfigures logging; restore it afterwards."""
    import logging

    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers[:] = original_handlers
    root.setLevel(original_level)


@pytest.fixture
def runner():
    return CliRunner()


def _mock_supervisor(result: RunResult) -> MagicMock:
    supervisor = MagicMock()
    supervisor.start = AsyncMock(return_value=result)
    supervisor.cancel = AsyncMock()
    supervisor.discard_output = AsyncMock(return_value=True)
    return supervisor


class TestCommandCommand:
    """Tests for 'ffsup command'."""

    def test_prints_nvidia_command(self, runner):
        result = runner.invoke(
            main,
            [
                "command",
                "a.mp4",
                "-o",
                "out.mp4",
                "--vendor",
                "nvidia",
                "--quality",
                "20",
                "--preset",
                "2",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "-hwaccel cuda" in result.output
        assert "hevc_nvenc" in result.output
        assert "-cq 20" in result.output
        assert "-preset medium" in result.output
        assert result.output.rstrip().endswith("out.mp4")

    def test_uses_config_defaults(self, runner, temp_dir):
        config = temp_dir / "config.toml"
        config.write_text('[encode]\nvendor = "amd"\nquality = 24\n')

        result = runner.invoke(
            main, ["--config", str(config), "command", "a.mkv", "-o", "b.mkv"]
        )

        assert result.exit_code == 0, result.output
        assert "hevc_amf" in result.output
        assert "-qp 24" in result.output

    def test_invalid_preset(self, runner):
        result = runner.invoke(
            main, ["command", "a.mkv", "-o", "b.mkv", "--vendor", "amd", "--preset", "3"]
        )

        assert result.exit_code == ExitCode.INVALID_PRESET
        assert "does not exist for amd" in result.output

    def test_invalid_config(self, runner, temp_dir):
        config = temp_dir / "config.toml"
        config.write_text('[encode]\nvendor = "voodoo"\n')

        result = runner.invoke(
            main, ["--config", str(config), "command", "a.mkv", "-o", "b.mkv"]
        )

        assert result.exit_code == ExitCode.CONFIG_ERROR


class TestEncodeCommand:
    """Tests for 'ffsup encode'."""

    def test_dry_run_json(self, runner):
        result = runner.invoke(
            main, ["encode", "a.mkv", "-o", "b.mkv", "--dry-run", "--json"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["status"] == "completed"
        assert data["command"][-1] == "b.mkv"
        assert "libx265" in data["command"]

    def test_successful_encode(self, runner):
        run = RunResult(RunStatus.COMPLETED, 0, Path("b.mkv"))
        supervisor = _mock_supervisor(run)

        with patch(
            "ffsup.cli.encode.ProcessSupervisor.from_config", return_value=supervisor
        ):
            result = runner.invoke(main, ["encode", "a.mkv", "-o", "b.mkv", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["run_status"] == "completed"
        assert data["return_code"] == 0
        request = supervisor.start.await_args.args[0]
        assert request.output == Path("b.mkv")
        assert request.vendor is GpuVendor.NONE

    def test_failed_encode(self, runner):
        run = RunResult(
            RunStatus.FAILED,
            1,
            Path("b.mkv"),
            errors=(ErrorEvent(ErrorKind.NON_ZERO_EXIT, "Process failed with exit code 1."),),
        )

        supervisor = _mock_supervisor(run)

        with patch(
            "ffsup.cli.encode.ProcessSupervisor.from_config", return_value=supervisor
        ):
            result = runner.invoke(main, ["encode", "a.mkv", "-o", "b.mkv"])

        assert result.exit_code == ExitCode.OPERATION_FAILED
        assert "Process failed with exit code 1." in result.output
        supervisor.discard_output.assert_awaited_once()

    def test_failed_encode_json(self, runner):
        run = RunResult(
            RunStatus.FAILED,
            1,
            Path("b.mkv"),
            errors=(ErrorEvent(ErrorKind.NO_SPACE_LEFT, "disk full"),),
        )

        with patch(
            "ffsup.cli.encode.ProcessSupervisor.from_config",
            return_value=_mock_supervisor(run),
        ):
            result = runner.invoke(main, ["encode", "a.mkv", "-o", "b.mkv", "--json"])

        assert result.exit_code == ExitCode.OPERATION_FAILED
        data = json.loads(result.output)
        assert data["error"]["code"] == "OPERATION_FAILED"
        assert data["errors"] == [{"kind": "no_space_left", "message": "disk full"}]

    def test_missing_ffmpeg(self, runner):
        supervisor = MagicMock()
        supervisor.start = AsyncMock(side_effect=ToolNotFoundError("ffmpeg"))

        with patch(
            "ffsup.cli.encode.ProcessSupervisor.from_config", return_value=supervisor
        ):
            result = runner.invoke(main, ["encode", "a.mkv", "-o", "b.mkv"])

        assert result.exit_code == ExitCode.TOOL_NOT_AVAILABLE

    def test_interrupted(self, runner):
        with (
            patch("ffsup.cli.encode.ProcessSupervisor.from_config"),
            patch("ffsup.cli.encode.asyncio.run", side_effect=KeyboardInterrupt),
        ):
            result = runner.invoke(main, ["encode", "a.mkv", "-o", "b.mkv"])

        assert result.exit_code == ExitCode.INTERRUPTED

    def test_requires_output(self, runner):
        result = runner.invoke(main, ["encode", "a.mkv"])
        assert result.exit_code == 2
        assert "--output" in result.output


class TestPresetsCommand:
    """Tests for 'ffsup presets'."""

    def test_single_vendor(self, runner):
        result = runner.invoke(main, ["presets", "--vendor", "amd"])

        assert result.exit_code == 0
        assert "amd (hevc_amf):" in result.output
        assert " 2  quality" in result.output
        assert "nvidia" not in result.output

    def test_json_all_vendors(self, runner):
        result = runner.invoke(main, ["presets", "--json"])

        data = json.loads(result.output)
        assert set(data) == {"none", "nvidia", "amd", "intel"}
        assert data["nvidia"]["presets"][2] == "medium"


class TestGpusCommand:
    """Tests for 'ffsup gpus'."""

    def test_none_detected(self, runner):
        with patch("ffsup.cli.gpus.list_gpus", return_value=[]):
            result = runner.invoke(main, ["gpus"])
        assert "No GPUs detected." in result.output

    def test_lists_gpus(self, runner):
        gpus = [GpuInfo("GeForce RTX 4070", 0, GpuVendor.NVIDIA)]
        with patch("ffsup.cli.gpus.list_gpus", return_value=gpus):
            result = runner.invoke(main, ["gpus", "--json"])

        assert json.loads(result.output) == [
            {"name": "GeForce RTX 4070", "device_index": 0, "vendor": "nvidia"}
        ]
