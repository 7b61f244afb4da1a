"""CLI commands that build and run encode requests.

- ffsup encode: run ffmpeg under the supervisor with live progress
- ffsup command: print the ffmpeg command line without running it
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click

from ffsup.cli.exit_codes import ExitCode
from ffsup.cli.output import CLIResult, error_exit, success_output
from ffsup.config import FFsupConfig, get_config
from ffsup.core.exceptions import (
    ConfigError,
    InvalidPresetIndexError,
    ToolNotFoundError,
)
from ffsup.domain import EncodeRequest, GpuVendor, RunResult, RunStatus
from ffsup.executor import ProcessSupervisor, find_tool
from ffsup.jobs import (
    NullProgressReporter,
    ProgressReporter,
    StderrProgressReporter,
    attach_reporter,
)
from ffsup.tools import build_encode_command, format_command

logger = logging.getLogger(__name__)

VENDOR_CHOICES = [v.value for v in GpuVendor]


def _request_options(func):
    """Attach the options shared by encode and command."""
    options = [
        click.argument(
            "inputs",
            nargs=-1,
            required=True,
            type=click.Path(path_type=Path),
        ),
        click.option(
            "--output",
            "-o",
            required=True,
            type=click.Path(path_type=Path),
            help="Output file.",
        ),
        click.option(
            "--vendor",
            type=click.Choice(VENDOR_CHOICES, case_sensitive=False),
            default=None,
            help="Encoder family (default from config: none).",
        ),
        click.option(
            "--quality",
            "-q",
            type=int,
            default=None,
            help="Quality value passed to the encoder (default 18).",
        ),
        click.option(
            "--preset",
            "preset_index",
            type=int,
            default=None,
            help="Preset index into the vendor's table (see 'ffsup presets').",
        ),
        click.option(
            "--device",
            "device_index",
            type=int,
            default=None,
            help="Zero-based accelerator index (see 'ffsup gpus').",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _load_config(ctx: click.Context, json_output: bool = False) -> FFsupConfig:
    try:
        return get_config(config_path=ctx.obj.get("config_path"))
    except ConfigError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR, json_output)


def _build_request(
    config: FFsupConfig,
    inputs: tuple[Path, ...],
    output: Path,
    vendor: str | None,
    quality: int | None,
    preset_index: int | None,
    device_index: int | None,
) -> EncodeRequest:
    """Merge CLI options over the configured encode defaults."""
    defaults = config.encode
    return EncodeRequest(
        inputs=inputs,
        output=output,
        vendor=GpuVendor.from_name(vendor) if vendor else defaults.gpu_vendor,
        quality=quality if quality is not None else defaults.quality,
        preset_index=(
            preset_index if preset_index is not None else defaults.preset_index
        ),
        device_index=(
            device_index if device_index is not None else defaults.device_index
        ),
    )


def _preview_command(config: FFsupConfig, request: EncodeRequest) -> list[str]:
    """Build the command without requiring ffmpeg to be installed."""
    ffmpeg = find_tool("ffmpeg", config.tools.ffmpeg) or Path("ffmpeg")
    return build_encode_command(request, ffmpeg)


async def run_encode(
    supervisor: ProcessSupervisor,
    request: EncodeRequest,
    reporter: ProgressReporter,
) -> RunResult:
    """Run one request, cancelling it cleanly if this task is cancelled.

    The run itself is shielded so that an interrupt (Ctrl+C) goes through
    ProcessSupervisor.cancel(), which also removes the partial output.
    The output of a failed run is removed the same way.

    Args:
        supervisor: Idle supervisor to run on.
        request: Request to encode.
        reporter: Receives progress, errors and the final result.

    Returns:
        RunResult of the run.

    Raises:
        asyncio.CancelledError: After cleanup, if the task was cancelled.
    """
    attach_reporter(supervisor, reporter)
    reporter.on_start(request)

    run = asyncio.ensure_future(supervisor.start(request))
    try:
        result = await asyncio.shield(run)
    except asyncio.CancelledError:
        logger.info("Interrupted; cancelling encode")
        await supervisor.cancel()
        result = await run
        reporter.on_complete(result)
        raise

    if result.status is RunStatus.FAILED:
        await supervisor.discard_output()
    reporter.on_complete(result)
    return result


def _result_payload(result: RunResult) -> dict:
    return {
        "output": str(result.output_path),
        "run_status": result.status.value,
        "return_code": result.return_code,
        "errors": [
            {"kind": e.kind.value, "message": e.message} for e in result.errors
        ],
    }


@click.command("encode")
@_request_options
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print the ffmpeg command instead of running it.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output the result as JSON (disables the progress display).",
)
@click.pass_context
def encode_command(
    ctx: click.Context,
    inputs: tuple[Path, ...],
    output: Path,
    vendor: str | None,
    quality: int | None,
    preset_index: int | None,
    device_index: int | None,
    dry_run: bool,
    json_output: bool,
) -> None:
    """Encode INPUTS to HEVC with ffmpeg, showing live progress.

    Press Ctrl+C to cancel; the partial output file is deleted.

    Exit codes:
      0 - Encode completed
      2 - Interrupted
      10 - Invalid preset index
      30 - ffmpeg not found
      40 - ffmpeg failed
    """
    config = _load_config(ctx, json_output)

    try:
        request = _build_request(
            config, inputs, output, vendor, quality, preset_index, device_index
        )
        if dry_run:
            cmd = _preview_command(config, request)
            success_output(
                CLIResult(
                    success=True,
                    message=format_command(cmd),
                    data={"command": cmd},
                ),
                json_output,
            )
            return

        supervisor = ProcessSupervisor.from_config(config)
        reporter: ProgressReporter = (
            NullProgressReporter() if json_output else StderrProgressReporter()
        )
        result = asyncio.run(run_encode(supervisor, request, reporter))
    except InvalidPresetIndexError as e:
        error_exit(str(e), ExitCode.INVALID_PRESET, json_output)
    except ToolNotFoundError as e:
        error_exit(str(e), ExitCode.TOOL_NOT_AVAILABLE, json_output)
    except ValueError as e:
        error_exit(str(e), ExitCode.GENERAL_ERROR, json_output)
    except KeyboardInterrupt:
        error_exit("Encode cancelled", ExitCode.INTERRUPTED, json_output)
    except OSError as e:
        error_exit(f"Could not start ffmpeg: {e}", ExitCode.OPERATION_FAILED, json_output)

    if result.status is RunStatus.CANCELLED:
        error_exit("Encode cancelled", ExitCode.INTERRUPTED, json_output)

    if not result.success:
        message = (
            result.errors[-1].message
            if result.errors
            else f"ffmpeg exited with code {result.return_code}"
        )
        if json_output:
            success_output(
                CLIResult(
                    success=False,
                    message=message,
                    data=_result_payload(result),
                    exit_code=ExitCode.OPERATION_FAILED,
                ),
                json_output,
            )
            ctx.exit(ExitCode.OPERATION_FAILED)
        error_exit(message, ExitCode.OPERATION_FAILED)

    success_output(
        CLIResult(
            success=True,
            message=f"Encoded {result.output_path}",
            data=_result_payload(result),
        ),
        json_output,
    )


@click.command("command")
@_request_options
@click.pass_context
def command_command(
    ctx: click.Context,
    inputs: tuple[Path, ...],
    output: Path,
    vendor: str | None,
    quality: int | None,
    preset_index: int | None,
    device_index: int | None,
) -> None:
    """Print the ffmpeg command that 'encode' would run."""
    config = _load_config(ctx)
    try:
        request = _build_request(
            config, inputs, output, vendor, quality, preset_index, device_index
        )
        cmd = _preview_command(config, request)
    except InvalidPresetIndexError as e:
        error_exit(str(e), ExitCode.INVALID_PRESET)
    except ValueError as e:
        error_exit(str(e), ExitCode.GENERAL_ERROR)

    click.echo(format_command(cmd))
