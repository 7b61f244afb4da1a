"""CLI module for ffsup."""

import logging
from pathlib import Path

import click

from ffsup.cli.exit_codes import ExitCode
from ffsup.cli.output import error_exit
from ffsup.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


def _configure_logging(
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from CLI options.

    Args:
        config_path: Config file to read logging defaults from.
        log_level: Override log level (debug, info, warning, error).
        log_file: Override log file path.
        log_json: Use JSON log format.
    """
    from ffsup.config.logging_factory import configure_logging_from_cli

    configure_logging_from_cli(
        config_path=config_path,
        level=log_level,
        file=log_file,
        format="json" if log_json else None,
    )


@click.group()
@click.version_option(package_name="ffsup")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file path (default: ~/.ffsup/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """ffsup - Run and supervise ffmpeg HEVC encodes."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    try:
        _configure_logging(config_path, log_level, log_file, log_json)
    except ConfigError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR)

    logger.debug("ffsup starting: config=%s", config_path or "default")


# Defer import to avoid circular dependency
def _register_commands():
    from ffsup.cli.encode import command_command, encode_command
    from ffsup.cli.gpus import gpus_command
    from ffsup.cli.presets import presets_command

    main.add_command(encode_command)
    main.add_command(command_command)
    main.add_command(presets_command)
    main.add_command(gpus_command)


_register_commands()
