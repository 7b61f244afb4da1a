"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (FFSUP_*)
3. Config file (~/.ffsup/config.toml)
4. Default values

Environment variables:
- FFSUP_FFMPEG_PATH: Path to ffmpeg executable
- FFSUP_CLEANUP_ATTEMPTS: Partial output deletion attempts after cancel
- FFSUP_CLEANUP_DELAY: Seconds between deletion attempts
- FFSUP_VENDOR: Default encoder vendor (none, nvidia, amd, intel)
- FFSUP_QUALITY: Default quality value
- FFSUP_DEVICE: Default accelerator index
- FFSUP_LOG_LEVEL: Log level (debug, info, warning, error)
- FFSUP_LOG_FILE: Log file path
- FFSUP_LOG_FORMAT: Log format (text, json)
- FFSUP_CONFIG_PATH: Path to config file (overrides default location)
"""

from __future__ import annotations

import logging
import os
import threading
import tomllib
from pathlib import Path
from typing import Any

from ffsup.config.env import EnvReader
from ffsup.config.models import (
    EncodeDefaultsConfig,
    FFsupConfig,
    LoggingConfig,
    SupervisorConfig,
    ToolPathsConfig,
)
from ffsup.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# Default config location
DEFAULT_CONFIG_DIR = Path.home() / ".ffsup"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

# Cache for loaded config files (path -> (parsed dict, mtime))
_config_cache: dict[Path, tuple[dict, float]] = {}
_config_cache_lock = threading.Lock()


def get_default_config_path() -> Path:
    """Get the default config file path.

    Can be overridden by FFSUP_CONFIG_PATH environment variable.

    Returns:
        Path to config file.
    """
    env_path = os.environ.get("FFSUP_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def _read_toml(path: Path, *, strict: bool) -> dict:
    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with path.open("rb") as f:
            config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        if strict:
            raise ConfigError(f"Failed to load config file {path}: {e}") from e
        logger.warning("Failed to load config file %s: %s", path, e)
        return {}

    logger.debug("Loaded config from %s", path)
    return config


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Load configuration from TOML file.

    Results are cached with mtime-based invalidation, so an edited file is
    picked up on the next call. Use clear_config_cache() to force a reload.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, raise ConfigError on read or parse failures.
                If False (default), return empty dict on errors.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.

    Raises:
        ConfigError: When strict=True and the file cannot be parsed.
    """
    if path is None:
        path = get_default_config_path()

    try:
        current_mtime = path.stat().st_mtime
    except OSError:
        current_mtime = 0.0

    with _config_cache_lock:
        cached = _config_cache.get(path)
        if cached is not None and cached[1] == current_mtime:
            return cached[0]

        result = _read_toml(path, strict=strict)
        _config_cache[path] = (result, current_mtime)
        return result


def clear_config_cache() -> None:
    """Clear the config file cache.

    Primarily useful for testing.
    """
    with _config_cache_lock:
        _config_cache.clear()


def _section(file_config: dict, name: str) -> dict[str, Any]:
    value = file_config.get(name, {})
    if not isinstance(value, dict):
        raise ConfigError(f"[{name}] must be a table, got {type(value).__name__}")
    return value


def _optional_path(value: Any) -> Path | None:
    return Path(value).expanduser() if value else None


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    ffmpeg_path: Path | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> FFsupConfig:
    """Get ffsup configuration with full precedence handling.

    Precedence (highest to lowest):
    1. CLI arguments passed to this function
    2. Environment variables (FFSUP_*)
    3. Config file
    4. Default values

    Args:
        config_path: Path to config file (overrides FFSUP_CONFIG_PATH).
        ffmpeg_path: CLI override for ffmpeg path.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: If True, raise ConfigError on config file parse failures.

    Returns:
        FFsupConfig with merged configuration.

    Raises:
        ConfigError: If a value is invalid, or when strict=True and the
            config file cannot be parsed.
    """
    reader = env_reader or EnvReader()
    file_config = load_config_file(config_path, strict=strict)

    tools_file = _section(file_config, "tools")
    supervisor_file = _section(file_config, "supervisor")
    encode_file = _section(file_config, "encode")
    logging_file = _section(file_config, "logging")

    try:
        tools = ToolPathsConfig(
            ffmpeg=(
                ffmpeg_path
                or reader.get_path("FFSUP_FFMPEG_PATH")
                or _optional_path(tools_file.get("ffmpeg"))
            ),
        )

        supervisor = SupervisorConfig(
            cleanup_attempts=reader.get_int(
                "FFSUP_CLEANUP_ATTEMPTS",
                supervisor_file.get("cleanup_attempts", SupervisorConfig.cleanup_attempts),
            ),
            cleanup_delay_seconds=reader.get_float(
                "FFSUP_CLEANUP_DELAY",
                supervisor_file.get(
                    "cleanup_delay_seconds", SupervisorConfig.cleanup_delay_seconds
                ),
            ),
        )

        encode = EncodeDefaultsConfig(
            vendor=reader.get_str(
                "FFSUP_VENDOR", encode_file.get("vendor", EncodeDefaultsConfig.vendor)
            ),
            quality=reader.get_int(
                "FFSUP_QUALITY",
                encode_file.get("quality", EncodeDefaultsConfig.quality),
            ),
            preset_index=encode_file.get("preset_index"),
            device_index=reader.get_int(
                "FFSUP_DEVICE",
                encode_file.get("device_index", EncodeDefaultsConfig.device_index),
            ),
        )

        log_config = LoggingConfig(
            level=reader.get_str(
                "FFSUP_LOG_LEVEL", logging_file.get("level", LoggingConfig.level)
            ),
            file=(
                reader.get_path("FFSUP_LOG_FILE", must_exist=False)
                or _optional_path(logging_file.get("file"))
            ),
            format=reader.get_str(
                "FFSUP_LOG_FORMAT", logging_file.get("format", LoggingConfig.format)
            ),
            include_stderr=logging_file.get(
                "include_stderr", LoggingConfig.include_stderr
            ),
            max_bytes=logging_file.get("max_bytes", LoggingConfig.max_bytes),
            backup_count=logging_file.get("backup_count", LoggingConfig.backup_count),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    return FFsupConfig(
        tools=tools,
        supervisor=supervisor,
        encode=encode,
        logging=log_config,
    )
