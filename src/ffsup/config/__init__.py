"""Configuration management for ffsup.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (FFSUP_*)
3. Config file (~/.ffsup/config.toml)
4. Default values (lowest priority)
"""

from ffsup.config.env import EnvReader
from ffsup.config.loader import (
    clear_config_cache,
    get_config,
    get_default_config_path,
    load_config_file,
)
from ffsup.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from ffsup.config.models import (
    EncodeDefaultsConfig,
    FFsupConfig,
    LoggingConfig,
    SupervisorConfig,
    ToolPathsConfig,
)

__all__ = [
    # Models
    "EncodeDefaultsConfig",
    "FFsupConfig",
    "LoggingConfig",
    "SupervisorConfig",
    "ToolPathsConfig",
    # Loader
    "clear_config_cache",
    "get_config",
    "get_default_config_path",
    "load_config_file",
    "EnvReader",
    "build_logging_config",
    "configure_logging_from_cli",
]
