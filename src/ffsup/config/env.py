"""FFSUP_* environment overrides.

EnvReader reads the variables get_config() layers over the config file.
Tests pass their own mapping instead of patching os.environ.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import TypeVar

logger = logging.getLogger(__name__)

_T = TypeVar("_T", int, float)


class EnvReader:
    """Typed access to FFSUP_* overrides.

    An unparseable value is logged and treated as unset, so a typo in the
    environment falls back to the file or default rather than aborting.

    Example:
        reader = EnvReader(env={"FFSUP_QUALITY": "22"})
        reader.get_int("FFSUP_QUALITY", 18)  # Returns 22
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def get_str(self, var: str, default: str | None = None) -> str | None:
        return self._env.get(var, default)

    def get_int(self, var: str, default: int | None = None) -> int | None:
        return self._number(var, default, int)

    def get_float(self, var: str, default: float | None = None) -> float | None:
        return self._number(var, default, float)

    def get_path(
        self, var: str, must_exist: bool = True, default: Path | None = None
    ) -> Path | None:
        """Read a path, expanding ~.

        Args:
            var: Environment variable name.
            must_exist: Treat a path that does not exist as unset.
            default: Returned when unset.
        """
        value = self._env.get(var)
        if value is None:
            return default
        path = Path(value).expanduser()
        if must_exist and not path.exists():
            logger.warning("%s points to a missing path, ignoring: %s", var, value)
            return default
        return path

    def _number(
        self, var: str, default: _T | None, convert: type[_T]
    ) -> _T | None:
        value = self._env.get(var)
        if value is None:
            return default
        try:
            return convert(value)
        except ValueError:
            logger.warning(
                "Ignoring %s=%r: not a valid %s", var, value, convert.__name__
            )
            return default
