"""Structured logging module for ffsup.

Provides configurable logging with JSON format support and file rotation.
Includes run context support so records carry the active run's id.
"""

from ffsup.logging.config import configure_logging
from ffsup.logging.context import (
    RunContextFilter,
    clear_run_context,
    get_run_context,
    run_context,
    set_run_context,
)
from ffsup.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "RunContextFilter",
    "clear_run_context",
    "configure_logging",
    "get_run_context",
    "run_context",
    "set_run_context",
]
