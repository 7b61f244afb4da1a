"""Reporting helpers for supervised runs."""

from ffsup.jobs.progress import (
    NullProgressReporter,
    ProgressReporter,
    StderrProgressReporter,
    attach_reporter,
)

__all__ = [
    "NullProgressReporter",
    "ProgressReporter",
    "StderrProgressReporter",
    "attach_reporter",
]
