"""Shared test fixtures for ffsup."""

import shutil
import sys
import tempfile
import textwrap
from pathlib import Path

import pytest

from ffsup.config import clear_config_cache

# Fake ffmpeg: prints the lines in FAKE_FFMPEG_LINES to stderr (or stdout
# for lines prefixed "OUT:"), creates the output file named by its last
# argument, then exits with FAKE_FFMPEG_EXIT. A line "SLEEP:n" sleeps n
# seconds; a bare "SLEEP" sleeps until killed.
FAKE_FFMPEG_SOURCE = textwrap.dedent(
    """
    import os
    import sys
    import time

    output = sys.argv[-1]
    with open(output, "w") as f:
        f.write("partial")

    for line in os.environ.get("FAKE_FFMPEG_LINES", "").split("|"):
        if not line:
            continue
        if line.startswith("SLEEP"):
            _, _, seconds = line.partition(":")
            time.sleep(float(seconds or 60))
            continue
        stream = sys.stderr
        if line.startswith("OUT:"):
            stream = sys.stdout
            line = line[4:]
        end = "\\r" if line.startswith("frame=") else "\\n"
        stream.write(line + end)
        stream.flush()

    sys.exit(int(os.environ.get("FAKE_FFMPEG_EXIT", "0")))
    """
)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config loading at an empty location and clear the cache."""
    monkeypatch.setenv("FFSUP_CONFIG_PATH", str(tmp_path / "missing-config.toml"))
    for var in (
        "FFSUP_FFMPEG_PATH",
        "FFSUP_CLEANUP_ATTEMPTS",
        "FFSUP_CLEANUP_DELAY",
        "FFSUP_VENDOR",
        "FFSUP_QUALITY",
        "FFSUP_DEVICE",
        "FFSUP_LOG_LEVEL",
        "FFSUP_LOG_FILE",
        "FFSUP_LOG_FORMAT",
    ):
        monkeypatch.delenv(var, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def fake_ffmpeg(temp_dir: Path) -> Path:
    """Write an executable fake ffmpeg wrapper and return its path.

    The wrapper runs the fake with the current interpreter so no real
    ffmpeg is needed.
    """
    script = temp_dir / "fake_ffmpeg.py"
    script.write_text(FAKE_FFMPEG_SOURCE)

    if sys.platform == "win32":
        wrapper = temp_dir / "ffmpeg.bat"
        wrapper.write_text(f'@"{sys.executable}" "{script}" %*\n')
    else:
        wrapper = temp_dir / "ffmpeg"
        wrapper.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{script}" "$@"\n')
        wrapper.chmod(0o755)
    return wrapper
