"""Unit tests for the exception hierarchy."""

from ffsup.core.exceptions import (
    ConfigError,
    FFsupError,
    InvalidPresetIndexError,
    SupervisorBusyError,
    ToolNotFoundError,
)


class TestExceptions:
    """Tests for exception types and messages."""

    def test_all_share_base(self):
        for exc in (
            InvalidPresetIndexError("nvidia", 12, 12),
            SupervisorBusyError("busy"),
            ToolNotFoundError("ffmpeg"),
            ConfigError("bad"),
        ):
            assert isinstance(exc, FFsupError)

    def test_invalid_preset_message(self):
        exc = InvalidPresetIndexError("intel", 7, 5)
        assert str(exc) == "Preset level 7 does not exist for intel (valid range 0-4)"
        assert isinstance(exc, IndexError)

    def test_tool_not_found(self):
        exc = ToolNotFoundError("ffmpeg")
        assert exc.tool == "ffmpeg"
        assert "ffmpeg" in str(exc)

    def test_config_error_is_value_error(self):
        assert isinstance(ConfigError("bad"), ValueError)
