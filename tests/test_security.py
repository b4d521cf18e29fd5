"""
Security tests for Config Keeper.

Tests file size limits, byte-exact reads and error message scrubbing.
"""

import os
import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from keeper.core.security import (
    MAX_FILE_SIZE_BYTES,
    safe_read_text,
    sanitize_error_message,
    validate_file_size,
)


class TestFileSizeLimits:
    """Test memory exhaustion guards."""

    def test_small_file_ok(self, tmp_path):
        path = tmp_path / "app.toml"
        path.write_text("a = 1\n")
        assert validate_file_size(path) == (True, None)

    def test_large_file_rejected(self, tmp_path):
        path = tmp_path / "app.toml"
        path.write_bytes(b"x" * 101)
        is_valid, message = validate_file_size(path, max_size=100)
        assert not is_valid
        assert "101" in message

    def test_missing_file_deferred(self, tmp_path):
        """Missing files are reported by the read, not the size check."""
        assert validate_file_size(tmp_path / "missing") == (True, None)

    def test_default_limit(self):
        assert MAX_FILE_SIZE_BYTES == 10 * 1024 * 1024


class TestSafeReadText:
    """Test byte-exact reads."""

    def test_keeps_crlf(self, tmp_path):
        path = tmp_path / "app.env"
        path.write_bytes(b"A=1\r\nB=2\r\n")
        assert safe_read_text(path) == "A=1\r\nB=2\r\n"

    def test_keeps_lone_cr(self, tmp_path):
        path = tmp_path / "app.env"
        path.write_bytes(b"A=1\rB=2")
        assert safe_read_text(path) == "A=1\rB=2"

    def test_too_large(self, tmp_path):
        path = tmp_path / "app.env"
        path.write_bytes(b"A=" + b"x" * 50)
        with pytest.raises(ValueError):
            safe_read_text(path, max_size=10)

    def test_bad_encoding(self, tmp_path):
        path = tmp_path / "app.env"
        path.write_bytes(b"\xff")
        with pytest.raises(UnicodeDecodeError):
            safe_read_text(path)


class TestErrorMessageScrubbing:
    """Test that console messages don't leak absolute paths."""

    def test_workspace_root_replaced(self, tmp_path):
        message = f"IO error: Cannot read {tmp_path.resolve()}/config/app.toml"
        scrubbed = sanitize_error_message(message, tmp_path)
        assert scrubbed == "IO error: Cannot read <workspace>/config/app.toml"

    def test_home_replaced(self):
        home = os.path.expanduser("~")
        if home in ("~", os.sep):
            pytest.skip("No usable home directory")
        scrubbed = sanitize_error_message(f"Cannot read {home}/secrets.env")
        assert scrubbed == "Cannot read <home>/secrets.env"

    def test_plain_message_untouched(self):
        assert sanitize_error_message("Parse error: bad") == "Parse error: bad"
