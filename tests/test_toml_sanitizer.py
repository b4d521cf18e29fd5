"""
Tests for the layout-preserving TOML sanitizer.

Comments, blank lines and table header order must survive redaction; only
leaf values change.
"""

import pytest
import tomlkit
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from keeper.sanitizers import ParseError, TomlSanitizer, sanitize


PYPROJECT = '''\
# Project metadata
[tool.poetry]
name = "demo"  # the package name
version = "1.2.3"

# Runtime dependencies
[tool.poetry.dependencies]
python = "^3.11"
requests = { version = "2.31", optional = true }

[tool.ruff]
line-length = 100
select = ["E", "F"]

# Private index
[[tool.poetry.source]]
name = "internal"
url = "https://pypi.internal/simple"
'''


class TestTomlLayout:
    """Test that layout survives redaction."""

    def test_comments_preserved(self):
        result = sanitize(PYPROJECT, "pyproject.toml")
        for comment in ("# Project metadata", "# Runtime dependencies",
                        "# Private index", "# the package name"):
            assert comment in result

    def test_header_order_preserved(self):
        """Out-of-order tables stay where they were written."""
        result = sanitize(PYPROJECT, "pyproject.toml")
        positions = [
            result.index("[tool.poetry]\n"),
            result.index("[tool.poetry.dependencies]\n"),
            result.index("[tool.ruff]\n"),
            result.index("[[tool.poetry.source]]\n"),
        ]
        assert positions == sorted(positions)

    def test_inline_comment_kept_with_value(self):
        result = sanitize(PYPROJECT, "pyproject.toml")
        assert 'name = "***"  # the package name' in result

    def test_values_redacted(self):
        result = tomlkit.parse(sanitize(PYPROJECT, "pyproject.toml")).unwrap()
        assert result == {
            "tool": {
                "poetry": {
                    "name": "***",
                    "version": "***",
                    "dependencies": {
                        "python": "***",
                        "requests": {"version": "***", "optional": False},
                    },
                    "source": [{"name": "***", "url": "***"}],
                },
                "ruff": {"line-length": 0, "select": ["***", "***"]},
            }
        }

    def test_simple_document_exact(self):
        content = (
            "# top\n"
            'title = "x"   # c\n'
            "port = 8080\n"
            "ratio = 1.5\n"
            "debug = true\n"
        )
        assert sanitize(content, "app.toml") == (
            "# top\n"
            'title = "***"   # c\n'
            "port = 0\n"
            "ratio = 0.0\n"
            "debug = false\n"
        )

    def test_idempotent(self):
        once = sanitize(PYPROJECT, "pyproject.toml")
        assert sanitize(once, "pyproject.toml") == once


class TestTomlValues:
    """Test redaction of each value kind."""

    def test_datetimes_unchanged(self):
        content = (
            "created = 2024-01-01T10:00:00Z\n"
            "day = 2024-01-01\n"
            "at = 07:32:00\n"
            'owner = "me"\n'
        )
        result = sanitize(content, "app.toml")
        assert "created = 2024-01-01T10:00:00Z\n" in result
        assert "day = 2024-01-01\n" in result
        assert "at = 07:32:00\n" in result
        assert 'owner = "***"\n' in result

    def test_arrays(self):
        result = tomlkit.parse(sanitize("ports = [80, 443]\nflags = [true]\n", "a.toml")).unwrap()
        assert result == {"ports": [0, 0], "flags": [False]}

    def test_nested_arrays(self):
        result = tomlkit.parse(sanitize('matrix = [[1, 2], ["a"]]\n', "a.toml")).unwrap()
        assert result == {"matrix": [[0, 0], ["***"]]}

    def test_array_of_inline_tables(self):
        content = 'users = [{ name = "a", id = 1 }, { name = "b", id = 2 }]\n'
        result = tomlkit.parse(sanitize(content, "a.toml")).unwrap()
        assert result == {"users": [{"name": "***", "id": 0}, {"name": "***", "id": 0}]}

    def test_dotted_keys(self):
        content = 'server.host = "db"\nserver.port = 5432\n'
        result = tomlkit.parse(sanitize(content, "a.toml")).unwrap()
        assert result == {"server": {"host": "***", "port": 0}}

    def test_array_of_tables_every_element(self):
        content = (
            "[[servers]]\n"
            'host = "a"\n'
            "\n"
            "[[servers]]\n"
            'host = "b"\n'
        )
        result = tomlkit.parse(sanitize(content, "a.toml")).unwrap()
        assert result == {"servers": [{"host": "***"}, {"host": "***"}]}

    def test_literal_and_multiline_strings(self):
        content = "path = 'C:\\temp'\nbody = \"\"\"\nline\n\"\"\"\n"
        result = tomlkit.parse(sanitize(content, "a.toml")).unwrap()
        assert result == {"path": "***", "body": "***"}

    def test_empty_document(self):
        assert sanitize("", "a.toml") == ""


class TestTomlErrors:
    """Test malformed input."""

    def test_unterminated_string(self):
        with pytest.raises(ParseError) as exc_info:
            TomlSanitizer().sanitize('a = "unterminated\n')
        assert exc_info.value.detail.startswith("Invalid TOML:")

    def test_duplicate_key(self):
        with pytest.raises(ParseError):
            sanitize("a = 1\na = 2\n", "a.toml")
