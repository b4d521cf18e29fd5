"""
Tests for the config-keeper command line.
"""

import io
import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from keeper.cli import EXIT_DRIFT, EXIT_ERROR, EXIT_OK, main
from keeper.core.hashing import content_hash
from keeper.core.colors import Colors, print_box, strip_colors


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    root = tmp_path / "ws"
    root.mkdir()
    (root / "app.env").write_text("API_KEY=secret\n# note\n")
    (root / "app.json").write_text('{"token": "abc", "retries": 3}')
    # No stray keeper.* config gets picked up from the test runner's cwd
    monkeypatch.chdir(tmp_path)
    return root


class TestSanitizeCommand:
    """Test the sanitize subcommand."""

    def test_prints_redacted(self, workspace, capsys):
        code = main(["sanitize", "app.env", "--root", str(workspace)])
        captured = capsys.readouterr()
        assert code == EXIT_OK
        assert captured.out == "API_KEY=***\n# note\n"

    def test_json(self, workspace, capsys):
        assert main(["sanitize", "app.json", "--root", str(workspace)]) == EXIT_OK
        assert capsys.readouterr().out == '{\n  "token": "***",\n  "retries": 0\n}'

    def test_output_file(self, workspace, capsys):
        code = main(["--quiet", "sanitize", "app.env", "--root", str(workspace),
                     "--output", "redacted/app.env"])
        assert code == EXIT_OK
        assert (workspace / "redacted" / "app.env").read_text() == "API_KEY=***\n# note\n"
        assert capsys.readouterr().out == ""

    def test_output_outside_workspace(self, workspace, capsys):
        code = main(["sanitize", "app.env", "--root", str(workspace),
                     "--output", "../leak.env"])
        assert code == EXIT_ERROR
        assert not (workspace.parent / "leak.env").exists()

    def test_traversal_rejected(self, workspace, capsys):
        code = main(["sanitize", "../../etc/passwd", "--root", str(workspace)])
        err = capsys.readouterr().err
        assert code == EXIT_ERROR
        assert "outside workspace" in err
        assert "<workspace>" in err

    def test_unsupported_format(self, workspace, capsys):
        (workspace / "notes.txt").write_text("hello")
        code = main(["sanitize", "notes.txt", "--root", str(workspace)])
        assert code == EXIT_ERROR
        assert "Unsupported format" in capsys.readouterr().err

    def test_malformed(self, workspace, capsys):
        (workspace / "bad.json").write_text("{")
        code = main(["sanitize", "bad.json", "--root", str(workspace)])
        assert code == EXIT_ERROR
        assert "Invalid JSON" in capsys.readouterr().err

    def test_deeply_nested_input(self, workspace, capsys):
        (workspace / "deep.json").write_text("[" * 100000 + "]" * 100000)
        code = main(["sanitize", "deep.json", "--root", str(workspace)])
        assert code == EXIT_ERROR
        assert "nesting too deep" in capsys.readouterr().err


class TestHashCommand:
    """Test the hash subcommand."""

    def test_hash(self, workspace, capsys):
        code = main(["hash", "app.env", "--root", str(workspace)])
        assert code == EXIT_OK
        expected = content_hash("API_KEY=secret\n# note\n")
        assert capsys.readouterr().out == f"{expected}  app.env\n"

    def test_missing_file(self, workspace, capsys):
        code = main(["hash", "missing.env", "--root", str(workspace)])
        assert code == EXIT_ERROR
        assert "IO error" in capsys.readouterr().err


class TestStatusCommand:
    """Test drift checks against a stored snapshot."""

    def test_in_sync(self, workspace, tmp_path, capsys):
        stored = tmp_path / "stored.env"
        stored.write_text("API_KEY=secret\n# note\n")

        code = main(["status", str(stored), "app.env", "--root", str(workspace)])
        assert code == EXIT_OK
        assert "In sync" in capsys.readouterr().out

    def test_drift(self, workspace, tmp_path, capsys):
        stored = tmp_path / "stored.env"
        stored.write_text("API_KEY=old\n")

        code = main(["status", str(stored), "app.env", "--root", str(workspace)])
        assert code == EXIT_DRIFT
        assert "External changes detected" in capsys.readouterr().out

    def test_quiet_prints_nothing(self, workspace, tmp_path, capsys):
        stored = tmp_path / "stored.env"
        stored.write_text("API_KEY=old\n")

        code = main(["-q", "status", str(stored), "app.env", "--root", str(workspace)])
        assert code == EXIT_DRIFT
        assert capsys.readouterr().out == ""

    def test_missing_snapshot(self, workspace, tmp_path, capsys):
        code = main(["status", str(tmp_path / "nope.env"), "app.env", "--root", str(workspace)])
        assert code == EXIT_ERROR
        assert "Cannot read snapshot" in capsys.readouterr().err


class TestMergeCommand:
    """Test conflict marker output."""

    def test_markers(self, workspace, tmp_path, capsys):
        stored = tmp_path / "stored.env"
        stored.write_text("API_KEY=old")
        (workspace / "app.env").write_text("API_KEY=new")

        code = main(["merge", str(stored), "app.env", "--root", str(workspace)])
        assert code == EXIT_OK
        assert capsys.readouterr().out == (
            "<<<<<<< Database Version\n"
            "API_KEY=old\n"
            "=======\n"
            "API_KEY=new\n"
            ">>>>>>> Disk Version\n"
        )

    def test_no_differences(self, workspace, tmp_path, capsys):
        stored = tmp_path / "stored.env"
        stored.write_text("API_KEY=secret\n# note\n")

        code = main(["merge", str(stored), "app.env", "--root", str(workspace)])
        captured = capsys.readouterr()
        assert code == EXIT_OK
        assert captured.out == ""
        assert "No differences" in captured.err


class TestFormatsCommand:
    def test_lists_extensions(self, workspace, capsys):
        assert main(["formats"]) == EXIT_OK
        out = capsys.readouterr().out
        for ext in (".json", ".yaml", ".yml", ".toml", ".env"):
            assert ext in out


class TestConfigFile:
    """Test global configuration handling."""

    def test_workspace_root_from_config(self, workspace, tmp_path, capsys):
        config = tmp_path / "keeper.yaml"
        config.write_text("workspace:\n  name: demo\n  root: ws\n")

        code = main(["--config", str(config), "hash", "app.env"])
        assert code == EXIT_OK
        assert capsys.readouterr().out.endswith("  app.env\n")

    def test_config_discovered_in_cwd(self, workspace, tmp_path, capsys):
        (tmp_path / "keeper.toml").write_text('[workspace]\nroot = "ws"\n')

        assert main(["sanitize", "app.env"]) == EXIT_OK
        assert capsys.readouterr().out == "API_KEY=***\n# note\n"

    def test_size_limit_from_config(self, workspace, tmp_path, capsys):
        config = tmp_path / "keeper.json"
        config.write_text('{"workspace": {"root": "ws"}, "files": {"max_size": 5}}')

        code = main(["--config", str(config), "sanitize", "app.env"])
        assert code == EXIT_ERROR
        assert "too large" in capsys.readouterr().err

    def test_invalid_config(self, workspace, tmp_path, capsys):
        config = tmp_path / "keeper.yaml"
        config.write_text("files:\n  max_size: -1\n")

        code = main(["--config", str(config), "formats"])
        assert code == EXIT_ERROR
        assert "files.max_size" in capsys.readouterr().err

    def test_missing_config(self, workspace, tmp_path, capsys):
        code = main(["--config", str(tmp_path / "nope.yaml"), "formats"])
        assert code == EXIT_ERROR
        assert "Config file not found" in capsys.readouterr().err

    def test_unknown_key_warning(self, workspace, tmp_path, capsys):
        config = tmp_path / "keeper.yaml"
        config.write_text("extra:\n  x: 1\n")

        assert main(["--config", str(config), "formats"]) == EXIT_OK
        assert "Unknown section" in capsys.readouterr().err

    def test_log_file(self, workspace, tmp_path, capsys):
        log_file = tmp_path / "logs" / "keeper.log"
        code = main(["--verbose", "--log-file", str(log_file),
                     "sanitize", "app.env", "--root", str(workspace)])
        assert code == EXIT_OK
        assert log_file.exists()


class TestArgumentParsing:
    def test_command_required(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2


class TestStatusBox:
    """Test the framed status output."""

    def test_colored_lines_measured_without_escapes(self):
        out = io.StringIO()
        print_box([Colors.GREEN + "ok" + Colors.RESET], title="Status", width=20, stream=out)
        lines = out.getvalue().splitlines()
        assert strip_colors(lines[1]) == "│  ok" + " " * 14 + "│"
        assert all(len(strip_colors(line)) == 20 for line in lines)

    def test_long_line_truncated(self):
        out = io.StringIO()
        print_box(["x" * 50], width=20, stream=out)
        body = out.getvalue().splitlines()[1]
        assert "..." in body
        assert len(body) == 20
