"""Tests for CLI module."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from conftest import write_file

from mcp_mate.cli import StrictFileHandler, parse_args, run, setup_logging
from mcp_mate.errors import LogWriteError


class TestParseArgs:
    """Tests for argument parsing."""

    def test_default_args(self) -> None:
        """Test default argument values."""
        args = parse_args([])

        assert args.command is None
        assert args.root is None
        assert args.config is None
        assert args.log_level == "warn"
        assert args.debug is False
        assert args.quiet is False

    def test_global_options(self, tmp_path: Path) -> None:
        """Test root, config and logging flags."""
        args = parse_args(["-r", str(tmp_path), "-c", "mate.yaml", "-l", "debug", "-q", "instructions"])

        assert args.root == tmp_path
        assert args.config == Path("mate.yaml")
        assert args.log_level == "debug"
        assert args.quiet is True
        assert args.command == "instructions"

    def test_tools_list(self) -> None:
        """Test mcp:tools:list options."""
        args = parse_args(["mcp:tools:list", "--filter", "php-*", "--extension", "acme/a", "--format", "json"])

        assert args.command == "mcp:tools:list"
        assert args.pattern == "php-*"
        assert args.extension == "acme/a"
        assert args.format == "json"

    def test_tools_call(self) -> None:
        """Test mcp:tools:call positional arguments."""
        args = parse_args(["mcp:tools:call", "php-version", "{}"])

        assert args.name == "php-version"
        assert args.json_input == "{}"
        assert args.format == "pretty"

    def test_capabilities_list_type(self) -> None:
        """Test --type maps to kind."""
        args = parse_args(["mcp:capabilities:list", "--type", "prompt"])

        assert args.kind == "prompt"
        assert args.format == "table"

    def test_invalid_format(self) -> None:
        """Test unsupported formats are rejected by argparse."""
        with pytest.raises(SystemExit):
            parse_args(["mcp:tools:inspect", "x", "--format", "yaml"])

    def test_reads_sys_argv(self) -> None:
        """Test parsing falls back to sys.argv."""
        with patch("sys.argv", ["mate", "debug:extensions", "--show-all"]):
            args = parse_args()

        assert args.command == "debug:extensions"
        assert args.show_all is True


def clear_root_logger() -> logging.Logger:
    """Remove all root handlers so basicConfig applies."""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)
    return root


class TestSetupLogging:
    """Tests for logging setup."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        yield
        for handler in root.handlers[:]:
            if handler not in saved_handlers:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(saved_level)

    def test_info_logging_level(self) -> None:
        """Test info logging level maps correctly."""
        root = clear_root_logger()

        setup_logging("info")
        assert root.level == logging.INFO

    def test_warn_logging_level(self) -> None:
        """Test warn logging level maps correctly."""
        root = clear_root_logger()

        setup_logging("warn")
        assert root.level == logging.WARNING

    def test_error_logging_level(self) -> None:
        """Test error logging level maps correctly."""
        root = clear_root_logger()

        setup_logging("error")
        assert root.level == logging.ERROR

    def test_log_file(self, tmp_path: Path) -> None:
        """Test records are appended to the log file."""
        root = clear_root_logger()
        log_file = tmp_path / "var/dev.log"

        setup_logging("debug", log_file)
        logging.getLogger("mcp_mate.test").debug("hello file")
        for handler in root.handlers:
            handler.flush()

        assert "hello file" in log_file.read_text()


class TestStrictFileHandler:
    """Tests for StrictFileHandler."""

    def test_unwritable_path_raises(self, tmp_path: Path) -> None:
        """A log file that cannot be opened raises LogWriteError."""
        blocker = write_file(tmp_path / "blocker", "not a directory")
        handler = StrictFileHandler(blocker / "dev.log")
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "message", None, None)

        with pytest.raises(LogWriteError, match="Failed to write to log file"):
            handler.emit(record)

    def test_handle_error_raises(self, tmp_path: Path) -> None:
        """Write failures are raised rather than printed."""
        handler = StrictFileHandler(tmp_path / "dev.log")
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "message", None, None)

        with pytest.raises(LogWriteError):
            handler.handleError(record)


class TestRun:
    """Tests for command dispatch and error reporting."""

    def test_success(self, demo_project: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A successful command exits 0 and writes to stdout."""
        code = run(parse_args(["-r", str(demo_project), "mcp:tools:list", "--format", "json"]))

        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["summary"]["total"] == 6

    def test_error_on_stderr(self, demo_project: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Errors print a single line on stderr and exit 1."""
        code = run(parse_args(["-r", str(demo_project), "mcp:tools:inspect", "nope"]))

        captured = capsys.readouterr()
        assert code == 1
        assert captured.out == ""
        assert captured.err.startswith('Error: Tool "nope" not found')

    def test_error_as_json(self, demo_project: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """In JSON mode errors are a JSON object on stdout."""
        code = run(
            parse_args(["-r", str(demo_project), "mcp:tools:call", "app-info", "[]", "--format", "json"])
        )

        assert code == 1
        assert json.loads(capsys.readouterr().out) == {
            "error": True,
            "message": "JSON input must be an object",
        }

    def test_config_error(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A missing explicit config file is fatal."""
        code = run(parse_args(["-r", str(tmp_path), "-c", "missing.yaml", "instructions"]))

        assert code == 1
        assert "Config file not found" in capsys.readouterr().err

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Without a command the help text is shown."""
        assert run(parse_args([])) == 0
        assert "mcp:tools:list" in capsys.readouterr().out


class TestMain:
    """Tests for main entry point."""

    def test_main_loads_dotenv(self) -> None:
        """Test that main loads .env file."""
        from mcp_mate.cli import main

        with patch("mcp_mate.cli.load_dotenv") as mock_dotenv:
            with patch("mcp_mate.cli.parse_args") as mock_parse:
                mock_parse.return_value = argparse.Namespace(command=None)

                with patch("mcp_mate.cli.run") as mock_run:
                    mock_run.side_effect = KeyboardInterrupt()

                    main()

            mock_dotenv.assert_called_once()

    def test_main_exit_code(self) -> None:
        """Test that main exits with the command's code."""
        from mcp_mate.cli import main

        with patch("mcp_mate.cli.load_dotenv"):
            with patch("mcp_mate.cli.parse_args"):
                with patch("mcp_mate.cli.run", return_value=1):
                    with pytest.raises(SystemExit) as exc_info:
                        main()

        assert exc_info.value.code == 1

    def test_main_exits_on_error(self) -> None:
        """Test that main exits with code 1 on unexpected errors."""
        from mcp_mate.cli import main

        with patch("mcp_mate.cli.load_dotenv"):
            with patch("mcp_mate.cli.parse_args"):
                with patch("mcp_mate.cli.run") as mock_run:
                    mock_run.side_effect = RuntimeError("Fatal error")

                    with pytest.raises(SystemExit) as exc_info:
                        main()

                    assert exc_info.value.code == 1
