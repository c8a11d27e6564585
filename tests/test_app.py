"""Tests for the root Typer app and the console-script entry point."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from loopauth import __version__
from loopauth.app import app, main
from loopauth.exceptions import BindError
from loopauth.output import OutputFormat, get_output


@pytest.fixture(autouse=True)
def _no_signal_handlers():
    with patch("loopauth.app._setup_signal_handlers"):
        yield


class TestRootCallback:
    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"loopauth {__version__}" in result.output

    def test_no_args_shows_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, [])
        assert "auth" in result.output
        assert "config" in result.output

    def test_json_flag_sets_output_format(
        self, cli_runner: CliRunner, isolated_config: Path
    ) -> None:
        result = cli_runner.invoke(app, ["--json", "--quiet", "config", "show"])
        assert result.exit_code == 0
        assert get_output().format == OutputFormat.JSON
        assert get_output().is_quiet is True

    def test_verbose_enables_debug_logging(
        self, cli_runner: CliRunner, isolated_config: Path
    ) -> None:
        with patch("loopauth.app.logging.basicConfig") as mock_basic:
            result = cli_runner.invoke(app, ["--verbose", "--no-color", "config", "show"])

        assert result.exit_code == 0
        assert mock_basic.call_args.kwargs["level"] == logging.DEBUG


class TestMain:
    def test_loopauth_error_exits_with_its_code(self, capsys) -> None:
        with patch("loopauth.app.app", side_effect=BindError("no loopback")):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 6
        assert "no loopback" in capsys.readouterr().err

    def test_unexpected_error_writes_crash_log(self, isolated_config: Path, capsys) -> None:
        with patch("loopauth.app.app", side_effect=RuntimeError("kaboom")):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        logs = list((isolated_config / "data" / "loopauth" / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "RuntimeError: kaboom" in logs[0].read_text()
        assert "Unexpected error" in capsys.readouterr().err

    def test_keyboard_interrupt_exits_130(self, capsys) -> None:
        with patch("loopauth.app.app", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 130
        assert "Cancelled." in capsys.readouterr().err
