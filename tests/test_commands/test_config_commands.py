"""CLI tests for ``loopauth config show|set|reset``."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from loopauth.app import app
from loopauth.config import load_global_config, save_global_config
from loopauth.models import DEFAULT_DASHBOARD_API_ENDPOINT, GlobalConfig


class TestConfigShow:
    def test_json(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "--quiet", "config", "show"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["dashboard_api_endpoint"] == DEFAULT_DASHBOARD_API_ENDPOINT
        assert data["open_browser"] is True
        assert data["login_timeout"] is None

    def test_plain_shows_config_dir(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "--plain", "config", "show"])

        assert result.exit_code == 0
        assert "Config directory:" in result.output
        assert "open_browser\tTrue" in result.output

    def test_invalid_config_file(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        path = isolated_config / "config" / "loopauth" / "config.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("{broken", encoding="utf-8")

        result = cli_runner.invoke(app, ["--no-color", "config", "show"])
        assert result.exit_code != 0


class TestConfigSet:
    def test_set_endpoint(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app,
            ["--no-color", "config", "set", "dashboard_api_endpoint", "https://dash.example.com/"],
        )

        assert result.exit_code == 0, result.output
        assert load_global_config().dashboard_api_endpoint == "https://dash.example.com"

    @pytest.mark.parametrize("value, expected", [("false", False), ("no", False), ("true", True)])
    def test_set_bool(
        self, cli_runner: CliRunner, isolated_config: Path, value: str, expected: bool
    ) -> None:
        result = cli_runner.invoke(app, ["--no-color", "config", "set", "open_browser", value])

        assert result.exit_code == 0, result.output
        assert load_global_config().open_browser is expected

    def test_set_and_clear_timeout(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "config", "set", "login_timeout", "300"])
        assert result.exit_code == 0, result.output
        assert load_global_config().login_timeout == 300

        result = cli_runner.invoke(app, ["--no-color", "config", "set", "login_timeout", "none"])
        assert result.exit_code == 0, result.output
        assert load_global_config().login_timeout is None

    @pytest.mark.parametrize(
        "key, value, message",
        [
            ("unknown_key", "x", "Unknown config key"),
            ("login_timeout", "soon", "Expected integer"),
            ("login_timeout", "0", "Validation error"),
            ("pricing_api_endpoint", "ftp://pricing", "Invalid pricing_api_endpoint"),
        ],
    )
    def test_invalid_values(
        self,
        cli_runner: CliRunner,
        isolated_config: Path,
        key: str,
        value: str,
        message: str,
    ) -> None:
        result = cli_runner.invoke(app, ["--no-color", "config", "set", key, value])

        assert result.exit_code == 2
        assert message in result.output
        assert load_global_config() == GlobalConfig()


class TestConfigReset:
    def test_force_resets(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(open_browser=False, login_timeout=60))

        result = cli_runner.invoke(app, ["--no-color", "--force", "config", "reset"])

        assert result.exit_code == 0
        assert load_global_config() == GlobalConfig()

    def test_confirm_declined(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(open_browser=False))

        result = cli_runner.invoke(app, ["--no-color", "config", "reset"], input="n\n")

        assert result.exit_code == 0
        assert "Cancelled." in result.output
        assert load_global_config().open_browser is False
