"""Shared test fixtures for loopauth.

Provides fixtures for isolating configuration to a temporary directory,
resetting global output state, running CLI commands, and playing the login
page's part of the loopback handshake.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import parse_qs, urlencode, urlparse

import httpx
import pytest

from loopauth.output import reset_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test, the cached references go stale once the test finishes.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Forces XDG path resolution, points XDG_CONFIG_HOME and XDG_DATA_HOME at
    subdirectories of tmp_path, and clears the LOOPAUTH_* environment
    variables so tests never touch real user config.

    Returns:
        The tmp_path root directory.
    """
    monkeypatch.setattr("loopauth.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in [
        "LOOPAUTH_DASHBOARD_API_ENDPOINT",
        "LOOPAUTH_PRICING_API_ENDPOINT",
        "NO_COLOR",
    ]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()


# ---------------------------------------------------------------------------
# Loopback callback helpers
# ---------------------------------------------------------------------------


def send_callback(port: int, query: dict[str, str], path: str = "/") -> httpx.Response:
    """Send the login page's callback request to a loopback port."""
    url = f"http://127.0.0.1:{port}{path}"
    if query:
        url += "?" + urlencode(query)
    return httpx.get(url, timeout=5, trust_env=False)


def port_is_closed(port: int) -> bool:
    """Return True if nothing accepts connections on *port* any more."""
    try:
        httpx.get(f"http://127.0.0.1:{port}/", timeout=2, trust_env=False)
    except httpx.ConnectError:
        return True
    return False


class CallbackSender:
    """Progress sink that plays the login page.

    When the flow reports its login URL, a background thread sends the
    callback built by *make_query* from the session's state token.

    Args:
        make_query: Maps the session's state token to the callback query.
            ``None`` sends nothing.
    """

    def __init__(self, make_query: Optional[Callable[[str], dict[str, str]]]) -> None:
        self._make_query = make_query
        self._thread: Optional[threading.Thread] = None
        self.url: Optional[str] = None
        self.port: Optional[int] = None
        self.state: Optional[str] = None
        self.response: Optional[httpx.Response] = None
        self.events: list[str] = []

    def login_url(self, url: str) -> None:
        self.events.append("login_url")
        self.url = url
        params = parse_qs(urlparse(url).query)
        self.port = int(params["port"][0])
        self.state = params["state"][0]
        if self._make_query is not None:
            query = self._make_query(self.state)
            self._thread = threading.Thread(target=self._send, args=(query,), daemon=True)
            self._thread.start()

    def waiting(self) -> None:
        self.events.append("waiting")

    def join(self) -> None:
        if self._thread is not None:
            self._thread.join(timeout=5)

    def _send(self, query: dict[str, str]) -> None:
        self.response = send_callback(self.port, query)
