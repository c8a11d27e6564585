"""Login URL construction."""

from __future__ import annotations

from urllib.parse import urlencode

LOGIN_PATH = "/login"


def build_login_url(host: str, port: int, state: str) -> str:
    """Build the URL of the remote login page.

    Args:
        host: Dashboard base URL, e.g. ``https://dashboard.example.com``.
        port: The loopback port the callback server is listening on.
        state: The session's state token.

    Returns:
        ``{host}/login?port={port}&state={state}`` with url-encoded values.

    Example::

        >>> build_login_url("https://dash.example.com/", 51234, "abc123")
        'https://dash.example.com/login?port=51234&state=abc123'
    """
    query = urlencode({"port": str(port), "state": state})
    return f"{host.rstrip('/')}{LOGIN_PATH}?{query}"
