"""Loopback browser login for loopauth.

The main entry points are:

- :class:`LoginFlow` / :func:`login` -- open the dashboard login page and
  receive the API key on a one-shot local callback.
- :class:`ProgressSink` -- the notification interface the flow reports
  through; :class:`ConsoleProgress` prints to stdout.
- :class:`CredentialStore` -- where the CLI saves the returned key.

Typical usage::

    from loopauth.auth import ConsoleProgress, login

    api_key = login("https://dashboard.example.com", progress=ConsoleProgress())
"""

from loopauth.auth.callback import CallbackResult, CallbackServer, CallbackState
from loopauth.auth.credential_store import CredentialStore
from loopauth.auth.flow import LoginFlow, LoginSession, login
from loopauth.auth.listener import LoopbackListener
from loopauth.auth.progress import ConsoleProgress, NullProgress, ProgressSink
from loopauth.auth.state import generate_state
from loopauth.auth.url import build_login_url

__all__ = [
    "CallbackResult",
    "CallbackServer",
    "CallbackState",
    "ConsoleProgress",
    "CredentialStore",
    "LoginFlow",
    "LoginSession",
    "LoopbackListener",
    "NullProgress",
    "ProgressSink",
    "build_login_url",
    "generate_state",
    "login",
]
