"""Browser login over a loopback callback.

:class:`LoginFlow` obtains an API key from the dashboard without the CLI ever
seeing the user's password:

1. Generate a fresh state token.
2. Bind a :class:`~loopauth.auth.listener.LoopbackListener` on an
   OS-assigned port.
3. Build ``{host}/login?port=<port>&state=<state>``.
4. Report the URL to the progress sink, then try to open it in the browser.
5. Serve the single callback with
   :class:`~loopauth.auth.callback.CallbackServer` and return the API key.

Every call is an independent session. Failures are never retried here: the
caller starts a new session (new token, new port) if it wants another try.

See Also:
    :func:`loopauth.commands.auth.auth_login` for the CLI command that saves
    the returned key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from loopauth.auth.browser import open_browser
from loopauth.auth.callback import CallbackServer
from loopauth.auth.listener import LoopbackListener
from loopauth.auth.progress import NullProgress, ProgressSink
from loopauth.auth.state import generate_state
from loopauth.auth.url import build_login_url

logger = logging.getLogger(__name__)


@dataclass
class LoginSession:
    """State owned by a single :meth:`LoginFlow.login` call."""

    state: str
    listener: LoopbackListener

    @property
    def port(self) -> int:
        return self.listener.port


class LoginFlow:
    """Run the loopback browser login against a dashboard host.

    Args:
        host: Dashboard base URL serving the ``/login`` page.
        progress: Receives the login URL and the "waiting" notification.
            Defaults to :class:`~loopauth.auth.progress.NullProgress`.
        launch_browser: If ``False``, only report the URL; never start a
            browser.
        timeout: Seconds to wait for the callback. ``None`` waits until a
            request arrives.
        opener: Callable used to launch the browser. Its result is ignored.

    Example::

        flow = LoginFlow("https://dashboard.example.com", progress=ConsoleProgress())
        api_key = flow.login()
    """

    def __init__(
        self,
        host: str,
        progress: Optional[ProgressSink] = None,
        launch_browser: bool = True,
        timeout: Optional[float] = None,
        opener: Callable[[str], None] = open_browser,
    ) -> None:
        self.host = host
        self.progress = progress or NullProgress()
        self.launch_browser = launch_browser
        self.timeout = timeout
        self._opener = opener

    def start_session(self) -> LoginSession:
        """Generate a state token and bind a fresh listener.

        Raises:
            BindError: If no loopback port could be bound.
        """
        state = generate_state()
        listener = LoopbackListener()
        return LoginSession(state=state, listener=listener)

    def login(self) -> str:
        """Run one login attempt and return the API key.

        The session's listener is closed before this method returns or
        raises.

        Returns:
            The non-empty API key delivered by a callback whose state matched
            this session's token.

        Raises:
            BindError: No loopback listener could be bound.
            ValidationError: The callback had a wrong state or no API key.
            TransportError: Accepting or serving the callback failed
                (including :class:`~loopauth.exceptions.LoginTimeoutError`).
        """
        session = self.start_session()
        with session.listener:
            url = build_login_url(self.host, session.port, session.state)
            self.progress.login_url(url)
            if self.launch_browser:
                self._opener(url)

            self.progress.waiting()
            server = CallbackServer(session.listener, session.state, timeout=self.timeout)
            api_key = server.serve_once()

        logger.debug("Login callback accepted on port %d", session.port)
        return api_key


def login(
    host: str,
    progress: Optional[ProgressSink] = None,
    launch_browser: bool = True,
    timeout: Optional[float] = None,
) -> str:
    """Run a single :class:`LoginFlow` against *host* and return the API key."""
    flow = LoginFlow(host, progress=progress, launch_browser=launch_browser, timeout=timeout)
    return flow.login()
