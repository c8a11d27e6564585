"""Single-shot HTTP callback server for the loopback login handshake.

The login page redirects (or ``fetch``-es) the browser to
``http://localhost:<port>/?state=<state>&apiKey=<key>``. :class:`CallbackServer`
waits on the session's :class:`~loopauth.auth.listener.LoopbackListener` for
the first complete HTTP request, answers it, and closes the listener, whatever
the request contained:

* ``apiKey`` present and ``state`` equal to the session token -> ``200``,
  the key is returned.
* anything else -> ``400`` and :class:`~loopauth.exceptions.ValidationError`.
* a socket failure while accepting or serving ->
  :class:`~loopauth.exceptions.TransportError`.

Connections that close or stall before sending a full request head (browser
preconnects, port scanners) are dropped without ending the session. They are
watched side by side, so an idle one never delays the real callback.

Every response carries ``Access-Control-Allow-Origin: *`` because the page
delivering the callback is served from a different origin.
"""

from __future__ import annotations

import enum
import io
import logging
import selectors
import socket
import time
from dataclasses import dataclass
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler
from typing import Any, Optional
from urllib.parse import parse_qs, urlparse

from loopauth.auth.listener import LoopbackListener
from loopauth.auth.state import state_matches
from loopauth.exceptions import LoginTimeoutError, TransportError, ValidationError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10.0
"""Seconds an accepted connection may take to deliver its request head."""

MAX_REQUEST_HEAD = 64 * 1024

SUCCESS_HTML = (
    "<html><body><h2>Login successful! You can close this window "
    "and return to the terminal.</h2></body></html>"
)
REJECTED_HTML = (
    "<html><body><h2>Login failed: {reason}. Please run the login "
    "command again.</h2></body></html>"
)


class CallbackState(str, enum.Enum):
    """Lifecycle of a :class:`CallbackServer`."""

    LISTENING = "listening"
    SUCCESS = "success"
    REJECTED = "rejected"
    TRANSPORT_ERROR = "transport_error"


@dataclass
class CallbackResult:
    """Query parameters carried by the login callback."""

    api_key: str
    state: str

    @classmethod
    def from_path(cls, path: str) -> CallbackResult:
        """Parse ``apiKey`` and ``state`` from a request path.

        Missing parameters become empty strings.
        """
        params = parse_qs(urlparse(path).query)
        return cls(
            api_key=params.get("apiKey", [""])[0],
            state=params.get("state", [""])[0],
        )


@dataclass
class _PendingConnection:
    """An accepted connection whose request head has not fully arrived."""

    conn: socket.socket
    address: Any
    expires: float
    head: bytes = b""

    def receive(self) -> bool:
        """Read what has arrived. Returns ``False`` once the connection is unusable."""
        try:
            chunk = self.conn.recv(4096)
        except BlockingIOError:
            return True
        except OSError:
            return False
        if not chunk:
            return False
        # Blank lines before the request line are ignored (RFC 9112, 2.2).
        self.head = (self.head + chunk).lstrip(b"\r\n")
        return len(self.head) <= MAX_REQUEST_HEAD

    @property
    def complete(self) -> bool:
        return b"\r\n\r\n" in self.head or b"\n\n" in self.head


class _CallbackHandler(BaseHTTPRequestHandler):
    server: CallbackServer  # type: ignore[assignment]

    def setup(self) -> None:
        super().setup()
        # The head was already read off the socket while waiting for it.
        self.rfile.close()
        self.rfile = io.BytesIO(self.server._request_head)

    def do_GET(self) -> None:
        result = CallbackResult.from_path(self.path)
        reason = self.server._validate(result)
        if reason is not None:
            self.server._record_rejection(reason)
            self._respond(HTTPStatus.BAD_REQUEST, REJECTED_HTML.format(reason=reason))
            return
        self.server._record_success(result.api_key)
        self._respond(HTTPStatus.OK, SUCCESS_HTML)

    # The login page may deliver the callback with fetch(), which can send a
    # preflight or a POST; the query string is validated the same way.
    do_HEAD = do_POST = do_PUT = do_PATCH = do_DELETE = do_OPTIONS = do_GET

    def end_headers(self) -> None:
        # Also covers the error responses produced by send_error().
        self.send_header("Access-Control-Allow-Origin", "*")
        super().end_headers()

    def _respond(self, status: HTTPStatus, body: str) -> None:
        payload = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(payload)

    def log_message(self, format: str, *args: Any) -> None:
        pass  # request lines carry the API key


class CallbackServer:
    """Serve exactly one login callback on a bound listener.

    Args:
        listener: The session's bound listener. The server closes it once
            the first request has been answered.
        expected_state: The session's state token.
        timeout: Seconds to wait for the first request. ``None`` blocks
            until one arrives.
        request_timeout: Seconds an accepted connection may stay silent
            or incomplete before it is dropped.

    Example::

        with LoopbackListener() as listener:
            server = CallbackServer(listener, state)
            api_key = server.serve_once()
    """

    def __init__(
        self,
        listener: LoopbackListener,
        expected_state: str,
        timeout: Optional[float] = None,
        request_timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self._listener = listener
        self._expected_state = expected_state
        self._timeout = timeout
        self._request_timeout = request_timeout
        self._request_head = b""
        self._api_key: Optional[str] = None
        self._rejection: Optional[str] = None
        self.state = CallbackState.LISTENING

    def serve_once(self) -> str:
        """Wait for the first request, answer it, and close the listener.

        Returns:
            The API key carried by a valid callback.

        Raises:
            ValidationError: The first request had no ``apiKey``, a wrong
                ``state``, or was not a well-formed HTTP request.
            LoginTimeoutError: No request arrived within ``timeout``.
            TransportError: Accepting or serving failed at the socket level,
                or the server was already used.
        """
        if self.state is not CallbackState.LISTENING:
            raise TransportError("The callback server has already handled its request")

        try:
            pending = self._wait_for_request()
            try:
                self._handle(pending)
            finally:
                _shutdown(pending.conn)
        except TransportError:
            self.state = CallbackState.TRANSPORT_ERROR
            raise
        finally:
            self._listener.close()

        if self._api_key is None:
            self.state = CallbackState.REJECTED
            raise ValidationError(
                f"Login callback rejected: {self._rejection or 'malformed request'}"
            )
        self.state = CallbackState.SUCCESS
        return self._api_key

    def _validate(self, result: CallbackResult) -> Optional[str]:
        """Return why *result* must be rejected, or ``None`` if it is valid."""
        if not result.api_key:
            return "missing API key"
        if not state_matches(self._expected_state, result.state):
            return "state mismatch"
        return None

    def _record_success(self, api_key: str) -> None:
        self._api_key = api_key

    def _record_rejection(self, reason: str) -> None:
        logger.debug("Rejected login callback: %s", reason)
        self._rejection = reason

    def _wait_for_request(self) -> _PendingConnection:
        """Accept connections until one of them delivers a complete request head.

        Raises:
            LoginTimeoutError: No request arrived within ``timeout``.
            TransportError: The listener failed.
        """
        deadline = None if self._timeout is None else time.monotonic() + self._timeout
        sock = self._listener.socket
        pending: dict[socket.socket, _PendingConnection] = {}
        try:
            sock.setblocking(False)
            with selectors.DefaultSelector() as selector:
                selector.register(sock, selectors.EVENT_READ)
                while True:
                    for key, _ in selector.select(self._next_wakeup(deadline, pending)):
                        if key.fileobj is sock:
                            self._accept(sock, selector, pending)
                            continue
                        conn = pending[key.fileobj]  # type: ignore[index]
                        alive = conn.receive()
                        if alive and conn.complete:
                            selector.unregister(conn.conn)
                            del pending[conn.conn]
                            conn.conn.setblocking(True)
                            conn.conn.settimeout(self._request_timeout)
                            self._request_head = conn.head
                            return conn
                        if not alive:
                            _drop(selector, pending, conn)

                    now = time.monotonic()
                    for conn in [c for c in pending.values() if c.expires <= now]:
                        logger.debug("Dropped stalled connection from %s", conn.address[0])
                        _drop(selector, pending, conn)
                    if deadline is not None and now >= deadline:
                        raise LoginTimeoutError(
                            f"No login callback received within {self._timeout:g} seconds"
                        )
        except OSError as exc:
            raise TransportError(f"Failed to accept login callback: {exc}") from exc
        finally:
            for conn in pending.values():
                conn.conn.close()

    def _accept(
        self,
        sock: socket.socket,
        selector: selectors.BaseSelector,
        pending: dict[socket.socket, _PendingConnection],
    ) -> None:
        try:
            conn, client_address = sock.accept()
        except (BlockingIOError, ConnectionAbortedError):
            return
        conn.setblocking(False)
        pending[conn] = _PendingConnection(
            conn, client_address, time.monotonic() + self._request_timeout
        )
        selector.register(conn, selectors.EVENT_READ)
        logger.debug("Accepted callback connection from %s", client_address[0])

    @staticmethod
    def _next_wakeup(
        deadline: Optional[float], pending: dict[socket.socket, _PendingConnection]
    ) -> Optional[float]:
        wakeups = [c.expires for c in pending.values()]
        if deadline is not None:
            wakeups.append(deadline)
        if not wakeups:
            return None
        return max(0.0, min(wakeups) - time.monotonic())

    def _handle(self, pending: _PendingConnection) -> None:
        try:
            _CallbackHandler(pending.conn, pending.address, self)
        except OSError as exc:
            raise TransportError(f"Failed to serve login callback: {exc}") from exc


def _drop(
    selector: selectors.BaseSelector,
    pending: dict[socket.socket, _PendingConnection],
    conn: _PendingConnection,
) -> None:
    selector.unregister(conn.conn)
    del pending[conn.conn]
    conn.conn.close()


def _shutdown(conn: socket.socket) -> None:
    """Close an accepted connection, flushing what was written first."""
    try:
        conn.shutdown(socket.SHUT_WR)
    except OSError:
        pass  # peer already gone
    conn.close()
