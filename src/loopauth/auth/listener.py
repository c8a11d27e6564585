"""Loopback TCP listener with an OS-assigned port."""

from __future__ import annotations

import logging
import socket
import threading
from types import TracebackType
from typing import Optional

from loopauth.exceptions import BindError

logger = logging.getLogger(__name__)

LOOPBACK_HOST = "localhost"


class LoopbackListener:
    """A listening TCP socket on the loopback interface.

    The socket is bound to port ``0`` so the operating system picks a free
    ephemeral port; concurrent logins never collide on a fixed port. The
    listener is the only resource a login session owns, and :meth:`close`
    releases it exactly once no matter how many exit paths call it.

    Args:
        host: Interface to bind. Defaults to ``localhost``.
        backlog: Listen backlog. Browsers may open a few speculative
            connections next to the one carrying the callback.

    Raises:
        BindError: If the socket cannot be created, bound, or put into
            listening mode.

    Example::

        with LoopbackListener() as listener:
            print(listener.port)
    """

    def __init__(self, host: str = LOOPBACK_HOST, backlog: int = 8) -> None:
        try:
            self._socket = socket.create_server(
                (host, 0), family=socket.AF_INET, backlog=backlog
            )
        except OSError as exc:
            raise BindError(f"Could not bind a loopback listener on {host}: {exc}") from exc
        self._host = host
        self._port: int = self._socket.getsockname()[1]
        self._lock = threading.Lock()
        self._closed = False
        logger.debug("Bound loopback listener on port %d", self._port)

    @property
    def port(self) -> int:
        """The OS-assigned port."""
        return self._port

    @property
    def address(self) -> tuple[str, int]:
        """``(host, port)`` of the bound socket."""
        return self._host, self._port

    @property
    def socket(self) -> socket.socket:
        """The underlying listening socket."""
        return self._socket

    @property
    def closed(self) -> bool:
        """Whether :meth:`close` has run."""
        return self._closed

    def close(self) -> None:
        """Close the listening socket. Later calls are no-ops."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._socket.close()
        logger.debug("Closed loopback listener on port %d", self._port)

    def __enter__(self) -> LoopbackListener:
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()
