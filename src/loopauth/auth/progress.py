"""Progress notifications emitted during a browser login.

:class:`~loopauth.auth.flow.LoginFlow` reports through a :class:`ProgressSink`
rather than printing, so library callers and tests can observe progress
without capturing the real console.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from loopauth.output import print_data


@runtime_checkable
class ProgressSink(Protocol):
    """Receives the two notifications of a login attempt."""

    def login_url(self, url: str) -> None:
        """Called once with the login URL, before the browser is launched."""
        ...

    def waiting(self) -> None:
        """Called right before blocking on the callback."""
        ...


class ConsoleProgress:
    """Write progress to stdout, including the URL for manual copy and paste."""

    def login_url(self, url: str) -> None:
        print_data("Opening the authentication URL in your browser.")
        print_data("\nIf not opened automatically, copy and paste it to your browser:")
        print_data(f"\n    {url}\n")

    def waiting(self) -> None:
        print_data("Waiting...")


class NullProgress:
    """Discard all progress notifications."""

    def login_url(self, url: str) -> None:
        pass

    def waiting(self) -> None:
        pass
