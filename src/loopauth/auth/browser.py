"""Best-effort browser launch.

Opening the browser can fail for many ordinary reasons (headless machine,
SSH session, no registered browser). The login URL is always printed before
the launch is attempted, so a failed launch only costs the user a copy and
paste. :func:`open_browser` therefore never reports failure to its caller.
"""

from __future__ import annotations

import logging
import threading
import webbrowser

logger = logging.getLogger(__name__)


def _launch(url: str) -> None:
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as exc:
        logger.debug("Could not open browser: %s", exc)
        return
    if not opened:
        logger.debug("No browser available to open the login URL")


def open_browser(url: str) -> None:
    """Open *url* in the default browser without waiting for the result.

    The launch runs on a daemon thread; its outcome is discarded (and only
    logged at debug level).
    """
    thread = threading.Thread(target=_launch, args=(url,), daemon=True)
    thread.start()
