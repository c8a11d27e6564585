"""Per-attempt state tokens for the loopback login handshake.

The token is echoed back by the login page in the callback and is the only
thing tying that callback to the login attempt that started it. A page that
does not know the token cannot make the callback server accept its
credential.
"""

from __future__ import annotations

import secrets

STATE_TOKEN_BYTES = 32


def generate_state() -> str:
    """Return a new unpredictable, URL-safe state token."""
    return secrets.token_urlsafe(STATE_TOKEN_BYTES)


def state_matches(expected: str, received: str) -> bool:
    """Compare a received state with the session's token by exact equality.

    Uses :func:`secrets.compare_digest` so the comparison time does not
    depend on how many leading characters match.
    """
    return secrets.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))
