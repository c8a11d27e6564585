"""Exception hierarchy for loopauth.

All exceptions inherit from :class:`LoopauthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`loopauth.exit_codes`.
The top-level error handler in :func:`loopauth.app.main` catches
``LoopauthError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    LoopauthError (exit 1)
    +-- ConfigError               (exit 1)
    +-- LoginError                (exit 3)
        +-- BindError             (exit 6)
        +-- ValidationError       (exit 3)
        +-- TransportError        (exit 6)
            +-- LoginTimeoutError (exit 6)

The login errors are raised by :mod:`loopauth.auth` and are never retried
inside the library: a failed attempt must be started again from scratch
with a new state token and a new port.
"""

from loopauth.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
)


class LoopauthError(Exception):
    """Base exception for all loopauth errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`loopauth.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(LoopauthError):
    """Raised for configuration problems (invalid JSON, malformed endpoint URLs)."""

    exit_code = EXIT_GENERIC_FAILURE


class LoginError(LoopauthError):
    """Base class for failures of a browser login attempt."""

    exit_code = EXIT_AUTH_FAILURE


class BindError(LoginError):
    """Raised when no loopback listener could be bound."""

    exit_code = EXIT_CONNECTION_ERROR


class ValidationError(LoginError):
    """Raised when the callback carried a wrong state token or no API key.

    Either the login page sent a stale or duplicate callback, or something
    other than the login page reached the loopback port.
    """

    exit_code = EXIT_AUTH_FAILURE


class TransportError(LoginError):
    """Raised when accepting or serving the callback failed at the socket level."""

    exit_code = EXIT_CONNECTION_ERROR


class LoginTimeoutError(TransportError):
    """Raised when no callback arrived within the configured timeout."""
