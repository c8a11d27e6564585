"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~loopauth.exceptions.LoopauthError` subclass.
Shell wrappers and CI scripts can inspect the exit code to tell a rejected
login apart from a local socket problem without parsing stderr.

Example::

    $ loopauth auth login
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the callback was rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_AUTH_FAILURE = 3
"""The login handshake was rejected (state mismatch or missing API key)."""

EXIT_CONNECTION_ERROR = 6
"""A local network error occurred (no loopback port, socket failure, timeout)."""

EXIT_INTERRUPTED = 130
"""The user interrupted the command with Ctrl-C."""
