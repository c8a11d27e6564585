"""loopauth -- obtain an API key through a loopback browser login.

The CLI opens the dashboard's login page in the user's browser and receives
the resulting API key on a one-shot HTTP server bound to ``localhost``. The
CLI never sees the user's password.

Typical workflow::

    loopauth auth login      # browser login, saves the API key
    loopauth auth show       # inspect the saved key

Modules:
    app: Typer application and CLI entry point.
    auth: The loopback login flow and the credential store.
    models: Pydantic models for configuration and saved credentials.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
