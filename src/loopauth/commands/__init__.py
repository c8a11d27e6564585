"""Built-in CLI sub-commands for loopauth.

* :mod:`~loopauth.commands.auth` -- browser login and saved API key management.
* :mod:`~loopauth.commands.config` -- view and modify global settings.

Each module exports a :class:`typer.Typer` sub-application registered on the
root app in :func:`loopauth.app.main`.
"""
