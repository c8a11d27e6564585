"""Root ``loopauth`` command and the console-script entry point."""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from loopauth import __version__
from loopauth.commands.auth import auth_app
from loopauth.commands.config import config_app
from loopauth.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED


app = typer.Typer(
    name="loopauth",
    help="Obtain an API key through a loopback browser login.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)
app.add_typer(auth_app, name="auth", help="Log in, show or delete the saved API key.")
app.add_typer(config_app, name="config", help="Show or change global settings.")


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"loopauth {__version__}")
        raise typer.Exit()


def _enable_debug_logging() -> None:
    logging.basicConfig(
        level=logging.DEBUG,
        stream=sys.stderr,
        format="[debug] %(name)s: %(message)s",
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True,
        help="Print the version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="Emit JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Emit tab-separated text."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colours."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print results."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug messages."),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmations and existing-key checks."
    ),
) -> None:
    """Configure output and logging, then hand ``force`` to the sub-command."""
    from loopauth.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = OutputFormat.AUTO
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    if verbose:
        _enable_debug_logging()

    ctx.ensure_object(dict)
    ctx.obj.update(force=force, verbose=verbose)


def _cancel(*_: Any) -> None:
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_INTERRUPTED)


def _setup_signal_handlers() -> None:
    signal.signal(signal.SIGINT, _cancel)


def _write_crash_log() -> str:
    """Save the active traceback under ``<data_dir>/logs`` and return its path."""
    from loopauth.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """Run the CLI.

    A :class:`~loopauth.exceptions.LoopauthError` that escapes a command
    exits with its own ``exit_code``. Anything else leaves a crash log and
    exits with ``EXIT_GENERIC_FAILURE``.
    """
    from loopauth.exceptions import LoopauthError
    from loopauth.output import error

    _setup_signal_handlers()
    try:
        app()
    except KeyboardInterrupt:
        _cancel()
    except LoopauthError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        error(f"Unexpected error. Debug log: {_write_crash_log()}")
        sys.exit(EXIT_GENERIC_FAILURE)
