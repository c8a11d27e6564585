"""Auth commands -- obtain, inspect, and remove the saved API key.

Provides the ``loopauth auth`` sub-command group. ``login`` runs the
loopback browser login (:class:`~loopauth.auth.flow.LoginFlow`) and saves
the key it returns; ``show`` and ``logout`` work on the saved credentials.

Typical workflow::

    loopauth auth login          # browser login, saves the API key
    loopauth auth show           # inspect the saved key
    loopauth auth logout         # delete it
"""

from __future__ import annotations

from typing import Optional

import typer

from loopauth.output import debug, error, info, print_table, success, suggest, warning


auth_app = typer.Typer(no_args_is_help=True)


@auth_app.command("login")
def auth_login(
    ctx: typer.Context,
    dashboard_endpoint: Optional[str] = typer.Option(
        None,
        "--dashboard-endpoint",
        help="Dashboard URL serving the login page (overrides config and env).",
    ),
    no_browser: bool = typer.Option(
        False, "--no-browser", help="Print the login URL without opening a browser."
    ),
    timeout: Optional[int] = typer.Option(
        None,
        "--timeout",
        min=1,
        help="Seconds to wait for the login to complete (default: wait forever).",
    ),
) -> None:
    """Log in through the browser and save the API key.

    If an API key is already saved, reports where and returns without
    starting a login, unless ``--force`` is given.

    Args:
        ctx: Typer context carrying the ``force`` flag.
        dashboard_endpoint: Dashboard base URL override.
        no_browser: Only print the login URL.
        timeout: Seconds to wait for the callback.

    Raises:
        typer.Exit: With the failing error's exit code if the login fails.

    Example::

        loopauth auth login
        loopauth auth login --no-browser --timeout 300
    """
    from loopauth.auth import ConsoleProgress, CredentialStore, LoginFlow
    from loopauth.config import resolve_config
    from loopauth.exceptions import ConfigError, LoginError
    from loopauth.models import Credentials

    store = CredentialStore()
    force = ctx.obj.get("force", False) if ctx.obj else False
    has_key = store.has_api_key()
    if has_key and not force:
        info(
            f"You already have an API key saved in {store.path}. "
            "We recommend using the same API key in all environments."
        )
        suggest("Log in again anyway: loopauth --force auth login")
        return
    if has_key:
        warning(f"Replacing the API key saved in {store.path}")

    try:
        config = resolve_config(cli_dashboard_endpoint=dashboard_endpoint)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    debug(f"Dashboard endpoint: {config.dashboard_api_endpoint}")

    info(
        "Redirecting to the authentication page. Go ahead and log in; when you "
        "return to this prompt the login should be complete.\n"
    )

    flow = LoginFlow(
        config.dashboard_api_endpoint,
        progress=ConsoleProgress(),
        launch_browser=config.open_browser and not no_browser,
        timeout=timeout if timeout is not None else config.login_timeout,
    )
    try:
        api_key = flow.login()
    except LoginError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    store.save(
        Credentials(api_key=api_key, pricing_api_endpoint=config.pricing_api_endpoint)
    )
    success("\nYour account has been authenticated. loopauth is now ready to be used.")
    info(f"The API key was saved to {store.path}")


@auth_app.command("show")
def auth_show() -> None:
    """Show the saved API key.

    Displays the credentials file path, a truncated key preview, and the
    pricing endpoint the key was issued for.

    Example::

        loopauth auth show
    """
    from loopauth.auth import CredentialStore

    store = CredentialStore()
    credentials = store.load()
    if credentials is None:
        info("No API key saved.")
        suggest("Log in: loopauth auth login")
        return

    key = credentials.api_key
    rows = [
        ["Credentials File", str(store.path)],
        ["API Key", key[:8] + "..." if len(key) > 8 else key],
        ["Pricing API Endpoint", credentials.pricing_api_endpoint or "-"],
    ]
    print_table(["Field", "Value"], rows, title="Saved Credentials")


@auth_app.command("logout")
def auth_logout(ctx: typer.Context) -> None:
    """Delete the saved API key.

    Asks for confirmation unless the ``--force`` flag is active.

    Example::

        loopauth auth logout
        loopauth --force auth logout
    """
    from loopauth.auth import CredentialStore

    store = CredentialStore()
    if store.load() is None:
        info("No API key saved.")
        return

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm(f"Delete the API key saved in {store.path}?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    store.clear()
    success("API key deleted.")
