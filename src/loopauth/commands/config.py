"""Config commands -- view and modify global configuration.

Provides the ``loopauth config`` sub-command group for reading, updating,
and resetting the user's global configuration file
(:class:`~loopauth.models.GlobalConfig`): the dashboard and pricing
endpoints and the login defaults.
"""

from __future__ import annotations

from typing import Any

import typer

from loopauth.exit_codes import EXIT_INVALID_USAGE
from loopauth.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)

_INT_FIELDS = ("login_timeout",)
_ENDPOINT_FIELDS = ("dashboard_api_endpoint", "pricing_api_endpoint")


@config_app.command("show")
def config_show() -> None:
    """Show current configuration.

    Prints the config directory path followed by the stored configuration.
    Environment variable overrides are not applied.

    Example::

        loopauth config show
        loopauth --json config show
    """
    from loopauth.config import get_config_dir, load_global_config

    config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key, e.g. 'dashboard_api_endpoint'."),
    value: str = typer.Argument(help="Value to set ('none' clears login_timeout)."),
) -> None:
    """Set a configuration value.

    The value is coerced to the field's type (bool or int). Endpoint values
    must be absolute http(s) URLs. The updated config is validated against
    :class:`~loopauth.models.GlobalConfig` before saving.

    Raises:
        typer.Exit: With code 2 if the key is unknown, the value cannot be
            coerced, or validation fails.

    Example::

        loopauth config set dashboard_api_endpoint https://dashboard.example.com
        loopauth config set login_timeout 300
        loopauth config set open_browser false
    """
    from loopauth.config import load_global_config, save_global_config, validate_endpoint
    from loopauth.exceptions import ConfigError
    from loopauth.models import GlobalConfig

    config = load_global_config()
    data = config.model_dump(mode="json")

    if key not in data:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    current = data[key]
    coerced: Any
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif key in _INT_FIELDS:
        if value.lower() == "none":
            coerced = None
        else:
            try:
                coerced = int(value)
            except ValueError:
                error(f"Expected integer for {key}, got: {value}")
                raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    elif key in _ENDPOINT_FIELDS:
        try:
            coerced = validate_endpoint(value, key)
        except ConfigError as exc:
            error(str(exc))
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    else:
        coerced = value

    data[key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Reset configuration to defaults.

    Asks for confirmation unless ``--force`` is active.

    Example::

        loopauth config reset
        loopauth --force config reset
    """
    from loopauth.config import save_global_config
    from loopauth.models import GlobalConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
