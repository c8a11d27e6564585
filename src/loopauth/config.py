"""Where loopauth keeps its files, and how the effective settings are resolved.

Settings come from, highest first: the ``--dashboard-endpoint`` flag, the
``LOOPAUTH_*_API_ENDPOINT`` environment variables, ``config.json`` in
:func:`get_config_dir`, and the :class:`~loopauth.models.GlobalConfig`
defaults.
"""

from __future__ import annotations

import contextlib
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

import httpx

from loopauth.exceptions import ConfigError
from loopauth.models import GlobalConfig

_APP_NAME = "loopauth"

# Endpoint fields that an environment variable may override.
_ENDPOINT_ENV = {
    "dashboard_api_endpoint": "LOOPAUTH_DASHBOARD_API_ENDPOINT",
    "pricing_api_endpoint": "LOOPAUTH_PRICING_API_ENDPOINT",
}


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(xdg_var: str, xdg_default: str, fallback: Optional[str]) -> Path:
    if _is_xdg_platform():
        base = Path(os.environ.get(xdg_var) or Path.home() / xdg_default)
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
        if fallback:
            path = path / fallback
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """``$XDG_CONFIG_HOME/loopauth`` on Linux and BSD, ``~/.loopauth`` elsewhere.

    The directory is created if missing.
    """
    return _app_dir("XDG_CONFIG_HOME", ".config", None)


def get_data_dir() -> Path:
    """``$XDG_DATA_HOME/loopauth`` on Linux and BSD, ``~/.loopauth/data`` elsewhere.

    Crash logs are written here. The directory is created if missing.
    """
    return _app_dir("XDG_DATA_HOME", os.path.join(".local", "share"), "data")


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Replace *path* with *data* through a temp file in the same directory.

    Args:
        path: Destination file. Missing parent directories are created.
        data: Text to write, encoded as UTF-8.
        mode: Permission bits, set on the temp file before any data is
            written to it.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = tempfile.NamedTemporaryFile(
        "w",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
        encoding="utf-8",
    )
    try:
        with tmp:
            if mode is not None:
                os.chmod(tmp.name, mode)
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp.name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp.name)
        raise


def global_config_path() -> Path:
    return get_config_dir() / "config.json"


def load_global_config() -> GlobalConfig:
    """Read ``config.json``, or return the defaults when it does not exist.

    Raises:
        ConfigError: The file is not valid JSON or does not validate.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    atomic_write(global_config_path(), config.model_dump_json(indent=2) + "\n")


def validate_endpoint(value: str, name: str) -> str:
    """Return *value* without a trailing ``/`` if it is an absolute http(s) URL.

    Raises:
        ConfigError: Named after the *name* setting.
    """
    try:
        url = httpx.URL(value)
    except (httpx.InvalidURL, TypeError) as exc:
        raise ConfigError(f"Invalid {name} '{value}': {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigError(f"Invalid {name} '{value}': must be an absolute http(s) URL")
    return value.rstrip("/")


def resolve_config(cli_dashboard_endpoint: Optional[str] = None) -> GlobalConfig:
    """Merge the flag, the environment and ``config.json`` into one config.

    Empty environment variables are ignored. Both endpoints are checked
    with :func:`validate_endpoint` after merging.

    Raises:
        ConfigError: The config file or one of the endpoints is invalid.
    """
    config = load_global_config()
    endpoints = {field: getattr(config, field) for field in _ENDPOINT_ENV}
    for field, env_var in _ENDPOINT_ENV.items():
        endpoints[field] = os.environ.get(env_var) or endpoints[field]
    if cli_dashboard_endpoint is not None:
        endpoints["dashboard_api_endpoint"] = cli_dashboard_endpoint

    return config.model_copy(
        update={field: validate_endpoint(value, field) for field, value in endpoints.items()}
    )
