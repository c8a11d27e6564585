"""Persistent storage for the API key obtained by ``loopauth auth login``.

Stores :class:`~loopauth.models.Credentials` as YAML in
``~/.config/loopauth/credentials.yml`` (XDG) or the platform-equivalent
directory. Files are written atomically via
:func:`~loopauth.config.atomic_write` with ``0o600`` permissions so that the
key is never world-readable, even momentarily.

The login flow itself never touches this module; the ``auth login`` command
decides whether to persist what :meth:`~loopauth.auth.flow.LoginFlow.login`
returns.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml

from loopauth.config import atomic_write, get_config_dir
from loopauth.models import Credentials

_CREDENTIALS_FILENAME = "credentials.yml"


def credentials_path() -> Path:
    """Return the path of the credentials file."""
    return get_config_dir() / _CREDENTIALS_FILENAME


class CredentialStore:
    """Read/write the saved API key.

    Args:
        path: Optional override for the credentials file location.

    Example::

        store = CredentialStore()
        store.save(Credentials(api_key="sk_live_xyz"))
        assert store.load().api_key == "sk_live_xyz"
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or credentials_path()

    @property
    def path(self) -> Path:
        """The filesystem path of the credentials file."""
        return self._path

    def save(self, credentials: Credentials) -> None:
        """Persist *credentials* atomically with ``0o600`` permissions.

        Raises:
            OSError: If the file cannot be written (permissions, disk full, etc.).
        """
        data = credentials.model_dump(mode="json", exclude_none=True)
        text = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
        atomic_write(self._path, text, mode=0o600)

    def load(self) -> Optional[Credentials]:
        """Load the saved credentials.

        Returns:
            The deserialised :class:`~loopauth.models.Credentials`, or
            ``None`` if the file does not exist or cannot be parsed.
        """
        if not self._path.is_file():
            return None
        try:
            data = yaml.safe_load(self._path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                return None
            return Credentials.model_validate(data)
        except (yaml.YAMLError, ValueError, OSError):
            return None

    def has_api_key(self) -> bool:
        """Return ``True`` if a non-empty API key is saved."""
        credentials = self.load()
        return credentials is not None and bool(credentials.api_key)

    def clear(self) -> None:
        """Delete the credentials file if it exists."""
        if self._path.is_file():
            self._path.unlink()
