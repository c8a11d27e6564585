"""Pydantic models shared across loopauth modules.

Two models are persisted to the user's config directory:

* :class:`GlobalConfig` -- endpoints and login defaults, stored as
  ``config.json``.
* :class:`Credentials` -- the API key obtained by ``loopauth auth login``,
  stored as ``credentials.yml``.

Both use Pydantic v2. Unknown keys in ``config.json`` are ignored so that
older releases can read files written by newer ones.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_DASHBOARD_API_ENDPOINT = "https://dashboard.api.loopauth.dev"
DEFAULT_PRICING_API_ENDPOINT = "https://pricing.api.loopauth.dev"


class GlobalConfig(BaseModel):
    """User-level configuration stored in ``<config_dir>/config.json``.

    Example::

        GlobalConfig(
            dashboard_api_endpoint="https://dashboard.example.com",
            login_timeout=300,
        )
    """

    model_config = ConfigDict(extra="ignore")

    dashboard_api_endpoint: str = Field(
        default=DEFAULT_DASHBOARD_API_ENDPOINT,
        description="Base URL of the dashboard that serves the /login page",
    )
    pricing_api_endpoint: str = Field(
        default=DEFAULT_PRICING_API_ENDPOINT,
        description="Pricing API endpoint saved alongside the API key",
    )
    open_browser: bool = Field(
        default=True, description="Open the login URL in the default browser"
    )
    login_timeout: Optional[int] = Field(
        default=None,
        ge=1,
        description="Seconds to wait for the login callback (None = wait forever)",
    )


class Credentials(BaseModel):
    """An API key saved by ``loopauth auth login``."""

    api_key: str = Field(description="The API key returned by the login page")
    pricing_api_endpoint: Optional[str] = Field(
        default=None,
        description="Pricing API endpoint the key was issued for",
    )
