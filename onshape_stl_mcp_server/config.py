"""Environment-driven settings for the Onshape STL importer."""
from __future__ import annotations

import base64
from typing import Optional
from urllib.parse import urlsplit

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

DEFAULT_API_URL = "https://cad.onshape.com/api/v6"


class OnshapeSettings(BaseSettings):
    """Credentials and connection options, read once at startup.

    Values come from ``ONSHAPE_*`` environment variables or a ``.env`` file in
    the working directory.
    """

    access_key: str = Field("", description="Onshape API access key.")
    secret_key: str = Field("", description="Onshape API secret key.")
    api_url: str = Field(DEFAULT_API_URL, description="Base URL of the versioned Onshape REST API.")
    timeout: Optional[float] = Field(
        None, gt=0.0, description="Per-request timeout in seconds. Unset keeps the httpx default."
    )
    log_level: str = Field("INFO", description="Minimum level for log output.")
    json_logs: bool = Field(False, description="Render log lines as JSON instead of console text.")

    model_config = SettingsConfigDict(
        env_prefix="ONSHAPE_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    @property
    def auth_header(self) -> str:
        token = base64.b64encode(f"{self.access_key}:{self.secret_key}".encode("utf-8")).decode("ascii")
        return f"Basic {token}"

    @property
    def web_url(self) -> str:
        """Origin of the Onshape web UI, used to build document links."""
        parts = urlsplit(self.api_url)
        if not parts.scheme or not parts.netloc:
            return "https://cad.onshape.com"
        return f"{parts.scheme}://{parts.netloc}"


def load_settings(**overrides) -> OnshapeSettings:
    """Build settings and insist on both API keys being present."""

    settings = OnshapeSettings(**overrides)
    if not settings.access_key.strip() or not settings.secret_key.strip():
        raise ConfigurationError(
            "Onshape API keys not set. Please set ONSHAPE_ACCESS_KEY and ONSHAPE_SECRET_KEY "
            "environment variables."
        )
    return settings


__all__ = ["DEFAULT_API_URL", "OnshapeSettings", "load_settings"]
