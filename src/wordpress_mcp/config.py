"""Deployment configuration.

WordPress credentials are read from the unprefixed ``WORDPRESS_URL``,
``WORDPRESS_USERNAME`` and ``WORDPRESS_APP_PASSWORD`` variables; server
settings use the ``WORDPRESS_MCP_`` prefix (e.g. ``WORDPRESS_MCP_STATELESS_HTTP=true``).
A ``.env`` file in the working directory is honored.
"""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from wordpress_mcp.credentials import WordPressConfig

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WORDPRESS_MCP_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    # WordPress credentials
    site_url: str | None = Field(default=None, validation_alias="WORDPRESS_URL")
    username: str | None = Field(default=None, validation_alias="WORDPRESS_USERNAME")
    application_password: str | None = Field(
        default=None,
        validation_alias="WORDPRESS_APP_PASSWORD",
        repr=False,
    )

    # Server settings
    debug: bool = False
    log_level: LogLevel = "INFO"

    # HTTP settings
    host: str = "127.0.0.1"
    port: int = Field(default=3000, validation_alias=AliasChoices("WORDPRESS_MCP_PORT", "PORT"))
    mcp_path: str = "/mcp"

    # StreamableHTTP settings
    json_response: bool = True
    stateless_http: bool = False
    """Create a fresh session, backend handle and transport for every request."""

    def wordpress_config(self) -> WordPressConfig:
        return WordPressConfig(
            site_url=self.site_url or None,
            username=self.username or None,
            application_password=self.application_password or None,
        )
