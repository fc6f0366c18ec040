"""Logging setup shared by the CLI and the HTTP app."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Literal

from rich.console import Console
from rich.logging import RichHandler

from wordpress_mcp.credentials import CREDENTIAL_KEYS

_SENSITIVE_KEYS = {key.lower() for key in CREDENTIAL_KEYS} | {"authorization", "application_password"}


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
) -> None:
    """Send logs to stderr; stdout belongs to the stdio transport."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


def redact_credentials(data: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Return a shallow copy with secrets replaced by "***"."""
    if data is None:
        return None
    return {key: "***" if key.lower() in _SENSITIVE_KEYS else value for key, value in data.items()}
