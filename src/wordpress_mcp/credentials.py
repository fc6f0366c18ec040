"""Per-call credential resolution.

Deployment configuration always wins; each field that the deployment leaves
empty may be filled from the same-named inline tool argument. Resolution never
raises: a missing field produces an ``IncompleteCredentials`` value that the
caller turns into a tool error, so the session stays usable.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from wordpress_mcp.client import WordPressCredentials

URL_KEY = "WORDPRESS_URL"
USERNAME_KEY = "WORDPRESS_USERNAME"
PASSWORD_KEY = "WORDPRESS_APP_PASSWORD"

CREDENTIAL_KEYS = (URL_KEY, USERNAME_KEY, PASSWORD_KEY)

INCOMPLETE_CREDENTIALS_MESSAGE = (
    "Error: WORDPRESS_URL, WORDPRESS_USERNAME, and WORDPRESS_APP_PASSWORD are required."
)


@dataclass(frozen=True)
class WordPressConfig:
    """A possibly partial set of credentials from one configuration layer."""

    site_url: str | None = None
    username: str | None = None
    application_password: str | None = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> WordPressConfig:
        """Read the three WORDPRESS_* keys, e.g. from query parameters."""
        return cls(
            site_url=_present(values.get(URL_KEY)),
            username=_present(values.get(USERNAME_KEY)),
            application_password=_present(values.get(PASSWORD_KEY)),
        )

    def overlay(self, lower: WordPressConfig) -> WordPressConfig:
        """Fill fields this layer leaves empty from ``lower``; values already set win."""
        return WordPressConfig(
            site_url=self.site_url or lower.site_url,
            username=self.username or lower.username,
            application_password=self.application_password or lower.application_password,
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.site_url and self.username and self.application_password)


@dataclass(frozen=True)
class IncompleteCredentials:
    """Typed failure returned when a credential field is still missing after fallback."""

    missing: tuple[str, ...]

    @property
    def message(self) -> str:
        return INCOMPLETE_CREDENTIALS_MESSAGE


def resolve_credentials(
    config: WordPressConfig | None, arguments: Mapping[str, Any] | None
) -> WordPressCredentials | IncompleteCredentials:
    config = config or WordPressConfig()
    inline = WordPressConfig.from_mapping(arguments or {})
    merged = config.overlay(inline)

    missing = tuple(
        key
        for key, value in zip(
            CREDENTIAL_KEYS, (merged.site_url, merged.username, merged.application_password)
        )
        if not value
    )
    if missing:
        return IncompleteCredentials(missing=missing)

    assert merged.site_url and merged.username and merged.application_password
    return WordPressCredentials(
        site_url=merged.site_url,
        username=merged.username,
        application_password=merged.application_password,
    )


def _present(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None
