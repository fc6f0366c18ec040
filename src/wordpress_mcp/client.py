"""WordPress REST API client.

Authenticates with an application password over HTTP Basic auth. One
``WordPressClient`` is the backend handle for a session: credentials are
normalized and encoded once, at construction, and every method issues exactly
one HTTP request against ``{site_url}/wp-json``.
"""

from __future__ import annotations

import base64
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from wordpress_mcp.exceptions import BackendError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class WordPressCredentials:
    """A complete credential triple for one WordPress site."""

    site_url: str
    username: str
    application_password: str

    def __repr__(self) -> str:
        return (
            f"WordPressCredentials(site_url={self.site_url!r}, username={self.username!r}, "
            "application_password='***')"
        )


def create_http_client(
    transport: httpx.AsyncBaseTransport | None = None,
    timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
) -> httpx.AsyncClient:
    """Create an httpx AsyncClient with the defaults used for WordPress calls.

    The returned client must be used as a context manager so connections are
    released after the call.
    """
    return httpx.AsyncClient(transport=transport, timeout=timeout, follow_redirects=True)


def _query(**fields: Any) -> dict[str, str]:
    """Keep only the filters that were supplied; empty strings and zero count as absent."""
    return {key: str(value) for key, value in fields.items() if value}


def _payload(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Drop absent fields so WordPress leaves them unchanged."""
    return {key: value for key, value in fields.items() if value is not None}


class WordPressClient:
    def __init__(
        self,
        credentials: WordPressCredentials,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
    ):
        self.site_url = credentials.site_url.rstrip("/")
        self.username = credentials.username
        self._application_password = _WHITESPACE.sub("", credentials.application_password)
        token = base64.b64encode(f"{self.username}:{self._application_password}".encode()).decode("ascii")
        self._authorization = f"Basic {token}"
        self._transport = transport
        self._timeout = timeout

    @property
    def api_root(self) -> str:
        return f"{self.site_url}/wp-json"

    async def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        params: Mapping[str, str] | None = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Issue one request and return the decoded JSON body.

        Raises:
            BackendError: on a non-2xx status (with the body verbatim) or when
                the site cannot be reached
        """
        url = f"{self.api_root}{endpoint}"
        request_headers = {
            "Authorization": self._authorization,
            "Content-Type": "application/json",
        }
        if headers:
            request_headers.update(headers)

        logger.debug("WordPress %s %s params=%s", method, url, dict(params or {}))
        try:
            async with create_http_client(self._transport, self._timeout) as client:
                response = await client.request(
                    method,
                    url,
                    params=dict(params) if params else None,
                    json=json,
                    headers=request_headers,
                )
        except httpx.HTTPError as exc:
            raise BackendError(None, str(exc) or exc.__class__.__name__) from exc

        if not response.is_success:
            raise BackendError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as exc:
            raise BackendError(response.status_code, response.text) from exc

    # Posts

    async def list_posts(self, *, per_page: int | None = None, status: str | None = None, search: str | None = None):
        return await self.request("/wp/v2/posts", params=_query(per_page=per_page, status=status, search=search))

    async def get_post(self, post_id: int):
        return await self.request(f"/wp/v2/posts/{post_id}")

    async def create_post(
        self,
        *,
        title: str,
        content: str,
        status: str | None = None,
        categories: list[int] | None = None,
        tags: list[int] | None = None,
    ):
        data = _payload({"title": title, "content": content, "status": status, "categories": categories, "tags": tags})
        return await self.request("/wp/v2/posts", method="POST", json=data)

    async def update_post(self, post_id: int, data: Mapping[str, Any]):
        return await self.request(f"/wp/v2/posts/{post_id}", method="POST", json=_payload(data))

    async def delete_post(self, post_id: int):
        return await self.request(f"/wp/v2/posts/{post_id}", method="DELETE")

    # Pages

    async def list_pages(self, *, per_page: int | None = None, status: str | None = None):
        return await self.request("/wp/v2/pages", params=_query(per_page=per_page, status=status))

    async def get_page(self, page_id: int):
        return await self.request(f"/wp/v2/pages/{page_id}")

    async def create_page(self, *, title: str, content: str, status: str | None = None, parent: int | None = None):
        data = _payload({"title": title, "content": content, "status": status, "parent": parent})
        return await self.request("/wp/v2/pages", method="POST", json=data)

    async def update_page(self, page_id: int, data: Mapping[str, Any]):
        return await self.request(f"/wp/v2/pages/{page_id}", method="POST", json=_payload(data))

    async def delete_page(self, page_id: int):
        return await self.request(f"/wp/v2/pages/{page_id}", method="DELETE")

    # Media

    async def list_media(self, *, per_page: int | None = None, media_type: str | None = None):
        return await self.request("/wp/v2/media", params=_query(per_page=per_page, media_type=media_type))

    async def delete_media(self, media_id: int):
        # Media has no trash; WordPress refuses the delete without force.
        return await self.request(f"/wp/v2/media/{media_id}", method="DELETE", params={"force": "true"})

    # Comments

    async def list_comments(self, *, post: int | None = None, per_page: int | None = None):
        return await self.request("/wp/v2/comments", params=_query(post=post, per_page=per_page))

    async def create_comment(
        self,
        *,
        post: int,
        content: str,
        author_name: str | None = None,
        author_email: str | None = None,
    ):
        data = _payload({"post": post, "content": content, "author_name": author_name, "author_email": author_email})
        return await self.request("/wp/v2/comments", method="POST", json=data)

    async def update_comment(self, comment_id: int, data: Mapping[str, Any]):
        return await self.request(f"/wp/v2/comments/{comment_id}", method="POST", json=_payload(data))

    async def delete_comment(self, comment_id: int):
        return await self.request(f"/wp/v2/comments/{comment_id}", method="DELETE", params={"force": "true"})

    # Taxonomy

    async def list_categories(self):
        return await self.request("/wp/v2/categories", params={"per_page": "100"})

    async def list_tags(self):
        return await self.request("/wp/v2/tags", params={"per_page": "100"})

    # Users & site

    async def list_users(self):
        return await self.request("/wp/v2/users")

    async def get_site_info(self):
        return await self.request("/")
