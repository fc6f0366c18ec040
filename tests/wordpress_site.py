"""An in-memory WordPress REST API served through httpx.MockTransport."""

from __future__ import annotations

import base64
import json
from typing import Any

import httpx

from wordpress_mcp.client import WordPressClient, WordPressCredentials

SITE_URL = "https://blog.example.com"
USERNAME = "editor"
# Application passwords are displayed in groups of four; the spaces are cosmetic.
APP_PASSWORD = "abcd efgh ijkl mnop"

CREDENTIALS = WordPressCredentials(site_url=SITE_URL, username=USERNAME, application_password=APP_PASSWORD)

CREDENTIAL_ARGUMENTS = {
    "WORDPRESS_URL": SITE_URL,
    "WORDPRESS_USERNAME": USERNAME,
    "WORDPRESS_APP_PASSWORD": APP_PASSWORD,
}


def _expected_authorization() -> str:
    token = base64.b64encode(f"{USERNAME}:{APP_PASSWORD.replace(' ', '')}".encode()).decode()
    return f"Basic {token}"


class FakeWordPress:
    """Just enough of /wp-json/wp/v2 to exercise every tool.

    Every request is recorded in ``requests``. Set ``fail_with`` to make the
    next requests answer with that (status, body) instead.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.fail_with: tuple[int, str] | None = None
        self._next_id = 100
        self.items: dict[str, dict[int, dict[str, Any]]] = {
            "posts": {
                1: {"id": 1, "title": "Hello world!", "content": "<p>Welcome</p>", "status": "publish"},
                2: {"id": 2, "title": "Draft notes", "content": "<p>WIP</p>", "status": "draft"},
            },
            "pages": {
                10: {"id": 10, "title": "About", "content": "<p>About us</p>", "status": "publish", "parent": 0},
            },
            "media": {
                20: {"id": 20, "title": "logo.png", "media_type": "image", "source_url": f"{SITE_URL}/logo.png"},
            },
            "comments": {
                30: {"id": 30, "post": 1, "content": "Nice post", "status": "approved", "author_name": "Ann"},
            },
        }
        self.categories = [{"id": 1, "name": "Uncategorized", "count": 1}, {"id": 4, "name": "News", "count": 0}]
        self.tags = [{"id": 7, "name": "python", "count": 1}]
        self.users = [{"id": 1, "name": "editor", "roles": ["administrator"]}]
        self.site = {
            "name": "Example Blog",
            "description": "Just another WordPress site",
            "url": SITE_URL,
            "timezone_string": "UTC",
            "namespaces": ["wp/v2"],
        }

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def client(self, credentials: WordPressCredentials = CREDENTIALS) -> WordPressClient:
        return WordPressClient(credentials, transport=self.transport)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            status, body = self.fail_with
            return httpx.Response(status, text=body)

        if request.headers.get("authorization") != _expected_authorization():
            return _error(401, "rest_not_logged_in", "You are not currently logged in.")

        path = request.url.path
        assert path.startswith("/wp-json"), path
        route = path.removeprefix("/wp-json").strip("/")
        if not route:
            return httpx.Response(200, json=self.site)

        parts = route.split("/")
        collection = parts[2]
        item_id = int(parts[3]) if len(parts) > 3 else None

        if collection == "categories":
            return httpx.Response(200, json=self.categories)
        if collection == "tags":
            return httpx.Response(200, json=self.tags)
        if collection == "users":
            return httpx.Response(200, json=self.users)

        store = self.items[collection]
        if item_id is None:
            if request.method == "GET":
                return httpx.Response(200, json=self._filter(store, request.url.params))
            return self._create(store, json.loads(request.content))

        item = store.get(item_id)
        if item is None:
            return _error(404, "rest_post_invalid_id", "Invalid post ID.")
        if request.method == "GET":
            return httpx.Response(200, json=item)
        if request.method == "POST":
            item.update(json.loads(request.content))
            return httpx.Response(200, json=item)
        if request.method == "DELETE":
            if request.url.params.get("force") == "true":
                del store[item_id]
                return httpx.Response(200, json={"deleted": True, "previous": item})
            item["status"] = "trash"
            return httpx.Response(200, json=item)
        return _error(405, "rest_no_route", "No route was found matching the URL and request method.")

    def _filter(self, store: dict[int, dict[str, Any]], params: httpx.QueryParams) -> list[dict[str, Any]]:
        items = list(store.values())
        for key in ("status", "post", "media_type"):
            if key in params:
                items = [item for item in items if str(item.get(key)) == params[key]]
        if "search" in params:
            items = [item for item in items if params["search"].lower() in item["title"].lower()]
        return items[: int(params.get("per_page", 10))]

    def _create(self, store: dict[int, dict[str, Any]], body: dict[str, Any]) -> httpx.Response:
        self._next_id += 1
        item = {"id": self._next_id, "status": "draft", **body}
        store[item["id"]] = item
        return httpx.Response(201, json=item)


def _error(status: int, code: str, message: str) -> httpx.Response:
    return httpx.Response(status, json={"code": code, "message": message, "data": {"status": status}})


class RecordingClientFactory:
    """Builds clients bound to the fake site and remembers each set of credentials it was given."""

    def __init__(self, site: FakeWordPress) -> None:
        self.site = site
        self.created: list[WordPressCredentials] = []

    def __call__(self, credentials: WordPressCredentials) -> WordPressClient:
        self.created.append(credentials)
        return WordPressClient(credentials, transport=self.site.transport)
