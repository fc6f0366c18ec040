"""Route a tool name plus its argument bag to exactly one WordPress client call."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from wordpress_mcp.client import WordPressClient
from wordpress_mcp.exceptions import UnknownToolError
from wordpress_mcp.tools import TOOL_NAMES

ToolHandler = Callable[[WordPressClient, Mapping[str, Any]], Awaitable[Any]]


def _pick(arguments: Mapping[str, Any], *keys: str) -> dict[str, Any]:
    """Only the named arguments that were supplied; credentials and extras never travel upstream."""
    return {key: arguments[key] for key in keys if key in arguments}


def _numeric(value: Any) -> Any:
    # JSON numbers may arrive as 12.0; WordPress routes want 12.
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _id(arguments: Mapping[str, Any], key: str = "id") -> Any:
    return _numeric(arguments[key])


def _ids(values: Any) -> Any:
    if isinstance(values, list):
        return [_numeric(value) for value in values]
    return values


def _content_fields(arguments: Mapping[str, Any], *keys: str) -> dict[str, Any]:
    fields = _pick(arguments, *keys)
    for key in ("categories", "tags"):
        if key in fields:
            fields[key] = _ids(fields[key])
    for key in ("per_page", "post", "parent"):
        if key in fields:
            fields[key] = _numeric(fields[key])
    return fields


_POST_FIELDS = ("title", "content", "status", "categories", "tags")
_PAGE_UPDATE_FIELDS = ("title", "content", "status")
_COMMENT_UPDATE_FIELDS = ("content", "status")

HANDLERS: dict[str, ToolHandler] = {
    # Posts
    "wp_list_posts": lambda c, a: c.list_posts(**_content_fields(a, "per_page", "status", "search")),
    "wp_get_post": lambda c, a: c.get_post(_id(a)),
    "wp_create_post": lambda c, a: c.create_post(**_content_fields(a, *_POST_FIELDS)),
    "wp_update_post": lambda c, a: c.update_post(_id(a), _content_fields(a, *_POST_FIELDS)),
    "wp_delete_post": lambda c, a: c.delete_post(_id(a)),
    # Pages
    "wp_list_pages": lambda c, a: c.list_pages(**_content_fields(a, "per_page", "status")),
    "wp_get_page": lambda c, a: c.get_page(_id(a)),
    "wp_create_page": lambda c, a: c.create_page(**_content_fields(a, "title", "content", "status", "parent")),
    "wp_update_page": lambda c, a: c.update_page(_id(a), _content_fields(a, *_PAGE_UPDATE_FIELDS)),
    "wp_delete_page": lambda c, a: c.delete_page(_id(a)),
    # Media
    "wp_list_media": lambda c, a: c.list_media(**_content_fields(a, "per_page", "media_type")),
    "wp_delete_media": lambda c, a: c.delete_media(_id(a)),
    # Comments
    "wp_list_comments": lambda c, a: c.list_comments(**_content_fields(a, "post", "per_page")),
    "wp_create_comment": lambda c, a: c.create_comment(
        **_content_fields(a, "post", "content", "author_name", "author_email")
    ),
    "wp_update_comment": lambda c, a: c.update_comment(_id(a), _content_fields(a, *_COMMENT_UPDATE_FIELDS)),
    "wp_delete_comment": lambda c, a: c.delete_comment(_id(a)),
    # Taxonomy
    "wp_list_categories": lambda c, a: c.list_categories(),
    "wp_list_tags": lambda c, a: c.list_tags(),
    # Users & site
    "wp_list_users": lambda c, a: c.list_users(),
    "wp_get_site_info": lambda c, a: c.get_site_info(),
}

if HANDLERS.keys() != TOOL_NAMES:
    raise RuntimeError(f"Tool table and dispatch table disagree: {sorted(HANDLERS.keys() ^ TOOL_NAMES)}")


async def dispatch_tool(name: str, arguments: Mapping[str, Any] | None, client: WordPressClient) -> Any:
    """Call the WordPress operation behind ``name``.

    Raises:
        UnknownToolError: ``name`` is not an exact match for a registered tool
        BackendError: the upstream call failed
    """
    handler = HANDLERS.get(name)
    if handler is None:
        raise UnknownToolError(name)
    return await handler(client, arguments or {})
