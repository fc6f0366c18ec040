"""The WordPress tool catalogue.

``TOOLS`` is the only place tools are declared: ``tools/list`` serves it as-is
and the dispatcher derives its set of valid names from it.
"""

from __future__ import annotations

from typing import Any

from wordpress_mcp.types import JsonSchema, Tool, ToolAnnotations


def _tool(
    name: str,
    title: str,
    description: str,
    properties: dict[str, Any],
    required: list[str] | None = None,
    *,
    read_only: bool,
    destructive: bool,
    open_world: bool,
    idempotent: bool | None = None,
) -> Tool:
    return Tool(
        name=name,
        description=description,
        input_schema=JsonSchema(properties=properties, required=required),
        annotations=ToolAnnotations(
            title=title,
            read_only_hint=read_only,
            destructive_hint=destructive,
            idempotent_hint=idempotent,
            open_world_hint=open_world,
        ),
    )


_NUMBER_LIST = {"type": "array", "items": {"type": "number"}}

TOOLS: list[Tool] = [
    # Posts
    _tool(
        "wp_list_posts",
        "List Posts",
        "List WordPress posts with optional filters. Returns post ID, title, status, date, and categories. "
        "Use to browse existing content or find posts by keyword.",
        {
            "per_page": {"type": "number", "description": "Number of posts to return (default 10, max 100)"},
            "status": {"type": "string", "description": "Filter by status: publish, draft, pending, private, trash"},
            "search": {"type": "string", "description": "Search posts by keyword"},
        },
        read_only=True,
        destructive=False,
        open_world=True,
    ),
    _tool(
        "wp_get_post",
        "Get Post",
        "Get a single WordPress post with full content, metadata, categories, and tags. "
        "Use to inspect post content before editing.",
        {"id": {"type": "number", "description": "Post ID"}},
        ["id"],
        read_only=True,
        destructive=False,
        open_world=True,
    ),
    _tool(
        "wp_create_post",
        "Create Post",
        "Create a new WordPress post. Provide title and content (HTML). "
        "Optionally set status (draft/publish), categories, and tags.",
        {
            "title": {"type": "string", "description": "Post title"},
            "content": {"type": "string", "description": "Post content (HTML)"},
            "status": {"type": "string", "description": "Post status: draft (default), publish, pending, private"},
            "categories": {**_NUMBER_LIST, "description": "Category IDs"},
            "tags": {**_NUMBER_LIST, "description": "Tag IDs"},
        },
        ["title", "content"],
        read_only=False,
        destructive=False,
        open_world=False,
    ),
    _tool(
        "wp_update_post",
        "Update Post",
        "Update an existing WordPress post. Change title, content, status, categories, or tags.",
        {
            "id": {"type": "number", "description": "Post ID to update"},
            "title": {"type": "string", "description": "New title (optional)"},
            "content": {"type": "string", "description": "New content HTML (optional)"},
            "status": {"type": "string", "description": "New status (optional)"},
            "categories": {**_NUMBER_LIST, "description": "New category IDs (optional)"},
            "tags": {**_NUMBER_LIST, "description": "New tag IDs (optional)"},
        },
        ["id"],
        read_only=False,
        destructive=False,
        idempotent=True,
        open_world=False,
    ),
    _tool(
        "wp_delete_post",
        "Delete Post",
        "Delete a WordPress post. Moves to trash by default.",
        {"id": {"type": "number", "description": "Post ID to delete"}},
        ["id"],
        read_only=False,
        destructive=True,
        open_world=False,
    ),
    # Pages
    _tool(
        "wp_list_pages",
        "List Pages",
        "List WordPress pages. Returns page ID, title, status, and parent page. Use to browse site page structure.",
        {
            "per_page": {"type": "number", "description": "Number of pages to return (default 10, max 100)"},
            "status": {"type": "string", "description": "Filter by status: publish, draft, pending, private"},
        },
        read_only=True,
        destructive=False,
        open_world=True,
    ),
    _tool(
        "wp_get_page",
        "Get Page",
        "Get a single WordPress page with full content and metadata.",
        {"id": {"type": "number", "description": "Page ID"}},
        ["id"],
        read_only=True,
        destructive=False,
        open_world=True,
    ),
    _tool(
        "wp_create_page",
        "Create Page",
        "Create a new WordPress page. Provide title and content (HTML). Optionally set parent page for hierarchy.",
        {
            "title": {"type": "string", "description": "Page title"},
            "content": {"type": "string", "description": "Page content (HTML)"},
            "status": {"type": "string", "description": "Page status: draft (default), publish"},
            "parent": {"type": "number", "description": "Parent page ID for hierarchical pages"},
        },
        ["title", "content"],
        read_only=False,
        destructive=False,
        open_world=False,
    ),
    _tool(
        "wp_update_page",
        "Update Page",
        "Update an existing WordPress page.",
        {
            "id": {"type": "number", "description": "Page ID to update"},
            "title": {"type": "string", "description": "New title (optional)"},
            "content": {"type": "string", "description": "New content HTML (optional)"},
            "status": {"type": "string", "description": "New status (optional)"},
        },
        ["id"],
        read_only=False,
        destructive=False,
        idempotent=True,
        open_world=False,
    ),
    _tool(
        "wp_delete_page",
        "Delete Page",
        "Delete a WordPress page.",
        {"id": {"type": "number", "description": "Page ID to delete"}},
        ["id"],
        read_only=False,
        destructive=True,
        open_world=False,
    ),
    # Media
    _tool(
        "wp_list_media",
        "List Media",
        "List media files in the WordPress library. Returns file URLs, types, and metadata.",
        {
            "per_page": {"type": "number", "description": "Number of items to return (default 10)"},
            "media_type": {"type": "string", "description": "Filter by type: image, video, audio, application"},
        },
        read_only=True,
        destructive=False,
        open_world=True,
    ),
    _tool(
        "wp_delete_media",
        "Delete Media",
        "Permanently delete a media file from WordPress.",
        {"id": {"type": "number", "description": "Media ID to delete"}},
        ["id"],
        read_only=False,
        destructive=True,
        open_world=False,
    ),
    # Comments
    _tool(
        "wp_list_comments",
        "List Comments",
        "List comments on WordPress posts. Filter by post ID.",
        {
            "post": {"type": "number", "description": "Filter by post ID"},
            "per_page": {"type": "number", "description": "Number of comments to return"},
        },
        read_only=True,
        destructive=False,
        open_world=True,
    ),
    _tool(
        "wp_create_comment",
        "Create Comment",
        "Create a new comment on a WordPress post.",
        {
            "post": {"type": "number", "description": "Post ID to comment on"},
            "content": {"type": "string", "description": "Comment content"},
            "author_name": {"type": "string", "description": "Comment author name"},
            "author_email": {"type": "string", "description": "Comment author email"},
        },
        ["post", "content"],
        read_only=False,
        destructive=False,
        open_world=False,
    ),
    _tool(
        "wp_update_comment",
        "Update Comment",
        "Update or moderate a comment. Change content or approval status.",
        {
            "id": {"type": "number", "description": "Comment ID"},
            "content": {"type": "string", "description": "New comment content (optional)"},
            "status": {"type": "string", "description": "New status: approved, hold, spam, trash"},
        },
        ["id"],
        read_only=False,
        destructive=False,
        idempotent=True,
        open_world=False,
    ),
    _tool(
        "wp_delete_comment",
        "Delete Comment",
        "Permanently delete a comment.",
        {"id": {"type": "number", "description": "Comment ID to delete"}},
        ["id"],
        read_only=False,
        destructive=True,
        open_world=False,
    ),
    # Taxonomy
    _tool(
        "wp_list_categories",
        "List Categories",
        "List all WordPress categories with post counts.",
        {},
        read_only=True,
        destructive=False,
        open_world=True,
    ),
    _tool(
        "wp_list_tags",
        "List Tags",
        "List all WordPress tags with post counts.",
        {},
        read_only=True,
        destructive=False,
        open_world=True,
    ),
    # Users & site
    _tool(
        "wp_list_users",
        "List Users",
        "List WordPress users with their roles.",
        {},
        read_only=True,
        destructive=False,
        open_world=True,
    ),
    _tool(
        "wp_get_site_info",
        "Get Site Info",
        "Get WordPress site information: name, description, URL, timezone, and available features.",
        {},
        read_only=True,
        destructive=False,
        open_world=True,
    ),
]

TOOL_NAMES: frozenset[str] = frozenset(tool.name for tool in TOOLS)

TOOL_CATEGORIES: dict[str, int] = {
    "posts": 5,
    "pages": 5,
    "media": 2,
    "comments": 4,
    "taxonomy": 2,
    "users_and_site": 2,
}

_TOOLS_BY_NAME: dict[str, Tool] = {tool.name: tool for tool in TOOLS}


def get_tool(name: str) -> Tool | None:
    return _TOOLS_BY_NAME.get(name)
