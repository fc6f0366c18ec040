"""The WordPress MCP server: tools, prompts and the server-info resource."""

from __future__ import annotations

import json
import logging

import jsonschema

from wordpress_mcp.credentials import IncompleteCredentials
from wordpress_mcp.dispatch import dispatch_tool
from wordpress_mcp.exceptions import McpError, UnknownToolError, WordPressMcpError
from wordpress_mcp.results import error_result, success_result
from wordpress_mcp.server.context import RequestContext
from wordpress_mcp.server.lowlevel import LowLevelServer
from wordpress_mcp.tools import TOOL_CATEGORIES, TOOLS, get_tool
from wordpress_mcp.types import (
    INVALID_PARAMS,
    CallToolRequestParams,
    CallToolResult,
    ErrorData,
    GetPromptRequestParams,
    GetPromptResult,
    JSONRPCRequest,
    ListPromptsResult,
    ListResourcesResult,
    ListToolsResult,
    Prompt,
    PromptMessage,
    ReadResourceRequestParams,
    ReadResourceResult,
    Resource,
    TextContent,
    TextResourceContents,
)
from wordpress_mcp.utilities.logging import redact_credentials
from wordpress_mcp.version import __version__

logger = logging.getLogger(__name__)

SERVER_NAME = "wordpress-mcp"
SERVER_INFO_URI = "wordpress://server-info"

PROMPTS: dict[str, tuple[Prompt, str]] = {
    "manage-content": (
        Prompt(
            name="manage-content",
            description="Guide for managing WordPress posts and pages: list, create, update, and delete content",
        ),
        "\n".join(
            [
                "You are a WordPress content management assistant.",
                "",
                "Available actions:",
                "1. **List posts**: Use wp_list_posts to see all blog posts",
                "2. **Get post**: Use wp_get_post to read a specific post",
                "3. **Create post**: Use wp_create_post with title, content, and status",
                "4. **Update post**: Use wp_update_post to modify existing posts",
                "5. **Delete post**: Use wp_delete_post to remove a post",
                "6. **Pages**: Same operations available for pages (wp_list_pages, etc.)",
                "",
                "Start by listing my current posts.",
            ]
        ),
    ),
    "manage-media": (
        Prompt(
            name="manage-media",
            description="Guide for managing WordPress media library, comments, categories, and tags",
        ),
        "\n".join(
            [
                "You are a WordPress media and taxonomy assistant.",
                "",
                "Available actions:",
                "1. **List media**: Use wp_list_media to see uploaded files",
                "2. **Delete media**: Use wp_delete_media to remove files",
                "3. **Comments**: Use wp_list_comments, wp_create_comment, wp_update_comment, wp_delete_comment",
                "4. **Categories**: Use wp_list_categories to see all categories",
                "5. **Tags**: Use wp_list_tags to see all tags",
                "6. **Users**: Use wp_list_users to see site users",
                "7. **Site info**: Use wp_get_site_info for site details",
                "",
                "Start by listing the media library.",
            ]
        ),
    ),
}

SERVER_INFO_RESOURCE = Resource(
    uri=SERVER_INFO_URI,
    name="WordPress Server Info",
    description="Connection status and available tools for this WordPress MCP server",
    mime_type="application/json",
)


async def call_tool(ctx: RequestContext, params: CallToolRequestParams) -> CallToolResult:
    """Run one tool call and fold every outcome into a result envelope.

    Order: the name is looked up, credentials are resolved (creating the
    session's backend handle on first success), arguments are checked against
    the tool's input schema, then the WordPress call is made.
    """
    name = params.name
    arguments = params.arguments or {}
    logger.debug("tools/call %s %s", name, redact_credentials(arguments))

    tool = get_tool(name)
    if tool is None:
        return error_result(UnknownToolError(name))

    client = ctx.session.get_client(arguments)
    if isinstance(client, IncompleteCredentials):
        logger.info("Tool %s refused: missing %s", name, ", ".join(client.missing))
        return error_result(client)

    try:
        jsonschema.validate(instance=arguments, schema=tool.input_schema.dump())
    except jsonschema.ValidationError as exc:
        return error_result(f"Input validation error: {exc.message}")

    try:
        payload = await dispatch_tool(name, arguments, client)
    except WordPressMcpError as exc:
        logger.warning("Tool %s failed: %s", name, exc)
        return error_result(exc)
    except Exception as exc:
        logger.exception("Tool %s raised unexpectedly", name)
        return error_result(exc)
    return success_result(payload)


def server_info(ctx: RequestContext) -> dict[str, object]:
    config = ctx.session.config
    return {
        "name": SERVER_NAME,
        "version": __version__,
        "connected": config.is_complete,
        "wordpress_url": config.site_url,
        "tools_available": len(TOOLS),
        "tool_categories": TOOL_CATEGORIES,
    }


def create_server() -> LowLevelServer:
    """Build the handler registry shared by every transport."""
    server = LowLevelServer(name=SERVER_NAME, version=__version__)

    @server.request_handler("tools/list")
    async def list_tools(ctx: RequestContext, request: JSONRPCRequest) -> ListToolsResult:
        return ListToolsResult(tools=TOOLS)

    @server.request_handler("tools/call")
    async def handle_call_tool(ctx: RequestContext, request: JSONRPCRequest) -> CallToolResult:
        params = CallToolRequestParams.model_validate(request.params or {})
        return await call_tool(ctx, params)

    @server.request_handler("prompts/list")
    async def list_prompts(ctx: RequestContext, request: JSONRPCRequest) -> ListPromptsResult:
        return ListPromptsResult(prompts=[prompt for prompt, _ in PROMPTS.values()])

    @server.request_handler("prompts/get")
    async def get_prompt(ctx: RequestContext, request: JSONRPCRequest) -> GetPromptResult:
        params = GetPromptRequestParams.model_validate(request.params or {})
        if params.name not in PROMPTS:
            raise McpError(ErrorData(code=INVALID_PARAMS, message=f"Unknown prompt: {params.name}"))
        prompt, text = PROMPTS[params.name]
        return GetPromptResult(
            description=prompt.description,
            messages=[PromptMessage(role="user", content=TextContent(text=text))],
        )

    @server.request_handler("resources/list")
    async def list_resources(ctx: RequestContext, request: JSONRPCRequest) -> ListResourcesResult:
        return ListResourcesResult(resources=[SERVER_INFO_RESOURCE])

    @server.request_handler("resources/read")
    async def read_resource(ctx: RequestContext, request: JSONRPCRequest) -> ReadResourceResult:
        params = ReadResourceRequestParams.model_validate(request.params or {})
        if params.uri != SERVER_INFO_URI:
            raise McpError(ErrorData(code=INVALID_PARAMS, message=f"Unknown resource: {params.uri}"))
        return ReadResourceResult(
            contents=[
                TextResourceContents(
                    uri=SERVER_INFO_URI,
                    mime_type="application/json",
                    text=json.dumps(server_info(ctx), indent=2),
                )
            ]
        )

    return server
