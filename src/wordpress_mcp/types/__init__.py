"""Protocol types: the JSON-RPC envelope plus the MCP payloads this server speaks."""

from wordpress_mcp.types.base import LATEST_PROTOCOL_VERSION, SUPPORTED_PROTOCOL_VERSIONS, MCPModel, Result
from wordpress_mcp.types.common import ClientCapabilities, Implementation, ServerCapabilities
from wordpress_mcp.types.content import TextContent
from wordpress_mcp.types.initialize import InitializeRequestParams, InitializeResult
from wordpress_mcp.types.json_rpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SESSION_ERROR,
    ErrorData,
    JSONRPCErrorResponse,
    JSONRPCMessage,
    JSONRPCMessageAdapter,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    JSONRPCResultResponse,
    RequestId,
    dump_message,
    dump_message_json,
    error_response,
    is_initialize_request,
)
from wordpress_mcp.types.prompts import (
    GetPromptRequestParams,
    GetPromptResult,
    ListPromptsResult,
    Prompt,
    PromptArgument,
    PromptMessage,
)
from wordpress_mcp.types.resources import (
    ListResourcesResult,
    ReadResourceRequestParams,
    ReadResourceResult,
    Resource,
    TextResourceContents,
)
from wordpress_mcp.types.tools import (
    CallToolRequestParams,
    CallToolResult,
    JsonSchema,
    ListToolsResult,
    Tool,
    ToolAnnotations,
)

__all__ = [
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "LATEST_PROTOCOL_VERSION",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "SESSION_ERROR",
    "SUPPORTED_PROTOCOL_VERSIONS",
    "CallToolRequestParams",
    "CallToolResult",
    "ClientCapabilities",
    "ErrorData",
    "GetPromptRequestParams",
    "GetPromptResult",
    "Implementation",
    "InitializeRequestParams",
    "InitializeResult",
    "JSONRPCErrorResponse",
    "JSONRPCMessage",
    "JSONRPCMessageAdapter",
    "JSONRPCNotification",
    "JSONRPCRequest",
    "JSONRPCResponse",
    "JSONRPCResultResponse",
    "JsonSchema",
    "ListPromptsResult",
    "ListResourcesResult",
    "ListToolsResult",
    "MCPModel",
    "Prompt",
    "PromptArgument",
    "PromptMessage",
    "ReadResourceRequestParams",
    "ReadResourceResult",
    "RequestId",
    "Resource",
    "Result",
    "ServerCapabilities",
    "TextContent",
    "TextResourceContents",
    "Tool",
    "ToolAnnotations",
    "dump_message",
    "dump_message_json",
    "error_response",
    "is_initialize_request",
]
