"""MCP Tools Types - Types for tool listing and invocation."""

from typing import Annotated, Any, Literal

from pydantic import ConfigDict, Field

from wordpress_mcp.types.base import MCPModel, RequestParams, Result
from wordpress_mcp.types.content import TextContent


class JsonSchema(MCPModel):
    """A JSON Schema object describing a tool's arguments."""

    type: Literal["object"] = "object"
    properties: dict[str, Any] = Field(default_factory=dict)
    required: list[str] | None = None


class ToolAnnotations(MCPModel):
    """Additional properties describing a Tool to clients."""

    title: str | None = None
    read_only_hint: Annotated[bool | None, Field(alias="readOnlyHint")] = None
    destructive_hint: Annotated[bool | None, Field(alias="destructiveHint")] = None
    idempotent_hint: Annotated[bool | None, Field(alias="idempotentHint")] = None
    open_world_hint: Annotated[bool | None, Field(alias="openWorldHint")] = None


class Tool(MCPModel):
    """Definition of a tool the server provides."""

    model_config = ConfigDict(extra="allow", validate_by_name=True, validate_by_alias=True, frozen=True)

    name: str
    description: str | None = None
    input_schema: Annotated[JsonSchema, Field(alias="inputSchema")]
    annotations: ToolAnnotations | None = None


class ListToolsResult(Result):
    """Server's response to a tools/list request."""

    tools: list[Tool]
    next_cursor: Annotated[str | None, Field(alias="nextCursor")] = None


class CallToolRequestParams(RequestParams):
    """Parameters for tools/call request."""

    name: str
    arguments: dict[str, Any] | None = None


class CallToolResult(Result):
    """Server's response to a tools/call request."""

    content: list[TextContent]
    is_error: Annotated[bool, Field(alias="isError")] = False

    @property
    def text(self) -> str:
        """All text blocks joined, which is how clients usually render a result."""
        return "\n".join(block.text for block in self.content)
