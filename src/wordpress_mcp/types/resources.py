"""MCP Resource Types - Types for resources."""

from typing import Annotated

from pydantic import Field

from wordpress_mcp.types.base import MCPModel, RequestParams, Result


class Resource(MCPModel):
    """A known resource that the server is capable of reading."""

    uri: str
    name: str
    title: str | None = None
    description: str | None = None
    mime_type: Annotated[str | None, Field(alias="mimeType")] = None


class TextResourceContents(MCPModel):
    """Text contents of a resource."""

    uri: str
    mime_type: Annotated[str | None, Field(alias="mimeType")] = None
    text: str


class ListResourcesResult(Result):
    resources: list[Resource]


class ReadResourceRequestParams(RequestParams):
    uri: str


class ReadResourceResult(Result):
    contents: list[TextResourceContents]
