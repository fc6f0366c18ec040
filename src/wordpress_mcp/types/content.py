"""MCP Content Types - Content blocks used in prompts and tool results."""

from typing import Literal

from wordpress_mcp.types.base import MCPModel


class TextContent(MCPModel):
    """Text provided to or from an LLM."""

    type: Literal["text"] = "text"
    text: str
