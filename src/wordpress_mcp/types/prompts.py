"""MCP Prompt Types - Types for prompt listing and retrieval."""

from typing import Literal

from wordpress_mcp.types.base import MCPModel, RequestParams, Result
from wordpress_mcp.types.content import TextContent


class PromptArgument(MCPModel):
    """An argument that a prompt template can accept."""

    name: str
    description: str | None = None
    required: bool | None = None


class Prompt(MCPModel):
    """A prompt or prompt template that the server offers."""

    name: str
    title: str | None = None
    description: str | None = None
    arguments: list[PromptArgument] | None = None


class PromptMessage(MCPModel):
    """Describes a message returned as part of a prompt."""

    role: Literal["user", "assistant"]
    content: TextContent


class ListPromptsResult(Result):
    prompts: list[Prompt]


class GetPromptRequestParams(RequestParams):
    name: str
    arguments: dict[str, str] | None = None


class GetPromptResult(Result):
    description: str | None = None
    messages: list[PromptMessage]
