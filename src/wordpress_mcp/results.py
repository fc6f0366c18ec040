"""Build the uniform tool-call envelope from a backend payload or a failure."""

from __future__ import annotations

import json
from typing import Any

from wordpress_mcp.credentials import IncompleteCredentials
from wordpress_mcp.types import CallToolResult, TextContent


def success_result(payload: Any) -> CallToolResult:
    return CallToolResult(
        content=[TextContent(text=json.dumps(payload, indent=2, ensure_ascii=False))],
        is_error=False,
    )


def error_result(error: BaseException | IncompleteCredentials | str) -> CallToolResult:
    """Wrap a failure as an ``isError`` result.

    Exceptions are rendered as ``Error: <message>``; credential failures and
    plain strings are used verbatim since they are already client-facing text.
    """
    if isinstance(error, IncompleteCredentials):
        text = error.message
    elif isinstance(error, BaseException):
        text = f"Error: {error}"
    else:
        text = error
    return CallToolResult(content=[TextContent(text=text)], is_error=True)
