from wordpress_mcp.types.json_rpc import ErrorData


class WordPressMcpError(Exception):
    """Base class for errors raised by this package."""


class BackendError(WordPressMcpError):
    """The WordPress REST API answered with a non-success status or could not be reached.

    Attributes:
        status_code: HTTP status returned upstream, or None when no response arrived
        body: the raw response body (or transport error text), unmodified
    """

    def __init__(self, status_code: int | None, body: str):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            super().__init__(f"WordPress API request failed: {body}")
        else:
            super().__init__(f"WordPress API Error ({status_code}): {body}")


class UnknownToolError(WordPressMcpError):
    """A tools/call named an operation that is not in the tool table."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class InvalidSessionError(WordPressMcpError):
    """A frame referenced a session that does not exist or has been closed."""

    def __init__(self, session_id: str | None):
        self.session_id = session_id
        super().__init__("Bad Request: No valid session ID provided")


class McpError(WordPressMcpError):
    """Raised by a request handler to answer with a specific JSON-RPC error.

    Attributes:
        error: the ErrorData sent back to the peer
    """

    error: ErrorData

    def __init__(self, error: ErrorData):
        super().__init__(error.message)
        self.error = error
