"""Handler registry and message dispatch.

No I/O and no transport knowledge: transports hand a parsed message and a
sink to ``LowLevelServer.handle_message`` and write out whatever the sink
receives.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ValidationError

from wordpress_mcp.exceptions import McpError
from wordpress_mcp.server.context import RequestContext
from wordpress_mcp.server.session import ServerSession, SessionInfo
from wordpress_mcp.server.sink import ResponseSink
from wordpress_mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    LATEST_PROTOCOL_VERSION,
    METHOD_NOT_FOUND,
    SUPPORTED_PROTOCOL_VERSIONS,
    ErrorData,
    Implementation,
    InitializeRequestParams,
    InitializeResult,
    JSONRPCErrorResponse,
    JSONRPCMessage,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    JSONRPCResultResponse,
    ServerCapabilities,
)

logger = logging.getLogger(__name__)

RequestHandler = Callable[[RequestContext, JSONRPCRequest], Awaitable[Any]]


def negotiate_protocol_version(requested: str | None) -> str:
    """Echo the client's version when we speak it, otherwise offer our latest."""
    if requested in SUPPORTED_PROTOCOL_VERSIONS:
        return requested
    return LATEST_PROTOCOL_VERSION


class LowLevelServer:
    """Handler registry + dispatch.

    Usage:
        server = LowLevelServer(name="my-server", version="1.0")

        @server.request_handler("tools/list")
        async def list_tools(ctx: RequestContext, request: JSONRPCRequest):
            return ListToolsResult(tools=[...])
    """

    def __init__(self, *, name: str, version: str, instructions: str | None = None) -> None:
        self.name = name
        self.version = version
        self.instructions = instructions
        self._request_handlers: dict[str, RequestHandler] = {}

    def request_handler(self, method: str) -> Callable[[RequestHandler], RequestHandler]:
        """Decorator to register a request handler for a given method."""

        def decorator(fn: RequestHandler) -> RequestHandler:
            logger.debug("Registering handler for %s", method)
            self._request_handlers[method] = fn
            return fn

        return decorator

    def get_capabilities(self) -> ServerCapabilities:
        """Derive capabilities from registered handlers."""
        caps = ServerCapabilities()
        if "tools/list" in self._request_handlers or "tools/call" in self._request_handlers:
            caps.tools = {"listChanged": False}
        if "prompts/list" in self._request_handlers or "prompts/get" in self._request_handlers:
            caps.prompts = {"listChanged": False}
        if "resources/list" in self._request_handlers or "resources/read" in self._request_handlers:
            caps.resources = {"subscribe": False, "listChanged": False}
        return caps

    async def handle_message(self, sink: ResponseSink, message: JSONRPCMessage, *, session: ServerSession) -> None:
        """Dispatch a single inbound message; any response goes to ``sink``.

        Notifications and responses from the client are acknowledged and
        otherwise ignored: this server never issues server→client requests.
        """
        if isinstance(message, JSONRPCRequest):
            if message.method == "initialize":
                await sink.send_result(self._initialize(message, session))
                return
            if message.method == "ping":
                await sink.send_result(JSONRPCResultResponse(id=message.id, result={}))
                return

            ctx = RequestContext(session=session, request_id=message.id)
            await sink.send_result(await self.dispatch_request(ctx, message))
            return

        if isinstance(message, JSONRPCNotification):
            logger.debug("Notification %s for session %s", message.method, session.session_id)

    async def dispatch_request(self, ctx: RequestContext, request: JSONRPCRequest) -> JSONRPCResponse:
        handler = self._request_handlers.get(request.method)
        if not handler:
            return JSONRPCErrorResponse(
                id=request.id,
                error=ErrorData(code=METHOD_NOT_FOUND, message=f"Method not found: {request.method}"),
            )
        try:
            result = await handler(ctx, request)
        except McpError as exc:
            return JSONRPCErrorResponse(id=request.id, error=exc.error)
        except ValidationError as exc:
            return JSONRPCErrorResponse(
                id=request.id,
                error=ErrorData(code=INVALID_PARAMS, message=f"Invalid params for {request.method}: {exc}"),
            )
        except Exception:
            logger.exception("Handler error for %s", request.method)
            return JSONRPCErrorResponse(
                id=request.id,
                error=ErrorData(code=INTERNAL_ERROR, message="Internal error"),
            )

        if isinstance(result, BaseModel):
            result_data = result.model_dump(by_alias=True, exclude_none=True, mode="json")
        elif isinstance(result, dict):
            result_data = result
        else:
            result_data = {}
        return JSONRPCResultResponse(id=request.id, result=result_data)

    def _initialize(self, request: JSONRPCRequest, session: ServerSession) -> JSONRPCResponse:
        try:
            params = InitializeRequestParams.model_validate(request.params or {})
        except ValidationError as exc:
            return JSONRPCErrorResponse(
                id=request.id,
                error=ErrorData(code=INVALID_PARAMS, message=f"Invalid initialize params: {exc}"),
            )

        protocol_version = negotiate_protocol_version(params.protocol_version)
        session.info = SessionInfo(
            client_info=params.client_info,
            client_capabilities=params.capabilities,
            protocol_version=protocol_version,
        )
        logger.info(
            "Initialized session %s for %s %s (protocol %s)",
            session.session_id,
            params.client_info.name,
            params.client_info.version,
            protocol_version,
        )

        result = InitializeResult(
            protocol_version=protocol_version,
            capabilities=self.get_capabilities(),
            server_info=Implementation(name=self.name, version=self.version),
            instructions=self.instructions,
        )
        return JSONRPCResultResponse(id=request.id, result=result.dump())
