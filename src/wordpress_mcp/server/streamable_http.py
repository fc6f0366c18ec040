"""
StreamableHTTP Server Transport Module

One transport serves one session: it validates inbound HTTP frames, runs each
JSON-RPC request through the server and writes the reply either as a plain
JSON body or as a Server-Sent Events stream.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Callable
from http import HTTPStatus

import anyio
from anyio.streams.memory import MemoryObjectSendStream
from pydantic import ValidationError
from sse_starlette import EventSourceResponse
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import Receive, Scope, Send

from wordpress_mcp.server.lowlevel import LowLevelServer
from wordpress_mcp.server.session import ServerSession
from wordpress_mcp.server.sink import ChannelSink, NoOpSink
from wordpress_mcp.types import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    PARSE_ERROR,
    SESSION_ERROR,
    JSONRPCMessage,
    JSONRPCMessageAdapter,
    JSONRPCRequest,
    JSONRPCResponse,
    dump_message,
    dump_message_json,
    error_response,
)

logger = logging.getLogger(__name__)

MCP_SESSION_ID_HEADER = "mcp-session-id"

# Maximum size for incoming messages
MAXIMUM_MESSAGE_SIZE = 4 * 1024 * 1024  # 4MB

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_SSE = "text/event-stream"

SessionCloseCallback = Callable[[str | None], None]


def _sse_event(message: JSONRPCMessage) -> dict[str, str]:
    return {"event": "message", "data": dump_message_json(message)}


class StreamableHTTPServerTransport:
    """
    HTTP transport for a single MCP session.

    POST carries client frames, GET opens the standalone server→client SSE
    stream and DELETE ends the session. Frames are handled one at a time in
    arrival order; a frame that arrives while another is running waits for it.
    Once the session is terminated, replies still being computed are dropped.
    """

    def __init__(
        self,
        server: LowLevelServer,
        session: ServerSession,
        *,
        is_json_response_enabled: bool = True,
        on_close: SessionCloseCallback | None = None,
    ):
        """
        Args:
            server: handler registry requests are dispatched to
            session: the session this transport serves; its ``session_id`` is
                echoed in the ``mcp-session-id`` header (None in stateless mode)
            is_json_response_enabled: answer requests with a JSON body; when
                False each reply is sent as a one-event SSE stream
            on_close: called once, synchronously, when the transport terminates
        """
        self.server = server
        self.session = session
        self.is_json_response_enabled = is_json_response_enabled
        self._on_close = on_close
        self._request_lock = anyio.Lock()
        self._terminated = False
        self._standalone_writer: MemoryObjectSendStream[JSONRPCMessage] | None = None

    @property
    def mcp_session_id(self) -> str | None:
        return self.session.session_id

    @property
    def is_terminated(self) -> bool:
        return self._terminated

    @property
    def has_standalone_stream(self) -> bool:
        return self._standalone_writer is not None

    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI entry point for every frame addressed to this session."""
        request = Request(scope, receive)

        if self._terminated:
            await self._terminated_response()(scope, receive, send)
            return

        if request.method == "POST":
            await self._handle_post_request(scope, request, receive, send)
        elif request.method == "GET":
            await self._handle_get_request(scope, request, receive, send)
        elif request.method == "DELETE":
            await self._handle_delete_request(scope, receive, send)
        else:
            response = self._error_response(
                HTTPStatus.METHOD_NOT_ALLOWED,
                SESSION_ERROR,
                "Method Not Allowed",
                headers={"Allow": "GET, POST, DELETE"},
            )
            await response(scope, receive, send)

    async def _handle_post_request(self, scope: Scope, request: Request, receive: Receive, send: Send) -> None:
        content_type = request.headers.get("content-type", "")
        if not content_type.lower().startswith(CONTENT_TYPE_JSON):
            response = self._error_response(
                HTTPStatus.UNSUPPORTED_MEDIA_TYPE,
                INVALID_REQUEST,
                "Unsupported Media Type: Content-Type must be application/json",
            )
            await response(scope, receive, send)
            return

        body = await request.body()
        if len(body) > MAXIMUM_MESSAGE_SIZE:
            response = self._error_response(
                HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
                INVALID_REQUEST,
                "Payload Too Large: Message exceeds maximum size",
            )
            await response(scope, receive, send)
            return

        try:
            raw_message = json.loads(body)
        except ValueError as exc:
            response = self._error_response(HTTPStatus.BAD_REQUEST, PARSE_ERROR, f"Parse error: {exc}")
            await response(scope, receive, send)
            return

        try:
            message = JSONRPCMessageAdapter.validate_python(raw_message)
        except ValidationError as exc:
            response = self._error_response(HTTPStatus.BAD_REQUEST, INVALID_REQUEST, f"Validation error: {exc}")
            await response(scope, receive, send)
            return

        if not isinstance(message, JSONRPCRequest):
            # Notifications and responses are processed before the 202 so
            # their effects are visible to the next frame.
            async with self._request_lock:
                if self._terminated:
                    await self._terminated_response()(scope, receive, send)
                    return
                await self.server.handle_message(NoOpSink(), message, session=self.session)
            response = Response(status_code=HTTPStatus.ACCEPTED, headers=self._session_headers())
            await response(scope, receive, send)
            return

        async with self._request_lock:
            if self._terminated:
                await self._terminated_response()(scope, receive, send)
                return
            await self._handle_jsonrpc_request(scope, message, receive, send)

    async def _handle_jsonrpc_request(
        self, scope: Scope, message: JSONRPCRequest, receive: Receive, send: Send
    ) -> None:
        send_stream, recv_stream = anyio.create_memory_object_stream[JSONRPCResponse](1)
        await self._run_handler(ChannelSink(send_stream), message)
        with recv_stream:
            try:
                reply = recv_stream.receive_nowait()
            except (anyio.WouldBlock, anyio.EndOfStream):
                # The handler closed its sink without producing a result.
                reply = error_response(INTERNAL_ERROR, "Internal error", message.id)

        if self._terminated:
            logger.debug("Dropping reply to %s: session %s closed while it ran", message.method, self.mcp_session_id)
            await self._terminated_response()(scope, receive, send)
            return

        if self.is_json_response_enabled:
            await self._json_response(dump_message(reply))(scope, receive, send)
            return

        async def event_stream() -> AsyncIterator[dict[str, str]]:
            yield _sse_event(reply)

        response = EventSourceResponse(
            content=event_stream(),
            headers=self._session_headers({"Cache-Control": "no-cache, no-transform"}),
        )
        await response(scope, receive, send)

    async def _run_handler(self, sink: ChannelSink, message: JSONRPCRequest) -> None:
        try:
            await self.server.handle_message(sink, message, session=self.session)
        except Exception:
            logger.exception("Error handling %s in session %s", message.method, self.mcp_session_id)
            await sink.send_result(error_response(INTERNAL_ERROR, "Internal error", message.id))
        finally:
            await sink.close()

    async def _handle_get_request(self, scope: Scope, request: Request, receive: Receive, send: Send) -> None:
        if CONTENT_TYPE_SSE not in request.headers.get("accept", ""):
            response = self._error_response(
                HTTPStatus.NOT_ACCEPTABLE,
                INVALID_REQUEST,
                "Not Acceptable: Client must accept text/event-stream",
            )
            await response(scope, receive, send)
            return

        if self._standalone_writer is not None:
            response = self._error_response(
                HTTPStatus.CONFLICT,
                INVALID_REQUEST,
                "Conflict: Only one SSE stream is allowed per session",
            )
            await response(scope, receive, send)
            return

        writer, reader = anyio.create_memory_object_stream[JSONRPCMessage](16)
        self._standalone_writer = writer

        async def standalone_stream() -> AsyncIterator[dict[str, str]]:
            async with reader:
                async for outgoing in reader:
                    yield _sse_event(outgoing)

        response = EventSourceResponse(
            content=standalone_stream(),
            headers=self._session_headers({"Cache-Control": "no-cache, no-transform"}),
        )
        logger.debug("Standalone SSE stream opened for session %s", self.mcp_session_id)
        try:
            await response(scope, receive, send)
        finally:
            if self._standalone_writer is writer:
                self._standalone_writer = None
            writer.close()
            logger.debug("Standalone SSE stream closed for session %s", self.mcp_session_id)

    async def _handle_delete_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        # The session stops being routable at once. Frames already running or
        # queued on the lock see the terminated flag and their replies are dropped.
        await self.terminate()
        response = Response(status_code=HTTPStatus.OK)
        await response(scope, receive, send)

    async def terminate(self) -> None:
        """End the session. Idempotent.

        The close callback runs before anything is awaited, so the session is
        unreachable by id as soon as termination starts.
        """
        if self._terminated:
            return
        self._terminated = True
        if self._on_close is not None:
            self._on_close(self.mcp_session_id)

        writer, self._standalone_writer = self._standalone_writer, None
        if writer is not None:
            writer.close()
        self.session.client = None
        logger.debug("Terminated transport for session %s", self.mcp_session_id)

    def _session_headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = dict(extra or {})
        if self.mcp_session_id is not None:
            headers[MCP_SESSION_ID_HEADER] = self.mcp_session_id
        return headers

    def _terminated_response(self) -> Response:
        return self._error_response(HTTPStatus.NOT_FOUND, SESSION_ERROR, "Not Found: Session has been terminated")

    def _json_response(self, content: dict[str, object], status_code: int = HTTPStatus.OK) -> Response:
        return JSONResponse(content=content, status_code=status_code, headers=self._session_headers())

    def _error_response(
        self,
        status_code: int,
        error_code: int,
        message: str,
        headers: dict[str, str] | None = None,
    ) -> Response:
        return JSONResponse(
            content=dump_message(error_response(error_code, message)),
            status_code=status_code,
            headers=self._session_headers(headers),
        )
