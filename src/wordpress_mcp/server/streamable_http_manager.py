"""StreamableHTTP session manager: routes HTTP frames to per-session transports."""

from __future__ import annotations

import contextlib
import json
import logging
from collections.abc import AsyncIterator
from http import HTTPStatus
from uuid import uuid4

import anyio
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import Message, Receive, Scope, Send

from wordpress_mcp.client import WordPressClient
from wordpress_mcp.credentials import WordPressConfig
from wordpress_mcp.exceptions import InvalidSessionError
from wordpress_mcp.server.lowlevel import LowLevelServer
from wordpress_mcp.server.session import ClientFactory, ServerSession, SessionRegistry
from wordpress_mcp.server.streamable_http import (
    MAXIMUM_MESSAGE_SIZE,
    MCP_SESSION_ID_HEADER,
    StreamableHTTPServerTransport,
)
from wordpress_mcp.types import (
    INTERNAL_ERROR,
    SESSION_ERROR,
    JSONRPCMessageAdapter,
    dump_message,
    error_response,
    is_initialize_request,
)

logger = logging.getLogger(__name__)


def _error(status_code: int, code: int, message: str, headers: dict[str, str] | None = None) -> Response:
    return JSONResponse(dump_message(error_response(code, message)), status_code=status_code, headers=headers)


def _is_initialize_body(body: bytes) -> bool:
    if not body or len(body) > MAXIMUM_MESSAGE_SIZE:
        return False
    try:
        message = JSONRPCMessageAdapter.validate_python(json.loads(body))
    except ValueError:
        return False
    return is_initialize_request(message)


def _replay_receive(body: bytes, receive: Receive) -> Receive:
    """Hand an already-read request body to the next ASGI consumer."""
    replayed = False

    async def replay() -> Message:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class StreamableHTTPSessionManager:
    """
    Owns the session registry and routes every ``/mcp`` request.

    In stateful mode a session is created only by a POST that carries an
    ``initialize`` request and no session header; every later frame must
    carry the issued id. In stateless mode each POST gets a throwaway session.

    Important: Only one StreamableHTTPSessionManager instance should be created
    per application. The instance cannot be reused after its run() context has
    completed. If you need to restart the manager, create a new instance.

    Args:
        server: The handler registry every transport dispatches to
        config: Deployment credentials; query-string credentials on the
                initializing request are layered underneath
        json_response: Whether to use JSON responses instead of SSE streams
        stateless: If True, creates a completely fresh transport for each request
                   with no session tracking or state persistence between requests.
        client_factory: Builds the backend handle once a session's credentials resolve
    """

    def __init__(
        self,
        server: LowLevelServer,
        *,
        config: WordPressConfig | None = None,
        json_response: bool = True,
        stateless: bool = False,
        client_factory: ClientFactory = WordPressClient,
    ):
        self.server = server
        self.config = config or WordPressConfig()
        self.client_factory = client_factory
        self.json_response = json_response
        self.stateless = stateless

        self._registry = SessionRegistry()
        self._running = False
        # Thread-safe tracking of run() calls
        self._run_lock = anyio.Lock()
        self._has_started = False

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    @contextlib.asynccontextmanager
    async def run(self) -> AsyncIterator[None]:
        """
        Run the session manager with proper lifecycle management.

        Important: This method can only be called once per instance. On exit
        every live session is terminated.

        Use this in the lifespan context manager of your Starlette app:

        @contextlib.asynccontextmanager
        async def lifespan(app: Starlette) -> AsyncIterator[None]:
            async with session_manager.run():
                yield
        """
        async with self._run_lock:
            if self._has_started:
                raise RuntimeError(
                    "StreamableHTTPSessionManager .run() can only be called "
                    "once per instance. Create a new instance if you need to run again."
                )
            self._has_started = True

        self._running = True
        logger.info("StreamableHTTP session manager started (%s)", "stateless" if self.stateless else "stateful")
        try:
            yield
        finally:
            logger.info("StreamableHTTP session manager shutting down")
            self._running = False
            with anyio.CancelScope(shield=True):
                await self._registry.close_all()

    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        """
        Process ASGI request with proper session handling and transport setup.

        Unexpected failures are answered with a 500 when no response has been
        started yet; other sessions are unaffected either way.
        """
        if not self._running:
            raise RuntimeError("Session manager is not running. Make sure to use run().")

        response_started = False

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            if self.stateless:
                await self._handle_stateless_request(scope, receive, tracking_send)
            else:
                await self._handle_stateful_request(scope, receive, tracking_send)
        except Exception:
            logger.exception("Error handling MCP request")
            if response_started:
                return
            response = _error(HTTPStatus.INTERNAL_SERVER_ERROR, INTERNAL_ERROR, "Internal server error")
            await response(scope, receive, send)

    def _new_session(self, session_id: str | None, request: Request) -> ServerSession:
        # Query-string credentials sit underneath deployment configuration.
        config = self.config.overlay(WordPressConfig.from_mapping(request.query_params))
        return ServerSession(session_id=session_id, config=config, client_factory=self.client_factory)

    async def _handle_stateless_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        if request.method != "POST":
            response = _error(
                HTTPStatus.METHOD_NOT_ALLOWED,
                SESSION_ERROR,
                "Method not allowed. Use POST.",
                headers={"Allow": "POST"},
            )
            await response(scope, receive, send)
            return

        logger.debug("Stateless mode: Creating new transport for this request")
        session = self._new_session(None, request)
        http_transport = StreamableHTTPServerTransport(
            self.server,
            session,
            is_json_response_enabled=self.json_response,
        )
        try:
            await http_transport.handle_request(scope, receive, send)
        finally:
            await http_transport.terminate()

    async def _handle_stateful_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        request_mcp_session_id = request.headers.get(MCP_SESSION_ID_HEADER)

        if request_mcp_session_id is not None:
            transport = self._registry.get(request_mcp_session_id)
            if transport is None:
                await self._reject(InvalidSessionError(request_mcp_session_id), scope, receive, send)
                return
            logger.debug("Routing %s to session %s", request.method, request_mcp_session_id)
            await transport.handle_request(scope, receive, send)
            return

        if request.method != "POST":
            await self._reject(InvalidSessionError(None), scope, receive, send)
            return

        body = await request.body()
        if not _is_initialize_body(body):
            await self._reject(InvalidSessionError(None), scope, receive, send)
            return

        new_session_id = uuid4().hex
        session = self._new_session(new_session_id, request)
        http_transport = StreamableHTTPServerTransport(
            self.server,
            session,
            is_json_response_enabled=self.json_response,
            on_close=self._registry.remove,
        )
        self._registry.add(new_session_id, http_transport)
        logger.info("Created new transport with session ID: %s", new_session_id)

        await http_transport.handle_request(scope, _replay_receive(body, receive), send)

        if session.info is None:
            # The initialize frame was rejected, so the id was never usable.
            logger.info("Discarding session %s: initialize did not complete", new_session_id)
            await http_transport.terminate()

    async def _reject(self, error: InvalidSessionError, scope: Scope, receive: Receive, send: Send) -> None:
        if error.session_id is not None:
            logger.debug("Rejected frame for unknown session %s", error.session_id)
        response = _error(HTTPStatus.BAD_REQUEST, SESSION_ERROR, str(error))
        await response(scope, receive, send)


class StreamableHTTPASGIApp:
    """ASGI application for Streamable HTTP server transport."""

    def __init__(self, session_manager: StreamableHTTPSessionManager):
        self.session_manager = session_manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.session_manager.handle_request(scope, receive, send)
