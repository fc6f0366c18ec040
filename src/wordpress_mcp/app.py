"""Starlette application for the streamable HTTP transports."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncIterator

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from wordpress_mcp.client import WordPressClient
from wordpress_mcp.config import Settings
from wordpress_mcp.server.session import ClientFactory
from wordpress_mcp.server.streamable_http import MCP_SESSION_ID_HEADER
from wordpress_mcp.server.streamable_http_manager import StreamableHTTPASGIApp, StreamableHTTPSessionManager
from wordpress_mcp.server.wordpress import SERVER_NAME, create_server
from wordpress_mcp.tools import TOOLS
from wordpress_mcp.version import __version__

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, *, client_factory: ClientFactory = WordPressClient) -> Starlette:
    """Build the ASGI app serving ``settings.mcp_path`` plus a health check at ``/``.

    The session manager is exposed as ``app.state.session_manager``.
    """
    settings = settings or Settings()
    session_manager = StreamableHTTPSessionManager(
        create_server(),
        config=settings.wordpress_config(),
        json_response=settings.json_response,
        stateless=settings.stateless_http,
        client_factory=client_factory,
    )
    transport = "streamable-http-stateless" if settings.stateless_http else "streamable-http"

    async def health(request: Request) -> JSONResponse:
        return JSONResponse(
            {
                "name": SERVER_NAME,
                "version": __version__,
                "status": "ok",
                "tools": len(TOOLS),
                "transport": transport,
                "endpoints": {"mcp": settings.mcp_path},
            }
        )

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        async with session_manager.run():
            logger.info("WordPress MCP server listening on %s (%s)", settings.mcp_path, transport)
            yield

    app = Starlette(
        debug=settings.debug,
        routes=[
            Route("/", endpoint=health, methods=["GET"]),
            Route(settings.mcp_path, endpoint=StreamableHTTPASGIApp(session_manager)),
        ],
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
                allow_headers=["*"],
                expose_headers=[MCP_SESSION_ID_HEADER],
            )
        ],
        lifespan=lifespan,
    )
    app.state.session_manager = session_manager
    return app
