from wordpress_mcp.server.lowlevel import LowLevelServer
from wordpress_mcp.server.session import ServerSession, SessionRegistry
from wordpress_mcp.server.streamable_http import StreamableHTTPServerTransport
from wordpress_mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from wordpress_mcp.server.wordpress import create_server

__all__ = [
    "LowLevelServer",
    "ServerSession",
    "SessionRegistry",
    "StreamableHTTPServerTransport",
    "StreamableHTTPSessionManager",
    "create_server",
]
