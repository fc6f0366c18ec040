"""What request handlers receive."""

from __future__ import annotations

from dataclasses import dataclass

from wordpress_mcp.server.session import ServerSession
from wordpress_mcp.types import RequestId


@dataclass
class RequestContext:
    """The session a request belongs to.

    Handlers do not know whether they run over stdio, stateful HTTP or
    stateless HTTP.
    """

    session: ServerSession
    request_id: RequestId
