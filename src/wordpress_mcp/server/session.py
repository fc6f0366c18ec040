"""Per-session state and the registry of live HTTP sessions."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from wordpress_mcp.client import WordPressClient, WordPressCredentials
from wordpress_mcp.credentials import IncompleteCredentials, WordPressConfig, resolve_credentials
from wordpress_mcp.types import ClientCapabilities, Implementation

if TYPE_CHECKING:
    from wordpress_mcp.server.streamable_http import StreamableHTTPServerTransport

logger = logging.getLogger(__name__)

ClientFactory = Callable[[WordPressCredentials], WordPressClient]


@dataclass(frozen=True)
class SessionInfo:
    """Protocol-level state agreed during the initialize handshake."""

    client_info: Implementation
    client_capabilities: ClientCapabilities
    protocol_version: str


@dataclass
class ServerSession:
    """One logical conversation and the backend handle it owns.

    ``client`` starts empty and is populated exactly once, by the first tool
    call whose credentials resolve. After that the handle is reused for the
    life of the session, whatever credentials later calls carry inline.
    """

    session_id: str | None
    config: WordPressConfig = field(default_factory=WordPressConfig)
    client_factory: ClientFactory = WordPressClient
    allow_inline_credentials: bool = True
    info: SessionInfo | None = None
    client: WordPressClient | None = None

    def get_client(self, arguments: Mapping[str, Any] | None = None) -> WordPressClient | IncompleteCredentials:
        if self.client is not None:
            return self.client

        inline = arguments if self.allow_inline_credentials else None
        resolved = resolve_credentials(self.config, inline)
        if isinstance(resolved, IncompleteCredentials):
            return resolved

        self.client = self.client_factory(resolved)
        logger.debug("Session %s bound to %s", self.session_id, self.client.site_url)
        return self.client


class SessionRegistry:
    """Maps session ids to the transport serving them.

    Every operation is synchronous, so a lookup, insert or removal can never
    interleave with another task's; frames for one session are serialized by
    that session's transport, not here.
    """

    def __init__(self) -> None:
        self._transports: dict[str, StreamableHTTPServerTransport] = {}

    def add(self, session_id: str, transport: StreamableHTTPServerTransport) -> None:
        if session_id in self._transports:
            raise ValueError(f"Session {session_id} is already registered")
        self._transports[session_id] = transport

    def get(self, session_id: str) -> StreamableHTTPServerTransport | None:
        return self._transports.get(session_id)

    def remove(self, session_id: str | None) -> None:
        if session_id is not None and self._transports.pop(session_id, None) is not None:
            logger.info("Session %s closed", session_id)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._transports

    def __len__(self) -> int:
        return len(self._transports)

    def __iter__(self) -> Iterator[str]:
        """Iterate over a snapshot of the live session ids."""
        return iter(list(self._transports))

    async def close_all(self) -> None:
        """Terminate every registered session; failures are logged and skipped."""
        for session_id, transport in list(self._transports.items()):
            try:
                await transport.terminate()
            except Exception:
                logger.exception("Error closing session %s", session_id)
        self._transports.clear()
