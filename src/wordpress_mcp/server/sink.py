"""ResponseSink implementations: where the reply to an inbound message goes."""

from __future__ import annotations

from typing import Protocol

import anyio
from anyio.streams.memory import MemoryObjectSendStream

from wordpress_mcp.types import JSONRPCMessage, JSONRPCResponse


class ResponseSink(Protocol):
    """Transport-specific destination for the reply to one inbound message.

    - ChannelSink (HTTP): hands the reply to the HTTP request that carried it
    - DirectSink (stdio): writes straight to the transport's write stream
    - NoOpSink: notifications, which never produce a response
    """

    async def send_result(self, response: JSONRPCResponse) -> None:
        """Send the final result. After this, the sink is done."""
        ...


class ChannelSink:
    """Writes the reply to a memory channel read by the HTTP transport."""

    def __init__(self, send_stream: MemoryObjectSendStream[JSONRPCResponse]) -> None:
        self._send = send_stream
        self._closed = False

    async def send_result(self, response: JSONRPCResponse) -> None:
        """Send the final result and close the channel."""
        if self._closed:
            return
        await self._send.send(response)
        await self.close()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        with anyio.CancelScope(shield=True):
            await self._send.aclose()


class DirectSink:
    """Writes every reply straight to a transport write stream."""

    def __init__(self, send_stream: MemoryObjectSendStream[JSONRPCMessage]) -> None:
        self._send = send_stream

    async def send_result(self, response: JSONRPCResponse) -> None:
        await self._send.send(response)


class NoOpSink:
    async def send_result(self, response: JSONRPCResponse) -> None:
        pass
