"""Stdio Server Transport Module

Newline-delimited JSON-RPC over the process' stdin/stdout. There is exactly
one implicit session per process.

Example:
    ```python
    async def main():
        server = create_server()
        await run_stdio(server, settings.wordpress_config())

    anyio.run(main)
    ```
"""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from io import TextIOWrapper
from typing import BinaryIO

import anyio
import anyio.lowlevel
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
from pydantic import ValidationError

from wordpress_mcp.client import WordPressClient
from wordpress_mcp.credentials import WordPressConfig
from wordpress_mcp.server.lowlevel import LowLevelServer
from wordpress_mcp.server.session import ClientFactory, ServerSession
from wordpress_mcp.server.sink import DirectSink
from wordpress_mcp.types import (
    INVALID_REQUEST,
    PARSE_ERROR,
    JSONRPCErrorResponse,
    JSONRPCMessage,
    JSONRPCMessageAdapter,
    dump_message_json,
    error_response,
)

logger = logging.getLogger(__name__)

StdioStreams = tuple[MemoryObjectReceiveStream[JSONRPCMessage | Exception], MemoryObjectSendStream[JSONRPCMessage]]


class _NonClosingTextIOWrapper(TextIOWrapper):
    """Text wrapper that never closes the underlying binary stream.

    stdio_server should not close the process' real stdin/stdout handles when its
    background tasks wind down.
    """

    def close(self) -> None:
        if self.closed:
            return

        # Preserve normal flush semantics for writable streams while keeping the
        # underlying stdio handle alive.
        if self.writable():
            self.flush()


def _wrap_process_stdio(binary_stream: BinaryIO) -> anyio.AsyncFile[str]:
    return anyio.wrap_file(_NonClosingTextIOWrapper(binary_stream, encoding="utf-8"))


@asynccontextmanager
async def stdio_server(
    stdin: anyio.AsyncFile[str] | None = None,
    stdout: anyio.AsyncFile[str] | None = None,
) -> AsyncIterator[StdioStreams]:
    """Yield (read_stream, write_stream) bound to stdin/stdout.

    Lines that are not a valid JSON-RPC message arrive on the read stream as
    the exception that rejected them.
    """
    # Encoding of stdin/stdout as text streams on python is platform-dependent,
    # so the underlying binary streams are re-wrapped to ensure UTF-8.
    if not stdin:
        stdin = _wrap_process_stdio(sys.stdin.buffer)
    if not stdout:
        stdout = _wrap_process_stdio(sys.stdout.buffer)

    read_stream_writer, read_stream = anyio.create_memory_object_stream[JSONRPCMessage | Exception](0)
    write_stream, write_stream_reader = anyio.create_memory_object_stream[JSONRPCMessage](0)

    async def stdin_reader() -> None:
        try:
            async with read_stream_writer:
                async for line in stdin:
                    if not line.strip():
                        continue
                    try:
                        message = JSONRPCMessageAdapter.validate_json(line)
                    except ValueError as exc:
                        await read_stream_writer.send(exc)
                        continue
                    await read_stream_writer.send(message)
        except anyio.ClosedResourceError:
            await anyio.lowlevel.checkpoint()

    async def stdout_writer() -> None:
        try:
            async with write_stream_reader:
                async for message in write_stream_reader:
                    await stdout.write(dump_message_json(message) + "\n")
                    await stdout.flush()
        except anyio.ClosedResourceError:
            await anyio.lowlevel.checkpoint()

    async with anyio.create_task_group() as tg:
        tg.start_soon(stdin_reader)
        tg.start_soon(stdout_writer)
        try:
            yield read_stream, write_stream
        finally:
            await write_stream.aclose()


def create_stdio_session(config: WordPressConfig, client_factory: ClientFactory = WordPressClient) -> ServerSession:
    """The one session a stdio process serves.

    Credentials come from deployment configuration only; when they are complete
    the backend handle is built up front.
    """
    session = ServerSession(
        session_id=None,
        config=config,
        client_factory=client_factory,
        allow_inline_credentials=False,
    )
    if config.is_complete:
        session.get_client()
    return session


def _rejection(exc: Exception) -> JSONRPCErrorResponse:
    if isinstance(exc, ValidationError) and not any(error["type"] == "json_invalid" for error in exc.errors()):
        return error_response(INVALID_REQUEST, f"Invalid request: {exc}")
    return error_response(PARSE_ERROR, f"Parse error: {exc}")


async def serve_stdio(
    server: LowLevelServer,
    session: ServerSession,
    read_stream: MemoryObjectReceiveStream[JSONRPCMessage | Exception],
    write_stream: MemoryObjectSendStream[JSONRPCMessage],
) -> None:
    """Handle messages one at a time, in the order they were read."""
    sink = DirectSink(write_stream)
    async with read_stream:
        async for message in read_stream:
            if isinstance(message, Exception):
                logger.warning("Rejected invalid stdin line: %s", message)
                await write_stream.send(_rejection(message))
                continue
            await server.handle_message(sink, message, session=session)


async def run_stdio(
    server: LowLevelServer,
    config: WordPressConfig,
    *,
    client_factory: ClientFactory = WordPressClient,
    stdin: anyio.AsyncFile[str] | None = None,
    stdout: anyio.AsyncFile[str] | None = None,
) -> None:
    """Serve ``server`` over stdio until stdin closes."""
    session = create_stdio_session(config, client_factory)
    logger.info("WordPress MCP server running on stdio")
    async with stdio_server(stdin, stdout) as (read_stream, write_stream):
        await serve_stdio(server, session, read_stream, write_stream)
