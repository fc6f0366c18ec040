"""Per-session transport: frame validation, response format and ordering."""

import json
from typing import Any

import anyio
import httpx
import pytest

from tests.mcp_http import SESSION_HEADER, http_client, initialize, sse_messages
from wordpress_mcp.server.context import RequestContext
from wordpress_mcp.server.lowlevel import LowLevelServer
from wordpress_mcp.server.session import ServerSession
from wordpress_mcp.server.streamable_http import MAXIMUM_MESSAGE_SIZE, StreamableHTTPServerTransport
from wordpress_mcp.server.streamable_http_manager import StreamableHTTPASGIApp, StreamableHTTPSessionManager
from wordpress_mcp.types import JSONRPCRequest

pytestmark = pytest.mark.anyio


def _make_server(events: list[str] | None = None) -> LowLevelServer:
    server = LowLevelServer(name="test-server", version="0.1.0")

    @server.request_handler("echo")
    async def echo(ctx: RequestContext, request: JSONRPCRequest) -> dict[str, Any]:
        return {"echo": (request.params or {}).get("message")}

    @server.request_handler("slow")
    async def slow(ctx: RequestContext, request: JSONRPCRequest) -> dict[str, Any]:
        assert events is not None
        label = (request.params or {})["label"]
        events.append(f"start {label}")
        await anyio.sleep(0.05)
        events.append(f"end {label}")
        return {}

    return server


def _rpc(method: str, params: dict[str, Any] | None = None, request_id: int = 2) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params or {}}


async def _session(client: httpx.AsyncClient) -> dict[str, str]:
    return {SESSION_HEADER: await initialize(client)}


@pytest.fixture
async def client():
    manager = StreamableHTTPSessionManager(_make_server())
    async with http_client(StreamableHTTPASGIApp(manager), manager) as http:
        yield http


async def test_json_response(client: httpx.AsyncClient):
    headers = await _session(client)
    response = await client.post("/mcp", json=_rpc("echo", {"message": "hi"}), headers=headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"jsonrpc": "2.0", "id": 2, "result": {"echo": "hi"}}


async def test_notification_is_accepted(client: httpx.AsyncClient):
    headers = await _session(client)
    response = await client.post(
        "/mcp", json={"jsonrpc": "2.0", "method": "notifications/cancelled", "params": {}}, headers=headers
    )

    assert response.status_code == 202
    assert response.content == b""


async def test_client_response_is_accepted(client: httpx.AsyncClient):
    headers = await _session(client)
    response = await client.post("/mcp", json={"jsonrpc": "2.0", "id": 99, "result": {}}, headers=headers)

    assert response.status_code == 202


async def test_wrong_content_type(client: httpx.AsyncClient):
    headers = await _session(client)
    response = await client.post("/mcp", content=b"{}", headers={**headers, "content-type": "text/plain"})

    assert response.status_code == 415
    assert response.json()["error"]["code"] == -32600


async def test_malformed_json_is_parse_error(client: httpx.AsyncClient):
    headers = await _session(client)
    response = await client.post(
        "/mcp", content=b'{"jsonrpc": "2.0",', headers={**headers, "content-type": "application/json"}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"]["code"] == -32700
    assert body["id"] is None


@pytest.mark.parametrize(
    "payload",
    [
        {"jsonrpc": "1.0", "id": 1, "method": "echo"},
        [{"jsonrpc": "2.0", "id": 1, "method": "echo"}],
        "echo",
    ],
)
async def test_invalid_jsonrpc_is_invalid_request(client: httpx.AsyncClient, payload: Any):
    headers = await _session(client)
    response = await client.post("/mcp", json=payload, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == -32600


async def test_oversized_body(client: httpx.AsyncClient):
    headers = await _session(client)
    padding = "x" * MAXIMUM_MESSAGE_SIZE
    response = await client.post("/mcp", json=_rpc("echo", {"message": padding}), headers=headers)

    assert response.status_code == 413


async def test_unsupported_method(client: httpx.AsyncClient):
    headers = await _session(client)
    response = await client.put("/mcp", headers=headers)

    assert response.status_code == 405
    assert response.headers["allow"] == "GET, POST, DELETE"


async def test_get_requires_event_stream_accept(client: httpx.AsyncClient):
    headers = await _session(client)
    response = await client.get("/mcp", headers={**headers, "accept": "application/json"})

    assert response.status_code == 406


async def test_sse_mode_replies_with_a_single_event():
    manager = StreamableHTTPSessionManager(_make_server(), json_response=False)
    async with http_client(StreamableHTTPASGIApp(manager), manager) as client:
        headers = await _session(client)
        response = await client.post(
            "/mcp",
            json=_rpc("echo", {"message": "hi"}),
            headers={**headers, "accept": "application/json, text/event-stream"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers[SESSION_HEADER] == headers[SESSION_HEADER]
        assert sse_messages(response.text) == [{"jsonrpc": "2.0", "id": 2, "result": {"echo": "hi"}}]


async def test_frames_in_one_session_do_not_interleave():
    events: list[str] = []
    manager = StreamableHTTPSessionManager(_make_server(events))
    async with http_client(StreamableHTTPASGIApp(manager), manager) as client:
        headers = await _session(client)

        async def post(index: int) -> None:
            response = await client.post("/mcp", json=_rpc("slow", {"label": index}, index + 2), headers=headers)
            assert response.status_code == 200

        async with anyio.create_task_group() as tg:
            for index in range(3):
                tg.start_soon(post, index)
                await anyio.sleep(0.01)

    assert events == ["start 0", "end 0", "start 1", "end 1", "start 2", "end 2"]


# Transport driven directly through ASGI, for the long-lived GET stream and mid-request closes.


def _scope(method: str, headers: dict[str, str]) -> dict[str, Any]:
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": "/mcp",
        "raw_path": b"/mcp",
        "root_path": "",
        "query_string": b"",
        "headers": [(key.encode(), value.encode()) for key, value in headers.items()],
        "server": ("test", 80),
        "client": ("client", 1234),
    }


class Recorder:
    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def status(self) -> int:
        return next(message["status"] for message in self.messages if message["type"] == "http.response.start")

    @property
    def body(self) -> bytes:
        chunks = [message.get("body", b"") for message in self.messages if message["type"] == "http.response.body"]
        return b"".join(chunks)


async def _never_disconnect() -> dict[str, Any]:
    await anyio.sleep_forever()
    raise AssertionError("unreachable")


async def test_standalone_stream_is_exclusive_and_closed_by_terminate():
    transport = StreamableHTTPServerTransport(_make_server(), ServerSession(session_id="abc"))
    stream = Recorder()
    second = Recorder()
    get_scope = _scope("GET", {"accept": "text/event-stream", SESSION_HEADER: "abc"})

    with anyio.fail_after(5):
        async with anyio.create_task_group() as tg:
            tg.start_soon(transport.handle_request, get_scope, _never_disconnect, stream)
            while not transport.has_standalone_stream:
                await anyio.sleep(0.01)

            await transport.handle_request(get_scope, _never_disconnect, second)
            assert second.status == 409

            await transport.terminate()

    assert stream.status == 200
    start = next(message for message in stream.messages if message["type"] == "http.response.start")
    assert (b"mcp-session-id", b"abc") in start["headers"]
    assert not transport.has_standalone_stream


async def test_terminated_transport_answers_not_found():
    closed: list[str | None] = []
    transport = StreamableHTTPServerTransport(
        _make_server(), ServerSession(session_id="abc"), on_close=closed.append
    )
    await transport.terminate()
    await transport.terminate()

    recorder = Recorder()

    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": b"{}", "more_body": False}

    await transport.handle_request(
        _scope("POST", {"content-type": "application/json", SESSION_HEADER: "abc"}), receive, recorder
    )

    assert closed == ["abc"]
    assert recorder.status == 404
    assert b"-32000" in recorder.body


async def test_reply_is_dropped_when_the_session_closes_mid_request():
    started = anyio.Event()
    release = anyio.Event()
    server = _make_server()

    @server.request_handler("wait")
    async def wait(ctx: RequestContext, request: JSONRPCRequest) -> dict[str, Any]:
        started.set()
        await release.wait()
        return {"done": True}

    closed: list[str | None] = []
    transport = StreamableHTTPServerTransport(server, ServerSession(session_id="abc"), on_close=closed.append)
    recorder = Recorder()
    body = json.dumps(_rpc("wait")).encode()

    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": body, "more_body": False}

    with anyio.fail_after(5):
        async with anyio.create_task_group() as tg:
            tg.start_soon(
                transport.handle_request,
                _scope("POST", {"content-type": "application/json", SESSION_HEADER: "abc"}),
                receive,
                recorder,
            )
            await started.wait()

            deleted = Recorder()
            await transport.handle_request(_scope("DELETE", {SESSION_HEADER: "abc"}), _never_disconnect, deleted)
            assert deleted.status == 200
            assert closed == ["abc"]

            release.set()

    assert recorder.status == 404
    assert b'"done"' not in recorder.body
