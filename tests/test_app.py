"""The Starlette app: health check, CORS and the MCP route end to end."""

import pytest

from tests.mcp_http import SESSION_HEADER, http_client, initialize, tool_call
from tests.wordpress_site import CREDENTIALS, FakeWordPress, RecordingClientFactory
from wordpress_mcp.app import create_app
from wordpress_mcp.config import Settings

pytestmark = pytest.mark.anyio


def _settings(**overrides) -> Settings:
    values = {
        "site_url": CREDENTIALS.site_url,
        "username": CREDENTIALS.username,
        "application_password": CREDENTIALS.application_password,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.mark.parametrize(
    ("stateless", "transport"),
    [(False, "streamable-http"), (True, "streamable-http-stateless")],
)
async def test_health(client_factory: RecordingClientFactory, stateless: bool, transport: str):
    app = create_app(_settings(stateless_http=stateless), client_factory=client_factory)
    async with http_client(app, app.state.session_manager) as client:
        response = await client.get("/")

    assert response.status_code == 200
    assert response.json() == {
        "name": "wordpress-mcp",
        "version": "1.0.3",
        "status": "ok",
        "tools": 20,
        "transport": transport,
        "endpoints": {"mcp": "/mcp"},
    }


async def test_tool_call_through_the_app(client_factory: RecordingClientFactory, wordpress: FakeWordPress):
    app = create_app(_settings(), client_factory=client_factory)
    async with http_client(app, app.state.session_manager) as client:
        session_id = await initialize(client)
        response = await client.post("/mcp", json=tool_call("wp_get_site_info"), headers={SESSION_HEADER: session_id})

    assert response.status_code == 200
    assert response.json()["result"]["isError"] is False
    assert client_factory.created == [CREDENTIALS]
    assert wordpress.last_request.url.path == "/wp-json/"


async def test_custom_mcp_path(client_factory: RecordingClientFactory):
    app = create_app(_settings(mcp_path="/wordpress/mcp"), client_factory=client_factory)
    async with http_client(app, app.state.session_manager) as client:
        session_id = await initialize(client, "/wordpress/mcp")
        health = await client.get("/")

    assert session_id
    assert health.json()["endpoints"] == {"mcp": "/wordpress/mcp"}


async def test_cors_exposes_session_header(client_factory: RecordingClientFactory):
    app = create_app(_settings(), client_factory=client_factory)
    async with http_client(app, app.state.session_manager) as client:
        preflight = await client.options(
            "/mcp",
            headers={
                "origin": "https://app.example",
                "access-control-request-method": "DELETE",
                "access-control-request-headers": "content-type, mcp-session-id",
            },
        )
        response = await client.post(
            "/mcp",
            json={
                "jsonrpc": "2.0",
                "id": 1,
                "method": "initialize",
                "params": {
                    "protocolVersion": "2025-06-18",
                    "capabilities": {},
                    "clientInfo": {"name": "browser", "version": "1"},
                },
            },
            headers={"origin": "https://app.example"},
        )

    assert preflight.status_code == 200
    assert "DELETE" in preflight.headers["access-control-allow-methods"]
    assert response.headers["access-control-allow-origin"] == "*"
    assert SESSION_HEADER in response.headers["access-control-expose-headers"]
    assert response.json()["result"]["protocolVersion"] == "2025-06-18"
