"""Command line entry point: ``wordpress-mcp``."""

from __future__ import annotations

import logging

import anyio
import click
import uvicorn
from pydantic import ValidationError

from wordpress_mcp.app import create_app
from wordpress_mcp.config import LogLevel, Settings
from wordpress_mcp.server.stdio import run_stdio
from wordpress_mcp.server.wordpress import create_server
from wordpress_mcp.utilities.logging import configure_logging
from wordpress_mcp.version import __version__

logger = logging.getLogger(__name__)


def run_http(settings: Settings) -> None:
    app = create_app(settings)
    logger.info(
        "WordPress MCP server v%s on http://%s:%s%s",
        __version__,
        settings.host,
        settings.port,
        settings.mcp_path,
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


def run_stdio_server(settings: Settings) -> None:
    config = settings.wordpress_config()
    if not config.is_complete:
        logger.warning("WordPress credentials are incomplete; tool calls will fail until they are configured")
    anyio.run(run_stdio, create_server(), config)


@click.command()
@click.version_option(__version__, prog_name="wordpress-mcp")
@click.option("--http", "use_http", is_flag=True, default=False, help="Serve streamable HTTP instead of stdio")
@click.option("--stateless", is_flag=True, default=False, help="Stateless HTTP: a fresh session per request")
@click.option("--host", default=None, help="Interface to bind for HTTP")
@click.option("--port", type=int, default=None, help="Port to listen on for HTTP")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Logging level",
)
@click.option(
    "--json-response/--sse-response",
    default=None,
    help="Answer requests with a JSON body, or stream them over SSE",
)
def main(
    use_http: bool,
    stateless: bool,
    host: str | None,
    port: int | None,
    log_level: str | None,
    json_response: bool | None,
) -> None:
    """Expose a WordPress site to MCP clients.

    Credentials come from WORDPRESS_URL, WORDPRESS_USERNAME and
    WORDPRESS_APP_PASSWORD.
    """
    overrides: dict[str, object] = {}
    if stateless:
        overrides["stateless_http"] = True
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if log_level is not None:
        overrides["log_level"] = log_level.upper()
    if json_response is not None:
        overrides["json_response"] = json_response
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc

    level: LogLevel = settings.log_level
    configure_logging(level)

    if use_http or settings.stateless_http:
        run_http(settings)
    else:
        run_stdio_server(settings)
