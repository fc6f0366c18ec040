"""MCP server exposing WordPress REST API content management as tools."""

from wordpress_mcp.version import __version__

__all__ = ["__version__"]
