"""Playwright MCP Server - browser automation over JSON-RPC."""

__version__ = "1.0.0"
