"""
Playwright MCP Server - stdio transport

Exposes the same browser operations as the HTTP server as native MCP tools,
for clients that launch the server as a subprocess. The browser pool is
launched in the FastMCP lifespan and shared by every tool call.

Logging goes to files only: stdout carries the MCP protocol.
"""

import sys
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from .context import ServerContext
from .playwright.tools import DEFAULT_ENGINE, DEFAULT_WAIT_TIMEOUT_MS, DEFAULT_WAIT_UNTIL
from .protocol import SERVER_INFO
from .utils.logging_config import get_logger, log_tool_result, setup_file_logging

# Configure logging using centralized utility
setup_file_logging(log_file="logs/playwright-mcp-server-stdio.log")
logger = get_logger(__name__)

logger.info(f"Python interpreter: {sys.executable}")
logger.info(f"Python version: {sys.version}")

# Global components
server_context: ServerContext | None = None


@asynccontextmanager
async def lifespan_context(server):
    """Lifespan context manager for startup and shutdown"""
    global server_context

    logger.info(f"Starting Playwright MCP Server v{SERVER_INFO['version']} (stdio)...")

    context = ServerContext.create()
    try:
        await context.start()
        server_context = context
        logger.info("Playwright MCP Server started successfully")

        yield

    except Exception as e:
        logger.error(f"Failed to start Playwright MCP Server: {e}", exc_info=True)
        raise

    finally:
        logger.info("Shutting down Playwright MCP Server...")
        server_context = None
        await context.stop()
        logger.info("Playwright MCP Server shut down successfully")


mcp = FastMCP(
    name="Playwright MCP Server",
    instructions="""
    Browser automation backed by long-lived Chromium, Firefox and WebKit
    browsers. Every tool call loads the given URL in a fresh, isolated
    browser context that is discarded when the call returns, so no cookies
    or storage carry over between calls.

    Select the engine with the browser argument: chromium (default),
    firefox or webkit.
    """,
    lifespan=lifespan_context,
)


async def _call_tool(method: str, params: dict[str, Any]) -> dict[str, Any]:
    """
    Run an operation and unwrap its result.

    Raises:
        ToolError: If the operation returned an error
    """
    if not server_context:
        raise RuntimeError("Server context not initialized")

    outcome = await server_context.executor.execute(method, params)
    if outcome.error is not None:
        raise ToolError(outcome.error.message)
    return outcome.value or {}


# =============================================================================
# BROWSER TOOLS
# =============================================================================


@mcp.tool()
@log_tool_result(logger)
async def navigate(
    url: str,
    browser: str = DEFAULT_ENGINE,
    wait_until: str = DEFAULT_WAIT_UNTIL,
) -> dict[str, Any]:
    """
    Navigate to a URL and return the page title.

    Args:
        url: The URL to load
        browser: Engine to use: chromium, firefox or webkit
        wait_until: Load state to wait for: load, domcontentloaded, networkidle or commit

    Returns:
        {"success": true, "title": str, "url": str}
    """
    return await _call_tool(
        "navigate", {"url": url, "browser": browser, "waitUntil": wait_until}
    )


@mcp.tool()
@log_tool_result(logger)
async def screenshot(
    url: str,
    browser: str = DEFAULT_ENGINE,
    full_page: bool = False,
    selector: str | None = None,
) -> dict[str, Any]:
    """
    Take a PNG screenshot of a webpage.

    Args:
        url: The URL to load
        browser: Engine to use: chromium, firefox or webkit
        full_page: Capture the full scrollable page instead of the viewport
        selector: Capture only the bounding box of the first matching element

    Returns:
        {"success": true, "screenshot": base64 str, "contentType": "image/png"}
    """
    params: dict[str, Any] = {"url": url, "browser": browser, "fullPage": full_page}
    if selector:
        params["selector"] = selector
    return await _call_tool("screenshot", params)


@mcp.tool()
@log_tool_result(logger)
async def extract_text(
    url: str,
    selector: str = "body",
    browser: str = DEFAULT_ENGINE,
) -> dict[str, Any]:
    """
    Extract the text content of the first element matching a selector.

    Returns:
        {"success": true, "text": str | null, "selector": str}
    """
    return await _call_tool(
        "extractText", {"url": url, "selector": selector, "browser": browser}
    )


@mcp.tool()
@log_tool_result(logger)
async def click_element(
    url: str,
    selector: str,
    browser: str = DEFAULT_ENGINE,
    wait_for_selector: bool = True,
) -> dict[str, Any]:
    """
    Click an element and report the URL the page ends up on.

    Returns:
        {"success": true, "currentUrl": str, "clickedSelector": str}
    """
    return await _call_tool(
        "clickElement",
        {
            "url": url,
            "selector": selector,
            "browser": browser,
            "waitForSelector": wait_for_selector,
        },
    )


@mcp.tool()
@log_tool_result(logger)
async def fill_form(
    url: str,
    selector: str,
    value: str,
    browser: str = DEFAULT_ENGINE,
) -> dict[str, Any]:
    """
    Fill a form field.

    The page is discarded when the call returns, so this only verifies that
    the field accepts the value.
    """
    return await _call_tool(
        "fillForm", {"url": url, "selector": selector, "value": value, "browser": browser}
    )


@mcp.tool()
@log_tool_result(logger)
async def wait_for_element(
    url: str,
    selector: str,
    timeout: int = DEFAULT_WAIT_TIMEOUT_MS,
    browser: str = DEFAULT_ENGINE,
) -> dict[str, Any]:
    """
    Wait for an element to appear and report whether it is visible.

    Args:
        url: The URL to load
        selector: Element selector
        timeout: Maximum wait in milliseconds
        browser: Engine to use: chromium, firefox or webkit

    Returns:
        {"success": true, "selector": str, "isVisible": bool}
    """
    return await _call_tool(
        "waitForElement",
        {"url": url, "selector": selector, "timeout": timeout, "browser": browser},
    )


@mcp.tool()
async def browser_status() -> dict[str, bool]:
    """Report which browser engines are running."""
    if not server_context:
        raise RuntimeError("Server context not initialized")
    return server_context.pool.status()


# =============================================================================
# RESOURCES
# =============================================================================


@mcp.resource("playwright-mcp://status")
async def get_server_status() -> str:
    """Get the current server status"""
    if not server_context:
        return "Playwright MCP Server is not initialized"

    status = server_context.pool.status()
    running = sum(status.values())
    return f"Playwright MCP Server is running ({running}/{len(status)} browsers running)"


# =============================================================================
# MAIN
# =============================================================================


def main() -> None:
    """Run the MCP server over stdio"""
    logger.info("Initializing Playwright MCP Server (stdio)...")
    mcp.run()


if __name__ == "__main__":
    main()
