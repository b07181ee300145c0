"""
Tests for the MCP stdio server

Tests the server setup and that each tool maps its arguments onto the
operation parameters and surfaces operation errors as ToolError.
"""

from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastmcp.exceptions import ToolError

from playwright_mcp_server import server
from playwright_mcp_server.errors import ErrorCode, ToolResult


@pytest.fixture
def fake_context():
    context = Mock()
    context.executor.execute = AsyncMock(return_value=ToolResult.success({"success": True}))
    context.pool.status = Mock(return_value={"chromium": True, "firefox": True, "webkit": False})
    with patch("playwright_mcp_server.server.server_context", context):
        yield context


class TestServerSetup:
    """Tests for server configuration."""

    def test_server_name(self):
        assert server.mcp.name == "Playwright MCP Server"

    def test_server_has_instructions(self):
        assert server.mcp.instructions is not None
        assert len(server.mcp.instructions) > 0


class TestToolMapping:
    """Each tool forwards camelCase parameters to the executor"""

    async def test_navigate(self, fake_context):
        result = await server.navigate.fn(url="https://example.com", wait_until="load")

        assert result == {"success": True}
        fake_context.executor.execute.assert_awaited_once_with(
            "navigate", {"url": "https://example.com", "browser": "chromium", "waitUntil": "load"}
        )

    async def test_screenshot_without_selector(self, fake_context):
        await server.screenshot.fn(url="https://example.com", full_page=True)

        fake_context.executor.execute.assert_awaited_once_with(
            "screenshot", {"url": "https://example.com", "browser": "chromium", "fullPage": True}
        )

    async def test_screenshot_with_selector(self, fake_context):
        await server.screenshot.fn(url="https://example.com", selector="h1", browser="webkit")

        method, params = fake_context.executor.execute.await_args.args
        assert method == "screenshot"
        assert params["selector"] == "h1"
        assert params["browser"] == "webkit"

    async def test_extract_text_defaults_to_body(self, fake_context):
        await server.extract_text.fn(url="https://example.com")

        fake_context.executor.execute.assert_awaited_once_with(
            "extractText", {"url": "https://example.com", "selector": "body", "browser": "chromium"}
        )

    async def test_click_element(self, fake_context):
        await server.click_element.fn(url="https://example.com", selector="a", wait_for_selector=False)

        fake_context.executor.execute.assert_awaited_once_with(
            "clickElement",
            {
                "url": "https://example.com",
                "selector": "a",
                "browser": "chromium",
                "waitForSelector": False,
            },
        )

    async def test_fill_form(self, fake_context):
        await server.fill_form.fn(url="https://example.com", selector="#q", value="hello")

        fake_context.executor.execute.assert_awaited_once_with(
            "fillForm",
            {"url": "https://example.com", "selector": "#q", "value": "hello", "browser": "chromium"},
        )

    async def test_wait_for_element_default_timeout(self, fake_context):
        await server.wait_for_element.fn(url="https://example.com", selector="h1")

        method, params = fake_context.executor.execute.await_args.args
        assert method == "waitForElement"
        assert params["timeout"] == 30000


class TestToolErrors:
    """Operation errors and missing context"""

    async def test_operation_error_raises_tool_error(self, fake_context):
        fake_context.executor.execute.return_value = ToolResult.failure(
            ErrorCode.INTERNAL_ERROR, "navigate failed: net::ERR_NAME_NOT_RESOLVED"
        )

        with pytest.raises(ToolError, match="ERR_NAME_NOT_RESOLVED"):
            await server.navigate.fn(url="https://nowhere.invalid")

    async def test_not_initialized(self):
        with patch("playwright_mcp_server.server.server_context", None):
            with pytest.raises(RuntimeError, match="not initialized"):
                await server.navigate.fn(url="https://example.com")


class TestStatus:
    """browser_status tool and status resource"""

    async def test_browser_status(self, fake_context):
        result = await server.browser_status.fn()

        assert result == {"chromium": True, "firefox": True, "webkit": False}

    async def test_status_resource(self, fake_context):
        status = await server.get_server_status.fn()

        assert status == "Playwright MCP Server is running (2/3 browsers running)"

    async def test_status_resource_not_initialized(self):
        with patch("playwright_mcp_server.server.server_context", None):
            status = await server.get_server_status.fn()

        assert status == "Playwright MCP Server is not initialized"


class TestLifespan:
    """Browser pool lifecycle around the MCP session"""

    async def test_lifespan_starts_and_stops_context(self):
        context = Mock()
        context.start = AsyncMock()
        context.stop = AsyncMock()

        with patch("playwright_mcp_server.server.ServerContext.create", return_value=context):
            async with server.lifespan_context(server.mcp):
                assert server.server_context is context
                context.stop.assert_not_awaited()

        context.start.assert_awaited_once()
        context.stop.assert_awaited_once()
        assert server.server_context is None

    async def test_lifespan_start_failure(self):
        context = Mock()
        context.start = AsyncMock(side_effect=RuntimeError("Browser webkit failed to launch"))
        context.stop = AsyncMock()

        with patch("playwright_mcp_server.server.ServerContext.create", return_value=context):
            with pytest.raises(RuntimeError, match="webkit"):
                async with server.lifespan_context(server.mcp):
                    pass

        context.stop.assert_awaited_once()
        assert server.server_context is None
