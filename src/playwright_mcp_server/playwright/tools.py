"""
Browser operations

Each operation validates its parameters, opens a fresh context and page on the
selected engine, performs one action and returns a ToolResult. Validation
happens before any context is created; execution failures are reported as
INTERNAL_ERROR after the context has been closed.
"""

import base64
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from ..errors import ErrorCode, ToolResult
from ..types import ToolDescriptor
from .pool_manager import BrowserPool

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)

DEFAULT_ENGINE = "chromium"
DEFAULT_WAIT_UNTIL = "networkidle"
DEFAULT_WAIT_TIMEOUT_MS = 30000
WAIT_UNTIL_STATES = ("load", "domcontentloaded", "networkidle", "commit")

TOOL_DEFINITIONS: dict[str, ToolDescriptor] = {
    "navigate": {
        "description": "Navigate to a URL",
        "parameters": ["url", "browser", "waitUntil"],
    },
    "screenshot": {
        "description": "Take a screenshot of a webpage",
        "parameters": ["url", "browser", "fullPage", "selector"],
    },
    "extractText": {
        "description": "Extract text content from a webpage",
        "parameters": ["url", "selector", "browser"],
    },
    "clickElement": {
        "description": "Click an element on a webpage",
        "parameters": ["url", "selector", "browser", "waitForSelector"],
    },
    "fillForm": {
        "description": "Fill a form field on a webpage",
        "parameters": ["url", "selector", "value", "browser"],
    },
    "waitForElement": {
        "description": "Wait for an element to appear on a webpage",
        "parameters": ["url", "selector", "timeout", "browser"],
    },
}

PageAction = Callable[["Page"], Awaitable[dict[str, Any]]]


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


class ToolExecutor:
    """Runs the six browser operations against a BrowserPool"""

    def __init__(self, pool: BrowserPool):
        self.pool = pool
        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[ToolResult]]] = {
            "navigate": self.navigate,
            "screenshot": self.screenshot,
            "extractText": self.extract_text,
            "clickElement": self.click_element,
            "fillForm": self.fill_form,
            "waitForElement": self.wait_for_element,
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    async def execute(self, method: str, params: Any) -> ToolResult:
        """
        Dispatch a method name to its operation.

        Args:
            method: One of the operation names in TOOL_DEFINITIONS
            params: Operation parameters (must be a mapping)

        Returns:
            ToolResult with the operation value or a tagged error
        """
        handler = self._handlers.get(method)
        if handler is None:
            return ToolResult.failure(
                ErrorCode.METHOD_NOT_FOUND,
                f"Unknown method: {method}",
                {"availableMethods": self.tool_names},
            )
        if params is None:
            params = {}
        if not isinstance(params, dict):
            return ToolResult.invalid_params("params must be an object")
        return await handler(params)

    async def _run(self, method: str, engine: Any, action: PageAction) -> ToolResult:
        """Run action on a fresh page; the context is closed before returning."""
        if not isinstance(engine, str) or self.pool.get_browser(engine) is None:
            return ToolResult.invalid_params(f"Browser {engine} not available")

        try:
            async with self.pool.open_page(engine) as page:
                value = await action(page)
        except Exception as e:
            logger.error(f"{method} failed on {engine}: {e}")
            return ToolResult.failure(
                ErrorCode.INTERNAL_ERROR, f"{method} failed: {e}", {"method": method}
            )
        return ToolResult.success(value)

    async def navigate(self, params: dict[str, Any]) -> ToolResult:
        url = params.get("url")
        wait_until = params.get("waitUntil", DEFAULT_WAIT_UNTIL)
        if _is_missing(url):
            return ToolResult.invalid_params("Missing required parameter: url")
        if wait_until not in WAIT_UNTIL_STATES:
            return ToolResult.invalid_params(
                f"waitUntil must be one of: {', '.join(WAIT_UNTIL_STATES)}"
            )

        async def action(page: "Page") -> dict[str, Any]:
            await page.goto(url, wait_until=wait_until)
            title = await page.title()
            return {"success": True, "title": title, "url": url}

        return await self._run("navigate", params.get("browser", DEFAULT_ENGINE), action)

    async def screenshot(self, params: dict[str, Any]) -> ToolResult:
        url = params.get("url")
        full_page = params.get("fullPage", False)
        selector = params.get("selector")
        if _is_missing(url):
            return ToolResult.invalid_params("Missing required parameter: url")
        if not isinstance(full_page, bool):
            return ToolResult.invalid_params("fullPage must be a boolean")

        async def action(page: "Page") -> dict[str, Any]:
            await page.goto(url, wait_until=DEFAULT_WAIT_UNTIL)
            if selector:
                box = await page.locator(selector).first.bounding_box()
                if box is None:
                    raise RuntimeError(f"Element {selector} has no bounding box")
                image = await page.screenshot(clip=box)
            else:
                image = await page.screenshot(full_page=full_page)
            return {
                "success": True,
                "screenshot": base64.b64encode(image).decode("ascii"),
                "contentType": "image/png",
            }

        return await self._run("screenshot", params.get("browser", DEFAULT_ENGINE), action)

    async def extract_text(self, params: dict[str, Any]) -> ToolResult:
        url = params.get("url")
        selector = params.get("selector") or "body"
        if _is_missing(url):
            return ToolResult.invalid_params("Missing required parameter: url")

        async def action(page: "Page") -> dict[str, Any]:
            await page.goto(url, wait_until=DEFAULT_WAIT_UNTIL)
            text = await page.locator(selector).first.text_content()
            return {"success": True, "text": text, "selector": selector}

        return await self._run("extractText", params.get("browser", DEFAULT_ENGINE), action)

    async def click_element(self, params: dict[str, Any]) -> ToolResult:
        url = params.get("url")
        selector = params.get("selector")
        wait_for_selector = params.get("waitForSelector", True)
        if _is_missing(url) or _is_missing(selector):
            return ToolResult.invalid_params("Missing required parameters: url and selector")
        if not isinstance(wait_for_selector, bool):
            return ToolResult.invalid_params("waitForSelector must be a boolean")

        async def action(page: "Page") -> dict[str, Any]:
            await page.goto(url, wait_until=DEFAULT_WAIT_UNTIL)
            if wait_for_selector:
                await page.wait_for_selector(selector)
            await page.click(selector)
            return {"success": True, "currentUrl": page.url, "clickedSelector": selector}

        return await self._run("clickElement", params.get("browser", DEFAULT_ENGINE), action)

    async def fill_form(self, params: dict[str, Any]) -> ToolResult:
        url = params.get("url")
        selector = params.get("selector")
        value = params.get("value")
        # An empty string is a legitimate value to fill
        if _is_missing(url) or _is_missing(selector) or value is None:
            return ToolResult.invalid_params(
                "Missing required parameters: url, selector, and value"
            )
        if not isinstance(value, str):
            return ToolResult.invalid_params("value must be a string")

        async def action(page: "Page") -> dict[str, Any]:
            await page.goto(url, wait_until=DEFAULT_WAIT_UNTIL)
            await page.fill(selector, value)
            return {"success": True, "selector": selector, "value": value}

        return await self._run("fillForm", params.get("browser", DEFAULT_ENGINE), action)

    async def wait_for_element(self, params: dict[str, Any]) -> ToolResult:
        url = params.get("url")
        selector = params.get("selector")
        timeout = params.get("timeout", DEFAULT_WAIT_TIMEOUT_MS)
        if _is_missing(url) or _is_missing(selector):
            return ToolResult.invalid_params("Missing required parameters: url and selector")
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout < 0:
            return ToolResult.invalid_params("timeout must be a non-negative number")

        async def action(page: "Page") -> dict[str, Any]:
            await page.goto(url, wait_until=DEFAULT_WAIT_UNTIL)
            await page.wait_for_selector(selector, timeout=timeout)
            is_visible = await page.is_visible(selector)
            return {"success": True, "selector": selector, "isVisible": is_visible}

        return await self._run("waitForElement", params.get("browser", DEFAULT_ENGINE), action)
