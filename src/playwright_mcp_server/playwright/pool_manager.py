"""
Browser Pool Manager

Holds one long-lived Playwright browser per engine (chromium, firefox, webkit).
Browsers are launched once at startup and closed once at shutdown; every
request gets its own isolated BrowserContext via open_page(), which closes the
context on exit even if an exception occurs.
"""

import asyncio
import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator

from playwright.async_api import async_playwright

from .config import ENGINE_NAMES, BrowserConfig

if TYPE_CHECKING:
    from playwright.async_api import Browser, Page, Playwright

logger = logging.getLogger(__name__)


class BrowserPool:
    """Fixed mapping from engine name to a launched browser"""

    def __init__(
        self,
        config: BrowserConfig,
        playwright_factory: Callable[[], Any] = async_playwright,
    ):
        self.config = config
        self._playwright_factory = playwright_factory
        self._playwright: "Playwright | None" = None
        self.browsers: dict[str, "Browser | None"] = {name: None for name in ENGINE_NAMES}

    async def initialize(self) -> None:
        """
        Start the Playwright driver and launch every engine.

        Raises:
            RuntimeError: If any engine fails to launch. Engines already
                launched are closed before raising.
        """
        logger.info("Initializing browsers...")
        self._playwright = await self._playwright_factory().start()

        for name in ENGINE_NAMES:
            try:
                launcher = getattr(self._playwright, name)
                self.browsers[name] = await launcher.launch(headless=self.config["headless"])
                logger.info(f"✓ {name} launched (headless={self.config['headless']})")
            except Exception as e:
                logger.error(f"✗ Failed to launch {name}: {e}", exc_info=True)
                await self.shutdown()
                raise RuntimeError(f"Browser {name} failed to launch: {e}") from e

        logger.info("All browsers initialized successfully")

    async def _close_browser(self, name: str, browser: "Browser") -> None:
        try:
            await browser.close()
            logger.info(f"{name} browser closed")
        except Exception as e:
            logger.error(f"Error closing {name} browser: {e}", exc_info=True)

    async def shutdown(self) -> None:
        """Close every launched engine and stop the driver. Safe to call twice."""
        logger.info("Shutting down browsers")

        launched = [(name, browser) for name, browser in self.browsers.items() if browser]
        await asyncio.gather(
            *(self._close_browser(name, browser) for name, browser in launched),
            return_exceptions=True,
        )
        for name in self.browsers:
            self.browsers[name] = None

        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.error(f"Error stopping Playwright driver: {e}", exc_info=True)
            self._playwright = None

        logger.info("Browsers shut down")

    def get_browser(self, name: str) -> "Browser | None":
        """Return the browser for an engine name, None if unknown or not running"""
        return self.browsers.get(name)

    def status(self) -> dict[str, bool]:
        """Report, per engine, whether its browser is present"""
        return {name: browser is not None for name, browser in self.browsers.items()}

    @asynccontextmanager
    async def open_page(self, name: str) -> AsyncIterator["Page"]:
        """
        Open an isolated context and page on the named engine.

        The context is closed exactly once when the block exits, whether it
        returns normally or raises.

        Args:
            name: Engine name (chromium, firefox or webkit)

        Yields:
            A fresh Page owned by a fresh BrowserContext

        Raises:
            ValueError: If the engine is not running
        """
        browser = self.get_browser(name)
        if browser is None:
            raise ValueError(f"Browser {name} not available")

        context = await browser.new_context()
        logger.debug(f"Opened context on {name}")
        try:
            if self.config["timeout_action"] is not None:
                context.set_default_timeout(self.config["timeout_action"])
            if self.config["timeout_navigation"] is not None:
                context.set_default_navigation_timeout(self.config["timeout_navigation"])

            page = await context.new_page()
            yield page
        finally:
            try:
                await context.close()
                logger.debug(f"Closed context on {name}")
            except Exception as e:
                logger.warning(f"Error closing context on {name}: {e}")
