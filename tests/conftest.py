"""
Pytest Configuration and Fixtures

Fakes for the Playwright object graph (driver -> browser -> context -> page)
so no test launches a real browser.
"""

from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

from playwright_mcp_server.context import ServerContext
from playwright_mcp_server.playwright.config import ENGINE_NAMES
from playwright_mcp_server.playwright.pool_manager import BrowserPool
from tests.fixtures.browser_fixture import make_context, make_page


@pytest.fixture
def mock_page():
    return make_page()


@pytest.fixture
def mock_context(mock_page):
    """A BrowserContext whose new_page returns mock_page."""
    return make_context(mock_page)


@pytest.fixture
def mock_browsers(mock_context):
    """One mock Browser per engine, all handing out mock_context."""
    browsers = {}
    for name in ENGINE_NAMES:
        browser = Mock(name=f"{name}_browser")
        browser.new_context = AsyncMock(return_value=mock_context)
        browser.close = AsyncMock()
        browsers[name] = browser
    return browsers


@pytest.fixture
def mock_playwright(mock_browsers):
    """A started Playwright driver exposing chromium/firefox/webkit launchers."""
    driver = Mock()
    for name, browser in mock_browsers.items():
        launcher = Mock()
        launcher.launch = AsyncMock(return_value=browser)
        setattr(driver, name, launcher)
    driver.stop = AsyncMock()
    return driver


@pytest.fixture
def playwright_factory(mock_playwright):
    """Stand-in for async_playwright: factory().start() returns mock_playwright."""
    starter = Mock()
    starter.start = AsyncMock(return_value=mock_playwright)
    return Mock(return_value=starter)


@pytest.fixture
def browser_config():
    return {"headless": True, "timeout_action": None, "timeout_navigation": None}


@pytest.fixture
def server_config(browser_config):
    return {
        "host": "127.0.0.1",
        "port": 3000,
        "environment": "production",
        "cors_allow_all": True,
        "allowed_origins": ["https://poke.com"],
        "max_body_bytes": 10 * 1024 * 1024,
        "log_file": "logs/test.log",
        "error_log_file": "logs/test-error.log",
        "log_level": "INFO",
        "browser": browser_config,
    }


@pytest.fixture
def browser_pool(browser_config, playwright_factory):
    """A BrowserPool wired to the mock driver, not yet initialized."""
    return BrowserPool(browser_config, playwright_factory=playwright_factory)


@pytest_asyncio.fixture
async def started_pool(browser_pool):
    """A BrowserPool with all three mock engines launched."""
    await browser_pool.initialize()
    yield browser_pool
    await browser_pool.shutdown()


@pytest.fixture
def server_context(server_config, browser_pool):
    """A ServerContext around the mock pool; transports start it themselves."""
    return ServerContext.create(server_config, pool=browser_pool)
