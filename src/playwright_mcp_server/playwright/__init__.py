"""
Playwright integration

Browser pool lifecycle, per-request contexts and the six browser operations.
"""

from .config import (
    ENGINE_NAMES,
    BrowserConfig,
    ServerConfig,
    load_browser_config,
    load_server_config,
)
from .pool_manager import BrowserPool
from .tools import TOOL_DEFINITIONS, ToolExecutor

__all__ = [
    "ENGINE_NAMES",
    "BrowserConfig",
    "ServerConfig",
    "load_browser_config",
    "load_server_config",
    "BrowserPool",
    "TOOL_DEFINITIONS",
    "ToolExecutor",
]
