"""
Configuration management for the Playwright MCP Server

Loads configuration from environment variables with sensible defaults for the
HTTP transport and the browser pool.
"""

import logging
import os
from pathlib import Path
from typing import TypedDict

from dotenv import load_dotenv

from ..utils.logging_config import log_dict

logger = logging.getLogger(__name__)

# Load environment variables from .env file
# Try multiple paths for .env file
env_loaded = False
for env_path in [
    Path.cwd() / ".env",
    Path(__file__).parent.parent.parent.parent / ".env",
    Path.home() / ".env",
]:
    if env_path.exists():
        logger.info(f"Loading environment from: {env_path}")
        load_dotenv(env_path)
        env_loaded = True
        break

if not env_loaded:
    logger.warning("No .env file found, using system environment variables only")


ENV_PREFIX = "PW_MCP_SERVER_"

# Engine names in launch order
ENGINE_NAMES: tuple[str, ...] = ("chromium", "firefox", "webkit")

DEFAULT_ALLOWED_ORIGINS = [
    "https://poke.com",
    "https://www.poke.com",
    "http://localhost:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3000",
]


class BrowserConfig(TypedDict):
    """Configuration shared by every engine in the pool"""

    headless: bool
    # Context-wide default timeouts (milliseconds); None keeps Playwright's defaults
    timeout_action: int | None
    timeout_navigation: int | None


class ServerConfig(TypedDict):
    """Complete server configuration"""

    host: str
    port: int
    environment: str
    cors_allow_all: bool
    allowed_origins: list[str]
    max_body_bytes: int
    log_file: str
    error_log_file: str
    log_level: str
    browser: BrowserConfig


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable"""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_optional_int_env(key: str) -> int | None:
    """Get integer environment variable, None when unset or malformed"""
    value = os.getenv(key)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer value for {key}: {value!r}")
        return None


def _get_list_env(key: str, default: list[str]) -> list[str]:
    """Get comma-separated list environment variable"""
    value = os.getenv(key)
    if value is None:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


def load_browser_config() -> BrowserConfig:
    """
    Load browser pool configuration from PW_MCP_SERVER_* environment variables.

    Returns:
        BrowserConfig with all settings
    """
    return {
        "headless": _get_bool_env(f"{ENV_PREFIX}HEADLESS", True),
        "timeout_action": _get_optional_int_env(f"{ENV_PREFIX}TIMEOUT_ACTION"),
        "timeout_navigation": _get_optional_int_env(f"{ENV_PREFIX}TIMEOUT_NAVIGATION"),
    }


def load_server_config() -> ServerConfig:
    """
    Load complete server configuration from environment variables.

    PORT is read unprefixed so container platforms can inject it. The
    environment marker falls back to NODE_ENV for deployments carried over
    from the Node.js server.

    Returns:
        ServerConfig with all settings

    Raises:
        ValueError: If the port or body cap is out of range
    """
    port = _get_int_env("PORT", 3000)
    if not 0 < port < 65536:
        raise ValueError(f"PORT must be between 1 and 65535, got {port}")

    max_body_mb = _get_int_env(f"{ENV_PREFIX}MAX_BODY_MB", 10)
    if max_body_mb < 1:
        raise ValueError(f"{ENV_PREFIX}MAX_BODY_MB must be at least 1, got {max_body_mb}")

    environment = os.getenv(f"{ENV_PREFIX}ENV") or os.getenv("NODE_ENV") or "production"

    config: ServerConfig = {
        "host": os.getenv(f"{ENV_PREFIX}HOST", "0.0.0.0"),
        "port": port,
        "environment": environment.lower(),
        "cors_allow_all": _get_bool_env(f"{ENV_PREFIX}CORS_ALLOW_ALL", True),
        "allowed_origins": _get_list_env(
            f"{ENV_PREFIX}ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS
        ),
        "max_body_bytes": max_body_mb * 1024 * 1024,
        "log_file": os.getenv(f"{ENV_PREFIX}LOG_FILE", "logs/playwright-mcp-server.log"),
        "error_log_file": os.getenv(f"{ENV_PREFIX}ERROR_LOG_FILE", "logs/error.log"),
        "log_level": os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper(),
        "browser": load_browser_config(),
    }

    log_dict(
        logger,
        "Server config:",
        {key: value for key, value in config.items() if key != "browser"},
    )
    log_dict(logger, "Browser config:", dict(config["browser"]))
    return config
