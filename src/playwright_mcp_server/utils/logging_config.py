"""
Logging configuration utilities for playwright-mcp-server

The HTTP server logs to a file, an error-only file and the console. The stdio
MCP entry point must never write to stdout (it carries the MCP protocol), so it
only enables the file handlers.
"""

import functools
import json
import logging
import sys
import tempfile
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

T = TypeVar("T")

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _prepare_log_path(log_file: str | Path) -> Path:
    """Create the parent directory, falling back to the temp dir if that fails."""
    log_path = Path(log_file)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        log_path = Path(tempfile.gettempdir()) / log_path.name
    return log_path


def setup_file_logging(
    log_file: str | Path = "logs/playwright-mcp-server.log",
    level: int = logging.INFO,
    format_string: str | None = None,
    error_log_file: str | Path | None = None,
    console: bool = False,
) -> logging.Logger:
    """
    Configure logging for the application.

    Args:
        log_file: Path to the main log file (relative or absolute)
        level: Logging level (default: logging.INFO)
        format_string: Custom format string (default: timestamp - name - level - message)
        error_log_file: Optional path of a second file receiving ERROR and above
        console: Also log to stderr. Leave False when stdout/stderr carry MCP traffic.

    Returns:
        The root logger instance
    """
    if format_string is None:
        format_string = DEFAULT_FORMAT

    log_path = _prepare_log_path(log_file)
    handlers: list[logging.Handler] = [logging.FileHandler(log_path)]

    if error_log_file is not None:
        error_handler = logging.FileHandler(_prepare_log_path(error_log_file))
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)

    if console:
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(
        level=level,
        format=format_string,
        handlers=handlers,
        force=True,  # Override any existing configuration
    )

    logger = logging.getLogger()
    logger.info(f"Logging configured: file={log_path}, level={logging.getLevelName(level)}")

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the specified module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_dict(
    logger: logging.Logger, message: str, data: dict[str, Any], level: int = logging.INFO
) -> None:
    """
    Log a dictionary with formatted key-value pairs.

    Args:
        logger: Logger instance
        message: Prefix message
        data: Dictionary to log
        level: Log level (default: INFO)
    """
    logger.log(level, message)
    for key, value in data.items():
        # Mask sensitive values
        if any(sensitive in key.lower() for sensitive in ["token", "password", "secret", "key"]):
            value = "***REDACTED***"
        logger.log(level, f"  {key}: {value}")


def log_tool_result(
    logger: logging.Logger | None = None, max_length: int = 2000
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator logging the result of an async tool as JSON.

    Screenshots are base64 strings of several hundred KB, so the rendered
    result is truncated to max_length characters.

    Args:
        logger: Logger to use (default: logger of the decorated function's module)
        max_length: Maximum number of characters logged per result
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        tool_logger = logger or logging.getLogger(func.__module__)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            result = await func(*args, **kwargs)
            try:
                rendered = json.dumps(result, default=str)
            except (TypeError, ValueError):
                rendered = str(result)
            if len(rendered) > max_length:
                rendered = rendered[:max_length] + f"... ({len(rendered)} chars)"
            tool_logger.info(f"TOOL_RESULT [{func.__name__}] {rendered}")
            return result

        return wrapper

    return decorator
