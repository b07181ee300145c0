"""
Playwright MCP Server - HTTP transport

FastAPI application exposing the browser operations over JSON-RPC 2.0 (and the
legacy flat envelope):

- POST /mcp: Dispatch any operation, or initialize
- POST /mcp/initialize: Initialize only
- GET /health: Browser presence per engine
- GET /tools: Capability descriptor
- GET /: Liveness and server metadata

Protocol errors are returned with HTTP 200 and carried in the body. Only an
unparseable body (400) or an oversized one (413) fails at the HTTP level.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .context import ServerContext
from .errors import ErrorCode, RpcError
from .playwright.config import load_server_config
from .protocol import SERVER_CAPABILITIES, SERVER_INFO, create_response
from .types import HealthResponse
from .utils.logging_config import get_logger, setup_file_logging

logger = get_logger(__name__)

# Hardening headers applied to every response
SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self';base-uri 'self';font-src 'self' https: data:;"
        "form-action 'self';frame-ancestors 'self';img-src 'self' data:;"
        "object-src 'none';script-src 'self';script-src-attr 'none';"
        "style-src 'self' https: 'unsafe-inline';upgrade-insecure-requests"
    ),
    "Cross-Origin-Opener-Policy": "same-origin-allow-popups",
    "Cross-Origin-Resource-Policy": "cross-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _too_large(max_bytes: int) -> JSONResponse:
    return JSONResponse(
        status_code=413,
        content={"error": f"Request body exceeds {max_bytes} bytes"},
    )


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def _parse_error() -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=create_response(None, error=RpcError(ErrorCode.PARSE_ERROR, "Parse error")),
    )


def _unhandled_error(request_id: Any, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=create_response(
            request_id,
            error=RpcError(
                ErrorCode.INTERNAL_ERROR, "Unhandled server error", {"details": str(exc)}
            ),
        ),
    )


def create_app(context: ServerContext | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        context: Pre-built server context (default: built from the environment)

    Returns:
        FastAPI app whose lifespan launches and closes the browser pool
    """
    if context is None:
        context = ServerContext.create()
    config = context.config
    max_body_bytes = config["max_body_bytes"]

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting Playwright MCP Server v{SERVER_INFO['version']}...")
        try:
            await context.start()
        except Exception as e:
            logger.error(f"Failed to start server: {e}", exc_info=True)
            raise

        logger.info(f"MCP Protocol Version: {SERVER_INFO['protocolVersion']}")
        try:
            yield
        finally:
            logger.info("Shutting down gracefully, closing browsers...")
            await context.stop()

    app = FastAPI(
        title="Playwright MCP Server",
        version=SERVER_INFO["version"],
        lifespan=lifespan,
    )
    app.state.context = context

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > max_body_bytes:
            return _too_large(max_body_bytes)
        return await call_next(request)

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    # Added last so it wraps everything above, including 413 responses
    allow_all = config["cors_allow_all"] or config["environment"] == "development"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[] if allow_all else config["allowed_origins"],
        allow_origin_regex=".*" if allow_all else None,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=86400,
    )

    async def read_envelope(request: Request) -> Any:
        raw = await request.body()
        if len(raw) > max_body_bytes:
            return _too_large(max_body_bytes)
        try:
            body = json.loads(raw, parse_constant=_reject_constant)
        except ValueError:
            logger.warning("Rejected unparseable request body")
            return _parse_error()
        if isinstance(body, dict):
            request.state.rpc_id = body.get("id")
        return body

    async def dispatch(
        request: Request, handler: Callable[[Any], Awaitable[dict[str, Any]]]
    ) -> JSONResponse:
        """Read the envelope and run handler; unexpected errors still get an envelope"""
        try:
            body = await read_envelope(request)
            if isinstance(body, JSONResponse):
                return body
            return JSONResponse(content=await handler(body))
        except Exception as e:
            logger.error(f"Unhandled error: {e}", exc_info=True)
            return _unhandled_error(getattr(request.state, "rpc_id", None), e)

    async def initialize(body: Any) -> dict[str, Any]:
        return context.adapter.handle_initialize(body)

    @app.post("/mcp/initialize")
    async def mcp_initialize(request: Request) -> JSONResponse:
        return await dispatch(request, initialize)

    @app.post("/mcp")
    async def mcp_endpoint(request: Request) -> JSONResponse:
        return await dispatch(request, context.adapter.handle)

    # TypedDict return annotations are not usable as response models on Python < 3.12
    @app.get("/health", response_model=None)
    async def health() -> HealthResponse:
        browsers = context.pool.status()
        return {
            "status": "healthy" if all(browsers.values()) else "degraded",
            "timestamp": _utc_timestamp(),
            "browsers": browsers,
            "server": SERVER_INFO,
        }

    @app.get("/")
    async def root() -> dict[str, Any]:
        return {
            "status": "ok",
            "message": "Playwright MCP Server is running",
            "server": SERVER_INFO,
            "capabilities": SERVER_CAPABILITIES,
        }

    @app.get("/tools")
    async def list_tools() -> dict[str, Any]:
        return {
            "tools": SERVER_CAPABILITIES["tools"],
            "description": "Available MCP tools for Playwright automation",
        }

    return app


def main() -> None:
    """Run the HTTP server"""
    config = load_server_config()
    setup_file_logging(
        log_file=config["log_file"],
        level=getattr(logging, config["log_level"], logging.INFO),
        error_log_file=config["error_log_file"],
        console=True,
    )

    app = create_app(ServerContext.create(config))

    logger.info(f"Playwright MCP Server running on port {config['port']}")
    logger.info(f"Health check: http://localhost:{config['port']}/health")
    logger.info(f"Available tools: http://localhost:{config['port']}/tools")

    # uvicorn handles SIGTERM/SIGINT by running the lifespan shutdown,
    # which closes every browser before the process exits
    uvicorn.run(app, host=config["host"], port=config["port"], log_config=None)


if __name__ == "__main__":
    main()
