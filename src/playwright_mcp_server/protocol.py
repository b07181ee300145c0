"""
Protocol adapter

Validates JSON-RPC 2.0 (or legacy flat) envelopes, dispatches them to the
ToolExecutor and wraps results and errors back into the envelope style the
caller used. Every error is returned as a body; nothing here raises.
"""

import logging
from typing import Any

from . import __version__
from .errors import ErrorCode, RpcError
from .playwright.tools import TOOL_DEFINITIONS, ToolExecutor
from .types import InitializeResult, ServerInfo

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"

SERVER_INFO: ServerInfo = {
    "name": "playwright-mcp-server",
    "version": __version__,
    "protocolVersion": "2024-11-05",
}

SERVER_CAPABILITIES: dict[str, Any] = {
    "tools": TOOL_DEFINITIONS,
    "prompts": {},
    "resources": {},
}


def initialize_result() -> InitializeResult:
    """Fixed server metadata returned by the initialize method"""
    return {
        "protocolVersion": SERVER_INFO["protocolVersion"],
        "capabilities": SERVER_CAPABILITIES,
        "serverInfo": {"name": SERVER_INFO["name"], "version": SERVER_INFO["version"]},
    }


def create_response(
    request_id: Any, result: Any = None, error: RpcError | None = None
) -> dict[str, Any]:
    """Build a versioned JSON-RPC 2.0 response"""
    response: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": request_id}
    if error is not None:
        response["error"] = error.to_dict()
    else:
        response["result"] = result
    return response


def is_versioned(body: dict[str, Any]) -> bool:
    """A request is versioned when it carries a non-empty jsonrpc member"""
    return bool(body.get("jsonrpc"))


def validate_request(body: dict[str, Any]) -> RpcError | None:
    """
    Validate the shape of a request envelope.

    Returns:
        RpcError if the envelope is malformed, None if valid
    """
    if is_versioned(body) and body["jsonrpc"] != JSONRPC_VERSION:
        return RpcError(
            ErrorCode.INVALID_REQUEST, 'Invalid JSON-RPC version. Must be "2.0"'
        )

    method = body.get("method")
    if not method or not isinstance(method, str):
        return RpcError(ErrorCode.INVALID_REQUEST, "Missing or invalid method field")

    request_id = body.get("id")
    if request_id is not None and (
        isinstance(request_id, bool) or not isinstance(request_id, (str, int, float))
    ):
        return RpcError(
            ErrorCode.INVALID_REQUEST, "Invalid id field. Must be string, number, or null"
        )

    return None


class ProtocolAdapter:
    """Translates request envelopes into operations and back"""

    def __init__(self, executor: ToolExecutor):
        self.executor = executor

    def _respond(
        self,
        body: dict[str, Any],
        result: Any = None,
        error: RpcError | None = None,
    ) -> dict[str, Any]:
        """Wrap a result or error in the envelope style the caller used"""
        if is_versioned(body):
            return create_response(body.get("id"), result, error)
        if error is not None:
            return {"error": error.message, "method": body.get("method")}
        return result

    def invalid_body(self) -> dict[str, Any]:
        """Response for a JSON body that is not an object"""
        return create_response(
            None, error=RpcError(ErrorCode.INVALID_REQUEST, "Request body must be a JSON object")
        )

    async def handle(self, body: Any) -> dict[str, Any]:
        """
        Handle an envelope received on the generic /mcp route.

        initialize is answered before any validation; every other method is
        validated and dispatched to the executor.
        """
        if not isinstance(body, dict):
            return self.invalid_body()

        method = body.get("method")
        if method == "initialize":
            logger.info("MCP initialization via /mcp endpoint")
            return self._respond(body, initialize_result())

        error = validate_request(body)
        if error is not None:
            logger.warning(f"Rejected request: {error.message}")
            return self._respond(body, error=error)

        params = body.get("params")
        param_names = sorted(params) if isinstance(params, dict) else []
        logger.info(f"MCP request: {method} params={param_names}")

        try:
            outcome = await self.executor.execute(method, params)
        except Exception as e:
            logger.error(f"MCP error for {method}: {e}", exc_info=True)
            return self._respond(
                body,
                error=RpcError(
                    ErrorCode.INTERNAL_ERROR, str(e) or "Internal server error", {"method": method}
                ),
            )

        if outcome.error is not None:
            return self._respond(body, error=outcome.error)
        return self._respond(body, outcome.value)

    def handle_initialize(self, body: Any) -> dict[str, Any]:
        """Handle an envelope received on the dedicated /mcp/initialize route"""
        logger.info("MCP initialization request received")
        if not isinstance(body, dict):
            return self.invalid_body()

        error = validate_request(body)
        if error is not None:
            return self._respond(body, error=error)

        method = body["method"]
        if method != "initialize":
            return self._respond(
                body,
                error=RpcError(ErrorCode.METHOD_NOT_FOUND, f"Method not found: {method}"),
            )

        logger.info("MCP initialization successful")
        return self._respond(body, initialize_result())
