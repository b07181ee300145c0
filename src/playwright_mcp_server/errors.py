"""
Error codes and the tagged result type returned by browser operations.

Operations never raise across the protocol boundary; they return a ToolResult
holding either a value or an RpcError, which the protocol adapter translates
into the wire envelope.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """JSON-RPC 2.0 error codes"""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


@dataclass(frozen=True)
class RpcError:
    """A protocol-level error: code, message and optional diagnostic data"""

    code: ErrorCode
    message: str
    data: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": int(self.code), "message": self.message}
        if self.data:
            error["data"] = self.data
        return error


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one operation: exactly one of value or error is set"""

    value: dict[str, Any] | None = None
    error: RpcError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: dict[str, Any]) -> "ToolResult":
        return cls(value=value)

    @classmethod
    def failure(
        cls, code: ErrorCode, message: str, data: dict[str, Any] | None = None
    ) -> "ToolResult":
        return cls(error=RpcError(code, message, data))

    @classmethod
    def invalid_params(cls, message: str) -> "ToolResult":
        return cls.failure(ErrorCode.INVALID_PARAMS, message)
