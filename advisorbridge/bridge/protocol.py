"""JSON-RPC 2.0 frames exchanged with the advisor process."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

JSONRPC_VERSION = "2.0"
INTERNAL_ERROR_CODE = -32603


@dataclass(slots=True)
class RpcError:
    """JSON-RPC error object."""

    code: int
    message: str
    data: Any = None


@dataclass(slots=True)
class RpcRequest:
    """JSON-RPC request frame."""

    method: str
    id: int | float | str
    params: Any = field(default_factory=dict)
    jsonrpc: str = JSONRPC_VERSION


@dataclass(slots=True)
class RpcResponse:
    """JSON-RPC response frame. Exactly one of result/error is set."""

    id: Any
    result: Any = None
    error: RpcError | None = None
    jsonrpc: str = JSONRPC_VERSION

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, id: Any, result: Any) -> "RpcResponse":
        return cls(id=id, result=result)

    @classmethod
    def failure(cls, id: Any, code: int, message: str, data: Any = None) -> "RpcResponse":
        return cls(id=id, error=RpcError(code=code, message=message, data=data))

    @classmethod
    def internal_error(cls, id: Any, message: str) -> "RpcResponse":
        return cls.failure(id, INTERNAL_ERROR_CODE, message)
