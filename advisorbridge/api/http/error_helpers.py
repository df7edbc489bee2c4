"""Shared helpers for consistent HTTP error detail formatting."""

from __future__ import annotations

from typing import Any

from advisorbridge.bridge import RpcResponse, response_to_payload


def unknown_error_detail(exc: Exception | None) -> str:
    """Format generic unknown-error detail consistently across endpoints."""
    return str(exc) if exc else "Unknown error"


def rpc_internal_error_payload(request_id: Any, exc: Exception | None) -> dict[str, Any]:
    """JSON-RPC internal-error body reported when the bridge itself fails."""
    return response_to_payload(RpcResponse.internal_error(request_id, unknown_error_detail(exc)))
