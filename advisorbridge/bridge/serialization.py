"""Serialization helpers for advisor RPC frames."""

from __future__ import annotations

import json
from typing import Any

from .protocol import JSONRPC_VERSION, RpcError, RpcRequest, RpcResponse

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


def _is_valid_id(value: Any) -> bool:
    return isinstance(value, (int, float, str)) and not isinstance(value, bool)


def request_to_payload(request: RpcRequest) -> dict[str, Any]:
    return {
        "jsonrpc": request.jsonrpc,
        "method": request.method,
        "params": request.params,
        "id": request.id,
    }


def encode_request_line(request: RpcRequest) -> str:
    """Encode a request frame into one line of compact JSON (no trailing newline).

    Raises TypeError/ValueError when params hold values JSON cannot represent.
    """
    return json.dumps(
        request_to_payload(request),
        ensure_ascii=False,
        separators=(",", ":"),
        allow_nan=False,
    )


def request_from_payload(payload: Any) -> RpcRequest:
    """Build a request from a caller-supplied dict, rejecting malformed frames with ValueError."""
    if not isinstance(payload, dict):
        raise ValueError("request must be a JSON object")
    method = payload.get("method")
    if not isinstance(method, str) or not method:
        raise ValueError("request.method must be a non-empty string")
    req_id = payload.get("id")
    if not _is_valid_id(req_id):
        raise ValueError("request.id must be a number or a string")
    version = payload.get("jsonrpc", JSONRPC_VERSION)
    if not isinstance(version, str):
        raise ValueError("request.jsonrpc must be a string")
    params = payload.get("params")
    return RpcRequest(
        method=method,
        id=req_id,
        params={} if params is None else params,
        jsonrpc=version,
    )


def decode_request_line(line: str) -> RpcRequest:
    return request_from_payload(json.loads(line))


def _decode_error(raw: Any) -> RpcError:
    if not isinstance(raw, dict):
        raise ValueError("error must be an object")
    code = raw.get("code")
    if not isinstance(code, int) or isinstance(code, bool) or not _INT32_MIN <= code <= _INT32_MAX:
        raise ValueError("error.code must be a 32-bit integer")
    message = raw.get("message")
    if not isinstance(message, str):
        raise ValueError("error.message must be a string")
    return RpcError(code=code, message=message, data=raw.get("data"))


def response_from_payload(payload: Any) -> RpcResponse:
    """Validate a parsed JSON value as a response frame, raising ValueError on violations."""
    if not isinstance(payload, dict):
        raise ValueError("response must be a JSON object")
    version = payload.get("jsonrpc")
    if not isinstance(version, str):
        raise ValueError("response.jsonrpc must be a string")
    if "id" not in payload:
        raise ValueError("response.id is required")
    has_result = "result" in payload
    has_error = "error" in payload and payload["error"] is not None
    if has_result and has_error:
        raise ValueError("response carries both result and error")
    if not has_result and not has_error:
        raise ValueError("response carries neither result nor error")
    if has_error:
        return RpcResponse(
            id=payload["id"],
            error=_decode_error(payload["error"]),
            jsonrpc=version,
        )
    return RpcResponse(id=payload["id"], result=payload["result"], jsonrpc=version)


def decode_response_text(text: str) -> RpcResponse:
    """Parse one framed message into a response (ValueError on bad JSON or schema)."""
    return response_from_payload(json.loads(text))


def response_to_payload(response: RpcResponse) -> dict[str, Any]:
    """Dump a response, omitting the absent member."""
    payload: dict[str, Any] = {"jsonrpc": response.jsonrpc}
    if response.error is not None:
        error: dict[str, Any] = {"code": response.error.code, "message": response.error.message}
        if response.error.data is not None:
            error["data"] = response.error.data
        payload["error"] = error
    else:
        payload["result"] = response.result
    payload["id"] = response.id
    return payload
