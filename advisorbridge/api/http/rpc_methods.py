"""Helpers for the advisor RPC HTTP endpoints.

Each helper runs a blocking bridge call and returns ``(status_code, body)``;
the route functions only move the call off the event loop.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from advisorbridge.api.http.error_helpers import rpc_internal_error_payload, unknown_error_detail
from advisorbridge.bridge import AdvisorBridge, BridgeError, RpcRequest, response_to_payload

HttpResult = tuple[int, dict[str, Any]]


def rpc_response(bridge: AdvisorBridge, request: RpcRequest) -> HttpResult:
    try:
        response = bridge.send_request(request)
    except BridgeError as exc:
        logger.error("RPC error: {}", exc)
        return 500, rpc_internal_error_payload(request.id, exc)
    return 200, response_to_payload(response)


def ping_response(bridge: AdvisorBridge) -> HttpResult:
    try:
        response = bridge.ping()
    except BridgeError as exc:
        logger.error("Ping failed: {}", exc)
        return 500, {"detail": unknown_error_detail(exc)}
    return 200, response_to_payload(response)


def restart_response(bridge: AdvisorBridge) -> HttpResult:
    try:
        bridge.restart()
    except BridgeError as exc:
        logger.error("Restart failed: {}", exc)
        return 500, {"ok": False, "detail": unknown_error_detail(exc)}
    return 200, {"ok": True, **bridge.health_check()}


def health_response(bridge: AdvisorBridge | None) -> dict[str, Any]:
    if bridge is None:
        return {"status": "ok", "bridgeState": "stopped"}
    return bridge.health_check()
