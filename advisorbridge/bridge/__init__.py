"""Subprocess bridge to the advisor's line-oriented JSON-RPC REPL."""

from .correlator import DEFAULT_RESPONSE_TIMEOUT, RequestCorrelator
from .errors import (
    BridgeError,
    InvalidResponseError,
    NotRunningError,
    ReceiveFailedError,
    RequestTimeoutError,
    SendFailedError,
    StartFailedError,
)
from .framing import FrameBuffer, extract_message
from .protocol import JSONRPC_VERSION, RpcError, RpcRequest, RpcResponse
from .serialization import (
    decode_response_text,
    encode_request_line,
    request_from_payload,
    response_to_payload,
)
from .state import AdvisorBridge, get_bridge, reset_bridge, set_bridge
from .supervisor import DEFAULT_SETTLE_DELAY, REPL_FLAG, ProcessSupervisor

__all__ = [
    "AdvisorBridge",
    "BridgeError",
    "DEFAULT_RESPONSE_TIMEOUT",
    "DEFAULT_SETTLE_DELAY",
    "FrameBuffer",
    "InvalidResponseError",
    "JSONRPC_VERSION",
    "NotRunningError",
    "ProcessSupervisor",
    "REPL_FLAG",
    "ReceiveFailedError",
    "RequestCorrelator",
    "RequestTimeoutError",
    "RpcError",
    "RpcRequest",
    "RpcResponse",
    "SendFailedError",
    "StartFailedError",
    "decode_response_text",
    "encode_request_line",
    "extract_message",
    "get_bridge",
    "request_from_payload",
    "reset_bridge",
    "response_to_payload",
    "set_bridge",
]
