"""Single-flight request/response exchange with the advisor."""

from __future__ import annotations

from loguru import logger

from .channel import ChannelClosed, ChannelTimeout
from .errors import (
    InvalidResponseError,
    NotRunningError,
    ReceiveFailedError,
    RequestTimeoutError,
    SendFailedError,
)
from .protocol import RpcRequest, RpcResponse
from .serialization import decode_response_text, encode_request_line
from .supervisor import ProcessSupervisor

DEFAULT_RESPONSE_TIMEOUT = 30.0


class RequestCorrelator:
    """Pairs each request with the next message the advisor frames.

    There is no id matching: callers must never have more than one request
    outstanding against the same supervisor (AdvisorBridge enforces this).
    """

    def __init__(self, supervisor: ProcessSupervisor, *, response_timeout: float = DEFAULT_RESPONSE_TIMEOUT):
        self.supervisor = supervisor
        self.response_timeout = response_timeout

    def send_request(self, request: RpcRequest) -> RpcResponse:
        if not self.supervisor.is_running():
            self.supervisor.start()

        outgoing = self.supervisor.outgoing
        incoming = self.supervisor.incoming
        if outgoing is None or incoming is None:
            raise NotRunningError()

        try:
            line = encode_request_line(request)
        except (TypeError, ValueError) as exc:
            raise SendFailedError(str(exc)) from exc

        # Anything already framed answers a request that timed out earlier.
        stale = incoming.drain()
        if stale:
            logger.warning("Discarding {} late advisor message(s) from a timed-out request", len(stale))

        logger.debug("Sending to advisor: {}", line)
        try:
            outgoing.send(line + "\n")
        except ChannelClosed as exc:
            raise SendFailedError(str(exc)) from exc

        try:
            text = incoming.recv(timeout=self.response_timeout)
        except ChannelTimeout as exc:
            raise RequestTimeoutError(self.response_timeout) from exc
        except ChannelClosed as exc:
            raise ReceiveFailedError("advisor disconnected") from exc

        logger.debug("Received from advisor: {}", text)
        try:
            return decode_response_text(text)
        except ValueError as exc:
            raise InvalidResponseError(str(exc)) from exc
