"""Failures raised by the advisor bridge."""

from __future__ import annotations

from advisorbridge.utils.exceptions import AdvisorBridgeError, ErrorCategory


class BridgeError(AdvisorBridgeError):
    """Base class for advisor process communication failures."""


class StartFailedError(BridgeError):
    """The advisor could not be spawned or one of its streams was not captured."""

    def __init__(self, cause: str):
        super().__init__(
            f"Failed to start advisor: {cause}",
            code="START_FAILED",
            category=ErrorCategory.FATAL,
            details={"cause": cause},
        )


class NotRunningError(BridgeError):
    """An operation needed a live advisor generation and none exists."""

    def __init__(self) -> None:
        super().__init__("Advisor is not running", code="NOT_RUNNING", category=ErrorCategory.RECOVERABLE)


class SendFailedError(BridgeError):
    """The request could not be serialized or handed to the writer."""

    def __init__(self, cause: str):
        super().__init__(
            f"Failed to send request to advisor: {cause}",
            code="SEND_FAILED",
            category=ErrorCategory.RECOVERABLE,
            details={"cause": cause},
        )


class ReceiveFailedError(BridgeError):
    """The reader channel closed before a response arrived."""

    def __init__(self, cause: str):
        super().__init__(
            f"Failed to receive response from advisor: {cause}",
            code="RECEIVE_FAILED",
            category=ErrorCategory.RECOVERABLE,
            details={"cause": cause},
        )


class RequestTimeoutError(BridgeError):
    """No framed response arrived within the response bound."""

    def __init__(self, timeout_seconds: float):
        super().__init__(
            "Timeout waiting for advisor response",
            code="TIMEOUT",
            category=ErrorCategory.TIMEOUT,
            details={"timeout_seconds": timeout_seconds},
        )


class InvalidResponseError(BridgeError):
    """The advisor answered with JSON that is not a valid JSON-RPC response."""

    def __init__(self, cause: str):
        super().__init__(
            f"Invalid JSON response: {cause}",
            code="INVALID_RESPONSE",
            category=ErrorCategory.VALIDATION,
            details={"cause": cause},
        )
