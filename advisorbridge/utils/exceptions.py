"""
Exception hierarchy and error handling utilities for advisorbridge.

Provides:
- Base exception class with error codes and categories
- Error categorization (recoverable, fatal, timeout, ...)
- Safe error message formatting (no sensitive data leak)
"""

from __future__ import annotations

import json
import re
import subprocess
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    RECOVERABLE = "recoverable"
    FATAL = "fatal"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"


class AdvisorBridgeError(Exception):
    """Base exception for all advisorbridge errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return self.message


class StorageError(AdvisorBridgeError):
    """Local data file could not be read or written."""

    def __init__(self, filename: str, message: str):
        super().__init__(
            f"Storage error for '{filename}': {message}",
            code="STORAGE_ERROR",
            category=ErrorCategory.FATAL,
            details={"filename": filename},
        )


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"[a-zA-Z0-9]{32,}"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove sensitive information from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: Exception) -> tuple[str, ErrorCategory]:
    """
    Classify an exception and return (error_code, category).

    Bridge errors carry their own code; everything else is mapped by type
    and, as a last resort, by message text.
    """
    if isinstance(exc, AdvisorBridgeError):
        return exc.code, exc.category

    if isinstance(exc, FileNotFoundError):
        return "FILE_NOT_FOUND", ErrorCategory.NOT_FOUND

    if isinstance(exc, subprocess.TimeoutExpired):
        return "TIMEOUT", ErrorCategory.TIMEOUT

    if isinstance(exc, (BrokenPipeError, ConnectionError)):
        return "CONNECTION_ERROR", ErrorCategory.RECOVERABLE

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.VALIDATION

    if isinstance(exc, (ValueError, TypeError, KeyError)):
        return "INVALID_VALUE", ErrorCategory.VALIDATION

    exc_str = str(exc).lower()
    if "timeout" in exc_str or "timed out" in exc_str:
        return "TIMEOUT", ErrorCategory.TIMEOUT

    if "not found" in exc_str:
        return "NOT_FOUND", ErrorCategory.NOT_FOUND

    return "INTERNAL_ERROR", ErrorCategory.FATAL
