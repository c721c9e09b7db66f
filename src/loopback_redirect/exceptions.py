"""Exception hierarchy for the loopback redirect listener.

All exceptions use proper exception chaining with the `from` keyword.
Error types use StrEnum so callers can tell a timeout from a bad redirect
from a port that could not be opened.
"""

from enum import StrEnum
from typing import Any


class ErrorType(StrEnum):
    """Error type codes reported by the listener."""

    BIND_FAILURE = "bind_failure"
    ACCEPT_FAILURE = "accept_failure"
    READ_FAILURE = "read_failure"
    MALFORMED_REDIRECT = "malformed_redirect"
    TIMEOUT = "timeout"
    CONFIGURATION = "configuration_error"
    INTERNAL = "internal_error"


# ============================================================================
# Base Exceptions
# ============================================================================


class RedirectListenerError(Exception):
    """Base exception for all listener errors."""

    default_error_type: ErrorType = ErrorType.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        error_type: ErrorType | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type or self.default_error_type
        self.details = details or {}


class ConfigurationError(RedirectListenerError):
    """Raised when configuration loading or validation fails."""

    default_error_type = ErrorType.CONFIGURATION


# ============================================================================
# Timeout
# ============================================================================


class RedirectTimeoutError(RedirectListenerError):
    """No usable connection arrived before the deadline."""

    default_error_type = ErrorType.TIMEOUT

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(
            "Timed out waiting for OAuth redirect",
            details={"timeout_seconds": timeout_seconds},
        )
        self.timeout_seconds = timeout_seconds


# ============================================================================
# IO Failures
# ============================================================================


class RedirectIOError(RedirectListenerError):
    """Base class for failures that end the call before a code is captured."""

    pass


class BindError(RedirectIOError):
    """The loopback port could not be bound (in use, not permitted)."""

    default_error_type = ErrorType.BIND_FAILURE

    def __init__(self, port: int, reason: str) -> None:
        super().__init__(f"Failed to bind: {reason}", details={"port": port})
        self.port = port


class AcceptError(RedirectIOError):
    """Accepting the incoming connection failed."""

    default_error_type = ErrorType.ACCEPT_FAILURE

    def __init__(self, reason: str) -> None:
        super().__init__(f"Accept error: {reason}")


class RequestReadError(RedirectIOError):
    """The request line of the accepted connection could not be read."""

    default_error_type = ErrorType.READ_FAILURE

    def __init__(self, reason: str) -> None:
        super().__init__(f"Read error: {reason}")


class MalformedRedirectError(RedirectIOError):
    """The request line did not carry a usable ``code`` query parameter."""

    default_error_type = ErrorType.MALFORMED_REDIRECT

    def __init__(
        self,
        message: str = "No auth code in redirect",
        *,
        request_line: str | None = None,
    ) -> None:
        super().__init__(message)
        self.request_line = request_line


__all__ = [
    "ErrorType",
    "RedirectListenerError",
    "ConfigurationError",
    "RedirectTimeoutError",
    "RedirectIOError",
    "BindError",
    "AcceptError",
    "RequestReadError",
    "MalformedRedirectError",
]
