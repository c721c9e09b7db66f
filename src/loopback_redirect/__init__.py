"""Single-use loopback listener for OAuth authorization-code redirects."""

from ._version import __version__
from .exceptions import (
    AcceptError,
    BindError,
    ErrorType,
    MalformedRedirectError,
    RedirectIOError,
    RedirectListenerError,
    RedirectTimeoutError,
    RequestReadError,
)
from .listener import (
    RedirectListener,
    await_outcome,
    await_redirect,
    build_confirmation_response,
    capture_outcome,
    extract_authorization_code,
    listen_for_redirect,
)
from .models import CodeReceived, IoFailure, Outcome, RedirectRequest, TimedOut


__all__ = [
    "__version__",
    "AcceptError",
    "BindError",
    "CodeReceived",
    "ErrorType",
    "IoFailure",
    "MalformedRedirectError",
    "Outcome",
    "RedirectIOError",
    "RedirectListener",
    "RedirectListenerError",
    "RedirectRequest",
    "RedirectTimeoutError",
    "RequestReadError",
    "TimedOut",
    "await_outcome",
    "await_redirect",
    "build_confirmation_response",
    "capture_outcome",
    "extract_authorization_code",
    "listen_for_redirect",
]
