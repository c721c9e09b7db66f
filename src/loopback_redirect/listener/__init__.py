"""Loopback OAuth redirect listener."""

from .parsing import extract_authorization_code, find_query_param
from .response import build_confirmation_response, render_confirmation_page
from .server import (
    LOOPBACK_HOST,
    RedirectListener,
    await_outcome,
    await_redirect,
    capture_outcome,
    listen_for_redirect,
)


__all__ = [
    "LOOPBACK_HOST",
    "RedirectListener",
    "await_outcome",
    "await_redirect",
    "build_confirmation_response",
    "capture_outcome",
    "extract_authorization_code",
    "find_query_param",
    "listen_for_redirect",
    "render_confirmation_page",
]
