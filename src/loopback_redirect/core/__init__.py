"""Core helpers for the loopback redirect listener."""

from loopback_redirect.core.async_utils import run_in_executor
from loopback_redirect.core.logging import configure_logging
from loopback_redirect.core.validators import (
    NonEmptyStr,
    NonNegativeTimeout,
    Port,
    PositiveTimeout,
)


__all__ = [
    "run_in_executor",
    "configure_logging",
    "Port",
    "NonNegativeTimeout",
    "PositiveTimeout",
    "NonEmptyStr",
]
