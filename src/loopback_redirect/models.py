"""Request and outcome types for a single redirect wait."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from loopback_redirect.core.validators import NonNegativeTimeout, Port
from loopback_redirect.exceptions import ErrorType


class RedirectRequest(BaseModel):
    """Parameters of one listener invocation.

    Owned by a single call; nothing about it outlives the call.
    """

    model_config = ConfigDict(frozen=True)

    port: Port
    timeout_seconds: NonNegativeTimeout


@dataclass(frozen=True, slots=True)
class CodeReceived:
    """The redirect carried an authorization code."""

    code: str


@dataclass(frozen=True, slots=True)
class TimedOut:
    """No usable connection arrived before the deadline."""

    timeout_seconds: float


@dataclass(frozen=True, slots=True)
class IoFailure:
    """Binding, accepting, reading or parsing failed."""

    message: str
    error_type: ErrorType


Outcome = CodeReceived | TimedOut | IoFailure


__all__ = [
    "RedirectRequest",
    "CodeReceived",
    "TimedOut",
    "IoFailure",
    "Outcome",
]
