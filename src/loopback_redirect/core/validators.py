"""Pydantic-based validation types shared by models and settings."""

from typing import Annotated

from pydantic import Field


__all__ = [
    "Port",
    "NonNegativeTimeout",
    "PositiveTimeout",
    "NonEmptyStr",
]


# Custom annotated types using Pydantic Field constraints
Port = Annotated[int, Field(ge=1, le=65535, description="TCP port number")]
NonNegativeTimeout = Annotated[
    float, Field(ge=0, description="Timeout value in seconds (0 polls once)")
]
PositiveTimeout = Annotated[float, Field(gt=0, description="Timeout value in seconds")]
NonEmptyStr = Annotated[str, Field(min_length=1, description="Non-empty string")]
