"""Serialized error record that crosses the snapshot boundary."""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProcessingError(BaseModel):
    """Plain-record form of an OperationError.

    Missing fields default to safe empties so that partially written or
    hand-built records can still be rebuilt into a usable error.
    """

    model_config = ConfigDict(extra="ignore")

    message: str = "Unknown error"
    code: int = 0
    location: str = ""
    context: dict[str, Any] = Field(default_factory=dict)
    timestamp: float = Field(default_factory=time.time)

    @field_validator("message", mode="before")
    @classmethod
    def validate_message(cls, value: Any) -> str:
        """Empty or missing messages fall back to a generic one."""
        if value is None or (isinstance(value, str) and not value.strip()):
            return "Unknown error"
        return str(value)

    @field_validator("code", mode="before")
    @classmethod
    def validate_code(cls, value: Any) -> int:
        """Codes that are not integers collapse to 0."""
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0

    @field_validator("context", mode="before")
    @classmethod
    def validate_context(cls, value: Any) -> dict[str, Any]:
        """Context must be a mapping; anything else becomes empty."""
        if isinstance(value, dict):
            return value
        return {}

    @field_validator("location", mode="before")
    @classmethod
    def validate_location(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("timestamp", mode="before")
    @classmethod
    def validate_timestamp(cls, value: Any) -> float:
        """Unparseable timestamps are replaced with the current time."""
        try:
            return float(value)
        except (TypeError, ValueError):
            return time.time()
