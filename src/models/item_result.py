"""Per-item processing results."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class Success(BaseModel):
    """A processor call that succeeded, with an optional payload."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    payload: Any = None


class Failure(BaseModel):
    """A processor call that failed, with a human-readable reason."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    reason: str = "Processing failed"
    error_data: dict[str, Any] | None = None


ItemResult = Annotated[Success | Failure, Field(discriminator="kind")]


class ItemOutcome(BaseModel):
    """One classified entry in a batch result, tied to its work item key."""

    key: str | int
    position: int
    payload: Any = None
    reason: str | None = None
    error_data: dict[str, Any] | None = None

    @classmethod
    def from_result(cls, key: str | int, position: int, result: Success | Failure) -> ItemOutcome:
        if isinstance(result, Success):
            return cls(key=key, position=position, payload=result.payload)
        return cls(key=key, position=position, reason=result.reason, error_data=result.error_data)
