"""Progress snapshot model persisted for out-of-band pollers."""

from __future__ import annotations

import time
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProgressStatus(StrEnum):
    """Lifecycle status of an operation as seen by pollers."""

    STARTING = "starting"
    PROCESSING = "processing"
    COMPLETE = "complete"
    ERROR = "error"
    WARNING = "warning"


TERMINAL_STATUSES = frozenset({ProgressStatus.COMPLETE, ProgressStatus.ERROR})


class ProgressSnapshot(BaseModel):
    """The single overwritable status record of one operation.

    Self-describing: status alone tells a reader whether the operation is
    running, finished or failed. Keys beyond the declared fields are kept.
    """

    model_config = ConfigDict(extra="allow")

    status: ProgressStatus = ProgressStatus.PROCESSING
    progress: int = Field(default=0, ge=0, le=100)
    message: str = ""
    details: str = ""
    timestamp: float = Field(default_factory=time.time)
    results: Any = None
    summary: dict[str, int] | None = None
    error: str | None = None
    error_data: Any = None
    warning: str | None = None
    warning_data: Any = None
    started_at: float | None = None
    completed_at: float | None = None
    failed_at: float | None = None
    warned_at: float | None = None

    @property
    def is_terminal(self) -> bool:
        """True once the operation has completed or failed."""
        return self.status in TERMINAL_STATUSES

    def age_seconds(self, now: float | None = None) -> float:
        """Seconds elapsed since this snapshot was written."""
        return (now if now is not None else time.time()) - self.timestamp

    def to_record(self) -> dict[str, Any]:
        """Wire form: the snapshot's fields without unset optional keys."""
        return self.model_dump(mode="json", exclude_none=True)
