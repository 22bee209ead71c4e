"""Batch result models returned by the executor and stored on completion."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from src.models.item_result import ItemOutcome


class BatchResult(BaseModel):
    """Outcome of a single process_items run.

    result_kind tags the shape so the progress store never has to infer it.
    """

    result_kind: Literal["flat"] = "flat"
    successes: list[ItemOutcome] = Field(default_factory=list)
    failures: list[ItemOutcome] = Field(default_factory=list)
    total_processed: int = 0
    total_succeeded: int = 0
    total_failed: int = 0
    duration_seconds: float = 0.0

    @model_validator(mode="after")
    def validate_counters(self) -> BatchResult:
        """Succeeded plus failed must equal processed."""
        if self.total_succeeded + self.total_failed != self.total_processed:
            msg = "total_succeeded + total_failed must equal total_processed"
            raise ValueError(msg)
        return self

    @property
    def errors(self) -> list[str]:
        """Failure reasons prefixed with their item key."""
        return [f"{outcome.key}: {outcome.reason}" for outcome in self.failures]


class PhaseResult(BaseModel):
    """Results of one named phase of a multi-phase operation."""

    successful: list[Any] = Field(default_factory=list)
    failed: list[Any] = Field(default_factory=list)


class PhasedResults(BaseModel):
    """Results of an operation made of several named phases.

    Example: a plugin reinstall with separate 'wordpress_org' and
    'wpmu_dev' phases, each listing its own successes and failures.
    """

    result_kind: Literal["multi_phase"] = "multi_phase"
    phases: dict[str, PhaseResult] = Field(default_factory=dict)

    @property
    def total_successful(self) -> int:
        return sum(len(phase.successful) for phase in self.phases.values())

    @property
    def total_failed(self) -> int:
        return sum(len(phase.failed) for phase in self.phases.values())
