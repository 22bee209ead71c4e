"""Result accumulation for batch operations."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

from src.core.transformers import percent_complete
from src.models.batch_result import BatchResult
from src.models.item_result import Failure, ItemOutcome, Success
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ResultAccumulator:
    """Ordered successes and failures of one run, with running counters."""

    total: int
    successes: list[ItemOutcome] = field(default_factory=list)
    failures: list[ItemOutcome] = field(default_factory=list)
    total_processed: int = 0
    total_succeeded: int = 0
    total_failed: int = 0
    start_time: float = field(default_factory=time.monotonic)

    def record(self, key: str | int, result: Success | Failure) -> ItemOutcome:
        """Record one dispatched item and return its outcome entry."""
        self.total_processed += 1
        outcome = ItemOutcome.from_result(key, self.total_processed, result)
        if isinstance(result, Success):
            self.successes.append(outcome)
            self.total_succeeded += 1
        else:
            self.failures.append(outcome)
            self.total_failed += 1
        return outcome

    @property
    def elapsed_seconds(self) -> float:
        """Time elapsed since start."""
        return time.monotonic() - self.start_time

    @property
    def progress_percentage(self) -> int:
        """Floor percentage of total items processed."""
        return percent_complete(self.total_processed, self.total)

    def log_progress(self, every_n: int = 10, log: Any = None) -> None:
        """Log progress every N items."""
        if self.total_processed % every_n == 0 or self.total_processed == self.total:
            (log or logger).info(
                "batch_progress",
                processed=self.total_processed,
                total=self.total,
                successful=self.total_succeeded,
                failed=self.total_failed,
                percentage=f"{self.progress_percentage}%",
                elapsed=f"{self.elapsed_seconds:.1f}s",
            )

    def to_result(self) -> BatchResult:
        """Freeze the accumulated state into a BatchResult."""
        return BatchResult(
            successes=list(self.successes),
            failures=list(self.failures),
            total_processed=self.total_processed,
            total_succeeded=self.total_succeeded,
            total_failed=self.total_failed,
            duration_seconds=round(self.elapsed_seconds, 2),
        )
