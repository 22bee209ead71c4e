"""Batch verification of files against a checksum baseline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from src.domains.integrity.core.baseline import collect_files, compare_file

if TYPE_CHECKING:
    from pathlib import Path

    from src.models.batch_result import BatchResult
    from src.models.item_result import Failure, Success
    from src.services.batch_processor import BatchExecutor, ProgressCallback

logger = structlog.get_logger(__name__)


@dataclass
class VerificationReport:
    """Batch result of a verification plus files the baseline does not know."""

    result: BatchResult
    unexpected_files: list[str] = field(default_factory=list)


class FileVerifier:
    """Verifies a directory against a baseline using a BatchExecutor.

    Installs its own progress callback on the executor for the duration of
    verify() to publish a warning snapshot when the directory holds files
    absent from the baseline. A callback already registered on the executor
    keeps firing after every item and is restored afterwards.
    """

    def __init__(self, executor: BatchExecutor) -> None:
        self.executor = executor
        self._unexpected: list[str] = []
        self._warned = False
        self._chained: ProgressCallback | None = None

    def verify(self, root: Path, baseline: dict[str, str]) -> VerificationReport:
        """Compare every baseline entry with the file on disk.

        Raises OperationError when the baseline is empty.
        """
        self._unexpected = sorted(set(collect_files(root)) - set(baseline))
        self._warned = False
        self._chained = self.executor.progress_callback

        items = {
            relative: {"name": relative, "expected": expected}
            for relative, expected in sorted(baseline.items())
        }

        def process(item: dict[str, Any], position: int, total: int) -> Success | Failure:
            return compare_file(root, item["name"], item["expected"])

        self.executor.set_progress_callback(self._on_progress)
        try:
            result = self.executor.process_items(items, process, "Verifying files")
        finally:
            self.executor.set_progress_callback(self._chained)
            self._chained = None

        logger.info(
            "verification_complete",
            root=str(root),
            verified=result.total_succeeded,
            mismatched=result.total_failed,
            unexpected=len(self._unexpected),
        )
        return VerificationReport(result=result, unexpected_files=list(self._unexpected))

    def _on_progress(
        self, processed: int, total: int, item: Any, result: Success | Failure
    ) -> None:
        if self._unexpected and not self._warned:
            self._warned = True
            self.executor.progress_store.send_warning(
                f"{len(self._unexpected)} file(s) not in baseline",
                {"files": self._unexpected[:50]},
            )
        if self._chained is not None:
            self._chained(processed, total, item, result)
