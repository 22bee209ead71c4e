"""Chunked batch executor with out-of-band progress reporting."""

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from src.core.chunking import DEFAULT_CHUNK_SIZE, chunk_items, clamp_chunk_size, normalize_items
from src.core.errors import OperationError
from src.core.transformers import classify_result, describe_item, percent_complete
from src.models.item_result import Failure, Success
from src.models.progress_snapshot import ProgressStatus
from src.utils.progress import ResultAccumulator

if TYPE_CHECKING:
    from collections.abc import Callable

    from src.models.batch_result import BatchResult
    from src.services.progress_store import ProgressStore

DEFAULT_ITEM_DELAY = 0.1
DEFAULT_CHUNK_DELAY = 1.0


class ItemProcessor(Protocol):
    """Processes one work item. position is 1-based; total is the batch size."""

    def __call__(self, item: Any, position: int, total: int) -> Success | Failure | Any: ...


class ProgressCallback(Protocol):
    """Notified after every item with the running count and the item's result."""

    def __call__(
        self,
        processed: int,
        total: int,
        item: Any,
        result: Success | Failure,
    ) -> None: ...


class BatchExecutor:
    """Runs work items through a processor in chunks, reporting to a ProgressStore.

    Items run strictly in order, one at a time. A processor that raises or
    returns a failure marks that item failed and the run moves on; only
    invalid input aborts before the first snapshot is written.
    """

    def __init__(
        self,
        store: ProgressStore,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        progress_callback: ProgressCallback | None = None,
        item_delay: float = DEFAULT_ITEM_DELAY,
        chunk_delay: float = DEFAULT_CHUNK_DELAY,
        logger: Any = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._store = store
        self.chunk_size = clamp_chunk_size(chunk_size)
        self._progress_callback = progress_callback if callable(progress_callback) else None
        self.item_delay = max(0.0, float(item_delay))
        self.chunk_delay = max(0.0, float(chunk_delay))
        self._logger = logger if logger is not None else structlog.get_logger(__name__)
        self._sleep = sleep

    @property
    def progress_store(self) -> ProgressStore:
        return self._store

    @property
    def progress_callback(self) -> ProgressCallback | None:
        return self._progress_callback

    def set_chunk_size(self, chunk_size: Any) -> None:
        """Change the chunk size; values below 1 are clamped to 1."""
        self.chunk_size = clamp_chunk_size(chunk_size)

    def set_progress_callback(self, callback: ProgressCallback | None) -> None:
        """Register (or clear, with None) the per-item progress callback."""
        if callback is None or callable(callback):
            self._progress_callback = callback

    def process_items(
        self,
        items: Mapping[str | int, Any] | Sequence[Any],
        processor: ItemProcessor,
        operation_name: str = "Processing",
    ) -> BatchResult:
        """Process every item and return the accumulated results.

        Raises OperationError, before any snapshot is written, when items is
        empty or not a collection, or when processor is not callable.
        """
        pairs = self._validate(items, processor)
        total = len(pairs)
        chunks = chunk_items(pairs, self.chunk_size)
        accumulator = ResultAccumulator(total=total)

        self._logger.info(
            "batch_started",
            operation=operation_name,
            operation_id=self._store.operation_id,
            total=total,
            chunks=len(chunks),
            chunk_size=self.chunk_size,
        )
        self._store.initialize_progress(
            operation_name,
            {"details": f"Processing {total} items in batches of {self.chunk_size}"},
        )

        for chunk_index, chunk in enumerate(chunks):
            batch_label = f"Processing batch {chunk_index + 1}/{len(chunks)}"
            self._store.update_progress(
                {
                    "status": ProgressStatus.PROCESSING,
                    "progress": accumulator.progress_percentage,
                    "message": f"{operation_name}: {batch_label}",
                    "details": f"Batch contains {len(chunk)} items",
                }
            )

            for key, item in chunk:
                self._process_one(key, item, processor, operation_name, accumulator)
                if self.item_delay:
                    self._sleep(self.item_delay)

            if self.chunk_delay and chunk_index < len(chunks) - 1:
                self._sleep(self.chunk_delay)

        result = accumulator.to_result()
        self._store.send_completion(result)

        self._logger.info(
            "batch_completed",
            operation=operation_name,
            operation_id=self._store.operation_id,
            succeeded=result.total_succeeded,
            failed=result.total_failed,
            duration_seconds=result.duration_seconds,
        )
        return result

    def _validate(self, items: Any, processor: Any) -> list[tuple[str | int, Any]]:
        try:
            pairs = normalize_items(items)
        except TypeError as exc:
            raise OperationError(
                "Items must be a mapping or sequence",
                {"items_type": type(items).__name__},
                cause=exc,
            ) from exc
        if not pairs:
            raise OperationError("No items to process", {"operation_id": self._store.operation_id})
        if not callable(processor):
            raise OperationError(
                "Invalid processor function",
                {"processor_type": type(processor).__name__},
            )
        return pairs

    def _process_one(
        self,
        key: str | int,
        item: Any,
        processor: ItemProcessor,
        operation_name: str,
        accumulator: ResultAccumulator,
    ) -> None:
        position = accumulator.total_processed + 1
        total = accumulator.total

        try:
            result = classify_result(processor(item, position, total))
        except OperationError as exc:
            exc.add_context("item_key", key)
            self._logger.error("batch_item_failed", item=str(key)[:100], error=exc.message)
            result = Failure(reason=exc.message or type(exc).__name__, error_data=exc.to_dict())
        except Exception as exc:
            self._logger.error("batch_item_failed", item=str(key)[:100], error=str(exc))
            result = Failure(reason=str(exc) or type(exc).__name__)

        accumulator.record(key, result)

        self._store.update_progress(
            {
                "status": ProgressStatus.PROCESSING,
                "progress": percent_complete(accumulator.total_processed, total),
                "message": f"{operation_name}: {describe_item(item, position, total)}",
                "details": f"Progress: {accumulator.total_processed}/{total} items processed",
            }
        )
        accumulator.log_progress(every_n=10, log=self._logger)

        if self._progress_callback is not None:
            try:
                self._progress_callback(accumulator.total_processed, total, item, result)
            except Exception as exc:
                self._logger.warning(
                    "progress_callback_failed",
                    item=str(key)[:100],
                    error=str(exc),
                )
