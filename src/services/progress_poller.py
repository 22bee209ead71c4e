"""Reader-side poller that follows an operation's progress snapshot."""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING, Any

import structlog
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_result,
    stop_after_attempt,
    stop_after_delay,
    stop_never,
    wait_fixed,
)

from src.core.errors import OperationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from src.models.progress_snapshot import ProgressSnapshot
    from src.services.progress_store import ProgressStore

logger = structlog.get_logger(__name__)

MIN_INTERVAL_SECONDS = 0.5


def _still_running(snapshot: ProgressSnapshot | None) -> bool:
    return snapshot is None or not snapshot.is_terminal


def _log_poll(retry_state: RetryCallState) -> None:
    """Log each poll that did not yet see a terminal snapshot."""
    outcome = retry_state.outcome
    snapshot = outcome.result() if outcome is not None and not outcome.failed else None
    logger.debug(
        "progress_poll_waiting",
        attempt=retry_state.attempt_number,
        status=str(snapshot.status) if snapshot is not None else "absent",
        progress=snapshot.progress if snapshot is not None else None,
    )


class ProgressPoller:
    """Polls a ProgressStore and fires callbacks on change and on completion.

    An absent snapshot means the operation has not started yet (or was
    cleaned up) and is not an error. Identical consecutive snapshots do not
    re-fire on_update. The first terminal snapshot fires on_complete and
    stops the poller.
    """

    def __init__(
        self,
        store: ProgressStore,
        on_update: Callable[[ProgressSnapshot], None] | None = None,
        on_complete: Callable[[ProgressSnapshot], None] | None = None,
        interval: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.store = store
        self.on_update = on_update
        self.on_complete = on_complete
        self._interval = max(MIN_INTERVAL_SECONDS, float(interval))
        self._sleep = sleep
        self._active = False
        self._last_key: str | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        self._interval = max(MIN_INTERVAL_SECONDS, float(value))

    def is_active(self) -> bool:
        return self._active

    def stop(self) -> None:
        self._active = False

    def poll(self) -> ProgressSnapshot | None:
        """Read the snapshot once and dispatch callbacks if it changed."""
        snapshot = self.store.get_current_progress()
        if snapshot is None:
            return None

        key = json.dumps(snapshot.to_record(), sort_keys=True, default=str)
        if key == self._last_key:
            return snapshot
        self._last_key = key

        if snapshot.is_terminal:
            self.stop()
            self._dispatch(self.on_complete, snapshot)
        else:
            self._dispatch(self.on_update, snapshot)
        return snapshot

    def wait_for_completion(
        self,
        timeout: float | None = None,
        stale_after: float | None = None,
        max_polls: int | None = None,
    ) -> ProgressSnapshot:
        """Poll until the operation completes or fails.

        Raises OperationError when timeout or max_polls is exhausted, or when
        a running operation's snapshot is older than stale_after seconds.
        """
        stop = stop_after_delay(timeout) if timeout is not None else stop_never
        if max_polls is not None:
            stop = stop | stop_after_attempt(max(1, max_polls))

        retrying = Retrying(
            stop=stop,
            wait=wait_fixed(self._interval),
            retry=retry_if_result(_still_running),
            after=_log_poll,
            sleep=self._sleep,
        )

        self._active = True
        try:
            snapshot = retrying(self._poll_checked, stale_after)
        except RetryError as exc:
            last = exc.last_attempt.result() if not exc.last_attempt.failed else None
            raise OperationError(
                "Timed out waiting for operation to complete",
                {
                    "operation_id": self.store.operation_id,
                    "timeout": timeout,
                    "last_status": str(last.status) if last is not None else None,
                },
                cause=exc,
            ) from exc
        finally:
            self._active = False
        return snapshot

    def debug_info(self) -> dict[str, Any]:
        """Diagnostic view of the poller state."""
        return {
            "operation_id": self.store.operation_id,
            "snapshot_path": str(self.store.snapshot_path),
            "is_polling": self._active,
            "interval_seconds": self._interval,
            "has_update_callback": callable(self.on_update),
            "has_complete_callback": callable(self.on_complete),
            "last_snapshot": self._last_key,
        }

    def _poll_checked(self, stale_after: float | None) -> ProgressSnapshot | None:
        snapshot = self.poll()
        if (
            stale_after is not None
            and snapshot is not None
            and not snapshot.is_terminal
            and snapshot.age_seconds() > stale_after
        ):
            raise OperationError(
                "Operation appears stalled",
                {
                    "operation_id": self.store.operation_id,
                    "status": str(snapshot.status),
                    "age_seconds": round(snapshot.age_seconds(), 1),
                },
            )
        return snapshot

    def _dispatch(
        self,
        callback: Callable[[ProgressSnapshot], None] | None,
        snapshot: ProgressSnapshot,
    ) -> None:
        if callback is None:
            return
        try:
            callback(snapshot)
        except Exception as exc:
            logger.warning(
                "progress_poll_callback_failed",
                operation_id=self.store.operation_id,
                error=str(exc),
            )
