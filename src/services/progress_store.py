"""File-backed progress snapshot store for long-running operations."""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel

from src.core.errors import OperationError
from src.core.result_aggregation import (
    RESULT_KIND_AMBIGUOUS,
    completion_message,
    detect_result_kind,
    summarize_results,
)
from src.models.progress_snapshot import ProgressSnapshot, ProgressStatus
from src.utils.validators import is_valid_operation_id

logger = structlog.get_logger(__name__)

SNAPSHOT_SUFFIX = ".progress"
TEMP_SUFFIX = ".tmp"


def _to_plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, OperationError):
        return value.to_dict()
    return value


def _json_key(key: Any) -> Any:
    if key is None or isinstance(key, (str, int, float, bool)):
        return key
    return str(key)


def _json_safe(value: Any) -> Any:
    """Stringify mapping keys JSON cannot encode; sets and tuples become lists."""
    if isinstance(value, Mapping):
        return {_json_key(key): _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_json_safe(item) for item in value]
    return value


class ProgressStore:
    """Owns the single persisted status snapshot of one operation.

    The snapshot lives at <progress_dir>/<operation_id>.progress and is
    replaced atomically on every write, so a concurrent reader sees either
    the previous snapshot or the next one. Write and read failures are
    logged and reported as False / None; nothing raises to the caller.

    One writer per operation id is assumed and not enforced.
    """

    def __init__(
        self,
        operation_id: str,
        progress_dir: str | Path = "data/progress",
        logger: Any = None,
    ) -> None:
        if not isinstance(operation_id, str) or not is_valid_operation_id(operation_id):
            msg = (
                "operation_id must be 1-128 characters of letters, digits, '.', '_' or '-' "
                "and start with a letter or digit"
            )
            raise ValueError(msg)
        self.operation_id = operation_id
        self.progress_dir = Path(progress_dir)
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @property
    def snapshot_path(self) -> Path:
        """Full path of the snapshot file."""
        return self.progress_dir / f"{self.operation_id}{SNAPSHOT_SUFFIX}"

    # --- Writers ---

    def update_progress(self, fields: dict[str, Any] | None = None) -> bool:
        """Merge fields over the default template and persist the snapshot."""
        fields = dict(fields or {})
        data: dict[str, Any] = {
            "timestamp": time.time(),
            "status": ProgressStatus.PROCESSING,
            "progress": 0,
            "message": "",
            "details": "",
        }
        data.update(fields)

        try:
            snapshot = ProgressSnapshot.model_validate(data)
            self._write(snapshot)
        except Exception as exc:
            self._logger.error(
                "progress_write_failed",
                operation_id=self.operation_id,
                path=str(self.snapshot_path),
                error=str(exc),
            )
            return False

        progress = fields.get("progress")
        if isinstance(progress, int) and progress % 25 == 0:
            self._logger.info(
                "progress_milestone",
                operation_id=self.operation_id,
                progress=progress,
                message=snapshot.message,
            )
        return True

    def initialize_progress(
        self,
        operation_name: str,
        initial: dict[str, Any] | None = None,
    ) -> bool:
        """Write the 'starting' snapshot of an operation."""
        data: dict[str, Any] = {
            "status": ProgressStatus.STARTING,
            "progress": 0,
            "message": f"Initializing {operation_name}...",
            "details": "Preparing operation",
            "started_at": time.time(),
        }
        data.update(initial or {})
        self._logger.info(
            "progress_initialized",
            operation_id=self.operation_id,
            operation=operation_name,
        )
        return self.update_progress(data)

    def send_completion(self, results: Any) -> bool:
        """Write the terminal 'complete' snapshot with results and a summary."""
        summary: dict[str, int] | None = None
        try:
            kind = detect_result_kind(results)
            if kind == RESULT_KIND_AMBIGUOUS:
                self._logger.warning(
                    "ambiguous_result_shape",
                    operation_id=self.operation_id,
                    resolved_as="flat",
                )
            summary = summarize_results(results, kind)
        except Exception as exc:
            self._logger.error(
                "completion_summary_failed",
                operation_id=self.operation_id,
                error=str(exc),
            )

        data: dict[str, Any] = {
            "status": ProgressStatus.COMPLETE,
            "progress": 100,
            "message": completion_message(summary),
            "completed_at": time.time(),
        }
        if summary is not None:
            data["summary"] = summary
        try:
            data["results"] = _json_safe(_to_plain(results))
        except Exception as exc:
            self._logger.warning(
                "completion_results_unserializable",
                operation_id=self.operation_id,
                error=str(exc),
            )

        self._logger.info(
            "progress_completion",
            operation_id=self.operation_id,
            message=data["message"],
        )
        if self.update_progress(data):
            return True
        if "results" not in data:
            return False

        # Retry without results so the snapshot still reaches a terminal status.
        self._logger.warning("completion_results_dropped", operation_id=self.operation_id)
        del data["results"]
        return self.update_progress(data)

    def send_error(self, message: str, data: Any = None) -> bool:
        """Write the terminal 'error' snapshot."""
        self._logger.error("progress_error", operation_id=self.operation_id, error=message)
        return self.update_progress(
            {
                "status": ProgressStatus.ERROR,
                "progress": 0,
                "message": f"Operation failed: {message}",
                "error": message,
                "error_data": _json_safe(_to_plain(data)) if data is not None else {},
                "failed_at": time.time(),
            }
        )

    def send_warning(self, message: str, data: Any = None) -> bool:
        """Write an advisory 'warning' snapshot; the operation keeps running."""
        current = self.get_current_progress()
        self._logger.warning("progress_warning", operation_id=self.operation_id, warning=message)
        return self.update_progress(
            {
                "status": ProgressStatus.WARNING,
                "progress": current.progress if current is not None else 0,
                "message": f"Warning: {message}",
                "warning": message,
                "warning_data": _json_safe(_to_plain(data)) if data is not None else {},
                "warned_at": time.time(),
            }
        )

    # --- Readers ---

    def get_current_progress(self) -> ProgressSnapshot | None:
        """Return the last persisted snapshot, or None if absent or unreadable."""
        path = self.snapshot_path
        if not path.exists():
            return None
        try:
            content = path.read_text(encoding="utf-8")
            return ProgressSnapshot.model_validate(json.loads(content))
        except (OSError, ValueError) as exc:
            self._logger.warning(
                "progress_read_failed",
                operation_id=self.operation_id,
                path=str(path),
                error=str(exc),
            )
            return None

    def is_complete(self) -> bool:
        """True if the last snapshot is 'complete' or 'error'."""
        snapshot = self.get_current_progress()
        return snapshot is not None and snapshot.is_terminal

    def is_stale(self, max_age_seconds: float, now: float | None = None) -> bool:
        """True if a running operation has not written for max_age_seconds.

        Absent and terminal snapshots are never stale.
        """
        snapshot = self.get_current_progress()
        if snapshot is None or snapshot.is_terminal:
            return False
        return snapshot.age_seconds(now) > max_age_seconds

    def cleanup(self) -> bool:
        """Remove the snapshot. Succeeds when there is nothing to remove."""
        try:
            self.snapshot_path.unlink(missing_ok=True)
        except OSError as exc:
            self._logger.error(
                "progress_cleanup_failed",
                operation_id=self.operation_id,
                path=str(self.snapshot_path),
                error=str(exc),
            )
            return False
        return True

    # --- Internals ---

    def _write(self, snapshot: ProgressSnapshot) -> None:
        """Atomically replace the snapshot file with the given snapshot."""
        payload = json.dumps(
            snapshot.model_dump(exclude_none=True),
            indent=2,
            default=str,
            ensure_ascii=False,
        )
        self.progress_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.operation_id}.",
            suffix=TEMP_SUFFIX,
            dir=self.progress_dir,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", errors="replace") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.snapshot_path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise


def purge_expired_snapshots(
    progress_dir: str | Path,
    max_age_seconds: float,
    now: float | None = None,
) -> int:
    """Delete snapshot files not modified within max_age_seconds.

    Temp files left by interrupted writes are removed on the same terms.
    Returns the number of files removed. A missing directory removes nothing.
    """
    directory = Path(progress_dir)
    if not directory.is_dir():
        return 0

    cutoff = (now if now is not None else time.time()) - max_age_seconds
    removed = 0
    candidates = [
        *directory.glob(f"*{SNAPSHOT_SUFFIX}"),
        *directory.glob(f".*{TEMP_SUFFIX}"),
    ]
    for path in candidates:
        try:
            if path.stat().st_mtime < cutoff:
                path.unlink()
                removed += 1
        except OSError as exc:
            logger.warning("snapshot_purge_failed", path=str(path), error=str(exc))

    logger.info("snapshots_purged", directory=str(directory), removed=removed)
    return removed
