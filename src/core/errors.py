"""Structured error carrier for batch operations."""

from __future__ import annotations

import time
import traceback
from typing import Any

import structlog

from src.models.processing_error import ProcessingError

logger = structlog.get_logger(__name__)


def _call_site() -> str:
    """Return 'path:line' of the frame that constructed the error."""
    # [-1] is this function, [-2] OperationError.__init__, [-3] the caller
    frames = traceback.extract_stack(limit=3)
    if len(frames) < 3:
        return ""
    frame = frames[0]
    return f"{frame.filename}:{frame.lineno}"


class OperationError(Exception):
    """Error raised by batch operations, carrying structured context.

    The context dict is the only mutable part; use add_context() to enrich
    an error as it travels up from a processor. to_dict() / from_dict()
    convert to and from the plain record stored in error snapshots.
    """

    def __init__(
        self,
        message: str = "",
        context: dict[str, Any] | None = None,
        code: int = 0,
        cause: BaseException | None = None,
        *,
        log: bool = True,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.cause = cause
        self.location = _call_site()
        self.timestamp = time.time()
        self._context: dict[str, Any] = dict(context or {})
        if cause is not None:
            self.__cause__ = cause

        if log:
            logger.error("operation_error", message=message, code=code)
            if self._context:
                logger.error("operation_error_context", context=self._context)

    @property
    def context(self) -> dict[str, Any]:
        """Copy of the context mapping."""
        return dict(self._context)

    def add_context(self, key: str, value: Any) -> None:
        """Attach one key/value pair to the context."""
        self._context[key] = value

    def get_context(self, key: str, default: Any = None) -> Any:
        """Read a context value, returning default when missing."""
        return self._context.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain record suitable for JSON serialization."""
        record = ProcessingError(
            message=self.message,
            code=self.code,
            location=self.location,
            context=self._context,
            timestamp=self.timestamp,
        )
        data = record.model_dump()
        if self.cause is not None:
            data["context"].setdefault("cause", f"{type(self.cause).__name__}: {self.cause}")
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> OperationError:
        """Rebuild an error from a record produced by to_dict().

        Missing or malformed fields default to safe empties.
        """
        record = ProcessingError.model_validate(data if isinstance(data, dict) else {})
        error = cls(record.message, record.context, record.code, log=False)
        error.location = record.location
        error.timestamp = record.timestamp
        return error

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, code={self.code})"
