"""Transformation of processor returns and work items for progress reporting."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from src.models.item_result import Failure, Success

DEFAULT_FAILURE_REASON = "Processing failed"


def classify_result(raw: Any) -> Success | Failure:
    """Normalize a processor's return value into Success or Failure.

    Success/Failure instances pass through. A literal True, or a mapping
    whose 'success' key is truthy, is a success carrying the mapping as
    payload. Everything else is a failure; a mapping's 'error' or 'reason'
    key becomes the failure reason.
    """
    if isinstance(raw, (Success, Failure)):
        return raw
    if raw is True:
        return Success(payload=True)
    if isinstance(raw, Mapping):
        data = dict(raw)
        if data.get("success"):
            return Success(payload=data)
        reason = data.get("error") or data.get("reason") or DEFAULT_FAILURE_REASON
        return Failure(reason=str(reason), error_data=data)
    return Failure(reason=DEFAULT_FAILURE_REASON)


def item_display_name(item: Any) -> str | None:
    """Human-readable name of a work item, if it carries one."""
    if isinstance(item, str):
        return item or None
    if isinstance(item, Mapping):
        name = item.get("display_name") or item.get("name")
        return str(name) if name else None
    for attr in ("display_name", "name"):
        name = getattr(item, attr, None)
        if isinstance(name, str) and name:
            return name
    return None


def describe_item(item: Any, current: int, total: int) -> str:
    """Progress message fragment for the item being processed."""
    name = item_display_name(item)
    if name:
        return f"Processing {name} ({current}/{total})"
    return f"Processing item {current} of {total}"


def percent_complete(processed: int, total: int) -> int:
    """Floor percentage of processed items, clamped to 0..100."""
    if total <= 0:
        return 100
    return max(0, min(100, (processed * 100) // total))
