"""Partitioning of work items into fixed-size chunks."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

DEFAULT_CHUNK_SIZE = 5


def normalize_items(items: Any) -> list[tuple[str | int, Any]]:
    """Return items as ordered (key, item) pairs.

    Mappings keep their keys; sequences are keyed by position. Strings and
    bytes are not treated as sequences of items.
    """
    if isinstance(items, Mapping):
        return list(items.items())
    if isinstance(items, Sequence) and not isinstance(items, (str, bytes)):
        return list(enumerate(items))
    msg = f"items must be a mapping or a sequence, got {type(items).__name__}"
    raise TypeError(msg)


def clamp_chunk_size(size: Any) -> int:
    """Coerce a caller-supplied chunk size to an int of at least 1."""
    try:
        return max(1, int(size))
    except (TypeError, ValueError):
        return DEFAULT_CHUNK_SIZE


def chunk_items(
    pairs: list[tuple[str | int, Any]],
    size: int = DEFAULT_CHUNK_SIZE,
) -> list[list[tuple[str | int, Any]]]:
    """Split ordered pairs into chunks of `size`; only the last may be shorter."""
    size = clamp_chunk_size(size)
    return [pairs[start : start + size] for start in range(0, len(pairs), size)]
