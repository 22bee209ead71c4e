"""File checksum computation."""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

READ_CHUNK_BYTES = 64 * 1024


def compute_file_checksum(path: Path) -> str:
    """Compute MD5 hex digest of a file, reading it in fixed-size blocks."""
    digest = hashlib.md5()
    with path.open("rb") as handle:
        for block in iter(lambda: handle.read(READ_CHUNK_BYTES), b""):
            digest.update(block)
    return digest.hexdigest()
