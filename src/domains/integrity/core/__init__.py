"""Integrity domain core -- pure functions for file checksums and baselines."""

from __future__ import annotations

from src.domains.integrity.core.baseline import (
    DEFAULT_EXCLUDE_PATTERNS,
    build_baseline,
    collect_files,
    compare_file,
    parse_baseline,
)
from src.domains.integrity.core.checksum import compute_file_checksum

__all__ = [
    # baseline
    "DEFAULT_EXCLUDE_PATTERNS",
    "build_baseline",
    "collect_files",
    "compare_file",
    "parse_baseline",
    # checksum
    "compute_file_checksum",
]
