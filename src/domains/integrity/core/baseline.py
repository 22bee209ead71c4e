"""Checksum baselines: building, parsing and per-file comparison."""

from __future__ import annotations

import fnmatch
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from src.domains.integrity.core.checksum import compute_file_checksum
from src.models.item_result import Failure, Success
from src.utils.validators import is_safe_relative_path, is_valid_checksum_hex

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_EXCLUDE_PATTERNS = (".git/*", "*.progress", "*.tmp")


def collect_files(
    root: Path,
    exclude_patterns: tuple[str, ...] = DEFAULT_EXCLUDE_PATTERNS,
) -> list[str]:
    """Relative POSIX paths of all regular files under root, sorted."""
    files = []
    for path in root.rglob("*"):
        if not path.is_file():
            continue
        relative = path.relative_to(root).as_posix()
        if any(fnmatch.fnmatch(relative, pattern) for pattern in exclude_patterns):
            continue
        files.append(relative)
    return sorted(files)


def build_baseline(
    root: Path,
    exclude_patterns: tuple[str, ...] = DEFAULT_EXCLUDE_PATTERNS,
) -> dict[str, str]:
    """Map every file under root to its MD5 checksum."""
    return {
        relative: compute_file_checksum(root / relative)
        for relative in collect_files(root, exclude_patterns)
    }


def parse_baseline(data: Any) -> dict[str, str]:
    """Validate a loaded baseline document and return path -> checksum.

    Accepts either {"files": {path: checksum}} or a bare {path: checksum}
    mapping. Raises ValueError on anything else.
    """
    if isinstance(data, Mapping) and "files" in data:
        data = data["files"]
    if not isinstance(data, Mapping):
        msg = "baseline must be a mapping of relative path to checksum"
        raise ValueError(msg)

    baseline: dict[str, str] = {}
    for path, checksum in data.items():
        if not isinstance(path, str) or not is_safe_relative_path(path):
            msg = f"baseline path is not a safe relative path: {path!r}"
            raise ValueError(msg)
        if not isinstance(checksum, str) or not is_valid_checksum_hex(checksum):
            msg = f"baseline checksum for {path} is not a 32-character hex digest"
            raise ValueError(msg)
        baseline[path] = checksum.lower()
    return baseline


def compare_file(root: Path, relative: str, expected: str) -> Success | Failure:
    """Check one file against its baseline checksum."""
    path = root / relative
    if not path.is_file():
        return Failure(
            reason="missing",
            error_data={"path": relative, "expected": expected},
        )

    actual = compute_file_checksum(path)
    if actual != expected:
        return Failure(
            reason="modified",
            error_data={"path": relative, "expected": expected, "actual": actual},
        )
    return Success(payload={"path": relative, "checksum": actual})
