"""Identifier and checksum validation utilities."""

from __future__ import annotations

import re
from pathlib import PurePosixPath


def is_valid_checksum_hex(value: str) -> bool:
    """Validate a hex string is a valid checksum (32 chars, any case)."""
    return bool(re.match(r"^[0-9a-f]{32}$", value.lower()))


def is_valid_operation_id(value: str) -> bool:
    """Operation ids are safe file-name stems: letters, digits, '.', '_', '-'."""
    return bool(re.fullmatch(r"[A-Za-z0-9][A-Za-z0-9._-]{0,127}", value))


def is_safe_relative_path(value: str) -> bool:
    """Check a baseline path is relative and does not escape its root."""
    if not value or value.startswith("/") or "\\" in value:
        return False
    return ".." not in PurePosixPath(value).parts
