"""Unit tests for the integrity domain core: checksums and baselines."""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

import pytest

from src.domains.integrity.core.baseline import (
    build_baseline,
    collect_files,
    compare_file,
    parse_baseline,
)
from src.domains.integrity.core.checksum import compute_file_checksum
from src.models.item_result import Failure, Success

if TYPE_CHECKING:
    from pathlib import Path


class TestChecksum:
    """Tests for checksum helpers."""

    def test_file_checksum_matches_hashlib(self, tmp_path: Path) -> None:
        path = tmp_path / "plugin.zip"
        data = b"PK\x03\x04" + b"x" * 200_000
        path.write_bytes(data)
        assert compute_file_checksum(path) == hashlib.md5(data).hexdigest()

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.php"
        path.write_bytes(b"")
        assert compute_file_checksum(path) == "d41d8cd98f00b204e9800998ecf8427e"


class TestCollectFiles:
    """Tests for collect_files and build_baseline."""

    def test_relative_sorted_paths(self, sample_tree: Path) -> None:
        assert collect_files(sample_tree) == [
            "index.php",
            "wp-config.php",
            "wp-includes/version.php",
        ]

    def test_excludes_progress_files(self, sample_tree: Path) -> None:
        (sample_tree / "scan.progress").write_text("{}", encoding="utf-8")
        assert "scan.progress" not in collect_files(sample_tree)

    def test_custom_excludes(self, sample_tree: Path) -> None:
        assert collect_files(sample_tree, ("wp-includes/*",)) == ["index.php", "wp-config.php"]

    def test_build_baseline(self, sample_tree: Path) -> None:
        baseline = build_baseline(sample_tree)
        assert set(baseline) == {"index.php", "wp-config.php", "wp-includes/version.php"}
        assert baseline["index.php"] == compute_file_checksum(sample_tree / "index.php")


class TestParseBaseline:
    """Tests for parse_baseline."""

    def test_wrapped_document(self) -> None:
        assert parse_baseline({"files": {"index.php": "A" * 32}}) == {"index.php": "a" * 32}

    def test_bare_mapping(self) -> None:
        assert parse_baseline({"index.php": "b" * 32}) == {"index.php": "b" * 32}

    def test_non_mapping_rejected(self) -> None:
        with pytest.raises(ValueError, match="mapping"):
            parse_baseline(["index.php"])

    def test_bad_checksum_rejected(self) -> None:
        with pytest.raises(ValueError, match="hex digest"):
            parse_baseline({"index.php": "not-a-checksum"})

    def test_path_escape_rejected(self) -> None:
        with pytest.raises(ValueError, match="safe relative path"):
            parse_baseline({"../wp-config.php": "a" * 32})


class TestCompareFile:
    """Tests for compare_file."""

    def test_unchanged(self, sample_tree: Path) -> None:
        expected = compute_file_checksum(sample_tree / "index.php")
        result = compare_file(sample_tree, "index.php", expected)
        assert isinstance(result, Success)
        assert result.payload == {"path": "index.php", "checksum": expected}

    def test_modified(self, sample_tree: Path) -> None:
        result = compare_file(sample_tree, "index.php", "0" * 32)
        assert isinstance(result, Failure)
        assert result.reason == "modified"
        assert result.error_data is not None
        assert result.error_data["expected"] == "0" * 32

    def test_missing(self, sample_tree: Path) -> None:
        result = compare_file(sample_tree, "wp-login.php", "0" * 32)
        assert isinstance(result, Failure)
        assert result.reason == "missing"
        assert result.error_data == {"path": "wp-login.php", "expected": "0" * 32}
