"""Unit tests for utility modules.

Tests pure functions and simple data classes -- no I/O, no mocking required.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from src.models.item_result import Failure, Success
from src.utils.logger import configure_logging, get_logger
from src.utils.progress import ResultAccumulator
from src.utils.validators import (
    is_safe_relative_path,
    is_valid_checksum_hex,
    is_valid_operation_id,
)

# ──────────────────────────────────────────────────────────────────────
# Module 1: utils/validators.py
# ──────────────────────────────────────────────────────────────────────


class TestIsValidChecksumHex:
    """Tests for is_valid_checksum_hex."""

    def test_lowercase_valid(self) -> None:
        assert is_valid_checksum_hex("a" * 32) is True

    def test_uppercase_valid(self) -> None:
        assert is_valid_checksum_hex("A" * 32) is True

    def test_non_hex(self) -> None:
        assert is_valid_checksum_hex("z" * 32) is False


class TestIsValidOperationId:
    """Tests for is_valid_operation_id."""

    @pytest.mark.parametrize("value", ["reinstall", "scan-2024.01", "op_1", "A"])
    def test_valid(self, value: str) -> None:
        assert is_valid_operation_id(value) is True

    @pytest.mark.parametrize(
        "value", ["", "../etc/passwd", "a/b", ".hidden", "-flag", "a b", "x" * 129]
    )
    def test_invalid(self, value: str) -> None:
        assert is_valid_operation_id(value) is False


class TestIsSafeRelativePath:
    """Tests for is_safe_relative_path."""

    def test_nested(self) -> None:
        assert is_safe_relative_path("wp-includes/version.php") is True

    def test_absolute(self) -> None:
        assert is_safe_relative_path("/etc/passwd") is False

    def test_parent_escape(self) -> None:
        assert is_safe_relative_path("../wp-config.php") is False

    def test_backslash(self) -> None:
        assert is_safe_relative_path("wp-includes\\version.php") is False

    def test_empty(self) -> None:
        assert is_safe_relative_path("") is False


# ──────────────────────────────────────────────────────────────────────
# Module 2: utils/progress.py
# ──────────────────────────────────────────────────────────────────────


class TestResultAccumulator:
    """Tests for ResultAccumulator."""

    def test_initial_state(self) -> None:
        accumulator = ResultAccumulator(total=10)
        assert accumulator.total_processed == 0
        assert accumulator.total_succeeded == 0
        assert accumulator.total_failed == 0
        assert accumulator.successes == []
        assert accumulator.failures == []

    def test_record_success(self) -> None:
        accumulator = ResultAccumulator(total=5)
        outcome = accumulator.record("akismet", Success(payload=True))
        assert outcome.position == 1
        assert accumulator.total_processed == 1
        assert accumulator.total_succeeded == 1
        assert accumulator.successes[0].key == "akismet"

    def test_record_failure(self) -> None:
        accumulator = ResultAccumulator(total=5)
        accumulator.record("jetpack", Failure(reason="something broke"))
        assert accumulator.total_processed == 1
        assert accumulator.total_failed == 1
        assert accumulator.failures[0].reason == "something broke"

    def test_counters_stay_consistent(self) -> None:
        accumulator = ResultAccumulator(total=6)
        seen = []
        for index in range(6):
            result = Success() if index % 3 else Failure(reason=f"bad {index}")
            accumulator.record(index, result)
            counted = accumulator.total_succeeded + accumulator.total_failed
            assert counted == accumulator.total_processed
            seen.append(accumulator.total_processed)
        assert seen == sorted(seen)
        assert accumulator.total_processed == 6

    def test_order_preserved(self) -> None:
        accumulator = ResultAccumulator(total=3)
        for key in ("c", "a", "b"):
            accumulator.record(key, Success())
        assert [outcome.key for outcome in accumulator.successes] == ["c", "a", "b"]

    def test_progress_percentage(self) -> None:
        accumulator = ResultAccumulator(total=3)
        accumulator.record(0, Success())
        assert accumulator.progress_percentage == 33

    def test_to_result(self) -> None:
        accumulator = ResultAccumulator(total=2)
        accumulator.record("a", Success())
        accumulator.record("b", Failure(reason="boom"))
        result = accumulator.to_result()
        assert result.total_processed == 2
        assert result.total_succeeded == 1
        assert result.total_failed == 1
        assert result.errors == ["b: boom"]
        assert result.duration_seconds >= 0

    def test_log_progress_every_n(self) -> None:
        log = MagicMock()
        accumulator = ResultAccumulator(total=25)
        for index in range(10):
            accumulator.record(index, Success())
            accumulator.log_progress(every_n=10, log=log)
        log.info.assert_called_once()
        assert log.info.call_args.kwargs["processed"] == 10

    def test_log_progress_on_last_item(self) -> None:
        log = MagicMock()
        accumulator = ResultAccumulator(total=3)
        for index in range(3):
            accumulator.record(index, Success())
            accumulator.log_progress(every_n=10, log=log)
        log.info.assert_called_once()


# ──────────────────────────────────────────────────────────────────────
# Module 3: utils/logger.py
# ──────────────────────────────────────────────────────────────────────


class TestLogger:
    """Tests for configure_logging and get_logger."""

    def test_configure_and_log(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging("INFO")
        get_logger("tests").info("batch_started", total=3)
        captured = capsys.readouterr()
        assert "batch_started" in captured.err

    def test_level_filters_debug(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging("WARNING")
        get_logger("tests").info("should_not_appear")
        assert "should_not_appear" not in capsys.readouterr().err

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging("INFO", json_output=True)
        get_logger("tests").info("json_event", count=2)
        assert '"event": "json_event"' in capsys.readouterr().err
