# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for the CHECK / FATAL contract

Validates:
- Passing checks are silent
- Failing checks log one FATAL line with the caller's location
- The fatal action (raise the error category or abort)
"""

import pytest

from chaoscv import checks
from chaoscv.checks import (
    check,
    check_eq,
    check_ge,
    check_gt,
    check_le,
    check_lt,
    check_ne,
    fatal,
)
from chaoscv.config import ChaosConfig, set_config
from chaoscv.errors import CheckFailedError, OutOfRangeError
from chaoscv.observability import LogSeverity


class TestCheck:
    """Tests for check()."""

    def test_passing_check_is_silent(self, log_output):
        check(True, "never shown")
        check(1, "never shown")
        assert log_output.getvalue() == ""

    def test_failing_check_raises(self, log_output):
        with pytest.raises(CheckFailedError) as exc_info:
            check(False, "height must be positive", expression="h > 0")
        error = exc_info.value
        assert error.message == "Check failed: h > 0. height must be positive"
        assert error.file == "test_checks.py"
        assert error.line > 0

    def test_failing_check_logs_fatal_line(self, log_output):
        with pytest.raises(CheckFailedError):
            check(False, "boom")
        lines = log_output.getvalue().splitlines()
        assert len(lines) == 1
        assert lines[0].startswith("[FATAL ")
        assert "test_checks.py:" in lines[0]
        assert lines[0].endswith("] Check failed. boom")

    def test_error_category(self):
        with pytest.raises(OutOfRangeError):
            check(False, "row", error=OutOfRangeError)

    def test_logged_line_matches_error(self, log_output):
        with pytest.raises(CheckFailedError) as exc_info:
            check(False)
        assert f"test_checks.py:{exc_info.value.line}]" in log_output.getvalue()


class TestComparisonChecks:
    """Tests for the comparison helpers."""

    def test_passing(self):
        check_eq(1, 1)
        check_ne(1, 2)
        check_lt(1, 2)
        check_le(2, 2)
        check_gt(3, 2)
        check_ge(3, 3)

    @pytest.mark.parametrize(
        "helper,a,b,expression",
        [
            (check_eq, 1, 2, "1 == 2"),
            (check_ne, 1, 1, "1 != 1"),
            (check_lt, 2, 2, "2 < 2"),
            (check_le, 3, 2, "3 <= 2"),
            (check_gt, 2, 2, "2 > 2"),
            (check_ge, 1, 2, "1 >= 2"),
        ],
    )
    def test_failing(self, helper, a, b, expression):
        with pytest.raises(CheckFailedError) as exc_info:
            helper(a, b, "values differ")
        assert exc_info.value.message == f"Check failed: {expression}. values differ"
        assert exc_info.value.file == "test_checks.py"

    def test_custom_error(self):
        with pytest.raises(OutOfRangeError):
            check_lt(5, 4, "index", error=OutOfRangeError)


class TestFatal:
    """Tests for fatal() and checks.log()."""

    def test_fatal_raises(self, log_output):
        with pytest.raises(CheckFailedError) as exc_info:
            fatal("unreachable state")
        assert exc_info.value.message == "unreachable state"
        assert "[FATAL " in log_output.getvalue()

    def test_log_non_fatal(self, log_output):
        checks.log(LogSeverity.WARNING, "careful", rows=3)
        line = log_output.getvalue()
        assert line.startswith("[WARNING ")
        assert "test_checks.py:" in line
        assert "(rows=3)" in line

    def test_log_fatal_terminates(self):
        with pytest.raises(CheckFailedError):
            checks.log(LogSeverity.FATAL, "stop")


class TestFatalAction:
    """Tests for the configured fatal action."""

    def test_abort_action(self, monkeypatch, log_output):
        aborted = []
        monkeypatch.setattr(checks.os, "abort", lambda: aborted.append(True))
        set_config(ChaosConfig(fatal_action="abort"))

        with pytest.raises(CheckFailedError):
            check(False, "corrupt")

        assert aborted == [True]
        assert "[FATAL " in log_output.getvalue()

    def test_raise_action_does_not_abort(self, monkeypatch):
        aborted = []
        monkeypatch.setattr(checks.os, "abort", lambda: aborted.append(True))

        with pytest.raises(CheckFailedError):
            check(False)

        assert aborted == []
