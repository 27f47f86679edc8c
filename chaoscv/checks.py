# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
CHECK / FATAL assertion contract.

A failed check writes a FATAL line naming the failed condition and the
source location of the check, then never returns: depending on
``ChaosConfig.fatal_action`` it either raises the error category passed by
the caller or aborts the process.

The default action is "raise". That is a deliberate departure from an
abort-only contract: a caller can catch the error and carry on, so a
failed check is only guaranteed to end the process with
``fatal_action="abort"`` (``CHAOSCV_FATAL_ACTION=abort`` or
``--fatal_action=abort``). Core code never catches these errors itself.

Example:
    from chaoscv.checks import check, check_lt
    from chaoscv.errors import OutOfRangeError

    check_lt(row, height, "row index", error=OutOfRangeError)
"""

import os
import sys
from typing import Any, NoReturn, Optional, Type

from .config import get_config
from .errors import CheckFailedError
from .observability.logger import LogSeverity, get_logger


def _fail(
    message: str,
    error: Type[CheckFailedError],
    file: str,
    line: int,
) -> NoReturn:
    logger = get_logger()
    logger.log(LogSeverity.FATAL, message, file=file, line=line)

    if get_config().fatal_action == "abort":
        logger.flush()
        os.abort()

    raise error(message, file=os.path.basename(file), line=line)


def fatal(
    message: str,
    error: Type[CheckFailedError] = CheckFailedError,
    stacklevel: int = 1,
) -> NoReturn:
    """Log message at FATAL severity and terminate (raise or abort)."""
    frame = sys._getframe(stacklevel)
    _fail(message, error, frame.f_code.co_filename, frame.f_lineno)


def check(
    condition: Any,
    message: str = "",
    error: Type[CheckFailedError] = CheckFailedError,
    expression: Optional[str] = None,
    stacklevel: int = 1,
) -> None:
    """
    Terminate with a FATAL log line unless condition is truthy.

    Args:
        condition: Value that must be truthy
        message: Extra description appended to the log line
        error: Error category raised when the fatal action is "raise"
        expression: Text of the checked condition, for the log line
        stacklevel: Frames to skip when locating the failing check
    """
    if condition:
        return

    text = "Check failed"
    if expression:
        text += f": {expression}"
    text += "."
    if message:
        text += f" {message}"

    frame = sys._getframe(stacklevel)
    _fail(text, error, frame.f_code.co_filename, frame.f_lineno)


def check_eq(a, b, message: str = "", error=CheckFailedError) -> None:
    check(a == b, message, error, expression=f"{a!r} == {b!r}", stacklevel=2)


def check_ne(a, b, message: str = "", error=CheckFailedError) -> None:
    check(a != b, message, error, expression=f"{a!r} != {b!r}", stacklevel=2)


def check_lt(a, b, message: str = "", error=CheckFailedError) -> None:
    check(a < b, message, error, expression=f"{a!r} < {b!r}", stacklevel=2)


def check_le(a, b, message: str = "", error=CheckFailedError) -> None:
    check(a <= b, message, error, expression=f"{a!r} <= {b!r}", stacklevel=2)


def check_gt(a, b, message: str = "", error=CheckFailedError) -> None:
    check(a > b, message, error, expression=f"{a!r} > {b!r}", stacklevel=2)


def check_ge(a, b, message: str = "", error=CheckFailedError) -> None:
    check(a >= b, message, error, expression=f"{a!r} >= {b!r}", stacklevel=2)


def log(severity: LogSeverity, message: str, **extra) -> None:
    """Write a line at the given severity; FATAL terminates like fatal()."""
    if LogSeverity(severity) == LogSeverity.FATAL:
        frame = sys._getframe(1)
        _fail(message, CheckFailedError, frame.f_code.co_filename, frame.f_lineno)
    get_logger().log(severity, message, stacklevel=2, **extra)
