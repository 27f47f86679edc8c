# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Line-oriented Logger for ChaosCV

Every message becomes one line on the output stream, prefixed with its
severity, a timestamp and the source location:

    [WARNING 2025-01-31 14:02:11 tensor.py:212] wrapped region is read-only

Lines can optionally be mirrored to a log file in a configured directory.
FATAL lines are written like any other; terminating afterwards is the job of
chaoscv.checks.

Example:
    from chaoscv.observability import get_logger, LogSeverity

    logger = get_logger()
    logger.set_level(LogSeverity.WARNING)
    logger.warning("view touches the last column", rect="[2 x 2 at (2, 2)]")
"""

import json
import os
import sys
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Callable, Optional, TextIO


class LogSeverity(IntEnum):
    """
    Log severities.

    Uses IntEnum for numeric comparison (e.g., if severity >= level).
    """

    INFO = 0
    WARNING = 1
    ERROR = 2
    FATAL = 3


@dataclass
class LogEntry:
    """
    One log line.

    Attributes:
        severity: INFO, WARNING, ERROR or FATAL
        message: Log message
        timestamp: Local time the entry was created
        file: Base name of the source file that logged it
        line: Line number in that file
        extra: Additional context fields
    """

    severity: str
    message: str
    timestamp: datetime
    file: str = "?"
    line: int = 0
    extra: dict = field(default_factory=dict)

    def to_json(self) -> str:
        """Convert to JSON string."""
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        if not data.get("extra"):
            data.pop("extra", None)
        return json.dumps(data, default=str)

    def to_text(self) -> str:
        """Convert to the human-readable line format."""
        stamp = self.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        text = f"[{self.severity} {stamp} {self.file}:{self.line}] {self.message}"
        if self.extra:
            fields = " ".join(f"{k}={v}" for k, v in self.extra.items())
            text = f"{text} ({fields})"
        return text


def log_file_name(argv0: str, now: Optional[datetime] = None) -> str:
    """
    Build the log file name for a program.

    The name is the timestamp followed by the program's base name without
    extension, e.g. ``2025.01.31.14.02.11.train.LOG``.
    """
    now = now or datetime.now()
    program = os.path.splitext(os.path.basename(argv0))[0] or "chaoscv"
    return f"{now.strftime('%Y.%m.%d.%H.%M.%S')}.{program}.LOG"


class ChaosLogger:
    """
    Line-oriented logger for ChaosCV.

    Singleton pattern ensures consistent logging configuration across the
    package.

    Example:
        logger = ChaosLogger.get()
        logger.set_level(LogSeverity.INFO)
        logger.info("tensor allocated", bytes=96)
    """

    _instance: Optional["ChaosLogger"] = None

    def __init__(self):
        """Initialize logger with settings from the active configuration."""
        from ..config import get_config

        config = get_config()
        self._level = LogSeverity(config.log_level)
        self._output: TextIO = sys.stderr
        self._json_format = False
        self._handlers: list[Callable[[LogEntry], None]] = []
        self._log_dir = config.log_dir
        self._log_name = log_file_name(sys.argv[0] if sys.argv else "")
        self._file_lock = threading.Lock()

    @classmethod
    def get(cls) -> "ChaosLogger":
        """Get the singleton logger instance."""
        if cls._instance is None:
            cls._instance = ChaosLogger()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        cls._instance = None

    def set_level(self, level: int) -> None:
        """
        Set the minimum severity that is written.

        Args:
            level: Severity (0-3 or LogSeverity enum)
        """
        if isinstance(level, LogSeverity):
            self._level = level
        else:
            self._level = LogSeverity(max(0, min(3, int(level))))

    def get_level(self) -> LogSeverity:
        """Get the current minimum severity."""
        return self._level

    def set_json_format(self, enabled: bool) -> None:
        """Enable or disable JSON output format."""
        self._json_format = enabled

    def set_output(self, output: TextIO) -> None:
        """Set output stream."""
        self._output = output

    def set_log_dir(self, log_dir: str) -> None:
        """Mirror every written line into a file in log_dir ('' disables)."""
        self._log_dir = log_dir

    def set_log_name(self, name: str) -> None:
        """Set the file name used inside the log directory."""
        self._log_name = name

    @property
    def log_path(self) -> Optional[str]:
        """Full path of the log file, or None when file logging is off."""
        if not self._log_dir:
            return None
        return os.path.join(self._log_dir, self._log_name)

    def add_handler(self, handler: Callable[[LogEntry], None]) -> None:
        """Add a custom log handler."""
        self._handlers.append(handler)

    def remove_handler(self, handler: Callable[[LogEntry], None]) -> None:
        """Remove a handler added with add_handler."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def flush(self) -> None:
        """Flush the output stream."""
        self._output.flush()

    def _emit(self, entry: LogEntry) -> None:
        """Emit a log entry."""
        if self._json_format:
            line = entry.to_json()
        else:
            line = entry.to_text()

        self._output.write(line + "\n")
        self._output.flush()

        path = self.log_path
        if path is not None:
            with self._file_lock:
                with open(path, "a", encoding="utf-8") as log_file:
                    log_file.write(line + "\n")

        for handler in self._handlers:
            handler(entry)

    def log(
        self,
        severity: LogSeverity,
        message: str,
        *,
        stacklevel: int = 1,
        file: Optional[str] = None,
        line: Optional[int] = None,
        **extra,
    ) -> Optional[LogEntry]:
        """
        Write one entry if severity passes the level filter.

        The source location defaults to the caller; stacklevel skips
        additional wrapper frames the same way the standard library does.

        Returns:
            The written entry, or None if it was filtered out.
        """
        severity = LogSeverity(severity)
        if severity < self._level:
            return None

        if file is None or line is None:
            frame = sys._getframe(stacklevel)
            file = file or frame.f_code.co_filename
            line = line if line is not None else frame.f_lineno

        entry = LogEntry(
            severity=severity.name,
            message=message,
            timestamp=datetime.now(),
            file=os.path.basename(file),
            line=line,
            extra=extra,
        )
        self._emit(entry)
        return entry

    def info(self, message: str, **extra) -> Optional[LogEntry]:
        """Log info message."""
        return self.log(LogSeverity.INFO, message, stacklevel=2, **extra)

    def warning(self, message: str, **extra) -> Optional[LogEntry]:
        """Log warning message."""
        return self.log(LogSeverity.WARNING, message, stacklevel=2, **extra)

    def error(self, message: str, **extra) -> Optional[LogEntry]:
        """Log error message."""
        return self.log(LogSeverity.ERROR, message, stacklevel=2, **extra)

    def fatal(self, message: str, **extra) -> Optional[LogEntry]:
        """Log fatal message. Does not terminate; see chaoscv.checks.fatal."""
        return self.log(LogSeverity.FATAL, message, stacklevel=2, **extra)


def get_logger() -> ChaosLogger:
    """Get the global ChaosCV logger."""
    return ChaosLogger.get()


def set_level(level: int) -> None:
    """
    Set global minimum log severity.

    Args:
        level: Severity (0=INFO, 1=WARNING, 2=ERROR, 3=FATAL)
    """
    ChaosLogger.get().set_level(level)


def init_logging(argv0: str, level: int = 0, log_dir: Optional[str] = None) -> ChaosLogger:
    """
    Prepare the global logger for a program.

    Names the log file after the program and the current time, sets the
    minimum severity and, if given, the log directory.
    """
    logger = ChaosLogger.get()
    logger.set_log_name(log_file_name(argv0))
    logger.set_level(level)
    if log_dir is not None:
        logger.set_log_dir(log_dir)
    return logger
