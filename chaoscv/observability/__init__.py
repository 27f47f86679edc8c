# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
ChaosCV Observability Module

Components:
- ChaosLogger: Line-oriented logger with severities and an optional log file
"""

from .logger import (
    LogSeverity,
    LogEntry,
    ChaosLogger,
    get_logger,
    set_level,
    init_logging,
    log_file_name,
)

__all__ = [
    "LogSeverity",
    "LogEntry",
    "ChaosLogger",
    "get_logger",
    "set_level",
    "init_logging",
    "log_file_name",
]
