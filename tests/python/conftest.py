# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Pytest configuration for ChaosCV Python tests.
"""

import io
import sys
from pathlib import Path

import pytest

# Add the project root to sys.path so we can import chaoscv
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

# Skip test modules that require optional dependencies not installed
collect_ignore = []

# Check for hypothesis
try:
    import hypothesis  # noqa: F401
except ImportError:
    collect_ignore.append("test_property_based.py")


@pytest.fixture(autouse=True)
def log_output(monkeypatch):
    """Fresh configuration and logger per test; log lines go to a buffer."""
    from chaoscv.config import reset_config
    from chaoscv.flags import FLAGS
    from chaoscv.observability import ChaosLogger

    for name in (
        "CHAOSCV_LOG_LEVEL",
        "CHAOSCV_LOG_DIR",
        "CHAOSCV_FATAL_ACTION",
        "CHAOSCV_BRACES",
    ):
        monkeypatch.delenv(name, raising=False)

    reset_config()
    ChaosLogger.reset()
    FLAGS.reset()

    buffer = io.StringIO()
    ChaosLogger.get().set_output(buffer)
    yield buffer

    reset_config()
    ChaosLogger.reset()
    FLAGS.reset()
