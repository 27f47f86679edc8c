# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Runtime configuration for ChaosCV.

Values come from the environment once, when the configuration is first
requested, and can be replaced programmatically afterwards:

    CHAOSCV_LOG_LEVEL      minimum log severity (0-3 or INFO/WARNING/ERROR/FATAL)
    CHAOSCV_LOG_DIR        directory for the log file (empty: no log file)
    CHAOSCV_FATAL_ACTION   "raise" (default) or "abort"
    CHAOSCV_BRACES         brace set used by str(tensor)

Example:
    from chaoscv.config import get_config, set_config

    cfg = get_config()
    set_config(cfg.replace(fatal_action="abort"))
"""

import dataclasses
import os
import threading
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError
from .flags import FLAGS, define_string

FATAL_ACTIONS = ("raise", "abort")

_SEVERITY_NAMES = {"INFO": 0, "WARNING": 1, "ERROR": 2, "FATAL": 3}


def parse_log_level(value) -> int:
    """
    Parse a log level given as an int, digit string or severity name.

    Raises:
        ConfigurationError: If the value is not a known severity.
    """
    if isinstance(value, int):
        level = value
    else:
        text = str(value).strip()
        if text.upper() in _SEVERITY_NAMES:
            return _SEVERITY_NAMES[text.upper()]
        try:
            level = int(text)
        except ValueError:
            raise ConfigurationError(
                f"unknown log level '{value}'",
                config_key="log_level",
                config_value=value,
            ) from None

    if not 0 <= level <= 3:
        raise ConfigurationError(
            f"log level must be between 0 and 3, got {level}",
            config_key="log_level",
            config_value=str(level),
        )
    return level


@dataclass(frozen=True)
class ChaosConfig:
    """
    Process-wide ChaosCV settings.

    Attributes:
        log_level: Minimum severity written by the logger (0=INFO .. 3=FATAL)
        log_dir: Directory for the log file, empty to disable file logging
        fatal_action: What a failed CHECK does after logging
        braces: Name of the brace set used by str(tensor)
    """

    log_level: int = 0
    log_dir: str = ""
    fatal_action: str = "raise"
    braces: str = "default"

    def __post_init__(self):
        if self.fatal_action not in FATAL_ACTIONS:
            raise ConfigurationError(
                f"fatal_action must be one of {FATAL_ACTIONS}",
                config_key="fatal_action",
                config_value=self.fatal_action,
            )
        parse_log_level(self.log_level)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ChaosConfig":
        """Build a configuration from CHAOSCV_* environment variables."""
        env = os.environ if environ is None else environ

        kwargs = {}
        if env.get("CHAOSCV_LOG_LEVEL"):
            kwargs["log_level"] = parse_log_level(env["CHAOSCV_LOG_LEVEL"])
        if "CHAOSCV_LOG_DIR" in env:
            kwargs["log_dir"] = env["CHAOSCV_LOG_DIR"]
        if env.get("CHAOSCV_FATAL_ACTION"):
            kwargs["fatal_action"] = env["CHAOSCV_FATAL_ACTION"].strip().lower()
        if env.get("CHAOSCV_BRACES"):
            kwargs["braces"] = env["CHAOSCV_BRACES"].strip().lower()
        return cls(**kwargs)

    def replace(self, **changes) -> "ChaosConfig":
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)


_config: Optional[ChaosConfig] = None
_config_lock = threading.Lock()


def get_config() -> ChaosConfig:
    """Get the active configuration, reading the environment on first use."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = ChaosConfig.from_env()
    return _config


def set_config(config: ChaosConfig) -> None:
    """Replace the active configuration."""
    global _config
    with _config_lock:
        _config = config


def reset_config() -> None:
    """Forget the active configuration (for testing)."""
    global _config
    with _config_lock:
        _config = None


define_string("log_dir", "", "Directory for the log file; empty disables file logging.")
define_string("log_level", "INFO", "Minimum log severity: INFO, WARNING, ERROR, FATAL or 0-3.")
define_string("fatal_action", "raise", "What a failed check does after logging: raise or abort.")
define_string("braces", "default", "Brace set used when printing tensors.")

_FLAG_FIELDS = ("log_dir", "log_level", "fatal_action", "braces")


def apply_flags() -> ChaosConfig:
    """Overlay the flags given on the command line onto the active configuration."""
    changes = {}
    for name in _FLAG_FIELDS:
        if FLAGS.is_set(name):
            value = getattr(FLAGS, name)
            changes[name] = parse_log_level(value) if name == "log_level" else value
    config = get_config().replace(**changes)
    set_config(config)
    return config
