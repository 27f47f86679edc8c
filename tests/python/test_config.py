# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for ChaosCV configuration

Validates:
- Defaults and validation
- CHAOSCV_* environment variables
- Overlaying command-line flags
"""

import pytest

from chaoscv.config import (
    ChaosConfig,
    apply_flags,
    get_config,
    parse_log_level,
    reset_config,
    set_config,
)
from chaoscv.errors import ConfigurationError
from chaoscv.flags import FLAGS


class TestParseLogLevel:
    """Tests for log level parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0, 0), (3, 3), ("2", 2), ("INFO", 0), ("warning", 1), (" Fatal ", 3)],
    )
    def test_valid(self, value, expected):
        assert parse_log_level(value) == expected

    @pytest.mark.parametrize("value", [4, -1, "7", "verbose"])
    def test_invalid(self, value):
        with pytest.raises(ConfigurationError):
            parse_log_level(value)


class TestChaosConfig:
    """Tests for the configuration dataclass."""

    def test_defaults(self):
        config = ChaosConfig()
        assert config.log_level == 0
        assert config.log_dir == ""
        assert config.fatal_action == "raise"
        assert config.braces == "default"

    def test_invalid_fatal_action(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ChaosConfig(fatal_action="explode")
        assert "fatal_action" in str(exc_info.value)

    def test_invalid_level(self):
        with pytest.raises(ConfigurationError):
            ChaosConfig(log_level=5)

    def test_replace(self):
        config = ChaosConfig()
        changed = config.replace(braces="python")
        assert changed.braces == "python"
        assert config.braces == "default"

    def test_frozen(self):
        with pytest.raises(AttributeError):
            ChaosConfig().log_level = 2


class TestFromEnv:
    """Tests for reading the environment."""

    def test_empty_environment(self):
        assert ChaosConfig.from_env({}) == ChaosConfig()

    def test_all_variables(self):
        config = ChaosConfig.from_env(
            {
                "CHAOSCV_LOG_LEVEL": "WARNING",
                "CHAOSCV_LOG_DIR": "/tmp/logs",
                "CHAOSCV_FATAL_ACTION": "Abort",
                "CHAOSCV_BRACES": "MATLAB",
            }
        )
        assert config == ChaosConfig(
            log_level=1, log_dir="/tmp/logs", fatal_action="abort", braces="matlab"
        )

    def test_invalid_variable(self):
        with pytest.raises(ConfigurationError):
            ChaosConfig.from_env({"CHAOSCV_FATAL_ACTION": "ignore"})

    def test_get_config_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("CHAOSCV_LOG_LEVEL", "2")
        reset_config()
        assert get_config().log_level == 2

    def test_get_config_is_cached(self, monkeypatch):
        first = get_config()
        monkeypatch.setenv("CHAOSCV_LOG_LEVEL", "3")
        assert get_config() is first

    def test_set_config(self):
        config = ChaosConfig(braces="python")
        set_config(config)
        assert get_config() is config


class TestApplyFlags:
    """Tests for overlaying flags on the configuration."""

    def test_unset_flags_keep_config(self):
        set_config(ChaosConfig(log_level=2, braces="matlab"))
        config = apply_flags()
        assert config.log_level == 2
        assert config.braces == "matlab"

    def test_set_flags_override(self, tmp_path):
        FLAGS.parse(
            [
                "prog",
                "--log_level=ERROR",
                f"--log_dir={tmp_path}",
                "--fatal_action=abort",
                "--braces=python",
            ]
        )
        config = apply_flags()
        assert config == ChaosConfig(
            log_level=2, log_dir=str(tmp_path), fatal_action="abort", braces="python"
        )
        assert get_config() is config

    def test_invalid_flag_value(self):
        FLAGS.parse(["prog", "--log_level=LOUD"])
        with pytest.raises(ConfigurationError):
            apply_flags()
