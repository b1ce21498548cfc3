"""
Unit tests for configuration management.
"""

import datetime as dt
from pathlib import Path

import pytest
from pydantic import ValidationError

from shiftledger.config.settings import (
    ShiftLedgerConfig,
    get_config,
    load_config,
    reload_config,
)


class TestShiftLedgerConfig:
    """Test cases for ShiftLedgerConfig."""

    def test_config_with_valid_env_vars(self, test_config):
        """Test configuration loads correctly with valid environment variables."""
        assert test_config.data_dir == Path("test-data")
        assert test_config.timezone == "UTC"
        assert test_config.default_pay_frequency == "semi-monthly"
        assert test_config.environment == "testing"
        assert test_config.debug is True
        assert test_config.log_level == "DEBUG"

    def test_tz_property(self, mock_env, monkeypatch):
        monkeypatch.setenv("TIMEZONE", "America/New_York")

        config = reload_config()

        assert config.tz.utcoffset(dt.datetime(2024, 7, 1)) == dt.timedelta(hours=-4)

    def test_defaults(self, monkeypatch):
        for name in ("SHIFTLEDGER_DATA_DIR", "TIMEZONE", "DEFAULT_PAY_FREQUENCY",
                     "ENVIRONMENT", "DEBUG", "LOG_LEVEL", "LOG_FORMAT", "LOG_FILE"):
            monkeypatch.delenv(name, raising=False)

        config = ShiftLedgerConfig(_env_file=None)

        assert config.data_dir == Path("data")
        assert config.default_pay_frequency == "monthly"
        assert config.log_format == "standard"
        assert config.log_file is None

    def test_values_are_normalized(self, mock_env, monkeypatch):
        monkeypatch.setenv("DEFAULT_PAY_FREQUENCY", "Bi-Weekly")
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.setenv("LOG_FORMAT", "JSON")

        config = reload_config()

        assert config.default_pay_frequency == "bi-weekly"
        assert config.log_level == "WARNING"
        assert config.log_format == "json"

    @pytest.mark.parametrize(
        "name,value",
        [
            ("TIMEZONE", "Mars/Olympus"),
            ("DEFAULT_PAY_FREQUENCY", "fortnightly"),
            ("LOG_LEVEL", "LOUD"),
            ("LOG_FORMAT", "xml"),
            ("ENVIRONMENT", "staging"),
        ],
    )
    def test_invalid_values(self, mock_env, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ValidationError):
            load_config()


class TestConfigFunctions:
    """Test configuration helper functions."""

    def test_get_config_caches_instance(self, mock_env):
        first = get_config()

        assert get_config() is first

    def test_reload_config_replaces_instance(self, mock_env, monkeypatch):
        first = get_config()
        monkeypatch.setenv("LOG_LEVEL", "ERROR")

        second = reload_config()

        assert second is not first
        assert get_config().log_level == "ERROR"

    def test_load_config_reads_env_file(self, mock_env, monkeypatch, tmp_path):
        monkeypatch.delenv("SHIFTLEDGER_DATA_DIR")
        env_file = tmp_path / "custom.env"
        env_file.write_text("SHIFTLEDGER_DATA_DIR=/srv/ledger\n")

        config = load_config(str(env_file))

        assert config.data_dir == Path("/srv/ledger")
