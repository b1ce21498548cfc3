"""Tests for centralized logging configuration."""

import json
import logging
import logging.handlers
import sys

import pytest

from shiftledger.config import reload_config
from shiftledger.config.logging_config import (
    ContextFormatter,
    JSONFormatter,
    LoggingConfig,
    configure_logging,
    reset_logging,
)
from shiftledger.utils.logging_utils import LogContext


class TestLoggingConfig:
    """Test LoggingConfig class."""

    def test_default_configuration(self):
        """Test default logging configuration."""
        config = LoggingConfig()

        assert config.log_level == "INFO"
        assert config.log_format == "standard"
        assert config.log_file is None
        assert config.enable_console is True
        assert config.enable_file is False
        assert config.max_file_size == 10 * 1024 * 1024  # 10MB
        assert config.backup_count == 5

    def test_level_and_format_are_normalized(self):
        config = LoggingConfig(log_level="debug", log_format="JSON")

        assert (config.log_level, config.log_format) == ("DEBUG", "json")

    def test_from_settings(self, mock_env, monkeypatch):
        """Test configuration from the environment-backed settings."""
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        monkeypatch.setenv("LOG_FORMAT", "json")
        monkeypatch.setenv("LOG_FILE", "/tmp/shiftledger.log")
        settings = reload_config()

        config = LoggingConfig.from_settings(settings)

        assert config.log_level == "WARNING"
        assert config.log_format == "json"
        assert config.enable_file is True

    def test_debug_flag_wins_over_settings(self, test_config):
        settings = test_config.model_copy(update={"log_level": "ERROR"})

        config = LoggingConfig.from_settings(settings, debug=True)

        assert config.log_level == "DEBUG"
        assert config.enable_file is False

    def test_invalid_log_level(self):
        """Test invalid log level raises error."""
        with pytest.raises(ValueError, match="Invalid log level"):
            LoggingConfig(log_level="INVALID")

    def test_invalid_log_format(self):
        """Test invalid log format raises error."""
        with pytest.raises(ValueError, match="Invalid log format"):
            LoggingConfig(log_format="xml")


class TestConfigureLogging:
    """Test configure_logging function."""

    def test_console_handler(self):
        configure_logging(LoggingConfig(log_level="DEBUG"))

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_reconfiguring_does_not_duplicate_handlers(self):
        configure_logging(LoggingConfig())
        configure_logging(LoggingConfig())

        assert len(logging.getLogger().handlers) == 1

    def test_file_handler_writes_json(self, tmp_path):
        log_file = tmp_path / "logs" / "shiftledger.log"
        configure_logging(
            LoggingConfig(
                log_format="json",
                enable_console=False,
                    log_file=str(log_file),
            )
        )

        with LogContext(period_id="2024-07-01_2024-07-15"):
            logging.getLogger("shiftledger.test").info(
                "Locked", extra={"employee_pin": "1234"}
            )
        for handler in logging.getLogger().handlers:
            handler.flush()

        record = json.loads(log_file.read_text().strip())
        assert record["message"] == "Locked"
        assert record["level"] == "INFO"
        assert record["logger"] == "shiftledger.test"
        assert record["period_id"] == "2024-07-01_2024-07-15"
        assert record["employee_pin"] == "***REDACTED***"
        assert isinstance(
            logging.getLogger().handlers[0], logging.handlers.RotatingFileHandler
        )

    def test_reset_logging(self):
        configure_logging(LoggingConfig(log_level="DEBUG"))

        reset_logging()

        root = logging.getLogger()
        assert root.handlers == []
        assert root.level == logging.WARNING


class TestJSONFormatter:
    """Test JSON formatter."""

    def test_exception_is_included(self):
        formatter = JSONFormatter()
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.getLogger("x").makeRecord(
                "x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )

        data = json.loads(formatter.format(record))

        assert data["message"] == "failed"
        assert "RuntimeError: boom" in data["exception"]


class TestContextFormatter:
    """Test the standard line formatter."""

    def make_record(self, **fields):
        record = logging.getLogger("shiftledger.test").makeRecord(
            "shiftledger.test", logging.INFO, __file__, 1, "Locked", (), None
        )
        for key, value in fields.items():
            setattr(record, key, value)
        return record

    def test_plain_record(self):
        line = ContextFormatter().format(self.make_record())

        assert line.endswith("INFO     shiftledger.test: Locked")

    def test_context_fields_are_appended(self):
        record = self.make_record(
            period_id="2024-07-01_2024-07-15",
            correlation_id="3f2a9c1e-0000-4000-8000-000000000000",
            manager_pin="4321",
        )

        line = ContextFormatter().format(record)

        assert line.endswith(
            "Locked [correlation_id=3f2a9c1e manager_pin=***REDACTED*** "
            "period_id=2024-07-01_2024-07-15]"
        )
