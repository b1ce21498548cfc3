"""Tests for structured logging utilities."""

import json
import logging
import uuid

import pytest

from shiftledger.config.logging_config import LoggingConfig, configure_logging
from shiftledger.utils.logging_utils import (
    LogContext,
    generate_correlation_id,
    get_context,
    get_correlation_id,
    is_sensitive_field,
    log_function_call,
    sanitize_sensitive_data,
)


@pytest.fixture
def json_log(tmp_path):
    """Configure JSON file logging and return a reader for the records."""
    log_file = tmp_path / "test.log"
    configure_logging(
        LoggingConfig(
            log_level="DEBUG",
            log_format="json",
            enable_console=False,
            log_file=str(log_file),
        )
    )

    def read():
        for handler in logging.getLogger().handlers:
            handler.flush()
        return [json.loads(line) for line in log_file.read_text().splitlines()]

    return read


class TestGenerateCorrelationId:
    """Test correlation ID generation."""

    def test_generate_correlation_id_format(self):
        """Test correlation ID has correct UUID format."""
        uuid.UUID(generate_correlation_id())

    def test_generate_correlation_id_uniqueness(self):
        """Test each correlation ID is unique."""
        ids = [generate_correlation_id() for _ in range(100)]
        assert len(set(ids)) == 100


class TestLogContext:
    """Test LogContext context manager."""

    def test_context_adds_fields_to_logs(self, json_log):
        """Test context manager adds fields to log records."""
        with LogContext(period_id="2024-07-01_2024-07-15", employee_id="emp-1"):
            logging.getLogger("test_module").info("Confirmed")

        record = json_log()[0]
        assert record["period_id"] == "2024-07-01_2024-07-15"
        assert record["employee_id"] == "emp-1"

    def test_context_nesting_and_cleanup(self, json_log):
        """Test nested contexts merge fields and are removed on exit."""
        logger = logging.getLogger("test_module")

        with LogContext(period_id="p1"):
            with LogContext(employee_id="emp-2"):
                logger.info("Nested")
            logger.info("Outer")
        logger.info("Outside")

        nested, outer, outside = json_log()
        assert (nested["period_id"], nested["employee_id"]) == ("p1", "emp-2")
        assert outer["period_id"] == "p1"
        assert "employee_id" not in outer
        assert "period_id" not in outside

    def test_explicit_extra_wins_over_context(self, json_log):
        with LogContext(employee_id="emp-1"):
            logging.getLogger("test_module").info(
                "Edited", extra={"employee_id": "emp-2"}
            )

        assert json_log()[0]["employee_id"] == "emp-2"

    def test_get_context(self):
        with LogContext(period_id="p1"):
            assert get_context() == {"period_id": "p1"}
        assert get_context() == {}

    def test_get_correlation_id_from_context(self):
        """Test retrieving correlation ID from context."""
        corr_id = generate_correlation_id()

        with LogContext(correlation_id=corr_id):
            assert get_correlation_id() == corr_id

    def test_get_correlation_id_outside_context(self):
        """Test getting correlation ID outside context returns None."""
        assert get_correlation_id() is None


class TestSanitizeSensitiveData:
    """Test sensitive data sanitization."""

    @pytest.mark.parametrize(
        "name", ["pin", "managerPin", "employee_pin", "password", "routingNumber"]
    )
    def test_sensitive_names(self, name):
        assert is_sensitive_field(name)

    @pytest.mark.parametrize("name", ["shipping", "pinned", "employee", "site"])
    def test_ordinary_names(self, name):
        assert not is_sensitive_field(name)

    def test_sanitize_nested_structures(self):
        data = {
            "employee": {"name": "Ana", "pin": "1234"},
            "accounts": [{"accountNumber": "999", "bank": "Harbor"}],
        }

        sanitized = sanitize_sensitive_data(data)

        assert sanitized["employee"] == {"name": "Ana", "pin": "***REDACTED***"}
        assert sanitized["accounts"] == [
            {"accountNumber": "***REDACTED***", "bank": "Harbor"}
        ]
        assert data["employee"]["pin"] == "1234"

    def test_sanitize_preserves_non_sensitive(self):
        data = {"employee": "Ana Diaz", "site": "Harbor Office", "hours": 8.5}

        assert sanitize_sensitive_data(data) == data

    def test_sanitize_handles_none(self):
        assert sanitize_sensitive_data({"pin": None}) == {"pin": None}


class TestLogFunctionCall:
    """Test function call logging decorator."""

    def test_logs_entry_and_exit(self, json_log):
        @log_function_call
        def add(x, y):
            return x + y

        assert add(2, 3) == 5

        entering, exiting = [r["message"] for r in json_log()]
        assert entering == "Entering add"
        assert exiting.startswith("Exiting add after ")
        assert exiting.endswith(" ms")

    def test_includes_args_with_redaction(self, json_log):
        @log_function_call(include_args=True, level="INFO")
        def unlock(period_id, pin=None):
            return period_id

        unlock("p1", pin="4321")

        entry = json_log()[0]
        assert entry["level"] == "INFO"
        assert "'p1'" in entry["message"]
        assert "***REDACTED***" in entry["message"]
        assert "4321" not in entry["message"]

    def test_exceptions_are_logged_and_reraised(self, json_log):
        @log_function_call
        def failing():
            raise ValueError("Test error")

        with pytest.raises(ValueError):
            failing()

        error = json_log()[-1]
        assert error["level"] == "ERROR"
        assert "ValueError: Test error" in error["message"]
        assert "exception" in error

    def test_long_arguments_are_shortened(self, json_log):
        @log_function_call(include_args=True)
        def load(entries):
            return len(entries)

        load(list(range(1000)))

        entering = json_log()[0]["message"]
        assert entering.endswith("...)")
        assert len(entering) < 120
