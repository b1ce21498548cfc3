"""Centralized logging configuration for ShiftLedger.

Two output formats are supported. ``standard`` is a single human-readable
line with the active LogContext fields appended, ``json`` emits one JSON
object per record for log shipping. Both redact sensitive fields such as
PINs and bank numbers.
"""

import json
import logging
import logging.handlers
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from shiftledger.utils.logging_utils import _ContextFilter, sanitize_sensitive_data

if TYPE_CHECKING:
    from shiftledger.config.settings import ShiftLedgerConfig

# Attributes every LogRecord has; anything else came from extra= or a LogContext
_RECORD_FIELDS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
}

STANDARD_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
STANDARD_DATEFMT = "%Y-%m-%d %H:%M:%S"


def record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Structured fields attached to a record, with secrets redacted."""
    fields = {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_FIELDS and not key.startswith("_")
    }
    return sanitize_sensitive_data(fields)


class ContextFormatter(logging.Formatter):
    """Standard line format followed by the record's structured fields.

    Example output:
        2024-07-16 09:12:03 INFO     shiftledger.services.payroll_workflow:
        Recorded confirmation at revision 2 [correlation_id=3f2a9c1e
        employee_id=emp-1 period_id=2024-07-01_2024-07-15]
    """

    def __init__(self):
        super().__init__(fmt=STANDARD_FORMAT, datefmt=STANDARD_DATEFMT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = record_fields(record)
        if not fields:
            return line

        # Full ids are in the JSON output; eight characters tell runs apart
        if "correlation_id" in fields:
            fields["correlation_id"] = str(fields["correlation_id"])[:8]
        context = " ".join(f"{key}={fields[key]}" for key in sorted(fields))

        head, newline, trace = line.partition("\n")
        return f"{head} [{context}]{newline}{trace}"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Fields passed via ``extra={...}`` or a LogContext are emitted as
    top-level keys next to the standard ones.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(record_fields(record))
        return json.dumps(log_data, default=str)


@dataclass
class LoggingConfig:
    """
    Configuration for centralized logging.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format type ('standard' or 'json')
        log_file: Rotating log file; file logging is on when set
        enable_console: Enable console output (stderr)
        max_file_size: Maximum log file size in bytes (default: 10MB)
        backup_count: Number of rotated files to keep (default: 5)
    """

    log_level: str = "INFO"
    log_format: str = "standard"
    log_file: Optional[str] = None
    enable_console: bool = True
    max_file_size: int = 10 * 1024 * 1024
    backup_count: int = 5

    VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    VALID_FORMATS = ("standard", "json")

    def __post_init__(self):
        """
        Raises:
            ValueError: If the log level or format is unknown
        """
        self.log_level = self.log_level.upper()
        self.log_format = self.log_format.lower()
        if self.log_level not in self.VALID_LEVELS:
            raise ValueError(
                f"Invalid log level: {self.log_level}. "
                f"Must be one of {', '.join(self.VALID_LEVELS)}"
            )
        if self.log_format not in self.VALID_FORMATS:
            raise ValueError(
                f"Invalid log format: {self.log_format}. "
                f"Must be one of {', '.join(self.VALID_FORMATS)}"
            )

    @property
    def enable_file(self) -> bool:
        return bool(self.log_file)

    @classmethod
    def from_settings(
        cls, settings: "ShiftLedgerConfig", debug: bool = False
    ) -> "LoggingConfig":
        """Logging setup for one CLI run; ``debug`` forces the DEBUG level."""
        return cls(
            log_level="DEBUG" if debug else settings.log_level,
            log_format=settings.log_format,
            log_file=settings.log_file or None,
        )


def _build_handlers(config: LoggingConfig) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if config.enable_console:
        handlers.append(logging.StreamHandler())
    if config.enable_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                filename=log_path,
                maxBytes=config.max_file_size,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        )
    return handlers


def configure_logging(config: LoggingConfig) -> None:
    """
    Configure the root logger for the application.

    Existing root handlers are replaced, so configuring twice does not
    duplicate output.

    Args:
        config: LoggingConfig instance
    """
    reset_logging()
    root_logger = logging.getLogger()
    level = getattr(logging, config.log_level)
    root_logger.setLevel(level)

    formatter = JSONFormatter() if config.log_format == "json" else ContextFormatter()
    context_filter = _ContextFilter()
    for handler in _build_handlers(config):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root_logger.addHandler(handler)


def reset_logging() -> None:
    """Remove all root handlers and restore the default level."""
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(logging.WARNING)
