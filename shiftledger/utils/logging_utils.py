"""Structured logging utilities with context support.

A CLI run attaches a correlation id, and payroll operations attach the
period and employee they act on. Every record logged inside such a block
carries those fields, so one confirmation or one failed lock can be traced
through the log without repeating ids in each message.
"""

import functools
import logging
import re
import threading
import time
import uuid
from typing import Any, Callable, Dict, List, Optional

_local = threading.local()

# Field names whose values must never reach a log line
SENSITIVE_FIELDS = frozenset(
    {
        "pin",
        "manager_pin",
        "password",
        "token",
        "secret",
        "api_key",
        "account_number",
        "routing_number",
    }
)

REDACTED = "***REDACTED***"

# Longest argument repr written by log_function_call
MAX_ARG_REPR = 80

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _stack() -> List[Dict[str, Any]]:
    if not hasattr(_local, "stack"):
        _local.stack = []
    return _local.stack


def get_context() -> Dict[str, Any]:
    """Fields currently attached to log records, innermost block winning."""
    merged: Dict[str, Any] = {}
    for fields in _stack():
        merged.update(fields)
    return merged


def generate_correlation_id() -> str:
    """Unique id that ties together the log lines of one CLI invocation."""
    return str(uuid.uuid4())


def get_correlation_id() -> Optional[str]:
    return get_context().get("correlation_id")


class LogContext:
    """
    Context manager for adding structured fields to log records.

    Blocks nest: an inner block adds to (or overrides) the outer fields and
    only its own fields disappear when it exits. State is per thread.

    Example:
        with LogContext(period_id="2024-07-01_2024-07-15"):
            with LogContext(employee_id="emp-1"):
                logger.info("Recorded confirmation")  # carries both ids
    """

    def __init__(self, **fields: Any):
        self.fields = fields

    def __enter__(self) -> "LogContext":
        _stack().append(self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        stack = _stack()
        # Exits run in reverse order of entry, so this block is on top
        if stack and stack[-1] is self.fields:
            stack.pop()


class _ContextFilter(logging.Filter):
    """Copies LogContext fields onto records; explicit ``extra`` wins."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in get_context().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def is_sensitive_field(name: str) -> bool:
    """Whether a field name denotes a secret (PINs, bank numbers, tokens).

    Matches whole names and ``*_pin``-style suffixes, so ``manager_pin`` and
    ``employeePin`` are sensitive while ``shipping`` is not.

    Example:
        >>> is_sensitive_field("employeePin")
        True
        >>> is_sensitive_field("shipping")
        False
    """
    snake = _CAMEL_BOUNDARY.sub("_", name).lower().replace("-", "_")
    return snake in SENSITIVE_FIELDS or any(
        snake.endswith(f"_{field}") for field in SENSITIVE_FIELDS
    )


def _sanitize_value(value: Any) -> Any:
    if isinstance(value, dict):
        return sanitize_sensitive_data(value)
    if isinstance(value, (list, tuple)):
        return [_sanitize_value(v) for v in value]
    return value


def sanitize_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Copy of ``data`` with the values of sensitive fields redacted.

    Nested dictionaries and lists are processed too. ``None`` stays
    ``None`` so a missing PIN is still visible as missing.
    """
    if not isinstance(data, dict):
        return data

    return {
        key: (REDACTED if value is not None else None)
        if is_sensitive_field(str(key))
        else _sanitize_value(value)
        for key, value in data.items()
    }


def _short_repr(value: Any) -> str:
    text = repr(value)
    if len(text) > MAX_ARG_REPR:
        return f"{text[:MAX_ARG_REPR - 3]}..."
    return text


def log_function_call(
    func: Optional[Callable] = None, *, include_args: bool = False, level: str = "DEBUG"
) -> Callable:
    """
    Decorator logging entry, exit with elapsed time, and failures.

    Arguments are logged only when ``include_args`` is set; long reprs are
    shortened and keyword arguments with sensitive names are redacted.
    Exceptions are logged and re-raised.

    Args:
        func: Function to decorate (when used without arguments)
        include_args: Whether to include function arguments in logs
        level: Log level for entry and exit (DEBUG, INFO, WARNING, ERROR)

    Example:
        @log_function_call(include_args=True, level="INFO")
        def load(data_dir):
            ...
    """
    log_level = getattr(logging, level.upper())

    def decorator(f: Callable) -> Callable:
        logger = logging.getLogger(f.__module__)

        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            if include_args:
                shown = [_short_repr(a) for a in args] + [
                    f"{k}={_short_repr(v)}"
                    for k, v in sanitize_sensitive_data(kwargs).items()
                ]
                logger.log(log_level, f"Entering {f.__name__}({', '.join(shown)})")
            else:
                logger.log(log_level, f"Entering {f.__name__}")

            started = time.perf_counter()
            try:
                result = f(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Exception in {f.__name__}: {type(e).__name__}: {e}",
                    exc_info=True,
                )
                raise
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.log(log_level, f"Exiting {f.__name__} after {elapsed_ms:.1f} ms")
            return result

        return wrapper

    if func is None:
        return decorator
    return decorator(func)
