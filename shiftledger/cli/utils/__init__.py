"""CLI utility functions."""

from shiftledger.cli.utils.formatters import (
    format_duration,
    format_error,
    format_info,
    format_money,
    format_success,
    format_table,
    format_warning,
)

__all__ = [
    "format_duration",
    "format_error",
    "format_info",
    "format_money",
    "format_success",
    "format_table",
    "format_warning",
]
