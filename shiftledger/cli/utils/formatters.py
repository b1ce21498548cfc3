"""Output formatting utilities for CLI."""

import re
from decimal import Decimal
from typing import List, Sequence

import click

from shiftledger.calculators.time_utils import minutes_to_hhmm

# Amounts, durations, counts and percentages are right-aligned in tables
_NUMERIC_CELL = re.compile(r"^-?\$?[\d,]+(\.\d+)?%?$|^\d+:\d{2}$")

STATUS_COLORS = {
    "draft": "white",
    "final": "yellow",
    "locked": "cyan",
    "paid": "green",
}


def format_success(message: str) -> str:
    """Format a success message with green color.

    Args:
        message: The success message to format

    Returns:
        Formatted success message with color
    """
    return click.style(f"✓ {message}", fg="green", bold=True)


def format_error(message: str) -> str:
    """Format an error message with red color."""
    return click.style(f"✗ {message}", fg="red", bold=True)


def format_warning(message: str) -> str:
    return click.style(f"⚠ {message}", fg="yellow", bold=True)


def format_info(message: str) -> str:
    return click.style(f"ℹ {message}", fg="blue")


def format_status(status: str) -> str:
    """Color a payroll period status by how far along it is."""
    return click.style(status, fg=STATUS_COLORS.get(status, "white"), bold=True)


def format_money(amount: Decimal) -> str:
    """Format a dollar amount, negatives with a leading minus.

    Example:
        >>> format_money(Decimal("-12.5"))
        '-$12.50'
    """
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_duration(minutes: float) -> str:
    """Format minutes as HH:MM."""
    return minutes_to_hhmm(minutes)


def format_table(
    headers: List[str], rows: Sequence[Sequence[object]], max_width: int = 40
) -> str:
    """Format rows as a bordered table.

    A column whose cells are all amounts, durations, counts or percentages
    is right-aligned; anything else is left-aligned. Cells wider than
    ``max_width`` are cut.

    Args:
        headers: Column headers
        rows: Data rows; cells beyond the header count are dropped
        max_width: Maximum width of a column

    Returns:
        Formatted table, or an empty string without headers
    """
    if not headers:
        return ""

    cells = [[str(cell)[:max_width] for cell in row[: len(headers)]] for row in rows]
    widths = [
        min(max([len(h)] + [len(row[i]) for row in cells if i < len(row)]), max_width)
        for i, h in enumerate(headers)
    ]
    numeric = [
        bool(cells)
        and all(_NUMERIC_CELL.match(row[i]) for row in cells if i < len(row))
        for i in range(len(headers))
    ]

    def line(values: Sequence[str], align: Sequence[bool]) -> str:
        padded = [
            value.rjust(width) if right else value.ljust(width)
            for value, width, right in zip(values, widths, align)
        ]
        return "| " + " | ".join(padded) + " |"

    separator = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
    lines = [separator, line(headers, [False] * len(headers)), separator]
    if cells:
        lines.extend(line(row, numeric) for row in cells)
        lines.append(separator)
    return "\n".join(lines)
