"""Time calculation utilities for ShiftLedger.

This module provides low-level utilities for time calculations including:
- Converting between epoch milliseconds and aware datetimes
- Calendar windows (day, week, month) as half-open millisecond ranges
- Minute arithmetic and formatting

Clock entries carry epoch milliseconds. Calendar questions ("which day",
"which week") are answered in an explicit timezone passed by the caller.
"""

import datetime as dt
import math
from decimal import Decimal
from typing import Any, Optional, Tuple

MS_PER_MINUTE = 60_000
MS_PER_DAY = 24 * 60 * MS_PER_MINUTE

Window = Tuple[int, int]


def diff_minutes(start_ms: int, end_ms: int) -> float:
    """Minutes from start to end, clamped at zero.

    Example:
        >>> diff_minutes(0, 90 * 60_000)
        90.0
        >>> diff_minutes(60_000, 0)
        0.0
    """
    return max(0.0, (end_ms - start_ms) / MS_PER_MINUTE)


def minutes_to_hhmm(minutes: float) -> str:
    """Format minutes as HH:MM.

    Example:
        >>> minutes_to_hhmm(90)
        '01:30'
        >>> minutes_to_hhmm(605.4)
        '10:05'
    """
    total = int(round(max(0.0, minutes)))
    hours, mins = divmod(total, 60)
    return f"{hours:02d}:{mins:02d}"


def minutes_to_decimal_hours(minutes: float) -> Decimal:
    """Convert minutes to decimal hours with 2 decimal precision.

    Example:
        >>> minutes_to_decimal_hours(450)
        Decimal('7.50')
    """
    hours = Decimal(str(minutes)) / Decimal("60")
    return hours.quantize(Decimal("0.01"))


def from_epoch_ms(ts: int, tz: dt.tzinfo = dt.timezone.utc) -> dt.datetime:
    return dt.datetime.fromtimestamp(ts / 1000, tz=tz)


def to_epoch_ms(value: dt.datetime) -> int:
    """Convert a datetime to epoch ms; naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return int(value.timestamp() * 1000)


def parse_timestamp(value: Any, tz: dt.tzinfo = dt.timezone.utc) -> Optional[int]:
    """Convert a stored date/time value to epoch ms, or None if unreadable.

    Accepts epoch ms, datetimes, dates (midnight in ``tz``) and ISO strings.
    Epoch 0 is a valid timestamp; NaN, infinities and out-of-range dates
    are not.

    Example:
        >>> parse_timestamp(0)
        0
        >>> parse_timestamp(float("inf")) is None
        True
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else None
    try:
        if isinstance(value, dt.datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=tz)
            return to_epoch_ms(value)
        if isinstance(value, dt.date):
            return day_window(value, tz)[0]
        text = str(value).strip().replace("Z", "+00:00")
        if len(text) == 10:
            return day_window(dt.date.fromisoformat(text), tz)[0]
        parsed = dt.datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=tz)
        return to_epoch_ms(parsed)
    except (ValueError, OverflowError):
        return None


def safe_timestamp(value: Any, tz: dt.tzinfo = dt.timezone.utc) -> int:
    """Like ``parse_timestamp``, but unreadable input becomes 0.

    0 falls outside every reporting window, so report code can use the
    result without checking it.

    Example:
        >>> safe_timestamp("not a date")
        0
        >>> safe_timestamp(float("inf"))
        0
        >>> safe_timestamp(dt.date(1970, 1, 2))
        86400000
    """
    ts = parse_timestamp(value, tz)
    return 0 if ts is None else ts


def local_date(ts: int, tz: dt.tzinfo = dt.timezone.utc) -> dt.date:
    """Calendar date of a timestamp in ``tz``."""
    return from_epoch_ms(ts, tz).date()


def day_window(day: dt.date, tz: dt.tzinfo = dt.timezone.utc) -> Window:
    """Half-open [start, end) millisecond window of a calendar day.

    Computed from local midnights, so DST days are 23 or 25 hours long.
    """
    start = dt.datetime.combine(day, dt.time.min, tzinfo=tz)
    end = dt.datetime.combine(day + dt.timedelta(days=1), dt.time.min, tzinfo=tz)
    return to_epoch_ms(start), to_epoch_ms(end)


def date_range_window(
    start_date: dt.date, end_date: dt.date, tz: dt.tzinfo = dt.timezone.utc
) -> Window:
    """Window covering start_date through end_date, both days inclusive."""
    return day_window(start_date, tz)[0], day_window(end_date, tz)[1]


def start_of_week(day: dt.date, week_starts_on: int = 0) -> dt.date:
    """First day of the week containing ``day``.

    Args:
        day: Any date in the week
        week_starts_on: 0 = Sunday, 1 = Monday, ... 6 = Saturday

    Example:
        >>> start_of_week(dt.date(2024, 6, 5), 0)   # Wednesday
        datetime.date(2024, 6, 2)
        >>> start_of_week(dt.date(2024, 6, 5), 1)
        datetime.date(2024, 6, 3)
    """
    sunday_based = (day.weekday() + 1) % 7
    offset = (sunday_based - week_starts_on) % 7
    return day - dt.timedelta(days=offset)


def week_window(
    day: dt.date, week_starts_on: int = 0, tz: dt.tzinfo = dt.timezone.utc
) -> Window:
    first = start_of_week(day, week_starts_on)
    return date_range_window(first, first + dt.timedelta(days=6), tz)


def end_of_month(day: dt.date) -> dt.date:
    """Last calendar day of the month containing ``day``."""
    if day.month == 12:
        return dt.date(day.year, 12, 31)
    return dt.date(day.year, day.month + 1, 1) - dt.timedelta(days=1)


def month_window(day: dt.date, tz: dt.tzinfo = dt.timezone.utc) -> Window:
    return date_range_window(day.replace(day=1), end_of_month(day), tz)


def parse_month(month: str) -> dt.date:
    """Parse 'YYYY-MM' into the first day of that month.

    Raises:
        ValueError: If the value is not a valid year-month
    """
    try:
        return dt.datetime.strptime(month.strip(), "%Y-%m").date()
    except ValueError:
        raise ValueError(f"Invalid month '{month}', expected YYYY-MM")


def add_months(day: dt.date, months: int) -> dt.date:
    """Shift a date by whole months, clamping the day to the month's end."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    first = dt.date(year, month + 1, 1)
    return first.replace(day=min(day.day, end_of_month(first).day))


def month_difference(later: dt.date, earlier: dt.date) -> int:
    return (later.year - earlier.year) * 12 + (later.month - earlier.month)
