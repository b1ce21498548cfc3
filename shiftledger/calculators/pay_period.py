"""Pay period date ranges.

A pay period is an inclusive date range whose document id is
"YYYY-MM-DD_YYYY-MM-DD". The range containing a given day depends on the
pay frequency:

- weekly: the week containing the day (week start from settings)
- bi-weekly: two weeks beginning with the week containing the day
- semi-monthly: the 1st-15th or the 16th-end of month
- monthly: the calendar month
- custom: an explicit start and end date
"""

import datetime as dt
from dataclasses import dataclass
from typing import Literal, Optional

from shiftledger.calculators.time_utils import (
    Window,
    add_months,
    date_range_window,
    end_of_month,
    start_of_week,
)
from shiftledger.models.payroll import period_id_for

PayFrequency = Literal["weekly", "bi-weekly", "semi-monthly", "monthly", "custom"]

PAY_FREQUENCIES = ("weekly", "bi-weekly", "semi-monthly", "monthly", "custom")


@dataclass(frozen=True)
class PayPeriodRange:
    """An inclusive date range for one payroll run."""

    start_date: dt.date
    end_date: dt.date

    @property
    def id(self) -> str:
        return period_id_for(self.start_date, self.end_date)

    def window(self, tz: dt.tzinfo = dt.timezone.utc) -> Window:
        """Half-open millisecond window covering every day of the range."""
        return date_range_window(self.start_date, self.end_date, tz)

    def contains(self, day: dt.date) -> bool:
        return self.start_date <= day <= self.end_date


def pay_period_for(
    day: dt.date,
    frequency: PayFrequency = "monthly",
    week_starts_on: int = 0,
    custom_start: Optional[dt.date] = None,
    custom_end: Optional[dt.date] = None,
) -> PayPeriodRange:
    """Pay period of ``frequency`` that contains ``day``.

    Args:
        day: Any day inside the wanted period
        frequency: weekly, bi-weekly, semi-monthly, monthly or custom
        week_starts_on: First day of the week (0 = Sunday)
        custom_start: Start date for the custom frequency
        custom_end: End date for the custom frequency

    Returns:
        PayPeriodRange for the period

    Raises:
        ValueError: If the frequency is unknown or a custom range is
            missing or inverted

    Example:
        >>> pay_period_for(dt.date(2024, 7, 20), "semi-monthly").id
        '2024-07-16_2024-07-31'
    """
    if frequency == "weekly":
        start = start_of_week(day, week_starts_on)
        return PayPeriodRange(start, start + dt.timedelta(days=6))

    if frequency == "bi-weekly":
        start = start_of_week(day, week_starts_on)
        return PayPeriodRange(start, start + dt.timedelta(days=13))

    if frequency == "semi-monthly":
        if day.day <= 15:
            return PayPeriodRange(day.replace(day=1), day.replace(day=15))
        return PayPeriodRange(day.replace(day=16), end_of_month(day))

    if frequency == "monthly":
        return PayPeriodRange(day.replace(day=1), end_of_month(day))

    if frequency == "custom":
        if custom_start is None or custom_end is None:
            raise ValueError("Custom pay periods need a start and an end date")
        if custom_end < custom_start:
            raise ValueError(
                f"Custom pay period ends ({custom_end}) "
                f"before it starts ({custom_start})"
            )
        return PayPeriodRange(custom_start, custom_end)

    raise ValueError(
        f"Unknown pay frequency '{frequency}', "
        f"expected one of {', '.join(PAY_FREQUENCIES)}"
    )


def shift_period(
    day: dt.date, frequency: PayFrequency, amount: int, week_starts_on: int = 0
) -> PayPeriodRange:
    """The period ``amount`` steps before or after the one containing ``day``."""
    if frequency == "custom":
        raise ValueError("Custom pay periods cannot be shifted")
    period = pay_period_for(day, frequency, week_starts_on)
    if frequency == "weekly":
        target = period.start_date + dt.timedelta(weeks=amount)
    elif frequency == "bi-weekly":
        target = period.start_date + dt.timedelta(weeks=2 * amount)
    elif frequency == "semi-monthly":
        target = period.start_date
        for _ in range(abs(amount)):
            if amount > 0:
                target = _next_semi_monthly_start(target)
            else:
                target = _previous_semi_monthly_start(target)
    else:
        target = add_months(period.start_date, amount)
    return pay_period_for(target, frequency, week_starts_on)


def _next_semi_monthly_start(start: dt.date) -> dt.date:
    if start.day < 16:
        return start.replace(day=16)
    return end_of_month(start) + dt.timedelta(days=1)


def _previous_semi_monthly_start(start: dt.date) -> dt.date:
    if start.day >= 16:
        return start.replace(day=1)
    return (start.replace(day=1) - dt.timedelta(days=1)).replace(day=16)


def parse_period_id(period_id: str) -> PayPeriodRange:
    """Parse a "YYYY-MM-DD_YYYY-MM-DD" period id.

    Raises:
        ValueError: If the id is not two ISO dates joined by an underscore
    """
    try:
        start_text, end_text = period_id.split("_")
        return PayPeriodRange(
            dt.date.fromisoformat(start_text), dt.date.fromisoformat(end_text)
        )
    except ValueError:
        raise ValueError(
            f"Invalid payroll period id '{period_id}', expected YYYY-MM-DD_YYYY-MM-DD"
        )
