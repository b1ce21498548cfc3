"""Recurrence rules for cleaning schedules.

A schedule is anchored on its start date and repeats according to its
repeat frequency until its optional repeat-until date. Weekly-style rules
also require the day to be one of the schedule's weekdays and count weeks
as calendar weeks starting on the configured week-start day.
"""

import datetime as dt
from typing import Iterable, List, Optional

from shiftledger.calculators.time_utils import month_difference, start_of_week
from shiftledger.models.schedule import CleaningSchedule
from shiftledger.models.site import normalize_site_name

WEEKLY_INTERVALS = {"weekly": 1, "every-2-weeks": 2, "every-3-weeks": 3}
MONTHLY_INTERVALS = {"monthly": 1, "every-2-months": 2, "quarterly": 3}


def calendar_weeks_between(
    later: dt.date, earlier: dt.date, week_starts_on: int = 0
) -> int:
    """Number of week boundaries crossed going from ``earlier`` to ``later``.

    Example:
        >>> calendar_weeks_between(dt.date(2024, 6, 9), dt.date(2024, 6, 8), 0)
        1
    """
    first = start_of_week(earlier, week_starts_on)
    delta = start_of_week(later, week_starts_on) - first
    return delta.days // 7


def is_schedule_active_on_date(
    schedule: CleaningSchedule, day: dt.date, week_starts_on: int = 0
) -> bool:
    """Whether the schedule's job takes place on ``day``.

    Args:
        schedule: Cleaning schedule to evaluate
        day: Calendar day to check
        week_starts_on: First day of the week (0 = Sunday)

    Returns:
        True if the recurrence rule hits ``day`` and the day is not one of
        the schedule's exception dates

    Example:
        >>> schedule = CleaningSchedule(
        ...     siteName="Harbor Office",
        ...     startDate="2024-06-03",
        ...     repeatFrequency="every-2-weeks",
        ...     daysOfWeek=["Monday"],
        ... )
        >>> is_schedule_active_on_date(schedule, dt.date(2024, 6, 17))
        True
        >>> is_schedule_active_on_date(schedule, dt.date(2024, 6, 10))
        False
    """
    start = schedule.start_date
    if start is None or day < start:
        return False
    if schedule.repeat_until is not None and day > schedule.repeat_until:
        return False
    if day in schedule.exception_dates:
        return False

    frequency = schedule.repeat_frequency

    if frequency == "does-not-repeat":
        return day == start

    if frequency in WEEKLY_INTERVALS:
        if day.strftime("%A") not in schedule.days_of_week:
            return False
        weeks = calendar_weeks_between(day, start, week_starts_on)
        return weeks >= 0 and weeks % WEEKLY_INTERVALS[frequency] == 0

    months = month_difference(day, start)

    if frequency in MONTHLY_INTERVALS:
        return (
            day.day == start.day
            and months >= 0
            and months % MONTHLY_INTERVALS[frequency] == 0
        )

    if frequency == "yearly":
        return day.day == start.day and day.month == start.month

    return False


def active_schedules(
    schedules: Iterable[CleaningSchedule],
    day: dt.date,
    week_starts_on: int = 0,
    site_name: Optional[str] = None,
) -> List[CleaningSchedule]:
    """Schedules active on ``day``, optionally limited to one site."""
    wanted = normalize_site_name(site_name) if site_name else None
    return [
        s
        for s in schedules
        if (wanted is None or normalize_site_name(s.site_name) == wanted)
        and is_schedule_active_on_date(s, day, week_starts_on)
    ]
