"""Weekly hours calculator for generating crew utilization reports.

This module provides functionality to calculate weekly hours per employee
from reconstructed sessions, and to generate week-by-week matrices.
"""

import datetime as dt
import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

import pandas as pd

from shiftledger.aggregators.duration_aggregator import DurationAggregator
from shiftledger.calculators.time_utils import (
    local_date,
    minutes_to_decimal_hours,
    start_of_week,
    week_window,
)
from shiftledger.models.session import Session

logger = logging.getLogger(__name__)


@dataclass
class WeeklyHoursData:
    """Container for weekly hours data.

    Attributes:
        employee: Employee display name
        week_start: First day of the week (per the week-start setting)
        hours: Hours worked in the week (decimal, 2 places)
        sessions_count: Number of sessions that overlap the week

    Example:
        >>> data = WeeklyHoursData(
        ...     employee="Ana Diaz",
        ...     week_start=dt.date(2024, 6, 2),
        ...     hours=Decimal("38.50"),
        ...     sessions_count=5,
        ... )
        >>> data.week_label
        '2024-06-02'
    """

    employee: str
    week_start: dt.date
    hours: Decimal
    sessions_count: int

    @property
    def week_label(self) -> str:
        return self.week_start.isoformat()


class WeeklyHoursCalculator:
    """Calculates weekly hours and generates utilization matrices.

    Sessions that cross a week boundary are split between the weeks
    proportionally to their overlap. Only closed sessions are counted.

    Example:
        >>> calculator = WeeklyHoursCalculator(week_starts_on=1)
        >>> weekly = calculator.calculate_weekly_hours(sessions)
        >>> matrix = calculator.generate_weekly_matrix(weekly)
    """

    def __init__(
        self,
        week_starts_on: int = 0,
        tz: dt.tzinfo = dt.timezone.utc,
        aggregator: Optional[DurationAggregator] = None,
    ):
        self.week_starts_on = week_starts_on
        self.tz = tz
        self.aggregator = aggregator or DurationAggregator(tz=tz)

    def calculate_weekly_hours(self, sessions: List[Session]) -> List[WeeklyHoursData]:
        """Calculate weekly hours per employee.

        Args:
            sessions: Reconstructed sessions

        Returns:
            List of WeeklyHoursData, one per employee-week, ordered by
            employee then week
        """
        closed = [s for s in sessions if s.is_closed]
        logger.info(f"Calculating weekly hours for {len(closed)} closed sessions")

        if not closed:
            logger.info("No sessions to process, returning empty list")
            return []

        minutes: Dict[Tuple[str, dt.date], float] = defaultdict(float)
        counts: Dict[Tuple[str, dt.date], int] = defaultdict(int)

        for session in closed:
            first = start_of_week(
                local_date(session.in_entry.ts, self.tz), self.week_starts_on
            )
            last = start_of_week(
                local_date(session.end_ts(), self.tz), self.week_starts_on
            )
            week = first
            while week <= last:
                start, end = week_window(week, self.week_starts_on, self.tz)
                overlap = self.aggregator.overlap_minutes(session, start, end)
                if overlap > 0:
                    key = (session.employee, week)
                    minutes[key] += overlap
                    counts[key] += 1
                week += dt.timedelta(days=7)

        result = [
            WeeklyHoursData(
                employee=employee,
                week_start=week,
                hours=minutes_to_decimal_hours(total),
                sessions_count=counts[(employee, week)],
            )
            for (employee, week), total in sorted(minutes.items())
        ]

        logger.info(f"Calculated {len(result)} weekly hour records")
        return result

    def generate_weekly_matrix(
        self, weekly_data: List[WeeklyHoursData]
    ) -> pd.DataFrame:
        """Generate an employee × week matrix of hours.

        Args:
            weekly_data: List of weekly hours data

        Returns:
            DataFrame with employees as index and week-start labels as
            columns (sorted); missing cells are NaN
        """
        logger.info(f"Generating weekly matrix from {len(weekly_data)} records")

        if not weekly_data:
            logger.info("No weekly data, returning empty DataFrame")
            return pd.DataFrame()

        matrix_data: Dict[str, Dict[str, float]] = defaultdict(dict)
        for record in weekly_data:
            matrix_data[record.employee][record.week_label] = float(record.hours)

        df = pd.DataFrame.from_dict(matrix_data, orient="index")
        df = df.reindex(sorted(df.columns), axis=1).sort_index()

        logger.info(
            f"Generated matrix with {len(df)} employees and {len(df.columns)} weeks"
        )
        return df

    def filter_by_employee(
        self, weekly_data: List[WeeklyHoursData], employee: str
    ) -> List[WeeklyHoursData]:
        return [w for w in weekly_data if w.employee == employee]
