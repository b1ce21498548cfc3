"""Aggregators module for summing worked time over calendar windows.

This module provides functionality to total session minutes per window,
employee and site, and to build weekly utilization reports.
"""

from shiftledger.aggregators.duration_aggregator import (
    DurationAggregator,
    EmployeeMinutes,
    HoursSummary,
    SiteDayDurations,
)
from shiftledger.aggregators.weekly_hours_calculator import (
    WeeklyHoursCalculator,
    WeeklyHoursData,
)

__all__ = [
    "DurationAggregator",
    "EmployeeMinutes",
    "HoursSummary",
    "SiteDayDurations",
    "WeeklyHoursCalculator",
    "WeeklyHoursData",
]
