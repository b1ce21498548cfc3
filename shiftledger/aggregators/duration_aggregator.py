"""Duration aggregation over calendar windows.

This module sums session minutes over arbitrary [start, end) windows. A
session that crosses a window boundary contributes only the minutes that
overlap the window, so totals over adjacent windows add up exactly.

Active sessions are measured up to "now"; orphan clock-outs and sessions
without a readable start contribute nothing.
"""

import datetime as dt
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Literal, Optional

from shiftledger.calculators.time_utils import (
    day_window,
    local_date,
    minutes_to_decimal_hours,
    month_window,
    week_window,
)
from shiftledger.models.session import Session, now_ms
from shiftledger.models.site import Site, normalize_site_name

logger = logging.getLogger(__name__)

SiteStatus = Literal["complete", "in-process", "incomplete"]

UNASSIGNED_SITE = "Unassigned"


@dataclass
class EmployeeMinutes:
    """Total minutes for one employee within a window."""

    employee: str
    employee_id: str
    minutes: float


@dataclass
class SiteDayDurations:
    """Minutes worked at one site on one day, with per-employee breakdown."""

    site: str
    minutes: float = 0.0
    by_employee: Dict[str, float] = field(default_factory=dict)


@dataclass
class HoursSummary:
    """Decimal hours worked today, this week and this month."""

    today: Decimal
    this_week: Decimal
    this_month: Decimal


class DurationAggregator:
    """Sums session minutes over day, week, month and custom windows.

    Attributes:
        tz: Timezone in which calendar days are evaluated
        now: Fixed reference time in epoch ms for active sessions; when
            None, the current time is read on every call

    Example:
        >>> aggregator = DurationAggregator(tz=dt.timezone.utc)
        >>> aggregator.minutes_in_window(sessions, start_ms, end_ms)
        480.0
    """

    def __init__(self, tz: dt.tzinfo = dt.timezone.utc, now: Optional[int] = None):
        self.tz = tz
        self.now = now

    def _now(self) -> int:
        return self.now if self.now is not None else now_ms()

    def overlap_minutes(
        self,
        session: Session,
        start: Optional[int],
        end: Optional[int],
        now: Optional[int] = None,
    ) -> float:
        """Minutes of ``session`` that fall inside [start, end).

        Args:
            session: Session to measure
            start: Window start in epoch ms (None = unbounded)
            end: Window end in epoch ms (None = unbounded)
            now: Reference time for active sessions

        Returns:
            Overlap in minutes (0.0 when there is none)
        """
        if now is None:
            now = self._now()
        return session.overlap_minutes(start, end, now)

    def minutes_in_window(
        self,
        sessions: Iterable[Session],
        start: Optional[int],
        end: Optional[int],
        closed_only: bool = False,
    ) -> float:
        """Total overlapping minutes of all sessions with [start, end)."""
        now = self._now()
        total = 0.0
        for session in sessions:
            if closed_only and not session.is_closed:
                continue
            total += self.overlap_minutes(session, start, end, now)
        return total

    def hours_for_period(
        self, sessions: Iterable[Session], start: int, end: int
    ) -> Decimal:
        return minutes_to_decimal_hours(self.minutes_in_window(sessions, start, end))

    def totals_by_employee(
        self,
        sessions: Iterable[Session],
        start: Optional[int] = None,
        end: Optional[int] = None,
    ) -> List[EmployeeMinutes]:
        """Closed-session minutes per employee, largest total first.

        Example:
            >>> totals = aggregator.totals_by_employee(sessions, start_ms, end_ms)
            >>> totals[0].employee, totals[0].minutes
            ('Ana Diaz', 480.0)
        """
        totals: Dict[str, EmployeeMinutes] = {}
        now = self._now()
        for session in sessions:
            if not session.is_closed:
                continue
            minutes = self.overlap_minutes(session, start, end, now)
            if minutes <= 0:
                continue
            key = session.employee_id or session.employee
            if key not in totals:
                totals[key] = EmployeeMinutes(
                    employee=session.employee,
                    employee_id=session.employee_id,
                    minutes=0.0,
                )
            totals[key].minutes += minutes

        result = sorted(totals.values(), key=lambda t: (-t.minutes, t.employee))
        logger.debug(f"Computed totals for {len(result)} employees")
        return result

    def durations_by_site(
        self, sessions: Iterable[Session], day: dt.date
    ) -> Dict[str, SiteDayDurations]:
        """Minutes per site overlapping one calendar day.

        Active sessions count up to now; sessions without a site are
        grouped under "Unassigned".
        """
        start, end = day_window(day, self.tz)
        now = self._now()
        result: Dict[str, SiteDayDurations] = {}
        for session in sessions:
            if session.in_entry is None:
                continue
            minutes = self.overlap_minutes(session, start, end, now)
            if minutes <= 0:
                continue
            site = session.in_entry.site or UNASSIGNED_SITE
            bucket = result.setdefault(site, SiteDayDurations(site=site))
            bucket.minutes += minutes
            bucket.by_employee[session.employee] = (
                bucket.by_employee.get(session.employee, 0.0) + minutes
            )
        return result

    def minutes_by_start_day(
        self,
        sessions: Iterable[Session],
        site_name: str,
        day: dt.date,
        employee_id: Optional[str] = None,
    ) -> int:
        """Whole minutes of closed sessions at a site that START on ``day``.

        A shift that crosses midnight belongs entirely to its clock-in day,
        which is what "hours for this job" views expect.
        """
        wanted = normalize_site_name(site_name)
        total = 0
        for session in sessions:
            if not session.is_closed:
                continue
            if employee_id and session.employee_id != employee_id:
                continue
            if normalize_site_name(session.in_entry.site or "") != wanted:
                continue
            if local_date(session.in_entry.ts, self.tz) != day:
                continue
            total += round(session.duration_minutes())
        return total

    def site_statuses(
        self, sessions: Iterable[Session], sites: Iterable[Site], day: dt.date
    ) -> Dict[str, SiteStatus]:
        """Daily status per site: complete, in-process or incomplete.

        A site is complete when a closed session overlaps the day,
        in-process when only an active one does, incomplete otherwise.
        """
        start, end = day_window(day, self.tz)
        now = self._now()
        session_list = list(sessions)
        statuses: Dict[str, SiteStatus] = {}

        for site in sites:
            wanted = normalize_site_name(site.name)
            has_closed = False
            has_active = False
            for session in session_list:
                if normalize_site_name(session.site or "") != wanted:
                    continue
                session_start = session.start_ts
                session_end = session.out_entry.ts if session.out_entry else now
                if not (session_end > start and session_start < end):
                    continue
                if session.out_entry is not None:
                    has_closed = True
                elif session.active:
                    has_active = True

            if has_closed:
                statuses[site.name] = "complete"
            elif has_active:
                statuses[site.name] = "in-process"
            else:
                statuses[site.name] = "incomplete"
        return statuses

    def has_open_shift_on_day(
        self,
        sessions: Iterable[Session],
        site_name: str,
        day: dt.date,
        employee_id: Optional[str] = None,
    ) -> bool:
        """Whether an active session at the site overlaps ``day``."""
        start, end = day_window(day, self.tz)
        wanted = normalize_site_name(site_name)
        for session in sessions:
            if not session.active or session.in_entry is None:
                continue
            if employee_id and session.employee_id != employee_id:
                continue
            if normalize_site_name(session.in_entry.site or "") != wanted:
                continue
            if self.overlap_minutes(session, start, end) > 0:
                return True
        return False

    def employee_hours_summary(
        self, sessions: Iterable[Session], day: dt.date, week_starts_on: int = 0
    ) -> HoursSummary:
        """Hours today, this week and this month for an employee's sessions."""
        session_list = list(sessions)
        return HoursSummary(
            today=self.hours_for_period(session_list, *day_window(day, self.tz)),
            this_week=self.hours_for_period(
                session_list, *week_window(day, week_starts_on, self.tz)
            ),
            this_month=self.hours_for_period(session_list, *month_window(day, self.tz)),
        )

    def minutes_by_employee_and_site(
        self, sessions: Iterable[Session], start: int, end: int
    ) -> Dict[str, Dict[str, float]]:
        """Closed-session minutes keyed by employee id, then site name."""
        result: Dict[str, Dict[str, float]] = defaultdict(lambda: defaultdict(float))
        now = self._now()
        for session in sessions:
            if not session.is_closed:
                continue
            minutes = self.overlap_minutes(session, start, end, now)
            if minutes > 0:
                key = session.employee_id or session.employee
                result[key][session.site or UNASSIGNED_SITE] += minutes
        return {k: dict(v) for k, v in result.items()}
