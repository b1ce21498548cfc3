"""Site profitability calculations.

This module folds sessions, mileage and expenses into money per site:

- Monthly site profit: service charge (site service price × serviced days)
  minus labor, mileage and other expenses, one row per directory site that
  saw any activity in the month, plus a totals row.
- Daily job profitability: revenue for one site and day (invoice, active
  schedule price or site service price) minus the same three cost kinds,
  with a profit margin.

Labor only counts closed sessions. Records that reference a site unknown
to the directory are left out of site-level totals.
"""

import datetime as dt
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Set

from shiftledger.calculators.invoice_calculator import invoice_revenue, round_money
from shiftledger.calculators.schedule_calculator import active_schedules
from shiftledger.calculators.time_utils import day_window, end_of_month, local_date
from shiftledger.models.employee import Employee
from shiftledger.models.expense import MileageLog, OtherExpense
from shiftledger.models.schedule import CleaningSchedule, Invoice
from shiftledger.models.session import Session
from shiftledger.models.site import BusinessSettings, Site, SiteIndex

logger = logging.getLogger(__name__)

MINUTES_PER_HOUR = Decimal("60")
ZERO = Decimal("0")


@dataclass
class SiteProfitRow:
    """Monthly money for one directory site."""

    site_id: str
    site_name: str
    service_charge: Decimal = ZERO
    labor: Decimal = ZERO
    mileage: Decimal = ZERO
    other: Decimal = ZERO
    net: Decimal = ZERO


@dataclass
class MonthlySiteProfit:
    """Rows sorted by site name and their column totals."""

    month: dt.date
    rows: List[SiteProfitRow] = field(default_factory=list)
    totals: SiteProfitRow = field(
        default_factory=lambda: SiteProfitRow(site_id="", site_name="TOTAL")
    )


@dataclass
class JobProfitRow:
    """Profitability of the work done at one site on one day.

    Attributes:
        site: Site name
        date: Calendar day
        revenue: Invoice total, schedule price or site service price
        labor: Pay rate × hours of closed sessions at the site
        mileage: Miles × mileage rate
        expenses: Other expenses
        profit: revenue − labor − mileage − expenses
        margin: profit / revenue (0 when there is no revenue)
    """

    site: str
    date: dt.date
    revenue: Decimal
    labor: Decimal
    mileage: Decimal
    expenses: Decimal
    profit: Decimal
    margin: Decimal


class _RateBook:
    """Hourly rates by employee id and by name, with the default wage."""

    def __init__(self, employees: Iterable[Employee], default_rate: Decimal):
        self.default_rate = default_rate
        self.by_id: Dict[str, Decimal] = {}
        self.by_name: Dict[str, Decimal] = {}
        for employee in employees:
            rate = employee.rate_or(default_rate)
            self.by_id[employee.id] = rate
            self.by_name[employee.name] = rate

    def rate_for(self, session: Session) -> Decimal:
        if session.employee_id and session.employee_id in self.by_id:
            return self.by_id[session.employee_id]
        return self.by_name.get(session.employee, self.default_rate)


def _minutes(value: float) -> Decimal:
    return Decimal(str(value))


def aggregate_monthly_site_profit(
    sessions: Iterable[Session],
    employees: Iterable[Employee],
    mileage_logs: Iterable[MileageLog],
    other_expenses: Iterable[OtherExpense],
    settings: BusinessSettings,
    month: dt.date,
    tz: dt.tzinfo = dt.timezone.utc,
) -> MonthlySiteProfit:
    """Profit per directory site for the month containing ``month``.

    Args:
        sessions: Reconstructed sessions (only closed ones count)
        employees: Employees with pay rates
        mileage_logs: Mileage records (site references resolved via settings)
        other_expenses: Expense records (site references resolved via settings)
        settings: Business settings with the site directory, default wage
            and mileage rate
        month: Any day in the month to report on
        tz: Timezone in which days and the month boundary are evaluated

    Returns:
        MonthlySiteProfit with rows sorted by site name and a totals row

    Example:
        >>> report = aggregate_monthly_site_profit(
        ...     sessions, employees, [], [], settings, dt.date(2024, 6, 1)
        ... )
        >>> report.rows[0].site_name, report.rows[0].net
        ('Harbor Office', Decimal('120.00'))
    """
    first_day = month.replace(day=1)
    last_day = end_of_month(month)
    report = MonthlySiteProfit(month=first_day)

    if not settings.sites:
        logger.info("No sites in the directory, returning empty profit report")
        return report

    index = settings.site_index()
    rates = _RateBook(employees, settings.default_hourly_wage)
    window_start = day_window(first_day, tz)[0]
    window_end = day_window(last_day, tz)[1]

    rows: Dict[str, SiteProfitRow] = {}
    serviced_days: Dict[str, Set[dt.date]] = {}

    def row_for(site: Site) -> SiteProfitRow:
        if site.key not in rows:
            rows[site.key] = SiteProfitRow(site_id=site.key, site_name=site.name)
        return rows[site.key]

    for session in sessions:
        if not session.is_closed:
            continue
        site = index.get_by_name(session.site)
        if site is None:
            continue
        minutes = session.overlap_minutes(window_start, window_end)
        if minutes <= 0:
            continue

        overlap_start = max(session.in_entry.ts, window_start)
        serviced_days.setdefault(site.key, set()).add(local_date(overlap_start, tz))

        hours = _minutes(minutes) / MINUTES_PER_HOUR
        row_for(site).labor += hours * rates.rate_for(session)

    for site_key, days in serviced_days.items():
        site = index.by_id[site_key]
        if site.service_price:
            row_for(site).service_charge += site.service_price * len(days)

    for log in mileage_logs:
        if log.date is None or not first_day <= log.date <= last_day:
            continue
        site = index.resolve(site_id=log.site_key, legacy_name=log.site_key)
        if site is None:
            continue
        row_for(site).mileage += log.cost(settings.mileage_rate)

    for expense in other_expenses:
        if expense.date is None or not first_day <= expense.date <= last_day:
            continue
        site = index.resolve(site_id=expense.site_key, legacy_name=expense.site_key)
        if site is None:
            continue
        row_for(site).other += expense.amount

    for row in rows.values():
        row.net = round_money(row.service_charge - row.labor - row.mileage - row.other)
        row.service_charge = round_money(row.service_charge)
        row.labor = round_money(row.labor)
        row.mileage = round_money(row.mileage)
        row.other = round_money(row.other)

    report.rows = sorted(rows.values(), key=lambda r: r.site_name.lower())
    for row in report.rows:
        report.totals.service_charge += row.service_charge
        report.totals.labor += row.labor
        report.totals.mileage += row.mileage
        report.totals.other += row.other
        report.totals.net += row.net

    logger.info(
        f"Computed monthly profit for {len(report.rows)} sites in "
        f"{first_day.strftime('%Y-%m')}"
    )
    return report


def resolve_site_revenue(
    site: Site,
    day: dt.date,
    schedules: Iterable[CleaningSchedule],
    invoices: Iterable[Invoice],
    week_starts_on: int = 0,
) -> Decimal:
    """Revenue for a site on one day.

    An invoice for that site and day wins; otherwise the price of the first
    schedule active that day; otherwise the site's service price; else 0.
    """
    for invoice in invoices:
        if invoice.date != day:
            continue
        if invoice.site_id == site.key or invoice.site_name == site.name:
            return invoice_revenue(invoice)

    for schedule in active_schedules(schedules, day, week_starts_on, site.name):
        if schedule.service_price:
            return schedule.service_price
        break

    return site.service_price or ZERO


def compute_job_profitability(
    sessions: Iterable[Session],
    employees: Iterable[Employee],
    mileage_logs: Iterable[MileageLog],
    other_expenses: Iterable[OtherExpense],
    schedules: Iterable[CleaningSchedule],
    invoices: Iterable[Invoice],
    settings: BusinessSettings,
    day: dt.date,
    tz: dt.tzinfo = dt.timezone.utc,
) -> Dict[str, JobProfitRow]:
    """Profitability per directory site for one calendar day.

    Labor counts closed sessions that start on ``day`` at the site, at
    their full duration.

    Returns:
        Mapping of site name to JobProfitRow, in directory order
    """
    start, end = day_window(day, tz)
    rates = _RateBook(employees, settings.default_hourly_wage)
    day_sessions = [
        s for s in sessions if s.is_closed and start <= s.in_entry.ts < end
    ]
    mileage_list = [m for m in mileage_logs if m.date == day]
    expense_list = [e for e in other_expenses if e.date == day]
    schedule_list = list(schedules)
    invoice_list = list(invoices)
    index = SiteIndex(settings.sites)

    rows: Dict[str, JobProfitRow] = {}
    for site in settings.sites:
        labor = ZERO
        for session in day_sessions:
            if index.get_by_name(session.site) is not site:
                continue
            hours = _minutes(session.duration_minutes()) / MINUTES_PER_HOUR
            labor += hours * rates.rate_for(session)

        miles = sum(
            (m.distance for m in mileage_list if _references(index, m, site)), ZERO
        )
        mileage = miles * settings.mileage_rate
        expenses = sum(
            (e.amount for e in expense_list if _references(index, e, site)), ZERO
        )

        revenue = resolve_site_revenue(
            site, day, schedule_list, invoice_list, settings.week_starts_on
        )
        profit = round_money(revenue - labor - mileage - expenses)
        margin = round_money(profit / revenue) if revenue > 0 else ZERO

        rows[site.name] = JobProfitRow(
            site=site.name,
            date=day,
            revenue=round_money(revenue),
            labor=round_money(labor),
            mileage=round_money(mileage),
            expenses=round_money(expenses),
            profit=profit,
            margin=margin,
        )

    return rows


def _references(index: SiteIndex, record, site: Site) -> bool:
    resolved = index.resolve(site_id=record.site_key, legacy_name=record.site_key)
    return resolved is site

