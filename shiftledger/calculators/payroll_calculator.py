"""Payroll calculator folding worked minutes into pay.

This module implements the payroll math for a period:
- Base pay: minutes × employee pay rate
- Hourly bonus: minutes at an hourly-bonus site × the site's bonus amount
  (those minutes are reported as bonus minutes, the rest as regular)
- Flat bonus: the site's bonus amount once per shift at a flat-bonus site
- Gross = base + hourly bonus + flat bonus; Net = gross − deductions

Missing pay rates or site configuration count as zero rather than raising.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from shiftledger.models.employee import Employee
from shiftledger.models.payroll import (
    CENTS,
    PayrollLineItem,
    PayrollPeriod,
    PayrollStatus,
)
from shiftledger.models.session import Session
from shiftledger.models.site import BusinessSettings, SiteIndex

logger = logging.getLogger(__name__)

DEFAULT_SITE_NAME = "General"
MINUTES_PER_HOUR = Decimal("60")


@dataclass
class PayrollTotals:
    """Totals across a period's line items."""

    gross: Decimal
    net: Decimal
    line_item_count: int


@dataclass
class YearlyPayRow:
    """Gross and net paid to one employee over a year."""

    employee_id: str
    employee_name: str
    gross: Decimal
    net: Decimal


def _round_minutes(minutes: float) -> Decimal:
    return Decimal(str(round(minutes, 2)))


def _employee_key(session: Session) -> str:
    return session.employee_id or session.employee


def compute_line_item(
    employee: Employee,
    sessions: Iterable[Session],
    settings: BusinessSettings,
    period_start: int,
    period_end: int,
    site_index: Optional[SiteIndex] = None,
) -> PayrollLineItem:
    """Compute one employee's line item for a period.

    Args:
        employee: Employee being paid
        sessions: That employee's sessions (only closed ones are paid)
        settings: Business settings with the site directory and default wage
        period_start: Period window start in epoch ms
        period_end: Period window end in epoch ms (exclusive)
        site_index: Prebuilt site index (built from settings when omitted)

    Returns:
        A PayrollLineItem with revision 0 and no deductions
    """
    index = site_index if site_index is not None else settings.site_index()
    rate = employee.rate_or(settings.default_hourly_wage)

    total_minutes = Decimal("0")
    regular_minutes = Decimal("0")
    bonus_minutes = Decimal("0")
    base_pay = Decimal("0")
    bonus_pay = Decimal("0")
    flat_bonus = Decimal("0")

    for session in sessions:
        if not session.is_closed:
            continue
        minutes = _round_minutes(session.overlap_minutes(period_start, period_end))
        if minutes <= 0:
            continue

        hours = minutes / MINUTES_PER_HOUR
        site = index.get_by_name(session.in_entry.site or DEFAULT_SITE_NAME)

        total_minutes += minutes
        base_pay += hours * rate

        if site is not None and site.has_hourly_bonus:
            bonus_pay += hours * site.bonus_amount
            bonus_minutes += minutes
        else:
            regular_minutes += minutes

        starts_in_period = period_start <= session.in_entry.ts < period_end
        if site is not None and site.has_flat_bonus and starts_in_period:
            flat_bonus += site.bonus_amount

    gross = (base_pay + bonus_pay + flat_bonus).quantize(CENTS)

    return PayrollLineItem(
        employee_id=employee.id,
        employee_name=employee.name,
        revision=0,
        minutes=float(total_minutes),
        regular_minutes=float(regular_minutes),
        bonus_minutes=float(bonus_minutes),
        flat_bonus=flat_bonus.quantize(CENTS),
        gross=gross,
        deductions=Decimal("0.00"),
        net=gross,
    )


def compute_line_items(
    sessions: Iterable[Session],
    employees: Iterable[Employee],
    settings: BusinessSettings,
    period_start: int,
    period_end: int,
) -> List[PayrollLineItem]:
    """Compute line items for every employee, sorted by name.

    Sessions are matched to employees by employee id, falling back to the
    display name for entries recorded without an id.

    Example:
        >>> items = compute_line_items(sessions, employees, settings, start, end)
        >>> items[0].gross
        Decimal('180.00')
    """
    index = settings.site_index()

    by_employee: Dict[str, List[Session]] = {}
    for session in sessions:
        by_employee.setdefault(_employee_key(session), []).append(session)

    items = []
    for employee in employees:
        employee_sessions = list(by_employee.get(employee.id, []))
        if employee.name != employee.id:
            employee_sessions.extend(
                s for s in by_employee.get(employee.name, []) if not s.employee_id
            )
        items.append(
            compute_line_item(
                employee,
                employee_sessions,
                settings,
                period_start,
                period_end,
                site_index=index,
            )
        )

    items.sort(key=lambda item: item.employee_name)
    logger.info(f"Computed {len(items)} payroll line items")
    return items


def apply_line_item_edit(
    item: PayrollLineItem,
    deductions: Optional[Decimal] = None,
    flat_bonus: Optional[Decimal] = None,
) -> PayrollLineItem:
    """Apply a manager edit of deductions and/or flat bonus.

    Gross keeps its hourly part and swaps the old flat bonus for the new
    one; net is gross minus deductions. The revision is left unchanged.

    Example:
        >>> edited = apply_line_item_edit(item, deductions=Decimal("25"))
        >>> edited.net == edited.gross - Decimal("25.00")
        True
    """
    new_flat = item.flat_bonus if flat_bonus is None else Decimal(flat_bonus)
    new_deductions = item.deductions if deductions is None else Decimal(deductions)

    gross = (item.gross - item.flat_bonus + new_flat).quantize(CENTS)
    net = (gross - new_deductions).quantize(CENTS)

    return item.model_copy(
        update={
            "flat_bonus": new_flat.quantize(CENTS),
            "deductions": new_deductions.quantize(CENTS),
            "gross": gross,
            "net": net,
        }
    )


def payroll_totals(items: Iterable[PayrollLineItem]) -> PayrollTotals:
    item_list = list(items)
    return PayrollTotals(
        gross=sum((i.gross for i in item_list), Decimal("0.00")),
        net=sum((i.net for i in item_list), Decimal("0.00")),
        line_item_count=len(item_list),
    )


def yearly_summary(
    periods: Iterable[PayrollPeriod], employees: Iterable[Employee], year: int
) -> List[YearlyPayRow]:
    """Gross and net per employee over all paid periods starting in ``year``.

    Employees with nothing paid are left out; rows are sorted by name.
    """
    rows: Dict[str, YearlyPayRow] = {
        e.id: YearlyPayRow(
            employee_id=e.id,
            employee_name=e.name,
            gross=Decimal("0.00"),
            net=Decimal("0.00"),
        )
        for e in employees
    }

    for period in periods:
        if period.status != PayrollStatus.PAID or period.start_date.year != year:
            continue
        for item in period.line_items:
            row = rows.get(item.employee_id)
            if row is None:
                continue
            row.gross += item.gross
            row.net += item.net

    return sorted(
        (r for r in rows.values() if r.gross > 0 or r.net > 0),
        key=lambda r: r.employee_name,
    )
