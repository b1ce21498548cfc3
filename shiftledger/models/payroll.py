"""Payroll data models.

This module defines the payroll documents managed by the approval workflow:
- PayrollLineItem: one employee's computed pay within a period
- PayrollPeriod: a date-bounded, status-tracked payroll run
- PayrollConfirmation: an employee's attestation of one line-item revision
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional, Set, Tuple

from pydantic import Field, field_validator

from shiftledger.models.base import BaseDataModel

CENTS = Decimal("0.01")


class PayrollStatus(str, Enum):
    """Lifecycle of a payroll period."""

    DRAFT = "draft"
    FINAL = "final"
    LOCKED = "locked"
    PAID = "paid"


def period_id_for(start_date: dt.date, end_date: dt.date) -> str:
    """Build the document id of a period ("YYYY-MM-DD_YYYY-MM-DD").

    Example:
        >>> period_id_for(dt.date(2024, 7, 1), dt.date(2024, 7, 15))
        '2024-07-01_2024-07-15'
    """
    return f"{start_date.isoformat()}_{end_date.isoformat()}"


class PayrollLineItem(BaseDataModel):
    """One employee's pay for a period.

    Attributes:
        employee_id: Employee reference
        employee_name: Employee display name
        revision: Bumped on every manager edit once the period is final
        minutes: Total worked minutes
        regular_minutes: Minutes at sites without an hourly bonus
        bonus_minutes: Minutes at sites with an hourly bonus
        flat_bonus: Sum of flat per-shift bonuses
        gross: Base pay + hourly bonus pay + flat bonus
        deductions: Manager-entered deductions
        net: gross - deductions
    """

    employee_id: str = Field(..., alias="employeeId")
    employee_name: str = Field(..., alias="employeeName")
    revision: int = Field(0, ge=0)
    minutes: float = Field(0.0, ge=0)
    regular_minutes: float = Field(0.0, alias="regularMinutes", ge=0)
    bonus_minutes: float = Field(0.0, alias="bonusMinutes", ge=0)
    flat_bonus: Decimal = Field(Decimal("0.00"), alias="flatBonus")
    gross: Decimal = Field(Decimal("0.00"))
    deductions: Decimal = Field(Decimal("0.00"))
    net: Decimal = Field(Decimal("0.00"))

    @field_validator("flat_bonus", "gross", "deductions", "net", mode="before")
    @classmethod
    def coerce_money(cls, v):
        if v is None or v == "":
            return Decimal("0.00")
        if isinstance(v, float):
            v = str(v)
        return Decimal(v).quantize(CENTS)

    @field_validator("minutes", "regular_minutes", "bonus_minutes", mode="before")
    @classmethod
    def coerce_minutes(cls, v):
        if v is None or v == "":
            return 0.0
        return v


class PayrollPeriod(BaseDataModel):
    """A payroll run over a date range.

    Attributes:
        id: "YYYY-MM-DD_YYYY-MM-DD" derived from the date range
        start_date: First day of the period
        end_date: Last day of the period (inclusive)
        status: draft, final, locked or paid
        revision: Bumped each time the period is finalized
        line_items: Snapshot taken at finalization
    """

    id: str = Field(..., min_length=1)
    start_date: dt.date = Field(..., alias="startDate")
    end_date: dt.date = Field(..., alias="endDate")
    status: PayrollStatus = PayrollStatus.DRAFT
    revision: int = Field(0, ge=0)
    line_items: List[PayrollLineItem] = Field(default_factory=list, alias="lineItems")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_iso_prefix(cls, v):
        """Accept full ISO timestamps written by older clients."""
        if isinstance(v, str) and len(v) > 10:
            return v[:10]
        return v

    def line_item_for(self, employee_id: str) -> Optional[PayrollLineItem]:
        for item in self.line_items:
            if item.employee_id == employee_id:
                return item
        return None

    @property
    def is_editable(self) -> bool:
        return self.status in (PayrollStatus.DRAFT, PayrollStatus.FINAL)


class PayrollConfirmation(BaseDataModel):
    """An employee's attestation that one line-item revision is correct."""

    period_id: str = Field(..., alias="periodId")
    employee_id: str = Field(..., alias="employeeId")
    employee_name: Optional[str] = Field(None, alias="employeeName")
    revision: int = Field(..., ge=0)
    confirmed: bool = True
    confirmed_at: Optional[int] = Field(None, alias="at")
    note: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str, int]:
        return (self.period_id, self.employee_id, self.revision)


def confirmed_keys(
    confirmations: Iterable[PayrollConfirmation], period_id: str
) -> Set[Tuple[str, int]]:
    """(employee_id, revision) pairs confirmed for one period."""
    return {
        (c.employee_id, c.revision)
        for c in confirmations
        if c.period_id == period_id and c.confirmed
    }


def is_item_confirmed(
    item: PayrollLineItem, confirmed: Set[Tuple[str, int]]
) -> bool:
    """A confirmation only counts for the item's current revision."""
    return (item.employee_id, item.revision) in confirmed
