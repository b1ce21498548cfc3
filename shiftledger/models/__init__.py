"""Data models for ShiftLedger.

This package contains Pydantic models for all business records:
- BaseDataModel: Base class with common configuration
- Entry: One clock-in or clock-out action
- Session: Derived pairing of clock actions (dataclass, never persisted)
- Site, SiteIndex, BusinessSettings: Site directory and company settings
- Employee: Crew member and pay rate
- PayrollPeriod, PayrollLineItem, PayrollConfirmation: Payroll documents
- MileageLog, OtherExpense: Job costs
- CleaningSchedule, Invoice: Revenue sources
"""

from shiftledger.models.base import BaseDataModel
from shiftledger.models.employee import Employee
from shiftledger.models.entry import Entry
from shiftledger.models.expense import MileageLog, OtherExpense
from shiftledger.models.payroll import (
    PayrollConfirmation,
    PayrollLineItem,
    PayrollPeriod,
    PayrollStatus,
    period_id_for,
)
from shiftledger.models.schedule import CleaningSchedule, Invoice, InvoiceLineItem
from shiftledger.models.session import Session
from shiftledger.models.site import BusinessSettings, Site, SiteIndex

__all__ = [
    "BaseDataModel",
    "BusinessSettings",
    "CleaningSchedule",
    "Employee",
    "Entry",
    "Invoice",
    "InvoiceLineItem",
    "MileageLog",
    "OtherExpense",
    "PayrollConfirmation",
    "PayrollLineItem",
    "PayrollPeriod",
    "PayrollStatus",
    "Session",
    "Site",
    "SiteIndex",
    "period_id_for",
]
