"""Cleaning schedule and invoice data models."""

import datetime as dt
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from shiftledger.models.base import BaseDataModel
from shiftledger.models.expense import parse_record_date

RepeatFrequency = Literal[
    "does-not-repeat",
    "weekly",
    "every-2-weeks",
    "every-3-weeks",
    "monthly",
    "every-2-months",
    "quarterly",
    "yearly",
]

DayOfWeek = Literal[
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"
]


class CleaningSchedule(BaseDataModel):
    """A recurring job at a site.

    Attributes:
        site_name: Site the job is performed at
        start_date: Anchor date of the recurrence
        repeat_frequency: Recurrence rule
        days_of_week: Weekdays for weekly-style rules
        repeat_until: Optional last date (inclusive)
        service_price: Optional per-visit revenue override
        exception_dates: Dates on which the job is skipped
        assigned_to: Employee names
    """

    id: str = ""
    site_name: str = Field(..., alias="siteName")
    tasks: str = ""
    assigned_to: List[str] = Field(default_factory=list, alias="assignedTo")
    start_date: Optional[dt.date] = Field(None, alias="startDate")
    repeat_frequency: RepeatFrequency = Field(
        "does-not-repeat", alias="repeatFrequency"
    )
    days_of_week: List[DayOfWeek] = Field(default_factory=list, alias="daysOfWeek")
    repeat_until: Optional[dt.date] = Field(None, alias="repeatUntil")
    service_price: Optional[Decimal] = Field(None, alias="servicePrice")
    exception_dates: List[dt.date] = Field(default_factory=list, alias="exceptionDates")

    @field_validator("start_date", "repeat_until", mode="before")
    @classmethod
    def lenient_date(cls, v):
        return parse_record_date(v)


class InvoiceLineItem(BaseDataModel):
    id: str = ""
    description: str = ""
    quantity: Decimal = Decimal("0")
    unit_price: Decimal = Field(Decimal("0"), alias="unitPrice")
    total: Decimal = Decimal("0")


class Invoice(BaseDataModel):
    """A client invoice for a site.

    Rates are fractions: ``tax_rate=0.07`` is 7 %, ``discount_percent=0.1``
    is 10 %. ``discount_amount`` is a fixed dollar amount.
    """

    id: str = ""
    site_id: Optional[str] = Field(None, alias="siteId")
    site_name: str = Field("", alias="siteName")
    invoice_number: str = Field("", alias="invoiceNumber")
    date: Optional[dt.date] = None
    due_date: Optional[dt.date] = Field(None, alias="dueDate")
    line_items: List[InvoiceLineItem] = Field(default_factory=list, alias="lineItems")
    tax_rate: Decimal = Field(Decimal("0"), alias="taxRate")
    discount_percent: Decimal = Field(Decimal("0"), alias="discountPercent")
    discount_amount: Decimal = Field(Decimal("0"), alias="discountAmount")
    subtotal: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    total: Optional[Decimal] = None
    status: Literal["draft", "sent", "paid", "void"] = "draft"

    @field_validator("date", "due_date", mode="before")
    @classmethod
    def lenient_date(cls, v):
        return parse_record_date(v)

    @field_validator("tax_rate", "discount_percent", "discount_amount", mode="before")
    @classmethod
    def blank_to_zero(cls, v):
        if v is None or v == "":
            return Decimal("0")
        return v
