"""Employee data model."""

from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from shiftledger.models.base import BaseDataModel


class Employee(BaseDataModel):
    """A crew member who clocks in and out.

    Only the fields payroll needs are modeled; contact and bank details stay
    in the surrounding application.

    Attributes:
        id: Stable employee identifier
        name: Display name (matches Entry.employee)
        pay_rate: Default dollars per hour
        hourly_rate: Optional override recorded by older versions
        pin: Clock-in PIN (never logged)
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    pay_rate: Optional[Decimal] = Field(None, alias="payRate", ge=0)
    hourly_rate: Optional[Decimal] = Field(None, alias="hourlyRate", ge=0)
    pin: Optional[str] = None
    team_id: Optional[str] = Field(None, alias="teamId")

    @field_validator("pay_rate", "hourly_rate", mode="before")
    @classmethod
    def blank_rate(cls, v):
        if v == "":
            return None
        return v

    def rate_or(self, fallback: Decimal) -> Decimal:
        """Hourly pay rate, falling back to the company default."""
        if self.pay_rate is not None:
            return self.pay_rate
        if self.hourly_rate is not None:
            return self.hourly_rate
        return fallback
