"""Clock entry data model.

This module defines the Entry model which represents a single clock-in or
clock-out action recorded for an employee, optionally at a site and with
the device's geolocation.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator

from shiftledger.models.base import BaseDataModel

EntryAction = Literal["in", "out"]


class Entry(BaseDataModel):
    """Represents one recorded clock action.

    Entries are immutable once recorded except for manager corrections
    (site, timestamp and note may be edited; action and employee may be
    reassigned). Sessions are derived from them on every read.

    Attributes:
        id: Document identifier
        employee: Employee display name (denormalized)
        employee_id: Stable employee reference
        action: 'in' or 'out'
        ts: Epoch milliseconds of the action
        site: Optional site name
        lat: Optional latitude of the device
        lng: Optional longitude of the device
        note: Optional free-text note

    Example:
        >>> entry = Entry(
        ...     id="e1",
        ...     employee="Ana Diaz",
        ...     employeeId="emp-1",
        ...     action="in",
        ...     ts=1717228800000,
        ...     site="Harbor Office",
        ... )
        >>> entry.employee_id
        'emp-1'
    """

    id: str = Field(..., description="Document identifier")
    employee: str = Field("", description="Employee display name")
    employee_id: str = Field("", alias="employeeId", description="Employee reference")
    action: EntryAction = Field(..., description="Clock action")
    ts: int = Field(..., description="Epoch milliseconds")
    site: Optional[str] = Field(None, description="Site name")
    lat: Optional[float] = Field(None, description="Latitude")
    lng: Optional[float] = Field(None, description="Longitude")
    note: Optional[str] = Field(None, description="Free-text note")

    @field_validator("action", mode="before")
    @classmethod
    def normalize_action(cls, v):
        """Accept 'IN'/'Out' spellings from older exports."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("employee", "employee_id", mode="before")
    @classmethod
    def default_blank(cls, v):
        if v is None:
            return ""
        return v

    @property
    def employee_key(self) -> str:
        """Normalized employee key: id when present, else display name."""
        return (self.employee_id or self.employee or "").strip().lower()

    @property
    def site_key(self) -> str:
        """Normalized site key (empty when no site was recorded)."""
        return (self.site or "").strip().lower()

    @property
    def has_location(self) -> bool:
        return self.lat is not None and self.lng is not None
