"""Mileage and other-expense data models.

Historical records reference their site through one of several field names
(``siteId``, ``site``, ``siteName``) and record distance as ``distance``,
``miles`` or ``distanceMiles``. The models fold those alternates into one
canonical field as soon as a record is validated, so no consumer ever has to
re-resolve them.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from pydantic import Field, field_validator, model_validator

from shiftledger.models.base import BaseDataModel
from shiftledger.models.site import SiteIndex

SITE_REFERENCE_FIELDS = ("siteId", "site_id", "site", "siteName", "site_name")
DISTANCE_FIELDS = ("distance", "miles", "distanceMiles")


def _first_present(data: Dict[str, Any], keys) -> Any:
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return None


def parse_record_date(v: Any) -> Optional[dt.date]:
    """Parse a 'YYYY-MM-DD' (or longer ISO) value; unparseable → None."""
    if v is None or v == "":
        return None
    if isinstance(v, dt.datetime):
        return v.date()
    if isinstance(v, dt.date):
        return v
    try:
        return dt.date.fromisoformat(str(v)[:10])
    except ValueError:
        return None


def _to_decimal(v: Any) -> Decimal:
    if v is None or v == "":
        return Decimal("0")
    try:
        return Decimal(str(v))
    except InvalidOperation:
        return Decimal("0")


class _SiteReferencedRecord(BaseDataModel):
    """Base for records that point at a site through legacy field names."""

    id: str = ""
    date: Optional[dt.date] = None
    site_key: Optional[str] = Field(None, description="Canonical site reference")

    @model_validator(mode="before")
    @classmethod
    def collapse_site_reference(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("site_key") is None:
            data = dict(data)
            data["site_key"] = _first_present(data, SITE_REFERENCE_FIELDS)
        return data

    @field_validator("date", mode="before")
    @classmethod
    def lenient_date(cls, v):
        return parse_record_date(v)

    def resolve_site(self, index: SiteIndex) -> "_SiteReferencedRecord":
        """Return a copy whose site_key is the directory key (or None)."""
        site = index.resolve(site_id=self.site_key, legacy_name=self.site_key)
        return self.model_copy(update={"site_key": site.key if site else None})


class MileageLog(_SiteReferencedRecord):
    """Miles driven for a job.

    Attributes:
        date: Day of travel (None when the stored date is unreadable)
        distance: Miles driven
        purpose: Free text
        site_key: Canonical site reference
    """

    distance: Decimal = Field(Decimal("0"))
    purpose: str = ""

    @model_validator(mode="before")
    @classmethod
    def collapse_distance(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            data["distance"] = _to_decimal(_first_present(data, DISTANCE_FIELDS))
        return data

    def cost(self, mileage_rate: Decimal) -> Decimal:
        return self.distance * mileage_rate


class OtherExpense(_SiteReferencedRecord):
    """Any non-labor, non-mileage cost such as supplies."""

    vendor: Optional[str] = None
    description: str = ""
    amount: Decimal = Field(Decimal("0"))

    @field_validator("amount", mode="before")
    @classmethod
    def lenient_amount(cls, v):
        return _to_decimal(v)
