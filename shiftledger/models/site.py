"""Site and business settings data models.

This module defines the service sites a crew works at, an index for
resolving legacy site references, and the BusinessSettings record that is
passed explicitly to every report and payroll computation.
"""

from decimal import Decimal
from typing import Dict, Iterable, List, Literal, Optional

from pydantic import Field, field_validator

from shiftledger.models.base import BaseDataModel

BonusType = Literal["hourly", "flat"]

BillingFrequency = Literal[
    "One-Time", "Daily", "Weekly", "Bi-Weekly", "Monthly", "Quarterly", "Yearly"
]


class Site(BaseDataModel):
    """A client location serviced by the crew.

    Attributes:
        id: Directory identifier (defaults to the name for legacy records)
        name: Display name used on clock entries
        service_price: Standard charge per serviced day
        billing_frequency: How the client is billed
        bonus_type: 'hourly' adds bonus_amount per hour, 'flat' once per shift
        bonus_amount: Bonus value for the chosen bonus type
        lat: Site latitude
        lng: Site longitude
        geofence_radius_feet: Site-specific geofence override

    Example:
        >>> site = Site(name="Harbor Office", bonusType="hourly", bonusAmount=2)
        >>> site.has_hourly_bonus
        True
    """

    id: str = Field("", description="Directory identifier")
    name: str = Field(..., min_length=1, description="Site name")
    address: Optional[str] = None
    service_price: Decimal = Field(Decimal("0"), alias="servicePrice", ge=0)
    billing_frequency: Optional[BillingFrequency] = Field(
        None, alias="billingFrequency"
    )
    bonus_type: Optional[BonusType] = Field(None, alias="bonusType")
    bonus_amount: Decimal = Field(Decimal("0"), alias="bonusAmount", ge=0)
    lat: Optional[float] = None
    lng: Optional[float] = None
    geofence_radius_feet: Optional[float] = Field(None, alias="geofenceRadiusFeet")

    @field_validator("service_price", "bonus_amount", mode="before")
    @classmethod
    def blank_to_zero(cls, v):
        """Missing or blank money values count as zero."""
        if v is None or v == "":
            return Decimal("0")
        return v

    @field_validator("bonus_type", mode="before")
    @classmethod
    def blank_bonus_type(cls, v):
        if v == "" or v == "none":
            return None
        return v

    @property
    def key(self) -> str:
        return self.id or self.name

    @property
    def has_hourly_bonus(self) -> bool:
        return self.bonus_type == "hourly" and self.bonus_amount > 0

    @property
    def has_flat_bonus(self) -> bool:
        return self.bonus_type == "flat" and self.bonus_amount > 0


class SiteIndex:
    """Lookup of sites by directory id and by normalized name.

    Older records reference sites by free-text name, newer ones by id.
    The index resolves either form to one directory site.

    Example:
        >>> index = SiteIndex([Site(id="s1", name="Harbor Office")])
        >>> index.resolve(legacy_name="  harbor office ").id
        's1'
    """

    def __init__(self, sites: Iterable[Site] = ()):
        self.by_id: Dict[str, Site] = {}
        self.by_name: Dict[str, Site] = {}
        for site in sites:
            self.by_id[site.key] = site
            self.by_name[normalize_site_name(site.name)] = site

    def __len__(self) -> int:
        return len(self.by_id)

    def get_by_name(self, name: Optional[str]) -> Optional[Site]:
        if not name:
            return None
        return self.by_name.get(normalize_site_name(name))

    def resolve(
        self, site_id: Optional[str] = None, legacy_name: Optional[str] = None
    ) -> Optional[Site]:
        """Resolve a site reference, preferring the directory id."""
        if site_id and site_id in self.by_id:
            return self.by_id[site_id]
        return self.get_by_name(legacy_name)


def normalize_site_name(name: str) -> str:
    return name.strip().lower()


class BusinessSettings(BaseDataModel):
    """Company-wide settings consumed read-only by reports and payroll.

    Attributes:
        week_starts_on: First day of the week (0 = Sunday ... 6 = Saturday)
        mileage_rate: Dollars reimbursed per mile
        default_hourly_wage: Pay rate for employees without one
        sites: Site directory
        require_geofence: Whether clock actions must be near the site
        geofence_radius: Default geofence radius in feet
    """

    week_starts_on: int = Field(0, alias="weekStartsOn", ge=0, le=6)
    mileage_rate: Decimal = Field(Decimal("0"), alias="mileageRate", ge=0)
    default_hourly_wage: Decimal = Field(Decimal("0"), alias="defaultHourlyWage", ge=0)
    sites: List[Site] = Field(default_factory=list)
    require_geofence: bool = Field(False, alias="requireGeofence")
    geofence_radius: float = Field(500.0, alias="geofenceRadius", ge=0)
    tax_rate: Optional[Decimal] = Field(None, alias="taxRate")

    @field_validator("mileage_rate", "default_hourly_wage", mode="before")
    @classmethod
    def blank_to_zero(cls, v):
        if v is None or v == "":
            return Decimal("0")
        return v

    def site_index(self) -> SiteIndex:
        return SiteIndex(self.sites)
