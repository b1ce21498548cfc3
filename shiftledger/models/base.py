"""Base model for all data models in ShiftLedger.

This module provides a base Pydantic model with common configuration
and helper methods for reading and writing document-shaped records.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class BaseDataModel(BaseModel):
    """Base class for all data models.

    Provides common configuration for:
    - Validation with type checking
    - Reading documents that use camelCase keys (``employeeId``)
    - Ignoring storage-only fields such as ``createdAt``
    - Arbitrary types support for dates and decimals

    Example:
        >>> from pydantic import Field
        >>> class Crew(BaseDataModel):
        ...     crew_name: str = Field(alias="crewName")
        >>> Crew.model_validate({"crewName": "Team A"}).crew_name
        'Team A'
    """

    model_config = ConfigDict(
        # Allow arbitrary types like Decimal, date
        arbitrary_types_allowed=True,
        # Validate on assignment to catch errors early
        validate_assignment=True,
        strict=False,
        # Documents carry storage metadata we don't model
        extra="ignore",
        # Accept both snake_case field names and camelCase aliases
        populate_by_name=True,
        frozen=False,
    )

    def to_document(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict keyed by document aliases."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
