"""Unit tests for base model functionality."""

import datetime as dt
from decimal import Decimal
from typing import Optional

import pytest
from pydantic import Field, ValidationError

from shiftledger.models.base import BaseDataModel


class Crew(BaseDataModel):
    crew_name: str = Field(..., alias="crewName")
    started: Optional[dt.date] = None
    budget: Decimal = Decimal("0")
    lead: Optional[str] = None


class TestBaseDataModel:
    """Test document handling shared by all models."""

    def test_accepts_alias_and_field_name(self):
        assert Crew.model_validate({"crewName": "A"}).crew_name == "A"
        assert Crew(crew_name="B").crew_name == "B"

    def test_unknown_fields_are_ignored(self):
        crew = Crew.model_validate({"crewName": "A", "createdAt": "2024-01-01"})

        assert not hasattr(crew, "createdAt")

    def test_to_document_uses_aliases_and_json_types(self):
        crew = Crew(crew_name="A", started=dt.date(2024, 7, 1), budget=Decimal("9.50"))

        assert crew.to_document() == {
            "crewName": "A",
            "started": "2024-07-01",
            "budget": "9.50",
        }

    def test_assignment_is_validated(self):
        crew = Crew(crew_name="A")

        with pytest.raises(ValidationError):
            crew.started = "not a date"
