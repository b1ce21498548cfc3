"""Unit tests for clock entries and sessions."""

import pytest
from pydantic import ValidationError

from shiftledger.models import Entry, Session

MINUTE = 60_000


class TestEntry:
    """Test entry validation and keys."""

    def test_action_is_normalized(self):
        entry = Entry(id="1", employeeId="emp-1", action=" OUT ", ts=0)

        assert entry.action == "out"

    def test_unknown_action_is_rejected(self):
        with pytest.raises(ValidationError):
            Entry(id="1", employeeId="emp-1", action="break", ts=0)

    def test_employee_key_prefers_id(self):
        assert Entry(id="1", employee="Ana", employeeId="EMP-1", action="in",
                     ts=0).employee_key == "emp-1"
        assert Entry(id="1", employee=" Ana ", employeeId=None, action="in",
                     ts=0).employee_key == "ana"

    def test_site_key_and_location(self):
        entry = Entry(id="1", employeeId="e", action="in", ts=0, site=" Harbor ",
                      lat=1.0)

        assert entry.site_key == "harbor"
        assert not entry.has_location


class TestSession:
    """Test derived session durations."""

    def test_closed_session(self, entry_at):
        session = Session(
            employee="Ana Diaz",
            employee_id="emp-1",
            in_entry=entry_at("1", "in", 0),
            out_entry=entry_at("2", "out", 90),
        )

        assert session.is_closed
        assert session.duration_minutes() == 90.0
        assert session.site == "Harbor Office"

    def test_active_session_uses_now(self, entry_at, july_1_ms):
        session = Session(
            employee="Ana Diaz",
            employee_id="emp-1",
            in_entry=entry_at("1", "in", 0),
            active=True,
        )

        assert session.duration_minutes(now=july_1_ms + 45 * MINUTE) == 45.0
        assert session.duration_minutes(now=july_1_ms - MINUTE) == 0.0

    def test_orphan_session(self, entry_at):
        session = Session(
            employee="Ana Diaz",
            employee_id="emp-1",
            out_entry=entry_at("2", "out", 90, site="Lake Clinic"),
        )

        assert session.is_orphan
        assert session.duration_minutes() == 0.0
        assert session.site == "Lake Clinic"
        assert session.overlap_minutes(None, None) == 0.0

    def test_overlap_with_window(self, entry_at, july_1_ms):
        session = Session(
            employee="Ana Diaz",
            employee_id="emp-1",
            in_entry=entry_at("1", "in", 0),
            out_entry=entry_at("2", "out", 90),
        )

        assert session.overlap_minutes(july_1_ms + 30 * MINUTE, None) == 60.0
        assert session.overlap_minutes(None, july_1_ms + 30 * MINUTE) == 30.0
        assert session.overlap_minutes(july_1_ms + 90 * MINUTE, None) == 0.0
