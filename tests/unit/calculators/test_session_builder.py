"""Unit tests for session reconstruction.

This module tests pairing of clock entries into sessions including:
- Exact (employee, site) matching
- The single-open-session fallback on a site mismatch
- Orphan clock-outs
- Order independence and entry conservation
"""

import random

import pytest

from shiftledger.calculators.session_builder import (
    active_sessions,
    build_sessions,
    is_clocked_in,
    sessions_for_employee,
)


class TestBuildSessions:
    """Test reconstruction of sessions from the entry log."""

    def test_simple_in_out_pair(self, entry_at):
        """An in and an out at the same site make one 90-minute session."""
        sessions = build_sessions(
            [entry_at("1", "in", 0, site="X"), entry_at("2", "out", 90, site="X")]
        )

        assert len(sessions) == 1
        session = sessions[0]
        assert session.duration_minutes() == 90.0
        assert session.site == "X"
        assert session.active is False
        assert session.is_closed

    def test_site_mismatch_closes_sole_open_session(self, entry_at):
        """An out at another site closes the employee's only open session."""
        sessions = build_sessions(
            [entry_at("1", "in", 0, site="X"), entry_at("2", "out", 60, site="Y")]
        )

        assert len(sessions) == 1
        assert sessions[0].in_entry.site == "X"
        assert sessions[0].out_entry.site == "Y"
        assert sessions[0].duration_minutes() == 60.0

    def test_site_mismatch_with_two_open_sessions_is_orphan(self, entry_at):
        """The fallback only applies when exactly one session is open."""
        sessions = build_sessions(
            [
                entry_at("1", "in", 0, site="X"),
                entry_at("2", "in", 5, site="Y"),
                entry_at("3", "out", 60, site="Z"),
            ]
        )

        assert len(sessions) == 3
        orphans = [s for s in sessions if s.is_orphan]
        assert len(orphans) == 1
        assert orphans[0].out_entry.id == "3"
        assert len(active_sessions(sessions)) == 2

    def test_lone_out_becomes_orphan(self, entry_at):
        """A clock-out with no clock-in is kept as a zero-minute orphan."""
        sessions = build_sessions([entry_at("1", "out", 30)])

        assert len(sessions) == 1
        assert sessions[0].in_entry is None
        assert sessions[0].is_orphan
        assert sessions[0].duration_minutes() == 0.0

    def test_open_session_is_active_and_measured_against_now(self, entry_at, july_1_ms):
        sessions = build_sessions([entry_at("1", "in", 0)])

        assert sessions[0].active is True
        assert sessions[0].duration_minutes(now=july_1_ms + 45 * 60_000) == 45.0

    def test_inverted_timestamps_clamp_to_zero(self, entry_at):
        """An out recorded before its in (after a correction) lasts 0 minutes."""
        in_entry = entry_at("1", "in", 60)
        out_entry = entry_at("2", "out", 30)
        session = build_sessions([in_entry])[0]
        session.out_entry = out_entry
        session.active = False

        assert session.duration_minutes() == 0.0

    def test_sessions_are_ordered_by_start(self, entry_at):
        entries = [
            entry_at("1", "in", 120, employee_id="emp-2", employee="Ben"),
            entry_at("2", "in", 0),
            entry_at("3", "out", 60),
        ]

        sessions = build_sessions(entries)

        assert [s.start_ts for s in sessions] == sorted(s.start_ts for s in sessions)
        assert sessions[0].employee_id == "emp-1"

    def test_employees_are_paired_separately(self, entry_at):
        sessions = build_sessions(
            [
                entry_at("1", "in", 0, employee_id="emp-1"),
                entry_at("2", "in", 10, employee_id="emp-2", employee="Ben"),
                entry_at("3", "out", 50, employee_id="emp-2", employee="Ben"),
                entry_at("4", "out", 100, employee_id="emp-1"),
            ]
        )

        by_employee = {s.employee_id: s.duration_minutes() for s in sessions}
        assert by_employee == {"emp-1": 100.0, "emp-2": 40.0}

    def test_accepts_entry_documents(self, sample_entry_documents):
        sessions = build_sessions(sample_entry_documents)

        assert len(sessions) == 3
        assert sessions[0].employee_id == "emp-1"
        assert sessions[0].duration_minutes() == 60.0  # 08:00 to 09:00

    def test_malformed_document_is_skipped(self, sample_entry_documents):
        documents = sample_entry_documents + [
            {"id": "bad", "employeeId": "emp-1", "action": "in", "ts": "noon"}
        ]

        sessions = build_sessions(documents)

        assert len(sessions) == 3

    def test_entry_without_employee_is_skipped(self, entry_at):
        sessions = build_sessions([entry_at("1", "in", 0, employee_id="", employee="")])

        assert sessions == []


class TestSessionProperties:
    """Properties that hold for any entry log."""

    @pytest.fixture
    def mixed_log(self, entry_at):
        return [
            entry_at("1", "in", 0, site="X"),
            entry_at("2", "out", 90, site="X"),
            entry_at("3", "in", 100, employee_id="emp-2", employee="Ben", site="Y"),
            entry_at("4", "out", 130, employee_id="emp-2", employee="Ben", site="Z"),
            entry_at("5", "out", 200, employee_id="emp-3", employee="Cara"),
            entry_at("6", "in", 300, site="X"),
            entry_at("7", "in", 310, employee_id="emp-2", employee="Ben", site="Y"),
        ]

    def test_every_entry_appears_in_exactly_one_session(self, mixed_log):
        sessions = build_sessions(mixed_log)

        seen = []
        for session in sessions:
            for entry in (session.in_entry, session.out_entry):
                if entry is not None:
                    seen.append(entry.id)

        assert sorted(seen) == sorted(e.id for e in mixed_log)

    def test_reconstruction_is_order_independent(self, mixed_log):
        expected = build_sessions(mixed_log)

        rng = random.Random(42)
        for _ in range(10):
            shuffled = list(mixed_log)
            rng.shuffle(shuffled)
            result = build_sessions(shuffled)
            assert [
                (s.in_entry and s.in_entry.id, s.out_entry and s.out_entry.id)
                for s in result
            ] == [
                (s.in_entry and s.in_entry.id, s.out_entry and s.out_entry.id)
                for s in expected
            ]

    def test_equal_timestamps_are_ordered_by_id(self, entry_at):
        entries = [entry_at("b", "out", 0), entry_at("a", "in", 0)]

        sessions = build_sessions(entries)

        assert len(sessions) == 1
        assert sessions[0].in_entry.id == "a"
        assert sessions[0].out_entry.id == "b"


class TestSessionQueries:
    """Test helpers that select sessions."""

    def test_sessions_for_employee_by_id(self, entry_at):
        sessions = build_sessions(
            [
                entry_at("1", "in", 0),
                entry_at("2", "in", 0, employee_id="emp-2", employee="Ben"),
            ]
        )

        result = sessions_for_employee(sessions, employee_id="emp-2")

        assert [s.employee for s in result] == ["Ben"]

    def test_sessions_for_employee_by_name_without_id(self, entry_at):
        sessions = build_sessions(
            [entry_at("1", "in", 0, employee_id="", employee="Ana")]
        )

        assert len(sessions_for_employee(sessions, employee_name="Ana")) == 1

    def test_is_clocked_in(self, entry_at):
        sessions = build_sessions([entry_at("1", "in", 0, site="Harbor Office")])

        assert is_clocked_in(sessions, "emp-1") is True
        assert is_clocked_in(sessions, "emp-1", " harbor office ") is True
        assert is_clocked_in(sessions, "emp-1", "Lake Clinic") is False
        assert is_clocked_in(sessions, "emp-2") is False
