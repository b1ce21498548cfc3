"""Unit tests for duration aggregation over calendar windows."""

import datetime as dt
from decimal import Decimal

import pytest

from shiftledger.aggregators.duration_aggregator import DurationAggregator
from shiftledger.calculators.session_builder import build_sessions
from shiftledger.calculators.time_utils import day_window

MINUTE = 60_000
JULY_1 = dt.date(2024, 7, 1)
JULY_2 = dt.date(2024, 7, 2)


@pytest.fixture
def overnight(entry_at):
    """A shift from 2024-07-01 23:00 to 2024-07-02 01:30."""
    return build_sessions(
        [entry_at("1", "in", 23 * 60), entry_at("2", "out", 25 * 60 + 30)]
    )


@pytest.fixture
def aggregator(july_1_ms):
    return DurationAggregator(tz=dt.timezone.utc, now=july_1_ms + 12 * 60 * MINUTE)


class TestWindows:
    """Test overlap of sessions with windows."""

    def test_adjacent_windows_add_up(self, aggregator, overnight):
        first = aggregator.minutes_in_window(overnight, *day_window(JULY_1))
        second = aggregator.minutes_in_window(overnight, *day_window(JULY_2))

        assert first == 60.0
        assert second == 90.0
        assert first + second == overnight[0].duration_minutes()

    def test_unbounded_window(self, aggregator, overnight):
        assert aggregator.minutes_in_window(overnight, None, None) == 150.0

    def test_active_session_counts_up_to_now(self, aggregator, entry_at):
        sessions = build_sessions([entry_at("1", "in", 11 * 60)])

        assert aggregator.minutes_in_window(sessions, *day_window(JULY_1)) == 60.0
        assert (
            aggregator.minutes_in_window(
                sessions, *day_window(JULY_1), closed_only=True
            )
            == 0.0
        )

    def test_orphans_contribute_nothing(self, aggregator, entry_at):
        sessions = build_sessions([entry_at("1", "out", 60)])

        assert aggregator.minutes_in_window(sessions, None, None) == 0.0

    def test_hours_for_period(self, aggregator, overnight):
        assert aggregator.hours_for_period(overnight, *day_window(JULY_2)) == Decimal(
            "1.50"
        )


class TestTotals:
    """Test per-employee and per-site totals."""

    def test_totals_by_employee_largest_first(
        self, aggregator, sample_entry_documents
    ):
        sessions = build_sessions(sample_entry_documents)

        totals = aggregator.totals_by_employee(sessions)

        assert [(t.employee_id, t.minutes) for t in totals] == [
            ("emp-2", 120.0),
            ("emp-1", 60.0),
            ("emp-3", 60.0),
        ]

    def test_durations_by_site(self, aggregator, sample_entry_documents, entry_at):
        sessions = build_sessions(
            sample_entry_documents
            + [
                entry_at("x1", "in", 10 * 60, employee_id="emp-3", employee="Cara Lund",
                         site=None),
                entry_at("x2", "out", 10 * 60 + 30, employee_id="emp-3",
                         employee="Cara Lund", site=None),
            ]
        )

        result = aggregator.durations_by_site(sessions, JULY_1)

        assert result["Lake Clinic"].minutes == 120.0
        assert result["Lake Clinic"].by_employee == {"Ben Okafor": 120.0}
        assert result["Unassigned"].minutes == 30.0

    def test_minutes_by_start_day_keeps_overnight_shift_whole(
        self, aggregator, overnight
    ):
        minutes = aggregator.minutes_by_start_day(overnight, "harbor office", JULY_1)
        assert minutes == 150
        assert aggregator.minutes_by_start_day(overnight, "Harbor Office", JULY_2) == 0

    def test_minutes_by_employee_and_site(self, aggregator, sample_entry_documents):
        sessions = build_sessions(sample_entry_documents)

        result = aggregator.minutes_by_employee_and_site(
            sessions, *day_window(JULY_1)
        )

        assert result["emp-1"] == {"Harbor Office": 60.0}
        assert result["emp-2"] == {"Lake Clinic": 120.0}

    def test_employee_hours_summary(self, aggregator, overnight):
        summary = aggregator.employee_hours_summary(overnight, JULY_2, week_starts_on=1)

        assert summary.today == Decimal("1.50")
        assert summary.this_week == Decimal("2.50")
        assert summary.this_month == Decimal("2.50")


class TestSiteStatuses:
    """Test daily site status."""

    def test_complete_in_process_and_incomplete(self, aggregator, entry_at, sites):
        sessions = build_sessions(
            [
                entry_at("1", "in", 8 * 60),
                entry_at("2", "out", 9 * 60),
                entry_at("3", "in", 10 * 60, employee_id="emp-2",
                         employee="Ben Okafor", site="Lake Clinic"),
            ]
        )

        statuses = aggregator.site_statuses(sessions, sites, JULY_1)

        assert statuses == {
            "Harbor Office": "complete",
            "Lake Clinic": "in-process",
            "Mill Lofts": "incomplete",
        }

    def test_has_open_shift_on_day(self, aggregator, entry_at):
        sessions = build_sessions([entry_at("1", "in", 10 * 60)])

        assert aggregator.has_open_shift_on_day(sessions, "Harbor Office", JULY_1)
        assert not aggregator.has_open_shift_on_day(sessions, "Lake Clinic", JULY_1)
        assert not aggregator.has_open_shift_on_day(
            sessions, "Harbor Office", JULY_1, employee_id="emp-2"
        )
