"""
End-to-end pipeline integration tests.

These tests verify the complete data flow from a data directory on disk
through session reconstruction, hour totals, the payroll approval workflow
and site profitability, with payroll state persisted between runs.
"""

import datetime as dt
import json
from decimal import Decimal

import pytest

from shiftledger.aggregators.duration_aggregator import DurationAggregator
from shiftledger.calculators.pay_period import pay_period_for
from shiftledger.calculators.profit_calculator import aggregate_monthly_site_profit
from shiftledger.models import PayrollStatus
from shiftledger.readers.data_reader import DataReader
from shiftledger.services import JsonPayrollStore, PayrollWorkflow
from shiftledger.validators.entry_auditor import EntryLogAuditor

UTC = dt.timezone.utc


def open_workflow(data_dir):
    """Load the data directory the way one CLI invocation does."""
    bundle = DataReader(data_dir, UTC).load_all()
    return PayrollWorkflow(
        JsonPayrollStore(data_dir),
        bundle.sessions(),
        bundle.employees,
        bundle.settings,
        tz=UTC,
        clock=lambda: 1_721_000_000_000,
    )


@pytest.mark.slow
class TestEndToEndPipeline:
    """Test complete workflow from stored entries to paid payroll."""

    def test_entries_to_hours(self, data_dir):
        bundle = DataReader(data_dir, UTC).load_all()
        report = EntryLogAuditor.audit(
            bundle.entries, bundle.settings, sessions=bundle.sessions()
        )
        period = pay_period_for(dt.date(2024, 7, 1), "semi-monthly")
        start, end = period.window(UTC)

        totals = DurationAggregator(tz=UTC).totals_by_employee(
            bundle.sessions(), start, end
        )

        assert not report.has_errors()
        assert {t.employee_id: t.minutes for t in totals} == {
            "emp-1": 60,
            "emp-2": 120,
            "emp-3": 60,
        }

    def test_payroll_survives_between_runs(self, data_dir):
        period = pay_period_for(dt.date(2024, 7, 3), "semi-monthly")

        finalized = open_workflow(data_dir).finalize(period.start_date, period.end_date)
        for item in finalized.line_items:
            open_workflow(data_dir).confirm(finalized.id, item.employee_id, 1)
        open_workflow(data_dir).lock(finalized.id)
        paid = open_workflow(data_dir).mark_paid(finalized.id)

        assert paid.status == PayrollStatus.PAID
        stored = json.loads((data_dir / "payroll_periods.json").read_text())
        assert stored[0]["status"] == "paid"
        confirmations = json.loads(
            (data_dir / "payroll_confirmations.json").read_text()
        )
        assert len(confirmations) == 3

        yearly = open_workflow(data_dir).yearly_summary(2024)
        assert sum(row.gross for row in yearly) == Decimal("92.00")

    def test_new_entries_do_not_change_a_final_snapshot(
        self, data_dir, sample_entry_documents, july_1_ms
    ):
        period = pay_period_for(dt.date(2024, 7, 3), "semi-monthly")
        open_workflow(data_dir).finalize(period.start_date, period.end_date)

        hour = 60 * 60_000
        sample_entry_documents += [
            {"id": "e7", "employeeId": "emp-1", "employee": "Ana Diaz",
             "action": "in", "ts": july_1_ms + 30 * hour, "site": "Harbor Office"},
            {"id": "e8", "employeeId": "emp-1", "employee": "Ana Diaz",
             "action": "out", "ts": july_1_ms + 32 * hour, "site": "Harbor Office"},
        ]
        (data_dir / "entries.json").write_text(json.dumps(sample_entry_documents))

        workflow = open_workflow(data_dir)
        view = workflow.view(period.start_date, period.end_date)
        live = workflow.live_line_items(period.start_date, period.end_date)

        stored = {i.employee_id: i.gross for i in view.line_items}
        computed = {i.employee_id: i.gross for i in live}
        assert stored["emp-1"] == Decimal("20.00")
        assert computed["emp-1"] == Decimal("60.00")

    def test_monthly_profit(self, data_dir):
        bundle = DataReader(data_dir, UTC).load_all()

        report = aggregate_monthly_site_profit(
            bundle.sessions(),
            bundle.employees,
            bundle.mileage_logs,
            bundle.other_expenses,
            bundle.settings,
            dt.date(2024, 7, 1),
            tz=UTC,
        )

        assert report.totals.net == Decimal("339.00")
        assert [r.site_name for r in report.rows] == [
            "Harbor Office",
            "Lake Clinic",
            "Mill Lofts",
        ]
