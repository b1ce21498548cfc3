"""Calculator modules for sessions, payroll and profitability."""

from shiftledger.calculators.invoice_calculator import (
    InvoiceTotals,
    compute_invoice_totals,
    with_computed_totals,
)
from shiftledger.calculators.pay_period import (
    PayPeriodRange,
    parse_period_id,
    pay_period_for,
    shift_period,
)
from shiftledger.calculators.payroll_calculator import (
    PayrollTotals,
    YearlyPayRow,
    apply_line_item_edit,
    compute_line_item,
    compute_line_items,
    payroll_totals,
    yearly_summary,
)
from shiftledger.calculators.payroll_diff import (
    LineItemChange,
    PeriodDiff,
    ScalarFieldChange,
    diff_line_items,
    diff_periods,
)
from shiftledger.calculators.profit_calculator import (
    JobProfitRow,
    MonthlySiteProfit,
    SiteProfitRow,
    aggregate_monthly_site_profit,
    compute_job_profitability,
)
from shiftledger.calculators.schedule_calculator import (
    active_schedules,
    is_schedule_active_on_date,
)
from shiftledger.calculators.session_builder import (
    active_sessions,
    build_sessions,
    is_clocked_in,
    sessions_for_employee,
)

__all__ = [
    # invoice_calculator
    "InvoiceTotals",
    "compute_invoice_totals",
    "with_computed_totals",
    # pay_period
    "PayPeriodRange",
    "parse_period_id",
    "pay_period_for",
    "shift_period",
    # payroll_calculator
    "PayrollTotals",
    "YearlyPayRow",
    "apply_line_item_edit",
    "compute_line_item",
    "compute_line_items",
    "payroll_totals",
    "yearly_summary",
    # payroll_diff
    "LineItemChange",
    "PeriodDiff",
    "ScalarFieldChange",
    "diff_line_items",
    "diff_periods",
    # profit_calculator
    "JobProfitRow",
    "MonthlySiteProfit",
    "SiteProfitRow",
    "aggregate_monthly_site_profit",
    "compute_job_profitability",
    # schedule_calculator
    "active_schedules",
    "is_schedule_active_on_date",
    # session_builder
    "active_sessions",
    "build_sessions",
    "is_clocked_in",
    "sessions_for_employee",
]
