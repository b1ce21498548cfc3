"""CLI commands."""

from shiftledger.cli.commands.audit import audit_entries
from shiftledger.cli.commands.hours import hours_report
from shiftledger.cli.commands.payroll import payroll
from shiftledger.cli.commands.profit import job_profit, site_profit
from shiftledger.cli.commands.sessions import list_sessions

__all__ = [
    "audit_entries",
    "hours_report",
    "job_profit",
    "list_sessions",
    "payroll",
    "site_profit",
]
