"""Payroll period commands."""

from decimal import Decimal, InvalidOperation
from typing import List, Optional

import click

from shiftledger.calculators.pay_period import PAY_FREQUENCIES, parse_period_id
from shiftledger.calculators.payroll_calculator import payroll_totals
from shiftledger.cli.error_handlers import DataValidationError, with_error_handling
from shiftledger.cli.utils.formatters import (
    format_duration,
    format_info,
    format_money,
    format_status,
    format_success,
    format_table,
    format_warning,
)
from shiftledger.cli.utils.runtime import CLIRuntime
from shiftledger.models.payroll import PayrollLineItem

period_options = [
    click.option("--start-date", type=str, default=None, help="First day (YYYY-MM-DD)"),
    click.option("--end-date", type=str, default=None, help="Last day (YYYY-MM-DD)"),
    click.option(
        "--date",
        "day",
        type=str,
        default=None,
        help="Any day inside the period (YYYY-MM-DD, default: today)",
    ),
    click.option(
        "--frequency",
        type=click.Choice([f for f in PAY_FREQUENCIES if f != "custom"]),
        default=None,
        help="Pay frequency used with --date (default: DEFAULT_PAY_FREQUENCY)",
    ),
]


def with_period_options(f):
    for option in reversed(period_options):
        f = option(f)
    return f


def _period_id(value: str) -> str:
    try:
        return parse_period_id(value).id
    except ValueError as e:
        raise DataValidationError(str(e))


def _money(value: Optional[str], name: str) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(value)
    except InvalidOperation:
        raise DataValidationError(f"Invalid amount for {name}: {value}")


def _line_item_table(
    items: List[PayrollLineItem], confirmed: Optional[set] = None
) -> str:
    headers = ["Employee", "Rev", "Time", "Bonus time", "Flat bonus", "Gross"]
    headers += ["Deductions", "Net"]
    if confirmed is not None:
        headers.append("Confirmed")
    rows = []
    for item in items:
        row = [
            item.employee_name,
            item.revision,
            format_duration(item.minutes),
            format_duration(item.bonus_minutes),
            format_money(item.flat_bonus),
            format_money(item.gross),
            format_money(item.deductions),
            format_money(item.net),
        ]
        if confirmed is not None:
            row.append("yes" if item.employee_id in confirmed else "no")
        rows.append(row)
    return format_table(headers, rows)


@click.group(name="payroll")
def payroll():
    """Review and approve payroll periods.

    A period is a draft until it is finalized. Employees then confirm their
    line items, after which the period can be locked and marked paid.
    """


@payroll.command(name="show")
@with_period_options
@click.pass_obj
def show_payroll(
    runtime: CLIRuntime,
    start_date: Optional[str],
    end_date: Optional[str],
    day: Optional[str],
    frequency: Optional[str],
):
    """Show a period's line items and status.

    Drafts are computed from the entry log; finalized periods show the
    stored snapshot.

    Example:
        shiftledger payroll show --date 2024-07-10 --frequency semi-monthly
    """
    with with_error_handling(runtime.debug):
        try:
            period = runtime.resolve_period(start_date, end_date, day, frequency)
        except ValueError as e:
            raise DataValidationError(str(e))

        view = runtime.payroll_workflow().view(period.start_date, period.end_date)
        source = "live" if view.is_live else f"revision {view.revision}"
        click.echo(
            format_info(f"Payroll {view.period_id}: ")
            + format_status(view.status.value)
            + f" ({source})"
        )
        click.echo()

        if not view.line_items:
            click.echo(format_info("No line items for this period."))
            return

        confirmed = None if view.is_live else view.confirmed_employee_ids
        click.echo(_line_item_table(view.line_items, confirmed))
        click.echo()

        totals = payroll_totals(view.line_items)
        click.echo(
            f"Totals: gross {format_money(totals.gross)}, "
            f"net {format_money(totals.net)}"
        )
        if not view.is_live and view.pending_confirmations:
            click.echo(
                format_warning(
                    f"Waiting for {view.pending_confirmations} confirmation(s)"
                )
            )


@payroll.command(name="finalize")
@with_period_options
@click.pass_obj
def finalize_payroll(
    runtime: CLIRuntime,
    start_date: Optional[str],
    end_date: Optional[str],
    day: Optional[str],
    frequency: Optional[str],
):
    """Snapshot a draft period's line items for confirmation.

    Example:
        shiftledger payroll finalize --start-date 2024-07-01 --end-date 2024-07-15
    """
    with with_error_handling(runtime.debug):
        try:
            period = runtime.resolve_period(start_date, end_date, day, frequency)
        except ValueError as e:
            raise DataValidationError(str(e))

        finalized = runtime.payroll_workflow().finalize(
            period.start_date, period.end_date
        )
        click.echo(_line_item_table(finalized.line_items))
        click.echo()
        click.echo(
            format_success(
                f"Finalized {finalized.id} at revision {finalized.revision} "
                f"with {len(finalized.line_items)} line item(s)"
            )
        )


@payroll.command(name="edit")
@click.argument("period_id")
@click.option("--employee", "employee_id", required=True, help="Employee id")
@click.option("--deductions", type=str, default=None, help="New deductions amount")
@click.option("--flat-bonus", type=str, default=None, help="New flat bonus amount")
@click.pass_obj
def edit_payroll(
    runtime: CLIRuntime,
    period_id: str,
    employee_id: str,
    deductions: Optional[str],
    flat_bonus: Optional[str],
):
    """Edit one line item of a final period.

    The item's revision goes up, so the employee has to confirm again.

    Example:
        shiftledger payroll edit 2024-07-01_2024-07-15 --employee emp-1 --deductions 25
    """
    with with_error_handling(runtime.debug):
        if deductions is None and flat_bonus is None:
            raise DataValidationError(
                "Nothing to edit: pass --deductions or --flat-bonus"
            )

        item = runtime.payroll_workflow().edit_line_item(
            _period_id(period_id),
            employee_id,
            deductions=_money(deductions, "--deductions"),
            flat_bonus=_money(flat_bonus, "--flat-bonus"),
        )
        click.echo(_line_item_table([item]))
        click.echo()
        click.echo(
            format_success(
                f"Updated {item.employee_name}, now at revision {item.revision}"
            )
        )


@payroll.command(name="remove")
@click.argument("period_id")
@click.option("--employee", "employee_id", required=True, help="Employee id")
@click.confirmation_option(prompt="Remove this employee's line item?")
@click.pass_obj
def remove_payroll_item(runtime: CLIRuntime, period_id: str, employee_id: str):
    """Remove one employee's line item from a final period.

    The employee's confirmation is no longer needed to lock the period.

    Example:
        shiftledger payroll remove 2024-07-01_2024-07-15 --employee emp-3 --yes
    """
    with with_error_handling(runtime.debug):
        pid = _period_id(period_id)
        workflow = runtime.payroll_workflow()
        workflow.remove_line_item(pid, employee_id)
        remaining = len(workflow.pending_confirmations(pid))
        click.echo(format_success(f"Removed {employee_id} from payroll {pid}"))
        click.echo(format_info(f"{remaining} confirmation(s) still pending"))


@payroll.command(name="confirm")
@click.argument("period_id")
@click.option("--employee", "employee_id", required=True, help="Employee id")
@click.option(
    "--revision",
    type=int,
    required=True,
    help="Line item revision the employee reviewed",
)
@click.option("--note", type=str, default=None, help="Optional note")
@click.pass_obj
def confirm_payroll(
    runtime: CLIRuntime,
    period_id: str,
    employee_id: str,
    revision: int,
    note: Optional[str],
):
    """Record an employee's confirmation of their line item.

    Example:
        shiftledger payroll confirm 2024-07-01_2024-07-15 --employee emp-1 --revision 2
    """
    with with_error_handling(runtime.debug):
        workflow = runtime.payroll_workflow()
        pid = _period_id(period_id)
        confirmation = workflow.confirm(pid, employee_id, revision, note=note)
        remaining = len(workflow.pending_confirmations(pid))
        click.echo(
            format_success(
                f"Confirmed {confirmation.employee_name or employee_id} "
                f"at revision {revision}"
            )
        )
        if remaining:
            click.echo(format_info(f"{remaining} confirmation(s) still pending"))
        else:
            click.echo(
                format_info("All line items confirmed; the period can be locked")
            )


def _transition_command(name: str, action: str, help_text: str):
    @payroll.command(name=name, help=help_text)
    @click.argument("period_id")
    @click.pass_obj
    def command(runtime: CLIRuntime, period_id: str):
        with with_error_handling(runtime.debug):
            transition = getattr(runtime.payroll_workflow(), action)
            period = transition(_period_id(period_id))
            click.echo(
                format_success(f"Payroll {period.id} is now {period.status.value}")
            )

    return command


lock_payroll = _transition_command(
    "lock", "lock", "Lock a final period once every line item is confirmed."
)
mark_paid_payroll = _transition_command(
    "mark-paid", "mark_paid", "Mark a locked period as paid."
)
reopen_payroll = _transition_command(
    "reopen", "reopen", "Send a final or locked period back to draft."
)


@payroll.command(name="delete")
@click.argument("period_id")
@click.confirmation_option(prompt="Delete this draft payroll period?")
@click.pass_obj
def delete_payroll(runtime: CLIRuntime, period_id: str):
    """Delete a draft period."""
    with with_error_handling(runtime.debug):
        pid = _period_id(period_id)
        runtime.payroll_workflow().delete(pid)
        click.echo(format_success(f"Deleted payroll {pid}"))


@payroll.command(name="yearly")
@click.option("--year", type=int, required=True, help="Calendar year")
@click.pass_obj
def yearly_payroll(runtime: CLIRuntime, year: int):
    """Gross and net paid per employee over a year of paid periods."""
    with with_error_handling(runtime.debug):
        rows = runtime.payroll_workflow().yearly_summary(year)
        if not rows:
            click.echo(format_info(f"No paid payroll in {year}."))
            return
        click.echo(
            format_table(
                ["Employee", "Gross", "Net"],
                [
                    [r.employee_name, format_money(r.gross), format_money(r.net)]
                    for r in rows
                ],
            )
        )
