"""Hours report command."""

from typing import Optional

import click

from shiftledger.aggregators.duration_aggregator import DurationAggregator
from shiftledger.aggregators.weekly_hours_calculator import WeeklyHoursCalculator
from shiftledger.calculators.pay_period import PayPeriodRange
from shiftledger.calculators.time_utils import (
    end_of_month,
    minutes_to_decimal_hours,
    parse_month,
)
from shiftledger.cli.error_handlers import DataValidationError, with_error_handling
from shiftledger.cli.utils.formatters import (
    format_duration,
    format_info,
    format_success,
    format_table,
)
from shiftledger.cli.utils.runtime import CLIRuntime


@click.command(name="hours")
@click.option(
    "--month",
    type=str,
    default=None,
    help="Month to total (YYYY-MM). Cannot be used with --start-date/--end-date.",
)
@click.option("--start-date", type=str, default=None, help="Start date (YYYY-MM-DD)")
@click.option("--end-date", type=str, default=None, help="End date (YYYY-MM-DD)")
@click.option(
    "--weekly",
    is_flag=True,
    default=False,
    help="Show an employee × week matrix instead of period totals",
)
@click.pass_obj
def hours_report(
    runtime: CLIRuntime,
    month: Optional[str],
    start_date: Optional[str],
    end_date: Optional[str],
    weekly: bool,
):
    """Total worked hours per employee.

    Only closed sessions count. A shift that crosses the edge of the range
    contributes just the minutes inside it.

    Example:
        shiftledger hours --month 2024-07
        shiftledger hours --start-date 2024-07-01 --end-date 2024-07-15
        shiftledger hours --month 2024-07 --weekly
    """
    with with_error_handling(runtime.debug):
        if month is not None and (start_date is not None or end_date is not None):
            raise DataValidationError(
                "Cannot use --month together with --start-date/--end-date"
            )

        try:
            if month is not None:
                first = parse_month(month)
                period = PayPeriodRange(first, end_of_month(first))
            elif start_date is not None or end_date is not None:
                period = runtime.resolve_period(start_date, end_date)
            else:
                today = runtime.today()
                period = PayPeriodRange(today.replace(day=1), end_of_month(today))
        except ValueError as e:
            raise DataValidationError(str(e))

        click.echo(
            format_info(f"Hours from {period.start_date} to {period.end_date}")
        )

        bundle = runtime.load_bundle()
        sessions = bundle.sessions()
        start, end = period.window(runtime.tz)

        if weekly:
            in_range = [
                s for s in sessions if s.is_closed and start <= s.start_ts < end
            ]
            calculator = WeeklyHoursCalculator(
                week_starts_on=bundle.settings.week_starts_on, tz=runtime.tz
            )
            matrix = calculator.generate_weekly_matrix(
                calculator.calculate_weekly_hours(in_range)
            )
            if matrix.empty:
                click.echo(format_info("No closed sessions in this range."))
                return
            click.echo(matrix.fillna(0).to_string(float_format="{:.2f}".format))
            return

        totals = DurationAggregator(tz=runtime.tz).totals_by_employee(
            sessions, start, end
        )
        if not totals:
            click.echo(format_info("No closed sessions in this range."))
            return

        rows = [
            [
                t.employee or t.employee_id,
                format_duration(t.minutes),
                str(minutes_to_decimal_hours(t.minutes)),
            ]
            for t in totals
        ]
        click.echo(format_table(["Employee", "Time", "Hours"], rows))
        click.echo()
        grand_total = sum(t.minutes for t in totals)
        click.echo(
            format_success(
                f"{len(totals)} employee(s), {format_duration(grand_total)} total"
            )
        )
