"""Site profitability commands."""

from typing import Optional

import click

from shiftledger.calculators.profit_calculator import (
    aggregate_monthly_site_profit,
    compute_job_profitability,
)
from shiftledger.calculators.time_utils import parse_month
from shiftledger.cli.error_handlers import DataValidationError, with_error_handling
from shiftledger.cli.utils.formatters import (
    format_info,
    format_money,
    format_success,
    format_table,
)
from shiftledger.cli.utils.runtime import CLIRuntime, parse_date_input


@click.command(name="site-profit")
@click.option(
    "--month",
    type=str,
    default=None,
    help="Month to report on (YYYY-MM, default: current month)",
)
@click.pass_obj
def site_profit(runtime: CLIRuntime, month: Optional[str]):
    """Monthly service charges, labor and expenses per site.

    Service charge is the site's price times the number of days it was
    serviced; labor is pay rate times hours worked there.

    Example:
        shiftledger site-profit --month 2024-07
    """
    with with_error_handling(runtime.debug):
        try:
            first = parse_month(month) if month else runtime.today().replace(day=1)
        except ValueError as e:
            raise DataValidationError(str(e))

        bundle = runtime.load_bundle()
        report = aggregate_monthly_site_profit(
            bundle.sessions(),
            bundle.employees,
            bundle.mileage_logs,
            bundle.other_expenses,
            bundle.settings,
            first,
            tz=runtime.tz,
        )
        if not report.rows:
            click.echo(format_info(f"No site activity in {first:%Y-%m}."))
            return

        rows = [
            [
                row.site_name,
                format_money(row.service_charge),
                format_money(row.labor),
                format_money(row.mileage),
                format_money(row.other),
                format_money(row.net),
            ]
            for row in report.rows + [report.totals]
        ]
        click.echo(
            format_table(
                ["Site", "Service", "Labor", "Mileage", "Other", "Net"], rows
            )
        )
        click.echo()
        net = format_money(report.totals.net)
        click.echo(format_success(f"Net for {first:%Y-%m}: {net}"))


@click.command(name="job-profit")
@click.option(
    "--date",
    "day",
    type=str,
    default=None,
    help="Day to report on (YYYY-MM-DD, default: today)",
)
@click.pass_obj
def job_profit(runtime: CLIRuntime, day: Optional[str]):
    """Revenue, costs and margin per site for one day.

    Revenue is the day's invoice when there is one, else the price of the
    cleaning schedule active that day, else the site's service price.

    Example:
        shiftledger job-profit --date 2024-07-03
    """
    with with_error_handling(runtime.debug):
        try:
            target = parse_date_input(day) if day else runtime.today()
        except ValueError as e:
            raise DataValidationError(str(e))

        bundle = runtime.load_bundle()
        jobs = compute_job_profitability(
            bundle.sessions(),
            bundle.employees,
            bundle.mileage_logs,
            bundle.other_expenses,
            bundle.schedules,
            bundle.invoices,
            bundle.settings,
            target,
            tz=runtime.tz,
        )
        if not jobs:
            click.echo(format_info("No sites in the site directory."))
            return

        rows = [
            [
                job.site,
                format_money(job.revenue),
                format_money(job.labor),
                format_money(job.mileage),
                format_money(job.expenses),
                format_money(job.profit),
                f"{job.margin * 100:.0f}%",
            ]
            for job in jobs.values()
        ]
        click.echo(
            format_table(
                ["Site", "Revenue", "Labor", "Mileage", "Expenses", "Profit", "Margin"],
                rows,
            )
        )
