"""List sessions command."""

from typing import Optional

import click

from shiftledger.calculators.session_builder import active_sessions
from shiftledger.calculators.time_utils import from_epoch_ms, local_date
from shiftledger.cli.error_handlers import DataValidationError, with_error_handling
from shiftledger.cli.utils.formatters import (
    format_duration,
    format_info,
    format_success,
    format_table,
)
from shiftledger.cli.utils.runtime import CLIRuntime, parse_date_input


@click.command(name="sessions")
@click.option(
    "--employee",
    type=str,
    default=None,
    help="Only show sessions of this employee (id or name)",
)
@click.option(
    "--date",
    "day",
    type=str,
    default=None,
    help="Only show sessions that start on this day (YYYY-MM-DD)",
)
@click.option(
    "--active",
    "active_only",
    is_flag=True,
    default=False,
    help="Only show employees who are still clocked in",
)
@click.pass_obj
def list_sessions(
    runtime: CLIRuntime, employee: Optional[str], day: Optional[str], active_only: bool
):
    """List work sessions rebuilt from the clock entry log.

    Clock-outs without a matching clock-in are shown as orphans with
    zero duration.

    Example:
        shiftledger sessions --date 2024-07-01
        shiftledger sessions --employee emp-1 --active
    """
    with with_error_handling(runtime.debug):
        try:
            target_day = parse_date_input(day) if day else None
        except ValueError as e:
            raise DataValidationError(str(e))

        bundle = runtime.load_bundle()
        sessions = bundle.sessions()
        if employee:
            sessions = [s for s in sessions if employee in (s.employee_id, s.employee)]
        if active_only:
            sessions = active_sessions(sessions)
        if target_day is not None:
            sessions = [
                s
                for s in sessions
                if local_date(s.start_ts, runtime.tz) == target_day
            ]

        if not sessions:
            click.echo(format_info("No sessions found."))
            return

        def stamp(entry) -> str:
            if entry is None:
                return "-"
            return from_epoch_ms(entry.ts, runtime.tz).strftime("%Y-%m-%d %H:%M")

        rows = []
        for session in sessions:
            if session.is_orphan:
                state = "orphan"
            elif session.active:
                state = "active"
            else:
                state = "closed"
            rows.append(
                [
                    session.employee or session.employee_id,
                    session.site or "-",
                    stamp(session.in_entry),
                    stamp(session.out_entry),
                    format_duration(session.duration_minutes()),
                    state,
                ]
            )

        click.echo(
            format_table(
                ["Employee", "Site", "Clock-in", "Clock-out", "Duration", "State"],
                rows,
            )
        )
        click.echo()
        click.echo(format_success(f"Found {len(sessions)} session(s)"))
