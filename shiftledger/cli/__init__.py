"""ShiftLedger CLI.

This module provides a command-line interface over a data directory of
clock entries, employees and business settings. It includes commands for
listing sessions, totalling hours, running payroll periods, reporting site
profitability and auditing the entry log.
"""

from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from shiftledger import __version__
from shiftledger.cli.commands.audit import audit_entries
from shiftledger.cli.commands.hours import hours_report
from shiftledger.cli.commands.payroll import payroll
from shiftledger.cli.commands.profit import job_profit, site_profit
from shiftledger.cli.commands.sessions import list_sessions
from shiftledger.cli.error_handlers import ConfigurationError, with_error_handling
from shiftledger.cli.utils.runtime import CLIRuntime
from shiftledger.config.logging_config import LoggingConfig, configure_logging
from shiftledger.config.settings import get_config
from shiftledger.utils.logging_utils import LogContext, generate_correlation_id


@click.group(help="ShiftLedger - Turn clock entries into hours, payroll and profit")
@click.version_option(version=__version__)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Data directory (default: SHIFTLEDGER_DATA_DIR)",
)
@click.option(
    "--debug", is_flag=True, default=False, help="Verbose logging and tracebacks"
)
@click.pass_context
def cli(ctx: click.Context, data_dir: Optional[Path], debug: bool):
    """ShiftLedger CLI main entry point."""
    with with_error_handling(debug):
        try:
            config = get_config()
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e.error_count()} problem(s)\n{e}",
                recovery_hint="Check your environment variables and .env file",
            )

        configure_logging(LoggingConfig.from_settings(config, debug=debug))

    ctx.obj = CLIRuntime(
        config=config,
        data_dir=data_dir or config.data_dir,
        debug=debug or config.debug,
    )
    ctx.with_resource(LogContext(correlation_id=generate_correlation_id()))


# Register commands
cli.add_command(list_sessions)
cli.add_command(hours_report)
cli.add_command(payroll)
cli.add_command(site_profit)
cli.add_command(job_profit)
cli.add_command(audit_entries)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
