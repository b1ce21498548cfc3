"""Audit entry log command."""

import click

from shiftledger.cli.error_handlers import DataValidationError, with_error_handling
from shiftledger.cli.utils.formatters import (
    format_error,
    format_info,
    format_success,
    format_warning,
)
from shiftledger.cli.utils.runtime import CLIRuntime
from shiftledger.validators.entry_auditor import EntryLogAuditor
from shiftledger.validators.validation_report import ValidationSeverity

MAX_ISSUES_PER_SEVERITY = 20


@click.command(name="audit")
@click.option(
    "--severity",
    type=click.Choice(["error", "warning", "info"], case_sensitive=False),
    default="warning",
    help="Minimum severity level to display (default: warning)",
)
@click.pass_obj
def audit_entries(runtime: CLIRuntime, severity: str):
    """Check the clock entry log for problems.

    Checks for:
    - Entries without an employee reference
    - Clock-outs without a matching clock-in
    - Entries recorded outside a site's geofence
    - Entries at sites missing from the site directory
    - Employees who are still clocked in

    Returns non-zero exit code if errors are found.

    Example:
        shiftledger audit
        shiftledger audit --severity info
    """
    with with_error_handling(runtime.debug):
        click.echo(format_info("Auditing clock entries..."))
        severity_level = ValidationSeverity[severity.upper()]

        bundle = runtime.load_bundle()
        report = EntryLogAuditor.audit(
            bundle.entries, bundle.settings, sessions=bundle.sessions()
        )
        shown = report.filter(severity_level)

        click.echo()
        click.echo("=" * 60)
        click.echo("Audit Summary")
        click.echo("=" * 60)
        click.echo(f"Entries checked:  {len(bundle.entries)}")
        click.echo(f"Errors:           {report.error_count}")
        click.echo(f"Warnings:         {report.warning_count}")
        click.echo(f"Info:             {report.info_count}")

        styles = {
            ValidationSeverity.ERROR: format_error,
            ValidationSeverity.WARNING: format_warning,
            ValidationSeverity.INFO: format_info,
        }
        for sev in sorted(styles, reverse=True):
            issues = shown.by_severity(sev)
            if not issues:
                continue
            click.echo()
            click.echo(f"{sev.name}S ({len(issues)}):")
            for issue in issues[:MAX_ISSUES_PER_SEVERITY]:
                click.echo(styles[sev](f"  {issue}"))
            if len(issues) > MAX_ISSUES_PER_SEVERITY:
                click.echo(f"  ... and {len(issues) - MAX_ISSUES_PER_SEVERITY} more")

        click.echo()
        if report.has_errors():
            raise DataValidationError(
                f"Audit failed with {report.error_count} error(s)",
                recovery_hint="Fix the listed entries and run the audit again",
            )
        if report.warning_count:
            click.echo(
                format_warning(
                    f"Audit completed with {report.warning_count} warning(s)"
                )
            )
        else:
            click.echo(format_success("Audit passed! No problems found."))
