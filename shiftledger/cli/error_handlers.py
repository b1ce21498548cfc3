"""Error handling for CLI commands.

Every command body runs inside ``with_error_handling``. Known failures are
printed as one styled line plus an optional hint and turned into a stable
exit code; anything else is logged with its traceback and exits with 255.
"""

import logging
import sys
import traceback
from typing import List, NamedTuple, Optional, Tuple, Type

import click

from shiftledger.cli.utils.formatters import format_error, format_warning
from shiftledger.services.errors import (
    PayrollNotFoundError,
    PayrollStoreError,
    PayrollTransitionError,
)

logger = logging.getLogger(__name__)


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        """
        Args:
            message: Error message to display
            recovery_hint: Optional hint for recovering from the error
        """
        self.message = message
        self.recovery_hint = recovery_hint
        super().__init__(message)


class ConfigurationError(CLIError):
    """Environment or .env settings are invalid."""


class DataValidationError(CLIError):
    """Unreadable data files, bad command input, or a failed audit."""


class ProcessingError(CLIError):
    """A computation could not be completed."""


class ExitRule(NamedTuple):
    """How one kind of failure is reported."""

    error_type: Type[BaseException]
    exit_code: int
    label: Optional[str]
    hint: Optional[str]


# First matching rule wins
EXIT_RULES: List[ExitRule] = [
    ExitRule(ConfigurationError, 1, "Configuration Error", None),
    ExitRule(DataValidationError, 2, "Data Validation Error", None),
    ExitRule(ProcessingError, 3, "Processing Error", None),
    ExitRule(PayrollTransitionError, 4, None, None),
    ExitRule(
        PayrollNotFoundError,
        5,
        None,
        "Finalize the period first, or check the period id",
    ),
    ExitRule(
        PayrollStoreError,
        6,
        "Storage Error",
        "Check that the data directory is writable",
    ),
]

EXIT_CANCELLED = 130
EXIT_UNEXPECTED = 255


def _describe(error: BaseException, rule: ExitRule) -> Tuple[str, List[str]]:
    """Headline and warning lines for a known failure."""
    message = error.message if isinstance(error, CLIError) else str(error)
    headline = f"{rule.label}: {message}" if rule.label else message

    notes = []
    if isinstance(error, PayrollTransitionError) and error.status:
        notes.append(f"Period {error.period_id} is {error.status}")
    hint = error.recovery_hint if isinstance(error, CLIError) else rule.hint
    if hint:
        notes.append(f"Hint: {hint}")
    return headline, notes


def handle_cli_error(error: BaseException, debug: bool = False) -> int:
    """
    Print a failure for the user and pick the process exit code.

    Exit codes:
        1: configuration error
        2: data validation error
        3: processing error
        4: payroll transition rejected
        5: payroll period or line item not found
        6: payroll documents could not be written
        130: cancelled by the user
        255: unexpected error

    Args:
        error: The exception that occurred
        debug: Whether to show the full stack trace of unexpected errors

    Returns:
        Exit code for the process
    """
    for rule in EXIT_RULES:
        if isinstance(error, rule.error_type):
            headline, notes = _describe(error, rule)
            click.echo(format_error(headline))
            for note in notes:
                click.echo(format_warning(note))
            return rule.exit_code

    if isinstance(error, click.Abort):
        click.echo(format_warning("\nOperation cancelled by user"))
        return EXIT_CANCELLED

    logger.exception("Unexpected error in CLI command")
    click.echo(format_error(f"Unexpected Error: {type(error).__name__}"))
    click.echo(str(error))
    if debug:
        click.echo("\nFull stack trace:")
        click.echo(
            "".join(traceback.format_exception(type(error), error, error.__traceback__))
        )
    else:
        click.echo(format_warning("\nRun with --debug flag for full stack trace"))
    return EXIT_UNEXPECTED


class ErrorHandler:
    """Context manager turning exceptions into exit codes.

    Click's own exits and usage errors pass through untouched.
    """

    def __init__(self, debug: bool = False):
        self.debug = debug

    def __enter__(self) -> "ErrorHandler":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_val is None:
            return False
        passthrough = (SystemExit, click.exceptions.Exit, click.ClickException)
        if isinstance(exc_val, passthrough):
            return False
        sys.exit(handle_cli_error(exc_val, self.debug))


def with_error_handling(debug: bool = False) -> ErrorHandler:
    """
    Standard error handling for a command body.

    Example:
        @click.command()
        @click.pass_obj
        def my_command(runtime):
            with with_error_handling(runtime.debug):
                ...
    """
    return ErrorHandler(debug)
