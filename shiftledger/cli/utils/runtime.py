"""Shared state and helpers for CLI commands."""

import datetime as dt
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from shiftledger.calculators.pay_period import PayPeriodRange, pay_period_for
from shiftledger.cli.error_handlers import DataValidationError
from shiftledger.config.settings import ShiftLedgerConfig
from shiftledger.readers.data_reader import DataBundle, DataFileError, DataReader
from shiftledger.services.payroll_store import JsonPayrollStore
from shiftledger.services.payroll_workflow import PayrollWorkflow


def parse_date_input(date_str: str) -> dt.date:
    """Parse date string in YYYY-MM-DD format.

    Raises:
        ValueError: If date format is invalid
    """
    try:
        return dt.datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")


@dataclass
class CLIRuntime:
    """Configuration and lazily loaded data shared by one CLI invocation.

    Attributes:
        config: Runtime configuration from the environment
        data_dir: Directory holding the data files
        debug: Show stack traces for unexpected errors
    """

    config: ShiftLedgerConfig
    data_dir: Path
    debug: bool = False
    _bundle: Optional[DataBundle] = field(default=None, repr=False)

    @property
    def tz(self) -> dt.tzinfo:
        return self.config.tz

    def today(self) -> dt.date:
        return dt.datetime.now(self.tz).date()

    def load_bundle(self) -> DataBundle:
        """Read the data directory once per invocation.

        Raises:
            DataValidationError: If a data file cannot be read
        """
        if self._bundle is None:
            try:
                self._bundle = DataReader(self.data_dir, self.tz).load_all()
            except DataFileError as e:
                raise DataValidationError(
                    str(e),
                    recovery_hint="Set SHIFTLEDGER_DATA_DIR or pass --data-dir",
                )
        return self._bundle

    def payroll_workflow(self) -> PayrollWorkflow:
        bundle = self.load_bundle()
        return PayrollWorkflow(
            JsonPayrollStore(self.data_dir),
            bundle.sessions(),
            bundle.employees,
            bundle.settings,
            tz=self.tz,
        )

    def resolve_period(
        self,
        start_date: Optional[str],
        end_date: Optional[str],
        day: Optional[str] = None,
        frequency: Optional[str] = None,
    ) -> PayPeriodRange:
        """Pick a pay period from explicit dates or from a day and frequency.

        With neither given, the period of the configured default frequency
        containing today is used.

        Raises:
            ValueError: If a date is malformed, only one bound is given, or
                the range is inverted
        """
        if (start_date is None) != (end_date is None):
            raise ValueError("--start-date and --end-date must be used together")

        if start_date is not None and end_date is not None:
            start, end = parse_date_input(start_date), parse_date_input(end_date)
            if end < start:
                raise ValueError("start-date must be before or equal to end-date")
            return PayPeriodRange(start, end)

        target = parse_date_input(day) if day else self.today()
        week_starts_on = self.load_bundle().settings.week_starts_on
        return pay_period_for(
            target, frequency or self.config.default_pay_frequency, week_starts_on
        )
