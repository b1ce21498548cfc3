"""Data reader for loading a ShiftLedger data directory.

This module reads the JSON (and CSV) files exported by the surrounding
application and validates them into models. It is the ingestion boundary:
legacy field spellings are normalized here once, records that fail
validation are logged and skipped, and nothing downstream re-resolves them.

Expected layout (every file optional except the entry log):

    data/
      entries.json | entries.csv
      employees.json
      settings.json
      mileage.json
      expenses.json
      schedules.json
      invoices.json
      payroll_periods.json
      payroll_confirmations.json

A collection file holds either a JSON array of documents or an object
mapping document ids to documents.
"""

import datetime as dt
import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

import pandas as pd
from pydantic import ValidationError

from shiftledger.calculators.session_builder import build_sessions
from shiftledger.calculators.time_utils import parse_timestamp
from shiftledger.models.base import BaseDataModel
from shiftledger.models.employee import Employee
from shiftledger.models.entry import Entry
from shiftledger.models.expense import MileageLog, OtherExpense
from shiftledger.models.schedule import CleaningSchedule, Invoice
from shiftledger.models.session import Session
from shiftledger.models.site import BusinessSettings
from shiftledger.utils.logging_utils import log_function_call

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseDataModel)

ENTRIES_JSON = "entries.json"
ENTRIES_CSV = "entries.csv"
EMPLOYEES_FILE = "employees.json"
SETTINGS_FILE = "settings.json"
MILEAGE_FILE = "mileage.json"
EXPENSES_FILE = "expenses.json"
SCHEDULES_FILE = "schedules.json"
INVOICES_FILE = "invoices.json"

ENTRY_CSV_COLUMNS = [
    "id",
    "employee",
    "employeeId",
    "action",
    "ts",
    "site",
    "lat",
    "lng",
    "note",
]


class DataFileError(Exception):
    """Raised when a data file exists but cannot be read as JSON/CSV."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


@dataclass
class DataBundle:
    """Everything loaded from one data directory."""

    entries: List[Entry] = field(default_factory=list)
    employees: List[Employee] = field(default_factory=list)
    settings: BusinessSettings = field(default_factory=BusinessSettings)
    mileage_logs: List[MileageLog] = field(default_factory=list)
    other_expenses: List[OtherExpense] = field(default_factory=list)
    schedules: List[CleaningSchedule] = field(default_factory=list)
    invoices: List[Invoice] = field(default_factory=list)

    def sessions(self) -> List[Session]:
        return build_sessions(self.entries)


class DataReader:
    """Reads and validates the files of a data directory.

    Attributes:
        data_dir: Directory holding the data files
        tz: Timezone for entry timestamps written as local date-times

    Example:
        >>> reader = DataReader(Path("data"))
        >>> bundle = reader.load_all()
        >>> len(bundle.sessions())
        42
    """

    def __init__(self, data_dir: Union[str, Path], tz: dt.tzinfo = dt.timezone.utc):
        self.data_dir = Path(data_dir)
        self.tz = tz

    @log_function_call(include_args=False, level="DEBUG")
    def load_all(self) -> DataBundle:
        """Load every collection in the data directory.

        Mileage and expense site references are resolved against the site
        directory in settings.json.

        Raises:
            DataFileError: If the directory or a present file is unreadable
        """
        if not self.data_dir.is_dir():
            raise DataFileError(
                f"Data directory not found: {self.data_dir}", path=self.data_dir
            )

        settings = self.load_settings()
        bundle = DataBundle(
            entries=self.load_entries(),
            employees=self.load_employees(),
            settings=settings,
            mileage_logs=self.load_mileage(settings),
            other_expenses=self.load_expenses(settings),
            schedules=self.load_schedules(),
            invoices=self.load_invoices(),
        )
        logger.info(
            f"Loaded {len(bundle.entries)} entries, {len(bundle.employees)} employees "
            f"and {len(settings.sites)} sites from {self.data_dir}"
        )
        return bundle

    def load_entries(self) -> List[Entry]:
        """Load the clock entry log from entries.json or entries.csv.

        Timestamps may be epoch milliseconds or ISO date-times; entries
        whose timestamp cannot be read are skipped.
        """
        json_path = self.data_dir / ENTRIES_JSON
        csv_path = self.data_dir / ENTRIES_CSV

        if json_path.exists():
            raw = self._read_collection(json_path)
            source = ENTRIES_JSON
        elif csv_path.exists():
            raw = self._read_entries_csv(csv_path)
            source = ENTRIES_CSV
        else:
            logger.warning(f"No entry log found in {self.data_dir}")
            return []

        records = []
        for record in raw:
            if not isinstance(record, dict):
                logger.warning(f"Skipping non-object entry record: {record!r}")
                continue
            ts = parse_timestamp(record.get("ts"), self.tz)
            if ts is None:
                logger.warning(
                    f"Skipping entry {record.get('id', '?')} with unreadable "
                    f"timestamp {record.get('ts')!r}"
                )
                continue
            records.append({**record, "ts": ts})

        return self._validate(records, Entry, source)

    def load_employees(self) -> List[Employee]:
        return self._load_models(EMPLOYEES_FILE, Employee)

    def load_settings(self) -> BusinessSettings:
        """Load settings.json; defaults apply when the file is missing."""
        path = self.data_dir / SETTINGS_FILE
        if not path.exists():
            logger.info("No settings.json found, using default business settings")
            return BusinessSettings()

        raw = self._read_json(path)
        if not isinstance(raw, dict):
            raise DataFileError(f"Expected a JSON object in {path}", path=path)
        try:
            return BusinessSettings.model_validate(raw)
        except ValidationError as e:
            raise DataFileError(f"Invalid settings in {path}: {e}", path=path)

    def load_mileage(
        self, settings: Optional[BusinessSettings] = None
    ) -> List[MileageLog]:
        logs = self._load_models(MILEAGE_FILE, MileageLog)
        return self._resolve_sites(logs, settings)

    def load_expenses(
        self, settings: Optional[BusinessSettings] = None
    ) -> List[OtherExpense]:
        expenses = self._load_models(EXPENSES_FILE, OtherExpense)
        return self._resolve_sites(expenses, settings)

    def load_schedules(self) -> List[CleaningSchedule]:
        return self._load_models(SCHEDULES_FILE, CleaningSchedule)

    def load_invoices(self) -> List[Invoice]:
        return self._load_models(INVOICES_FILE, Invoice)

    def _resolve_sites(self, records, settings: Optional[BusinessSettings]):
        """Replace each record's site reference with the directory key."""
        if settings is None or not settings.sites:
            return records
        index = settings.site_index()
        resolved = [r.resolve_site(index) for r in records]
        unresolved = sum(1 for r in resolved if r.site_key is None)
        if unresolved:
            logger.debug(f"{unresolved} record(s) reference no known site")
        return resolved

    def _load_models(self, filename: str, model: Type[ModelT]) -> List[ModelT]:
        path = self.data_dir / filename
        if not path.exists():
            logger.debug(f"Optional data file not found: {path}")
            return []
        return self._validate(self._read_collection(path), model, filename)

    def _validate(
        self, records: List[Dict[str, Any]], model: Type[ModelT], source: str
    ) -> List[ModelT]:
        """Validate records into models, skipping and logging invalid ones."""
        result = []
        for index, record in enumerate(records):
            try:
                result.append(model.model_validate(record))
            except ValidationError as e:
                logger.warning(
                    f"Skipping invalid {model.__name__} #{index} "
                    f"({_record_id(record)}) in {source}: "
                    f"{e.error_count()} validation error(s)"
                )
        logger.debug(f"Validated {len(result)}/{len(records)} records from {source}")
        return result

    def _read_collection(self, path: Path) -> List[Dict[str, Any]]:
        """Read a collection file as a list of documents.

        Object-shaped collections ({id: document}) get the key as the
        document id when the document has none.
        """
        raw = self._read_json(path)
        if isinstance(raw, dict):
            return [
                {"id": key, **value} if isinstance(value, dict) else value
                for key, value in raw.items()
            ]
        if isinstance(raw, list):
            return raw
        raise DataFileError(f"Expected a JSON array or object in {path}", path=path)

    def _read_json(self, path: Path) -> Any:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise DataFileError(f"Failed to parse {path}: {e}", path=path)
        except OSError as e:
            raise DataFileError(f"Failed to read {path}: {e}", path=path)

    def _read_entries_csv(self, path: Path) -> List[Dict[str, Any]]:
        """Read entries.csv with pandas; blank cells become missing values."""
        try:
            df = pd.read_csv(
                path,
                dtype={"id": str, "employee": str, "employeeId": str, "site": str},
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError, OSError) as e:
            raise DataFileError(f"Failed to read {path}: {e}", path=path)

        missing = [c for c in ("id", "action", "ts") if c not in df.columns]
        if missing:
            raise DataFileError(
                f"Missing required column(s) in {path}: {', '.join(missing)}",
                path=path,
            )

        columns = [c for c in ENTRY_CSV_COLUMNS if c in df.columns]
        records = []
        for row in df[columns].to_dict(orient="records"):
            records.append({k: _clean_cell(v) for k, v in row.items()})
        logger.debug(f"Read {len(records)} rows from {path}")
        return records


def _record_id(record: Any) -> str:
    if isinstance(record, dict):
        return str(record.get("id", "no id"))
    return "no id"


def _clean_cell(value: Any) -> Any:
    """NaN cells become None."""
    if isinstance(value, float) and math.isnan(value):
        return None
    return value
