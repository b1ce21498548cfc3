"""Whole-document storage for payroll periods and confirmations.

Periods are keyed by their "YYYY-MM-DD_YYYY-MM-DD" id and always written as
complete documents; there is no partial-field update and the last write
wins. Confirmations are append-only records keyed by
(period, employee, revision).

Two implementations are provided:
- PayrollStore: in-memory, used by tests and by callers that manage
  persistence themselves
- JsonPayrollStore: the same API backed by two JSON files, written
  atomically (temp file + rename); a change rewrites only its own file
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from shiftledger.models.payroll import PayrollConfirmation, PayrollPeriod
from shiftledger.services.errors import PayrollStoreError

logger = logging.getLogger(__name__)

PERIODS_FILE = "payroll_periods.json"
CONFIRMATIONS_FILE = "payroll_confirmations.json"

PERIODS = "periods"
CONFIRMATIONS = "confirmations"


class PayrollStore:
    """In-memory payroll document store.

    Reads hand out deep copies so callers can modify a period freely and
    only a save makes the change visible.

    Example:
        >>> store = PayrollStore()
        >>> store.save_period(period)
        >>> store.get_period(period.id).status
        <PayrollStatus.FINAL: 'final'>
    """

    def __init__(
        self,
        periods: Optional[List[PayrollPeriod]] = None,
        confirmations: Optional[List[PayrollConfirmation]] = None,
    ):
        self._lock = threading.Lock()
        self._periods: Dict[str, PayrollPeriod] = {}
        self._confirmations: Dict[Tuple[str, str, int], PayrollConfirmation] = {}
        for period in periods or []:
            self._periods[period.id] = period.model_copy(deep=True)
        for confirmation in confirmations or []:
            self._confirmations[confirmation.key] = confirmation.model_copy(deep=True)

    def get_period(self, period_id: str) -> Optional[PayrollPeriod]:
        with self._lock:
            period = self._periods.get(period_id)
            return period.model_copy(deep=True) if period else None

    def list_periods(self) -> List[PayrollPeriod]:
        """All periods ordered by start date, newest first."""
        with self._lock:
            periods = [p.model_copy(deep=True) for p in self._periods.values()]
        return sorted(periods, key=lambda p: p.start_date, reverse=True)

    def save_period(self, period: PayrollPeriod) -> None:
        """Overwrite the stored document with ``period``."""
        with self._lock:
            previous = self._periods.get(period.id)
            self._periods[period.id] = period.model_copy(deep=True)
            try:
                self._flush(PERIODS)
            except PayrollStoreError:
                if previous is None:
                    del self._periods[period.id]
                else:
                    self._periods[period.id] = previous
                raise
        logger.debug(f"Saved payroll period {period.id} ({period.status.value})")

    def delete_period(self, period_id: str) -> bool:
        """Delete a period; returns False when it did not exist."""
        with self._lock:
            previous = self._periods.pop(period_id, None)
            if previous is None:
                return False
            try:
                self._flush(PERIODS)
            except PayrollStoreError:
                self._periods[period_id] = previous
                raise
        logger.debug(f"Deleted payroll period {period_id}")
        return True

    def confirmations_for(self, period_id: str) -> List[PayrollConfirmation]:
        with self._lock:
            return [
                c.model_copy(deep=True)
                for c in self._confirmations.values()
                if c.period_id == period_id
            ]

    def add_confirmation(self, confirmation: PayrollConfirmation) -> None:
        """Record a confirmation; re-confirming the same revision overwrites it."""
        with self._lock:
            previous = self._confirmations.get(confirmation.key)
            self._confirmations[confirmation.key] = confirmation.model_copy(deep=True)
            try:
                self._flush(CONFIRMATIONS)
            except PayrollStoreError:
                if previous is None:
                    del self._confirmations[confirmation.key]
                else:
                    self._confirmations[confirmation.key] = previous
                raise

    def _flush(self, collection: str) -> None:
        """Persist one collection; the in-memory store has nothing to do.

        Only the collection a call changed is written, so a failed write
        never leaves the other collection ahead of memory.
        """
        pass


class JsonPayrollStore(PayrollStore):
    """Payroll store persisted as two JSON documents in a data directory.

    Args:
        data_dir: Directory holding payroll_periods.json and
            payroll_confirmations.json (created on first write)

    Example:
        >>> store = JsonPayrollStore(Path("data"))
        >>> [p.id for p in store.list_periods()]
        ['2024-07-01_2024-07-15']
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        self.periods_path = self.data_dir / PERIODS_FILE
        self.confirmations_path = self.data_dir / CONFIRMATIONS_FILE
        super().__init__(
            periods=_load_documents(self.periods_path, PayrollPeriod),
            confirmations=_load_documents(self.confirmations_path, PayrollConfirmation),
        )

    def _flush(self, collection: str) -> None:
        if collection == PERIODS:
            periods = sorted(self._periods.values(), key=lambda p: p.start_date)
            _write_json_atomic(self.periods_path, [p.to_document() for p in periods])
        else:
            confirmations = [c.to_document() for c in self._confirmations.values()]
            _write_json_atomic(self.confirmations_path, confirmations)


def _load_documents(path: Path, model):
    """Load a JSON array of documents, skipping ones that fail validation."""
    if not path.exists():
        logger.debug(f"Payroll file not found: {path}")
        return []

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise PayrollStoreError(f"Failed to parse {path} (corrupted JSON): {e}")

    if not isinstance(raw, list):
        raise PayrollStoreError(f"Expected a JSON array in {path}")

    documents = []
    for index, item in enumerate(raw):
        try:
            documents.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(
                f"Skipping invalid {model.__name__} #{index} in {path.name}: "
                f"{e.error_count()} validation error(s)"
            )
    logger.info(f"Loaded {len(documents)} {model.__name__} documents from {path}")
    return documents


def _write_json_atomic(path: Path, data) -> None:
    """Write JSON via a temp file and rename so the file is never half-written."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_fd, temp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(temp_path, path)
        except OSError:
            try:
                os.unlink(temp_path)
            except FileNotFoundError:
                pass
            raise
    except OSError as e:
        logger.error(f"Failed to write {path}: {e}")
        raise PayrollStoreError(f"Failed to write {path}: {e}")
