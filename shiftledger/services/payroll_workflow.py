"""Payroll period approval workflow.

A payroll period moves through these statuses:

    draft --finalize--> final --lock--> locked --mark_paid--> paid
      ^                   |               |
      +------reopen-------+------reopen---+

- draft: line items are computed live from the entry log on every view
- final: the line items are a stored snapshot; manager edits bump the
  edited item's revision, which invalidates that employee's confirmation
- locked: every line item was confirmed at its current revision
- paid: terminal

Every transition checks its precondition before touching the store, so a
rejected transition raises PayrollTransitionError and leaves the stored
documents exactly as they were.
"""

import datetime as dt
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Set

from shiftledger.calculators.pay_period import PayPeriodRange
from shiftledger.calculators.payroll_calculator import (
    YearlyPayRow,
    apply_line_item_edit,
    compute_line_items,
    yearly_summary,
)
from shiftledger.calculators.payroll_diff import PeriodDiff, diff_periods
from shiftledger.models.employee import Employee
from shiftledger.models.payroll import (
    PayrollConfirmation,
    PayrollLineItem,
    PayrollPeriod,
    PayrollStatus,
    confirmed_keys,
    is_item_confirmed,
    period_id_for,
)
from shiftledger.models.session import Session, now_ms
from shiftledger.models.site import BusinessSettings
from shiftledger.services.errors import PayrollNotFoundError, PayrollTransitionError
from shiftledger.services.payroll_store import PayrollStore
from shiftledger.utils.logging_utils import LogContext

logger = logging.getLogger(__name__)


@dataclass
class PayrollView:
    """What a manager sees for one period.

    Attributes:
        period_id: "YYYY-MM-DD_YYYY-MM-DD"
        start_date: First day of the period
        end_date: Last day of the period
        status: Current status (draft when nothing is stored)
        revision: Period revision (bumped on every finalize)
        line_items: Snapshot for final/locked/paid, live items for draft
        is_live: True when the items were computed from the entry log
        confirmed_employee_ids: Employees whose current revision is confirmed
    """

    period_id: str
    start_date: dt.date
    end_date: dt.date
    status: PayrollStatus
    revision: int
    line_items: List[PayrollLineItem]
    is_live: bool
    confirmed_employee_ids: Set[str] = field(default_factory=set)

    @property
    def pending_confirmations(self) -> int:
        return sum(
            1
            for item in self.line_items
            if item.employee_id not in self.confirmed_employee_ids
        )


class PayrollWorkflow:
    """Runs payroll periods through draft, final, locked and paid.

    Args:
        store: Document store for periods and confirmations
        sessions: Sessions reconstructed from the current entry log
        employees: Employees to pay
        settings: Business settings (site bonuses, default wage)
        tz: Timezone in which period dates are turned into windows
        clock: Returns the current time in epoch ms (for confirmations)

    Example:
        >>> workflow = PayrollWorkflow(PayrollStore(), sessions, employees, settings)
        >>> period = workflow.finalize(dt.date(2024, 7, 1), dt.date(2024, 7, 15))
        >>> workflow.lock(period.id)
        Traceback (most recent call last):
        ...
        PayrollTransitionError: Waiting for 3 more confirmation(s)
    """

    def __init__(
        self,
        store: PayrollStore,
        sessions: Iterable[Session],
        employees: Iterable[Employee],
        settings: BusinessSettings,
        tz: dt.tzinfo = dt.timezone.utc,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.sessions = list(sessions)
        self.employees = list(employees)
        self.settings = settings
        self.tz = tz
        self.clock = clock

    def live_line_items(
        self, start_date: dt.date, end_date: dt.date
    ) -> List[PayrollLineItem]:
        """Line items computed from the entry log for a date range."""
        start, end = PayPeriodRange(start_date, end_date).window(self.tz)
        return compute_line_items(
            self.sessions, self.employees, self.settings, start, end
        )

    def view(self, start_date: dt.date, end_date: dt.date) -> PayrollView:
        """Stored snapshot for final/locked/paid periods, live items otherwise."""
        period_id = period_id_for(start_date, end_date)
        period = self.store.get_period(period_id)

        if period is None or period.status == PayrollStatus.DRAFT:
            return PayrollView(
                period_id=period_id,
                start_date=start_date,
                end_date=end_date,
                status=PayrollStatus.DRAFT,
                revision=period.revision if period else 0,
                line_items=self.live_line_items(start_date, end_date),
                is_live=True,
            )

        confirmed = confirmed_keys(self.store.confirmations_for(period_id), period_id)
        return PayrollView(
            period_id=period_id,
            start_date=period.start_date,
            end_date=period.end_date,
            status=period.status,
            revision=period.revision,
            line_items=period.line_items,
            is_live=False,
            confirmed_employee_ids={
                item.employee_id
                for item in period.line_items
                if is_item_confirmed(item, confirmed)
            },
        )

    def finalize(
        self,
        start_date: dt.date,
        end_date: dt.date,
        line_items: Optional[List[PayrollLineItem]] = None,
    ) -> PayrollPeriod:
        """Snapshot the period's line items and move it to final.

        The period revision goes up by one. Each item's revision becomes the
        revision it had in the previous snapshot (kept across a reopen) plus
        one, so a confirmation given before a reopen never counts again.

        Args:
            start_date: First day of the period
            end_date: Last day of the period
            line_items: Items to snapshot (computed live when omitted)

        Raises:
            PayrollTransitionError: If the period is not a draft
        """
        if end_date < start_date:
            raise PayrollTransitionError(
                f"Payroll period ends ({end_date}) before it starts ({start_date})"
            )
        period_id = period_id_for(start_date, end_date)
        existing = self.store.get_period(period_id)

        with LogContext(period_id=period_id):
            if existing is not None and existing.status != PayrollStatus.DRAFT:
                raise PayrollTransitionError(
                    f"Payroll period is already {existing.status.value}",
                    period_id=period_id,
                    status=existing.status.value,
                )

            items = (
                line_items
                if line_items is not None
                else self.live_line_items(start_date, end_date)
            )
            previous: Dict[str, int] = (
                {i.employee_id: i.revision for i in existing.line_items}
                if existing
                else {}
            )
            snapshot = [
                item.model_copy(
                    update={"revision": previous.get(item.employee_id, 0) + 1}
                )
                for item in items
            ]

            period = PayrollPeriod(
                id=period_id,
                start_date=start_date,
                end_date=end_date,
                status=PayrollStatus.FINAL,
                revision=(existing.revision if existing else 0) + 1,
                line_items=snapshot,
            )
            self.store.save_period(period)
            logger.info(
                f"Finalized payroll period {period_id} at revision {period.revision} "
                f"with {len(snapshot)} line items"
            )
        return period

    def save_final_edits(
        self, period_id: str, edited_items: List[PayrollLineItem]
    ) -> PeriodDiff:
        """Store manager edits of a final period's line items.

        Only items that actually differ from the stored snapshot get their
        revision bumped; untouched items keep their confirmations. Items
        missing from ``edited_items`` are dropped from the period, and a
        dropped employee no longer needs to confirm before the lock.

        Returns:
            The diff that was applied (empty when nothing changed)

        Raises:
            PayrollNotFoundError: If the period does not exist
            PayrollTransitionError: If the period is not final, or the edit
                adds employees
        """
        period = self._require_period(period_id)

        with LogContext(period_id=period_id):
            self._require_status(period, PayrollStatus.FINAL, "edited")

            diff = diff_periods(period.line_items, edited_items)
            added = [c.employee_id for c in diff.items if c.kind == "added"]
            if added:
                ids = ", ".join(added)
                raise PayrollTransitionError(
                    f"Line items cannot be added to a final period ({ids})",
                    period_id=period_id,
                    status=period.status.value,
                )
            if diff.is_empty:
                logger.debug("No line item changes to save")
                return diff

            edited_by_id = {i.employee_id: i for i in edited_items}
            changed = {c.employee_id for c in diff.items if c.kind == "changed"}
            removed = {c.employee_id for c in diff.items if c.kind == "removed"}
            period.line_items = [
                edited_by_id[item.employee_id].model_copy(
                    update={"revision": item.revision + 1}
                )
                if item.employee_id in changed
                else item
                for item in period.line_items
                if item.employee_id not in removed
            ]
            self.store.save_period(period)
            logger.info(
                f"Saved edits to {len(changed)} line item(s) and removed "
                f"{len(removed)}; edited items need a new confirmation"
            )
        return diff

    def edit_line_item(
        self,
        period_id: str,
        employee_id: str,
        deductions: Optional[Decimal] = None,
        flat_bonus: Optional[Decimal] = None,
    ) -> PayrollLineItem:
        """Change one employee's deductions and/or flat bonus.

        Returns:
            The stored line item after the edit

        Raises:
            PayrollNotFoundError: If the period or the employee's item is missing
            PayrollTransitionError: If the period is not final
        """
        period = self._require_period(period_id)
        self._require_status(period, PayrollStatus.FINAL, "edited")
        item = self._require_item(period, employee_id)

        edited = apply_line_item_edit(
            item, deductions=deductions, flat_bonus=flat_bonus
        )
        self.save_final_edits(
            period_id,
            [edited if i.employee_id == employee_id else i for i in period.line_items],
        )
        return self._require_item(self._require_period(period_id), employee_id)

    def remove_line_item(self, period_id: str, employee_id: str) -> PeriodDiff:
        """Drop one employee's line item from a final period.

        Raises:
            PayrollNotFoundError: If the period or the employee's item is missing
            PayrollTransitionError: If the period is not final
        """
        period = self._require_period(period_id)
        self._require_status(period, PayrollStatus.FINAL, "edited")
        self._require_item(period, employee_id)

        return self.save_final_edits(
            period_id,
            [i for i in period.line_items if i.employee_id != employee_id],
        )

    def confirm(
        self,
        period_id: str,
        employee_id: str,
        revision: int,
        note: Optional[str] = None,
    ) -> PayrollConfirmation:
        """Record an employee's confirmation of their line item.

        Raises:
            PayrollNotFoundError: If the period or the employee's item is missing
            PayrollTransitionError: If the period is not final or the
                revision is not the item's current one
        """
        period = self._require_period(period_id)

        with LogContext(period_id=period_id, employee_id=employee_id):
            self._require_status(period, PayrollStatus.FINAL, "confirmed")
            item = self._require_item(period, employee_id)
            if item.revision != revision:
                raise PayrollTransitionError(
                    f"Line item has changed since it was reviewed "
                    f"(confirmed revision {revision}, "
                    f"current revision {item.revision})",
                    period_id=period_id,
                    status=period.status.value,
                )

            confirmation = PayrollConfirmation(
                period_id=period_id,
                employee_id=employee_id,
                employee_name=item.employee_name,
                revision=revision,
                confirmed=True,
                confirmed_at=self.clock(),
                note=note,
            )
            self.store.add_confirmation(confirmation)
            logger.info(f"Recorded confirmation at revision {revision}")
        return confirmation

    def pending_confirmations(self, period_id: str) -> List[PayrollLineItem]:
        """Line items without a confirmation at their current revision."""
        period = self._require_period(period_id)
        confirmed = confirmed_keys(self.store.confirmations_for(period_id), period_id)
        return [i for i in period.line_items if not is_item_confirmed(i, confirmed)]

    def lock(self, period_id: str) -> PayrollPeriod:
        """Lock a final period once every line item is confirmed.

        Raises:
            PayrollTransitionError: If the period is not final or any
                confirmation is missing
        """
        period = self._require_period(period_id)

        with LogContext(period_id=period_id):
            self._require_status(period, PayrollStatus.FINAL, "locked")
            pending = self.pending_confirmations(period_id)
            if pending:
                raise PayrollTransitionError(
                    f"Waiting for {len(pending)} more confirmation(s)",
                    period_id=period_id,
                    status=period.status.value,
                )
            return self._transition(period, PayrollStatus.LOCKED)

    def mark_paid(self, period_id: str) -> PayrollPeriod:
        """Mark a locked period as paid.

        Raises:
            PayrollTransitionError: If the period is not locked
        """
        period = self._require_period(period_id)
        with LogContext(period_id=period_id):
            if period.status != PayrollStatus.LOCKED:
                raise PayrollTransitionError(
                    "Payroll must be locked before it can be marked paid",
                    period_id=period_id,
                    status=period.status.value,
                )
            return self._transition(period, PayrollStatus.PAID)

    def reopen(self, period_id: str) -> PayrollPeriod:
        """Send a final or locked period back to draft.

        The stored line items stay on the document as history; views of a
        draft are computed live again.

        Raises:
            PayrollTransitionError: If the period is paid or already a draft
        """
        period = self._require_period(period_id)
        with LogContext(period_id=period_id):
            if period.status == PayrollStatus.PAID:
                raise PayrollTransitionError(
                    "Paid payroll periods cannot be reopened",
                    period_id=period_id,
                    status=period.status.value,
                )
            if period.status == PayrollStatus.DRAFT:
                raise PayrollTransitionError(
                    "Payroll period is already a draft",
                    period_id=period_id,
                    status=period.status.value,
                )
            return self._transition(period, PayrollStatus.DRAFT)

    def delete(self, period_id: str) -> None:
        """Delete a draft period.

        Raises:
            PayrollNotFoundError: If the period does not exist
            PayrollTransitionError: If the period is not a draft
        """
        period = self._require_period(period_id)
        with LogContext(period_id=period_id):
            self._require_status(period, PayrollStatus.DRAFT, "deleted")
            self.store.delete_period(period_id)
            logger.info("Deleted payroll period")

    def yearly_summary(self, year: int) -> List[YearlyPayRow]:
        return yearly_summary(self.store.list_periods(), self.employees, year)

    def _transition(
        self, period: PayrollPeriod, status: PayrollStatus
    ) -> PayrollPeriod:
        previous = period.status
        period.status = status
        self.store.save_period(period)
        logger.info(
            f"Payroll period {period.id} moved from {previous.value} to {status.value}"
        )
        return period

    def _require_period(self, period_id: str) -> PayrollPeriod:
        period = self.store.get_period(period_id)
        if period is None:
            raise PayrollNotFoundError(
                f"Payroll period {period_id} not found", period_id=period_id
            )
        return period

    @staticmethod
    def _require_item(period: PayrollPeriod, employee_id: str) -> PayrollLineItem:
        item = period.line_item_for(employee_id)
        if item is None:
            raise PayrollNotFoundError(
                f"No line item for employee {employee_id} in period {period.id}",
                period_id=period.id,
            )
        return item

    @staticmethod
    def _require_status(
        period: PayrollPeriod, status: PayrollStatus, action: str
    ) -> None:
        if period.status != status:
            raise PayrollTransitionError(
                f"Only {status.value} payroll periods can be {action} "
                f"(period is {period.status.value})",
                period_id=period.id,
                status=period.status.value,
            )
