"""Typed diff between stored and edited payroll line items.

Only a closed set of line-item fields is compared. Each difference is
reported as a ScalarFieldChange; per-employee differences are wrapped in a
LineItemChange tagged as added, removed or changed.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple

from shiftledger.models.payroll import PayrollLineItem

DIFFED_FIELDS: Tuple[str, ...] = (
    "employee_name",
    "minutes",
    "regular_minutes",
    "bonus_minutes",
    "flat_bonus",
    "gross",
    "deductions",
    "net",
)

ChangeKind = Literal["added", "removed", "changed"]


@dataclass(frozen=True)
class ScalarFieldChange:
    """One field whose value differs between two line items."""

    field: str
    old: Any
    new: Any


@dataclass
class LineItemChange:
    """Change of one employee's line item.

    Attributes:
        employee_id: Employee the line item belongs to
        kind: 'added', 'removed' or 'changed'
        changes: Field-level changes (only for 'changed')
    """

    employee_id: str
    kind: ChangeKind
    changes: List[ScalarFieldChange] = field(default_factory=list)

    @property
    def changed_fields(self) -> List[str]:
        return [c.field for c in self.changes]


@dataclass
class PeriodDiff:
    """All line-item changes between a stored period and an edit."""

    items: List[LineItemChange] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def changed_employee_ids(self) -> List[str]:
        return [c.employee_id for c in self.items]

    def for_employee(self, employee_id: str) -> Optional[LineItemChange]:
        for change in self.items:
            if change.employee_id == employee_id:
                return change
        return None


def diff_line_items(
    original: PayrollLineItem, edited: PayrollLineItem
) -> List[ScalarFieldChange]:
    """Field-level differences between two versions of a line item.

    Revision is not compared; it is derived from whether anything changed.

    Example:
        >>> changes = diff_line_items(item, item.model_copy(update={"net": 0}))
        >>> [c.field for c in changes]
        ['net']
    """
    changes = []
    for name in DIFFED_FIELDS:
        old = getattr(original, name)
        new = getattr(edited, name)
        if old != new:
            changes.append(ScalarFieldChange(field=name, old=old, new=new))
    return changes


def diff_periods(
    stored: Iterable[PayrollLineItem], edited: Iterable[PayrollLineItem]
) -> PeriodDiff:
    """Compare stored line items with an edited list, keyed by employee.

    Returns:
        PeriodDiff listing changes in stored order, followed by additions
    """
    stored_by_id: Dict[str, PayrollLineItem] = {i.employee_id: i for i in stored}
    edited_by_id: Dict[str, PayrollLineItem] = {i.employee_id: i for i in edited}

    diff = PeriodDiff()
    for employee_id, original in stored_by_id.items():
        new = edited_by_id.get(employee_id)
        if new is None:
            diff.items.append(LineItemChange(employee_id=employee_id, kind="removed"))
            continue
        changes = diff_line_items(original, new)
        if changes:
            diff.items.append(
                LineItemChange(employee_id=employee_id, kind="changed", changes=changes)
            )

    for employee_id in edited_by_id:
        if employee_id not in stored_by_id:
            diff.items.append(LineItemChange(employee_id=employee_id, kind="added"))

    return diff
