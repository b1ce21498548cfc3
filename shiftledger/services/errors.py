"""Exceptions raised by the payroll services."""

from typing import Optional


class PayrollError(Exception):
    """Base exception for payroll workflow failures."""

    pass


class PayrollNotFoundError(PayrollError):
    """Raised when a payroll period or line item does not exist."""

    def __init__(self, message: str, period_id: Optional[str] = None):
        super().__init__(message)
        self.period_id = period_id


class PayrollTransitionError(PayrollError):
    """Raised when a status transition's precondition does not hold.

    The message is meant to be shown to the manager as-is.

    Attributes:
        period_id: Period the transition was attempted on
        status: Status the period was in when the transition was rejected
    """

    def __init__(
        self,
        message: str,
        period_id: Optional[str] = None,
        status: Optional[str] = None,
    ):
        super().__init__(message)
        self.period_id = period_id
        self.status = status


class PayrollStoreError(PayrollError):
    """Raised when payroll documents cannot be written."""

    pass
