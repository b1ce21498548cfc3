"""
Payroll services.

This package provides the payroll approval workflow and the document store
it persists to:
- PayrollWorkflow: draft/final/locked/paid state machine
- PayrollStore / JsonPayrollStore: whole-document period storage
- PayrollError and subclasses for rejected operations
"""

from .errors import (
    PayrollError,
    PayrollNotFoundError,
    PayrollStoreError,
    PayrollTransitionError,
)
from .payroll_store import JsonPayrollStore, PayrollStore
from .payroll_workflow import PayrollView, PayrollWorkflow

__all__ = [
    "JsonPayrollStore",
    "PayrollError",
    "PayrollNotFoundError",
    "PayrollStore",
    "PayrollStoreError",
    "PayrollTransitionError",
    "PayrollView",
    "PayrollWorkflow",
]
