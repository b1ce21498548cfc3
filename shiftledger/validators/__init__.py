"""Audit layer for entry-log data quality."""

from shiftledger.validators.entry_auditor import EntryLogAuditor
from shiftledger.validators.validation_report import (
    ValidationIssue,
    ValidationReport,
    ValidationSeverity,
)

__all__ = [
    "EntryLogAuditor",
    "ValidationReport",
    "ValidationIssue",
    "ValidationSeverity",
]
