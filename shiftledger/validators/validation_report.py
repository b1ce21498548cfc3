"""Validation report for collecting audit findings about the entry log."""

from collections import Counter
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional


class ValidationSeverity(IntEnum):
    """Severity levels for validation issues, ordered by seriousness."""

    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class ValidationIssue:
    """A single finding about an entry or session.

    Attributes:
        severity: The severity level of the issue
        field: The entry field (or check name) the issue is about
        message: Human-readable description of the issue
        value: The offending value
        context: Optional context such as entry id or employee
    """

    severity: ValidationSeverity
    field: str
    message: str
    value: Any
    context: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        text = f"[{self.severity.name}] {self.field}: {self.message}"
        if self.context:
            details = ", ".join(f"{k}={v}" for k, v in self.context.items())
            text += f" ({details})"
        return text


class ValidationReport:
    """Findings of every severity from one audit run.

    Only errors fail an audit; warnings and info messages are shown to the
    manager but do not change the exit status.

    Example:
        >>> report = ValidationReport()
        >>> report.add_warning("action", "Clock-out without clock-in", "out")
        >>> report.has_errors()
        False
        >>> report.summary()
        '1 warning(s)'
    """

    def __init__(self, issues: Optional[List[ValidationIssue]] = None) -> None:
        self.issues: List[ValidationIssue] = list(issues or [])

    def _counts(self) -> Counter:
        return Counter(issue.severity for issue in self.issues)

    @property
    def error_count(self) -> int:
        return self._counts()[ValidationSeverity.ERROR]

    @property
    def warning_count(self) -> int:
        return self._counts()[ValidationSeverity.WARNING]

    @property
    def info_count(self) -> int:
        return self._counts()[ValidationSeverity.INFO]

    @property
    def errors(self) -> List[ValidationIssue]:
        return self.by_severity(ValidationSeverity.ERROR)

    @property
    def warnings(self) -> List[ValidationIssue]:
        return self.by_severity(ValidationSeverity.WARNING)

    def has_errors(self) -> bool:
        return self.error_count > 0

    def add(
        self,
        severity: ValidationSeverity,
        field: str,
        message: str,
        value: Any,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Add an issue of the given severity.

        Args:
            severity: Issue severity
            field: Field name or check name
            message: Human-readable description
            value: The value that caused the issue
            context: Optional context information
        """
        self.issues.append(
            ValidationIssue(severity, field, message, value, dict(context or {}))
        )

    def add_error(self, field, message, value, context=None) -> None:
        self.add(ValidationSeverity.ERROR, field, message, value, context)

    def add_warning(self, field, message, value, context=None) -> None:
        self.add(ValidationSeverity.WARNING, field, message, value, context)

    def add_info(self, field, message, value, context=None) -> None:
        self.add(ValidationSeverity.INFO, field, message, value, context)

    def by_severity(self, severity: ValidationSeverity) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == severity]

    def filter(self, min_severity: ValidationSeverity) -> "ValidationReport":
        """New report holding only issues at or above ``min_severity``."""
        return ValidationReport([i for i in self.issues if i.severity >= min_severity])

    def summary(self) -> str:
        """Counts per severity, e.g. "2 error(s), 1 warning(s)"."""
        counts = self._counts()
        labels = (
            (ValidationSeverity.ERROR, "error(s)"),
            (ValidationSeverity.WARNING, "warning(s)"),
            (ValidationSeverity.INFO, "info message(s)"),
        )
        parts = [f"{counts[sev]} {label}" for sev, label in labels if counts[sev]]
        return ", ".join(parts) if parts else "No issues found"
