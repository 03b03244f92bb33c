"""
Validation Result Classes.

This module defines dataclasses for storing validation output at different levels:
- ValidationIssue: A single problem found by a rule
- ValidationSummary: Aggregate counts for one validation call
- ValidationResult: Overall outcome of a validation call
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
from enum import Enum


class IssueSeverity(Enum):
    """
    Issue severity levels.

    Determines impact of an issue:
    - CRITICAL: Data integrity problem, the validation call fails
    - WARNING: Potential data quality problem, should be reviewed
    - INFO: Informational finding, consider reviewing

    Example:
        >>> IssueSeverity.CRITICAL.rank > IssueSeverity.WARNING.rank
        True
    """
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Ordering weight used when sorting issues (higher is more severe)."""
        ranks = {
            IssueSeverity.CRITICAL: 3,
            IssueSeverity.WARNING: 2,
            IssueSeverity.INFO: 1,
        }
        return ranks[self]


# Fixed display order for severities
SEVERITY_ORDER = (IssueSeverity.CRITICAL, IssueSeverity.WARNING, IssueSeverity.INFO)


@dataclass(frozen=True)
class IssueLocation:
    """Where an issue was found. Row numbers are 1-based and exclude the header."""

    file: str
    row: int
    column: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"file": self.file, "row": self.row, "column": self.column}


@dataclass
class ValidationIssue:
    """
    A single problem reported by a validation rule.

    Attributes:
        rule: Id of the rule that produced the issue
        severity: Severity level (critical, warning or info)
        message: Human-readable description of the problem
        location: File, first affected row and column
        suggestion: Actionable hint for fixing the problem
        affected_rows: 1-based row numbers affected (capped per rule)
        metadata: Optional structured details (missing values, ranges, ...)

    Example:
        >>> issue = ValidationIssue(
        ...     rule="referential_integrity",
        ...     severity=IssueSeverity.CRITICAL,
        ...     message="1 rows have invalid branch_id references",
        ...     location=IssueLocation("sales.csv", 7, "branch_id"),
        ...     suggestion="Missing values: 99. Add these to branches.csv or use existing values.",
        ...     affected_rows=[7],
        ... )
    """

    rule: str
    severity: IssueSeverity
    message: str
    location: IssueLocation
    suggestion: str
    affected_rows: List[int] = field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert issue to dictionary for JSON serialization.

        Returns:
            Dictionary with all issue fields, severity rendered as its value
        """
        result = {
            "rule": self.rule,
            "severity": self.severity.value,
            "message": self.message,
            "location": self.location.to_dict(),
            "suggestion": self.suggestion,
            "affected_rows": list(self.affected_rows),
        }
        if self.metadata is not None:
            result["metadata"] = self.metadata
        return result


@dataclass
class ValidationSummary:
    """Aggregate counts for a validation call."""

    total_files: int
    total_rows: int
    total_issues: int = 0
    critical_issues: int = 0
    warning_issues: int = 0
    info_issues: int = 0
    files_with_issues: List[str] = field(default_factory=list)
    validation_time_ms: int = 0

    @classmethod
    def from_issues(
        cls,
        issues: List[ValidationIssue],
        total_files: int,
        total_rows: int,
        validation_time_ms: int
    ) -> "ValidationSummary":
        """
        Build a summary by counting issues per severity.

        Files with issues are listed once each, in the order they first appear.
        """
        files_with_issues = list(dict.fromkeys(issue.location.file for issue in issues))

        return cls(
            total_files=total_files,
            total_rows=total_rows,
            total_issues=len(issues),
            critical_issues=sum(1 for i in issues if i.severity == IssueSeverity.CRITICAL),
            warning_issues=sum(1 for i in issues if i.severity == IssueSeverity.WARNING),
            info_issues=sum(1 for i in issues if i.severity == IssueSeverity.INFO),
            files_with_issues=files_with_issues,
            validation_time_ms=validation_time_ms,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_files": self.total_files,
            "total_rows": self.total_rows,
            "total_issues": self.total_issues,
            "critical_issues": self.critical_issues,
            "warning_issues": self.warning_issues,
            "info_issues": self.info_issues,
            "files_with_issues": list(self.files_with_issues),
            "validation_time_ms": self.validation_time_ms,
        }


@dataclass
class ValidationResult:
    """Overall outcome of one validation call."""

    success: bool
    summary: ValidationSummary
    issues: List[ValidationIssue] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    report: Optional[str] = None

    def has_critical_issues(self) -> bool:
        """Check if there are any critical issues."""
        return self.summary.critical_issues > 0

    def has_warnings(self) -> bool:
        """Check if there are any warnings."""
        return self.summary.warning_issues > 0

    def issues_for_rule(self, rule: str) -> List[ValidationIssue]:
        """Return the issues produced by one rule, in report order."""
        return [issue for issue in self.issues if issue.rule == rule]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "summary": self.summary.to_dict(),
            "issues": [issue.to_dict() for issue in self.issues],
            "recommendations": list(self.recommendations),
            "report": self.report,
        }
