"""
Base class for cross-file validation rules.

A rule receives the shared (context, indexes) pair plus an immutable options
value for the current call, and returns a list of ValidationIssue objects.
Rules hold no per-call state, so the same instance can serve concurrent calls.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from data_consistency.core.context import ValidationContext
from data_consistency.core.exceptions import ColumnNotFoundError
from data_consistency.core.results import IssueLocation, IssueSeverity, ValidationIssue
from data_consistency.indexing.smart_indexer import DataIndexes
from data_consistency.utils.text_matching import string_similarity

# Similarity a header must exceed to be accepted as a typo of the requested column
COLUMN_FUZZY_THRESHOLD = 0.8


def find_column_index(headers: List[str], column: str) -> Optional[int]:
    """
    Resolve a column name against a header row.

    Tries an exact match, then a case-insensitive match, then a fuzzy match
    (Levenshtein similarity above 0.8) to tolerate typos.

    Returns:
        Zero-based column index, or None when nothing matches
    """
    if column in headers:
        return headers.index(column)

    wanted = column.lower()
    for index, header in enumerate(headers):
        if header.lower() == wanted:
            return index

    for index, header in enumerate(headers):
        if string_similarity(header.lower(), wanted) > COLUMN_FUZZY_THRESHOLD:
            return index

    return None


class ValidationRule(ABC):
    """
    Abstract base class for all validation rules.

    Subclasses set the class attributes and implement validate().

    Attributes:
        name: Rule id used in the registry and on every issue
        severity: Default severity of the issues the rule reports
        description: Human-readable summary shown by list-rules
    """

    name: str = ""
    severity: IssueSeverity = IssueSeverity.WARNING
    description: str = ""

    @abstractmethod
    def validate(
        self,
        context: ValidationContext,
        indexes: DataIndexes,
        options: Any = None
    ) -> List[ValidationIssue]:
        """
        Run the rule.

        Args:
            context: Loaded files and detected relationships
            indexes: Read-only lookup indexes for the same context
            options: Rule-specific immutable options (rule defaults when None)

        Returns:
            Issues found, in deterministic order
        """

    def get_description(self) -> str:
        """Get human-readable description."""
        return self.description

    def resolve_column(self, headers: List[str], column: str) -> int:
        """
        Resolve a column or raise.

        Raises:
            ColumnNotFoundError: If no header matches
        """
        index = find_column_index(headers, column)
        if index is None:
            raise ColumnNotFoundError(self.name, column, headers)
        return index

    def _create_issue(
        self,
        message: str,
        location: IssueLocation,
        suggestion: str,
        affected_rows: Optional[List[int]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        severity: Optional[IssueSeverity] = None
    ) -> ValidationIssue:
        """Build an issue tagged with this rule's name and (default) severity."""
        return ValidationIssue(
            rule=self.name,
            severity=severity or self.severity,
            message=message,
            location=location,
            suggestion=suggestion,
            affected_rows=list(affected_rows or []),
            metadata=metadata,
        )

    def _column_not_found_issue(
        self,
        error: ColumnNotFoundError,
        file_path: str,
        label: str = "Column"
    ) -> ValidationIssue:
        """Convert an unresolved column into a critical issue."""
        return self._create_issue(
            f'{label} "{error.column}" not found',
            IssueLocation(file=file_path, row=1, column=error.column),
            f"Check column name spelling. Available columns: {', '.join(error.available_columns)}",
            severity=IssueSeverity.CRITICAL,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', severity={self.severity.value})"
