"""
Data completeness: flags required columns with too many empty cells.
"""

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from data_consistency.core.constants import (
    CRITICAL_COMPLETENESS,
    DEFAULT_MIN_COMPLETENESS,
    EMPTY_TOKENS,
    MAX_COMPLETENESS_AFFECTED_ROWS,
    MAX_INLINE_EMPTY_ROWS,
    MINOR_EMPTY_CELL_LIMIT,
    RULE_DATA_COMPLETENESS,
)
from data_consistency.core.context import ValidationContext, cell_at
from data_consistency.core.exceptions import ColumnNotFoundError
from data_consistency.core.results import IssueLocation, IssueSeverity, ValidationIssue
from data_consistency.indexing.smart_indexer import DataIndexes
from data_consistency.utils.text_matching import is_blank
from data_consistency.validations.base import ValidationRule

# Header names that usually denote fields every row should fill
IMPORTANT_COLUMN_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"^id$", r"^.*_id$",
        r"^name$", r"^.*_name$",
        r"^code$", r"^.*_code$",
        r"^email$", r"^phone$",
        r"^amount$", r"^price$", r"^revenue$", r"^total$",
        r"^status$",
        r"^date$", r"^.*_date$",
    )
]


@dataclass(frozen=True)
class CompletenessOptions:
    """
    Per-call options for DataCompletenessRule.

    Attributes:
        required_columns: Columns to check; overrides every other selection
        min_completeness: Minimum percentage of filled cells (0-100)
        check_all_columns: Check every header when no columns are configured
    """

    required_columns: Tuple[str, ...] = ()
    min_completeness: float = DEFAULT_MIN_COMPLETENESS
    check_all_columns: bool = False


def is_empty_cell(value: Any) -> bool:
    """True for None, empty or whitespace-only strings and the NULL / N/A tokens."""
    if is_blank(value):
        return True
    if isinstance(value, str):
        return value.strip() == "" or value in EMPTY_TOKENS
    return False


def _join_rows(rows: List[int]) -> str:
    return ", ".join(str(row) for row in rows)


class DataCompletenessRule(ValidationRule):
    """
    Validates that required fields are not empty.

    Two separate findings are possible per column:
    - completeness below the threshold (critical under 50%, warning otherwise)
    - threshold met but 1-5 empty cells left, listed row by row
    """

    name = RULE_DATA_COMPLETENESS
    severity = IssueSeverity.WARNING
    description = "Validates that required fields are not empty"

    def validate(
        self,
        context: ValidationContext,
        indexes: DataIndexes,
        options: Optional[CompletenessOptions] = None
    ) -> List[ValidationIssue]:
        options = options or CompletenessOptions()

        issues = []
        for column in self.columns_to_check(context, options):
            issues.extend(self._validate_column(column, context, options))
        return issues

    @staticmethod
    def columns_to_check(context: ValidationContext, options: CompletenessOptions) -> List[str]:
        """Configured columns, else all headers, else the important-looking ones."""
        if options.required_columns:
            return list(options.required_columns)

        headers = context.primary_file.headers
        if options.check_all_columns:
            return list(headers)

        return [h for h in headers if any(p.match(h) for p in IMPORTANT_COLUMN_PATTERNS)]

    def _validate_column(
        self,
        column: str,
        context: ValidationContext,
        options: CompletenessOptions
    ) -> List[ValidationIssue]:
        primary = context.primary_file

        try:
            column_index = self.resolve_column(primary.headers, column)
        except ColumnNotFoundError as e:
            return [self._column_not_found_issue(e, primary.file_path)]

        empty_rows = [
            row_number
            for row_number, row in enumerate(primary.data_rows(), start=1)
            if is_empty_cell(cell_at(row, column_index))
        ]
        total_rows = primary.row_count
        empty_count = len(empty_rows)
        completeness = (total_rows - empty_count) / total_rows * 100 if total_rows > 0 else 100.0

        if completeness < options.min_completeness:
            severity = IssueSeverity.CRITICAL if completeness < CRITICAL_COMPLETENESS else IssueSeverity.WARNING

            if empty_count > MAX_INLINE_EMPTY_ROWS:
                suggestion = (
                    f"Fill missing values in {empty_count} rows. "
                    "Consider data cleaning or validation rules."
                )
            else:
                suggestion = f"Fill missing values in rows: {_join_rows(empty_rows)}"

            return [self._create_issue(
                f'Column "{column}" is only {completeness:.1f}% complete ({empty_count}/{total_rows} empty)',
                IssueLocation(file=primary.file_path, row=empty_rows[0] if empty_rows else 1, column=column),
                suggestion,
                affected_rows=empty_rows[:MAX_COMPLETENESS_AFFECTED_ROWS],
                metadata={
                    "empty_count": empty_count,
                    "total_rows": total_rows,
                    "completeness_percent": completeness,
                    "threshold": options.min_completeness,
                },
                severity=severity,
            )]

        elif 0 < empty_count <= MINOR_EMPTY_CELL_LIMIT:
            return [self._create_issue(
                f'Column "{column}" has {empty_count} empty values',
                IssueLocation(file=primary.file_path, row=empty_rows[0], column=column),
                f"Fill missing values in rows: {_join_rows(empty_rows)}",
                affected_rows=empty_rows,
                metadata={
                    "empty_count": empty_count,
                    "total_rows": total_rows,
                    "completeness_percent": completeness,
                },
            )]

        return []
