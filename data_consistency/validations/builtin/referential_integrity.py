"""
Referential integrity across files.

Checks that every value of a foreign-key column in the primary file exists in
the matching column of a reference file, e.g. that each ``branch_id`` of a
sales sheet appears in the ``id`` column of a branches sheet.

Relationships come either from auto-detection (ContextBuilder) or from a list
of key columns supplied by the caller:

    options = ReferentialIntegrityOptions(key_columns=("branch_id",), auto_detect=False)
    issues = ReferentialIntegrityRule().validate(context, indexes, options)
"""

from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Tuple

from data_consistency.core.constants import (
    MAX_AVAILABLE_VALUE_SAMPLES,
    MAX_MISSING_VALUE_EXAMPLES,
    MAX_REFERENTIAL_AFFECTED_ROWS,
    RULE_REFERENTIAL_INTEGRITY,
)
from data_consistency.core.context import (
    DetectedRelationship,
    MatchType,
    ValidationContext,
    cell_at,
)
from data_consistency.core.exceptions import ColumnNotFoundError
from data_consistency.core.logging_config import get_logger
from data_consistency.core.results import IssueLocation, IssueSeverity, ValidationIssue
from data_consistency.indexing.smart_indexer import DataIndexes, index_key
from data_consistency.utils.text_matching import cell_to_text, is_blank, normalize_value
from data_consistency.validations.base import ValidationRule

logger = get_logger(__name__)

# Suffix conventions accepted when pairing a manual key column with a reference header
MANUAL_KEY_SUFFIXES = (("_id", "id"), ("_code", "code"), ("_name", "name"))


@dataclass(frozen=True)
class ReferentialIntegrityOptions:
    """
    Per-call options for ReferentialIntegrityRule.

    Attributes:
        key_columns: Primary columns to check when auto_detect is off
        auto_detect: Use the relationships detected by the ContextBuilder
        case_sensitive: Compare trimmed raw values instead of normalized ones
        allow_empty: Skip empty cells instead of reporting them as missing
    """

    key_columns: Tuple[str, ...] = ()
    auto_detect: bool = True
    case_sensitive: bool = False
    allow_empty: bool = True


def is_likely_key_match(primary_column: str, reference_column: str) -> bool:
    """
    Decide whether a manually supplied key column pairs with a reference header.

    Accepts identical names (ignoring case) and the usual foreign-key suffixes:
    ``branch_id`` -> ``id``, ``country_code`` -> ``code``, ``store_name`` -> ``name``.
    """
    p = primary_column.lower()
    r = reference_column.lower()

    if p == r:
        return True

    return any(suffix in p and r == bare for suffix, bare in MANUAL_KEY_SUFFIXES)


class ReferentialIntegrityRule(ValidationRule):
    """
    Validates that foreign key references exist in reference tables.

    One issue is reported per relationship with at least one dangling value.
    The issue points at the first failing row and carries the distinct missing
    values plus a sample of valid reference values in its metadata.
    """

    name = RULE_REFERENTIAL_INTEGRITY
    severity = IssueSeverity.CRITICAL
    description = "Validates that foreign key references exist in reference tables"

    def validate(
        self,
        context: ValidationContext,
        indexes: DataIndexes,
        options: Optional[ReferentialIntegrityOptions] = None
    ) -> List[ValidationIssue]:
        options = options or ReferentialIntegrityOptions()

        if options.auto_detect:
            relationships = list(context.relationships)
        else:
            relationships = self.create_manual_relationships(context, options.key_columns)

        logger.debug(f"Checking {len(relationships)} relationship(s)")

        issues = []
        for relationship in relationships:
            issues.extend(self._validate_relationship(relationship, context, indexes, options))
        return issues

    @staticmethod
    def create_manual_relationships(
        context: ValidationContext,
        key_columns: Tuple[str, ...]
    ) -> List[DetectedRelationship]:
        """Pair each key column with every reference header it likely refers to."""
        relationships = []
        for key_column in key_columns:
            for ref_path, ref_file in context.reference_files.items():
                for ref_column in ref_file.headers:
                    if is_likely_key_match(key_column, ref_column):
                        relationships.append(DetectedRelationship(
                            primary_column=key_column,
                            reference_file=ref_path,
                            reference_column=ref_column,
                            confidence=1.0,
                            match_type=MatchType.MANUAL,
                        ))
        return relationships

    def _validate_relationship(
        self,
        relationship: DetectedRelationship,
        context: ValidationContext,
        indexes: DataIndexes,
        options: ReferentialIntegrityOptions
    ) -> List[ValidationIssue]:
        primary = context.primary_file

        try:
            column_index = self.resolve_column(primary.headers, relationship.primary_column)
        except ColumnNotFoundError as e:
            return [self._column_not_found_issue(e, primary.file_path, label="Primary column")]

        key_set = self._reference_keys(relationship, context, indexes, options.case_sensitive)
        if key_set is None:
            return [self._create_issue(
                f'Reference column "{relationship.reference_column}" not found in {relationship.reference_file}',
                IssueLocation(file=relationship.reference_file, row=1, column=relationship.reference_column),
                "Check reference file and column name",
            )]

        invalid_rows: List[int] = []
        # dict keeps first-seen order of the missing values
        missing_values = {}

        for row_number, row in enumerate(primary.data_rows(), start=1):
            value = cell_at(row, column_index)

            if is_blank(value) and options.allow_empty:
                continue

            search_value = cell_to_text(value).strip() if options.case_sensitive else normalize_value(value)
            if search_value not in key_set:
                invalid_rows.append(row_number)
                missing_values.setdefault(cell_to_text(value), None)

        if not invalid_rows:
            return []

        return [self._missing_reference_issue(relationship, primary.file_path, invalid_rows, list(missing_values), key_set)]

    @staticmethod
    def _reference_keys(
        relationship: DetectedRelationship,
        context: ValidationContext,
        indexes: DataIndexes,
        case_sensitive: bool
    ) -> Optional[FrozenSet[str]]:
        """Key set for the relationship's reference column, None if it is unknown."""
        key_set = indexes.key_indexes.get(index_key(relationship.reference_file, relationship.reference_column))
        if key_set is None or not case_sensitive:
            return key_set

        ref_file = context.reference_files.get(relationship.reference_file)
        if ref_file is None or relationship.reference_column not in ref_file.headers:
            return None

        column_index = ref_file.headers.index(relationship.reference_column)
        return frozenset(
            cell_to_text(value).strip()
            for value in ref_file.column_values(column_index)
            if not is_blank(value)
        )

    def _missing_reference_issue(
        self,
        relationship: DetectedRelationship,
        file_path: str,
        invalid_rows: List[int],
        missing_values: List[str],
        key_set: FrozenSet[str]
    ) -> ValidationIssue:
        invalid_count = len(invalid_rows)

        message = f"{invalid_count} rows have invalid {relationship.primary_column} references"
        if invalid_count > MAX_REFERENTIAL_AFFECTED_ROWS:
            message += f" (showing first {MAX_REFERENTIAL_AFFECTED_ROWS} of {invalid_count} rows)"

        examples = ", ".join(missing_values[:MAX_MISSING_VALUE_EXAMPLES])
        overflow = len(missing_values) - MAX_MISSING_VALUE_EXAMPLES
        more = f" and {overflow} more" if overflow > 0 else ""

        return self._create_issue(
            message,
            IssueLocation(file=file_path, row=invalid_rows[0], column=relationship.primary_column),
            f"Missing values: {examples}{more}. Add these to {relationship.reference_file} or use existing values.",
            affected_rows=invalid_rows[:MAX_REFERENTIAL_AFFECTED_ROWS],
            metadata={
                "missing_values": missing_values,
                "invalid_count": invalid_count,
                "reference_file": relationship.reference_file,
                "reference_column": relationship.reference_column,
                "available_values": sorted(key_set)[:MAX_AVAILABLE_VALUE_SAMPLES],
            },
        )
