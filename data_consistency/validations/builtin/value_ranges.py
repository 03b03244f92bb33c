"""
Value range (outlier) detection for numeric columns.

Bounds are derived from the column statistics held in the indexes:

- iqr: Q1/Q3 approximated as median -/+ 0.6745 * std, bounds Q1 - k*IQR and
  Q3 + k*IQR (k defaults to 1.5)
- zscore: mean -/+ k * std (k defaults to 2.5)
- fixed: the column's own min/max unless a fixed range is configured

A configured fixed range for a column always wins, whatever the method.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from data_consistency.core.constants import (
    DEFAULT_IQR_MULTIPLIER,
    DEFAULT_OUTLIER_METHOD,
    DEFAULT_TOLERANCE,
    DEFAULT_ZSCORE_THRESHOLD,
    EXTREME_Z_SCORE,
    MAX_OUTLIER_SAMPLES,
    MAX_RANGE_AFFECTED_ROWS,
    OUTLIER_DENSITY_RATIO,
    QUARTILE_Z_OFFSET,
    RULE_VALUE_RANGES,
)
from data_consistency.core.context import ColumnStats, DataType, ValidationContext, cell_at
from data_consistency.core.exceptions import ColumnNotFoundError
from data_consistency.core.logging_config import get_logger
from data_consistency.core.results import IssueLocation, IssueSeverity, ValidationIssue
from data_consistency.indexing.smart_indexer import DataIndexes, index_key
from data_consistency.utils.text_matching import format_number, parse_number
from data_consistency.validations.base import ValidationRule

logger = get_logger(__name__)

OUTLIER_METHODS = ("iqr", "zscore", "fixed")


@dataclass(frozen=True)
class ValueRangeOptions:
    """
    Per-call options for ValueRangeRule.

    Attributes:
        columns: Columns to check (all numeric primary columns when empty)
        outlier_method: iqr, zscore or fixed
        outlier_threshold: Bound multiplier; None picks the method default
        fixed_ranges: Column -> {"min": x, "max": y}, either side optional
        tolerance: Numeric tolerance recorded with each issue
    """

    columns: Tuple[str, ...] = ()
    outlier_method: str = DEFAULT_OUTLIER_METHOD
    outlier_threshold: Optional[float] = None
    fixed_ranges: Mapping[str, Mapping[str, float]] = field(default_factory=dict)
    tolerance: float = DEFAULT_TOLERANCE

    @property
    def effective_threshold(self) -> float:
        """Configured threshold, or the default multiplier of the method."""
        if self.outlier_threshold:
            return self.outlier_threshold
        if self.outlier_method == "zscore":
            return DEFAULT_ZSCORE_THRESHOLD
        return DEFAULT_IQR_MULTIPLIER


def calculate_bounds(column: str, stats: ColumnStats, options: ValueRangeOptions) -> Tuple[float, float]:
    """
    Compute the (lower, upper) outlier bounds for a column.

    Args:
        column: Column name, used to look up a fixed range override
        stats: Statistics of the column
        options: Rule options

    Returns:
        Tuple of lower and upper bound, either of which may be infinite
    """
    fixed_range = options.fixed_ranges.get(column)
    if fixed_range:
        lower = fixed_range.get("min")
        upper = fixed_range.get("max")
        return (
            -math.inf if lower is None else float(lower),
            math.inf if upper is None else float(upper),
        )

    threshold = options.effective_threshold

    if options.outlier_method == "zscore":
        return stats.mean - threshold * stats.std_dev, stats.mean + threshold * stats.std_dev

    if options.outlier_method == "iqr":
        q1 = stats.median - stats.std_dev * QUARTILE_Z_OFFSET
        q3 = stats.median + stats.std_dev * QUARTILE_Z_OFFSET
        iqr = q3 - q1
        return q1 - threshold * iqr, q3 + threshold * iqr

    return stats.min, stats.max


def z_score(value: float, stats: ColumnStats) -> float:
    """Absolute z-score of a value; infinite when std is zero and value differs from the mean."""
    if stats.std_dev == 0:
        return 0.0 if value == stats.mean else math.inf
    return abs((value - stats.mean) / stats.std_dev)


def determine_severity(outlier_values: List[float], stats: ColumnStats) -> IssueSeverity:
    """
    Grade a set of outliers.

    critical: at least one value more than 3 standard deviations from the mean
    warning: outliers exceed 10% of the column's distinct values
    info: otherwise
    """
    if any(z_score(value, stats) > EXTREME_Z_SCORE for value in outlier_values):
        return IssueSeverity.CRITICAL

    if len(outlier_values) / (stats.unique_count or 1) > OUTLIER_DENSITY_RATIO:
        return IssueSeverity.WARNING

    return IssueSeverity.INFO


def _samples(values: List[float]) -> str:
    return ", ".join(format_number(v) for v in values[:MAX_OUTLIER_SAMPLES])


class ValueRangeRule(ValidationRule):
    """Validates that numeric values are within expected ranges."""

    name = RULE_VALUE_RANGES
    severity = IssueSeverity.WARNING
    description = "Validates that numeric values are within expected ranges"

    def validate(
        self,
        context: ValidationContext,
        indexes: DataIndexes,
        options: Optional[ValueRangeOptions] = None
    ) -> List[ValidationIssue]:
        options = options or ValueRangeOptions()

        issues = []
        for column in self.numeric_columns(context, indexes, options):
            issues.extend(self._validate_column(column, context, indexes, options))
        return issues

    @staticmethod
    def numeric_columns(
        context: ValidationContext,
        indexes: DataIndexes,
        options: ValueRangeOptions
    ) -> List[str]:
        """Configured columns, else every primary column detected as numeric."""
        if options.columns:
            return list(options.columns)

        primary = context.primary_file
        columns = []
        for column in primary.headers:
            stats = indexes.range_stats.get(index_key(primary.file_path, column))
            if stats is not None and stats.data_type == DataType.NUMBER:
                columns.append(column)
        return columns

    def _validate_column(
        self,
        column: str,
        context: ValidationContext,
        indexes: DataIndexes,
        options: ValueRangeOptions
    ) -> List[ValidationIssue]:
        primary = context.primary_file

        try:
            column_index = self.resolve_column(primary.headers, column)
        except ColumnNotFoundError as e:
            return [self._column_not_found_issue(e, primary.file_path)]

        header = primary.headers[column_index]
        stats = indexes.range_stats.get(index_key(primary.file_path, header))
        if stats is None or stats.data_type != DataType.NUMBER:
            logger.debug(f"Skipping non-numeric column {header}")
            return []

        lower, upper = calculate_bounds(column, stats, options)

        outlier_rows: List[int] = []
        outlier_values: List[float] = []
        for row_number, row in enumerate(primary.data_rows(), start=1):
            value = parse_number(cell_at(row, column_index))
            if value is None:
                continue
            if value < lower or value > upper:
                outlier_rows.append(row_number)
                outlier_values.append(value)

        if not outlier_rows:
            return []

        too_low = [v for v in outlier_values if v < lower]
        too_high = [v for v in outlier_values if v > upper]

        message = f'Column "{column}" has {len(outlier_rows)} potential outliers'
        if too_low and too_high:
            message += f" ({len(too_low)} below {lower:.2f}, {len(too_high)} above {upper:.2f})"
            suggestion = (
                f"Review values outside normal range [{lower:.2f} - {upper:.2f}]. "
                f"Check for data entry errors or exceptional cases. "
                f"Low: {_samples(too_low)}. High: {_samples(too_high)}"
            )
        elif too_low:
            message += f" below expected minimum ({lower:.2f})"
            suggestion = f"Values below {lower:.2f} may indicate data entry errors. Check: {_samples(too_low)}"
        else:
            message += f" above expected maximum ({upper:.2f})"
            suggestion = (
                f"Values above {upper:.2f} may indicate exceptional cases or errors. "
                f"Check: {_samples(too_high)}"
            )

        return [self._create_issue(
            message,
            IssueLocation(file=primary.file_path, row=outlier_rows[0], column=column),
            suggestion,
            affected_rows=outlier_rows[:MAX_RANGE_AFFECTED_ROWS],
            metadata={
                "outlier_count": len(outlier_rows),
                "expected_range": {"min": lower, "max": upper},
                "actual_range": {"min": min(outlier_values), "max": max(outlier_values)},
                "statistics": {
                    "mean": stats.mean,
                    "median": stats.median,
                    "std_dev": stats.std_dev,
                    "data_type": stats.data_type.value,
                },
                "method": options.outlier_method,
                "threshold": options.effective_threshold,
                "tolerance": options.tolerance,
            },
            severity=determine_severity(outlier_values, stats),
        )]
