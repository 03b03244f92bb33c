"""
Data Consistency - cross-file validation for tabular data.

Validates a primary CSV/Excel file against reference files:
referential integrity, data completeness and value ranges.

Example:
    >>> from data_consistency import ValidationEngine, ValidationOptions
    >>> result = ValidationEngine().validate_data_consistency(
    ...     "sales.csv", ["branches.csv"], ValidationOptions(key_columns=("branch_id",))
    ... )
    >>> result.success
"""

__version__ = "0.1.0"

from data_consistency.core.config import EngineConfig, ValidationOptions
from data_consistency.core.engine import ValidationEngine
from data_consistency.core.results import (
    IssueLocation,
    IssueSeverity,
    ValidationIssue,
    ValidationResult,
    ValidationSummary,
)

__all__ = [
    "EngineConfig",
    "IssueLocation",
    "IssueSeverity",
    "ValidationEngine",
    "ValidationIssue",
    "ValidationOptions",
    "ValidationResult",
    "ValidationSummary",
    "__version__",
]
