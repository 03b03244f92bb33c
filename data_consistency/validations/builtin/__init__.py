"""Built-in validation rules."""

from data_consistency.validations.builtin.completeness import CompletenessOptions, DataCompletenessRule
from data_consistency.validations.builtin.referential_integrity import (
    ReferentialIntegrityOptions,
    ReferentialIntegrityRule,
)
from data_consistency.validations.builtin.value_ranges import ValueRangeOptions, ValueRangeRule

__all__ = [
    "CompletenessOptions",
    "DataCompletenessRule",
    "ReferentialIntegrityOptions",
    "ReferentialIntegrityRule",
    "ValueRangeOptions",
    "ValueRangeRule",
]
