"""
Registry of the built-in validation rules.

The rule set is closed: every rule id maps to one stateless rule class. The
engine looks rules up by id and passes per-call options into validate().
"""

from typing import Dict, List, Type

from data_consistency.core.constants import (
    RULE_DATA_COMPLETENESS,
    RULE_REFERENTIAL_INTEGRITY,
    RULE_VALUE_RANGES,
)
from data_consistency.validations.base import ValidationRule
from data_consistency.validations.builtin import (
    DataCompletenessRule,
    ReferentialIntegrityRule,
    ValueRangeRule,
)

RULE_REGISTRY: Dict[str, Type[ValidationRule]] = {
    RULE_REFERENTIAL_INTEGRITY: ReferentialIntegrityRule,
    RULE_DATA_COMPLETENESS: DataCompletenessRule,
    RULE_VALUE_RANGES: ValueRangeRule,
}


def get_rule(rule_id: str) -> ValidationRule:
    """
    Instantiate a rule by id.

    Raises:
        KeyError: If the rule id is not registered
    """
    try:
        rule_class = RULE_REGISTRY[rule_id]
    except KeyError:
        raise KeyError(
            f"Unknown validation rule '{rule_id}'. Available rules: {', '.join(RULE_REGISTRY)}"
        ) from None
    return rule_class()


def list_rules() -> List[str]:
    """Registered rule ids in default execution order."""
    return list(RULE_REGISTRY)
