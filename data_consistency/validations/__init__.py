"""Validation rules and the rule registry."""

from data_consistency.validations.base import ValidationRule, find_column_index
from data_consistency.validations.registry import RULE_REGISTRY, get_rule, list_rules

__all__ = ["RULE_REGISTRY", "ValidationRule", "find_column_index", "get_rule", "list_rules"]
