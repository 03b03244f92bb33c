"""Unit tests for the rule registry and the shared rule base."""

import pytest

from data_consistency.core.results import IssueSeverity
from data_consistency.validations import RULE_REGISTRY, ValidationRule, find_column_index, get_rule, list_rules
from data_consistency.validations.builtin import (
    DataCompletenessRule,
    ReferentialIntegrityRule,
    ValueRangeRule,
)


@pytest.mark.unit
class TestRegistry:
    """Test rule lookup by id."""

    def test_rule_ids_in_default_order(self):
        """Test the closed rule set."""
        assert list_rules() == ["referential_integrity", "data_completeness", "value_ranges"]
        assert list(RULE_REGISTRY) == list_rules()

    def test_get_rule(self):
        """Test rules are instantiated by id."""
        assert isinstance(get_rule("referential_integrity"), ReferentialIntegrityRule)
        assert isinstance(get_rule("data_completeness"), DataCompletenessRule)
        assert isinstance(get_rule("value_ranges"), ValueRangeRule)

    def test_unknown_rule(self):
        """Test unknown ids list the available rules."""
        with pytest.raises(KeyError, match="Available rules"):
            get_rule("uniqueness")

    def test_rule_metadata(self):
        """Test default severities and descriptions."""
        assert get_rule("referential_integrity").severity == IssueSeverity.CRITICAL
        assert get_rule("data_completeness").severity == IssueSeverity.WARNING
        assert get_rule("value_ranges").severity == IssueSeverity.WARNING
        assert get_rule("value_ranges").get_description() == "Validates that numeric values are within expected ranges"
        assert repr(get_rule("value_ranges")) == "ValueRangeRule(name='value_ranges', severity=warning)"

    def test_rules_are_abstract(self):
        """Test the base class cannot be instantiated."""
        with pytest.raises(TypeError):
            ValidationRule()


@pytest.mark.unit
class TestFindColumnIndex:
    """Test column resolution against headers."""

    HEADERS = ["customer_id", "Email", "amount"]

    def test_exact(self):
        """Test exact match."""
        assert find_column_index(self.HEADERS, "amount") == 2

    def test_case_insensitive(self):
        """Test case-insensitive match."""
        assert find_column_index(self.HEADERS, "email") == 1

    def test_fuzzy(self):
        """Test a small typo above 0.8 similarity."""
        assert find_column_index(self.HEADERS, "customer_ids") == 0

    def test_not_found(self):
        """Test unrelated names."""
        assert find_column_index(self.HEADERS, "phone") is None
