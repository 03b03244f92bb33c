"""
Unit tests for ReferentialIntegrityRule.

Tests manual and auto-detected relationships, case sensitivity, empty cell
handling, capping of affected rows and missing-column findings.
"""

import pytest
from dataclasses import replace

from data_consistency.core.context import DetectedRelationship, MatchType
from data_consistency.core.results import IssueSeverity
from data_consistency.validations.builtin.referential_integrity import (
    ReferentialIntegrityOptions,
    ReferentialIntegrityRule,
    is_likely_key_match,
)

ORDERS = [
    ["order_id", "branch_id"],
    ["1", "B1"],
    ["2", "b2"],
    ["3", "B9"],
    ["4", ""],
    ["5", "B9"],
    ["6", "B7"],
]

BRANCHES = [
    ["id", "name"],
    ["B1", "North"],
    ["B2", "South"],
]

MANUAL = ReferentialIntegrityOptions(key_columns=("branch_id",), auto_detect=False)


@pytest.fixture
def orders_context(build_context, build_indexes):
    context = build_context(ORDERS, {"branches.csv": BRANCHES}, primary_path="orders.csv")
    return context, build_indexes(context)


@pytest.mark.unit
class TestKeyMatching:
    """Test pairing manual key columns with reference headers."""

    def test_suffix_conventions(self):
        """Test _id/_code/_name columns pair with bare reference headers."""
        assert is_likely_key_match("branch_id", "id")
        assert is_likely_key_match("country_code", "CODE")
        assert is_likely_key_match("store_name", "name")
        assert is_likely_key_match("Branch_ID", "branch_id")

    def test_unrelated(self):
        """Test other pairs are rejected."""
        assert not is_likely_key_match("branch_id", "name")
        assert not is_likely_key_match("amount", "id")

    def test_manual_relationships(self, orders_context):
        """Test one manual relationship per matching reference header."""
        context, _ = orders_context

        relationships = ReferentialIntegrityRule.create_manual_relationships(context, ("branch_id",))

        assert relationships == [DetectedRelationship("branch_id", "branches.csv", "id", 1.0, MatchType.MANUAL)]


@pytest.mark.unit
class TestMissingReferences:
    """Test detection of values absent from the reference column."""

    def test_invalid_rows_reported_once(self, orders_context):
        """Test one issue listing every dangling row."""
        context, indexes = orders_context

        issues = ReferentialIntegrityRule().validate(context, indexes, MANUAL)

        assert len(issues) == 1
        issue = issues[0]
        assert issue.rule == "referential_integrity"
        assert issue.severity == IssueSeverity.CRITICAL
        assert issue.message == "3 rows have invalid branch_id references"
        assert issue.affected_rows == [3, 5, 6]
        assert issue.location.file == "orders.csv"
        assert issue.location.row == 3
        assert issue.location.column == "branch_id"
        assert issue.suggestion == "Missing values: B9, B7. Add these to branches.csv or use existing values."

    def test_metadata(self, orders_context):
        """Test missing values in first-seen order and sorted available values."""
        context, indexes = orders_context

        metadata = ReferentialIntegrityRule().validate(context, indexes, MANUAL)[0].metadata

        assert metadata["missing_values"] == ["B9", "B7"]
        assert metadata["invalid_count"] == 3
        assert metadata["reference_file"] == "branches.csv"
        assert metadata["reference_column"] == "id"
        assert metadata["available_values"] == ["b1", "b2"]

    def test_empty_cells_reported_when_not_allowed(self, orders_context):
        """Test allow_empty=False treats blanks as missing."""
        context, indexes = orders_context
        options = ReferentialIntegrityOptions(key_columns=("branch_id",), auto_detect=False, allow_empty=False)

        issue = ReferentialIntegrityRule().validate(context, indexes, options)[0]

        assert issue.affected_rows == [3, 4, 5, 6]

    def test_case_sensitive(self, orders_context):
        """Test case-sensitive matching rejects differently cased values."""
        context, indexes = orders_context
        options = ReferentialIntegrityOptions(key_columns=("branch_id",), auto_detect=False, case_sensitive=True)

        issue = ReferentialIntegrityRule().validate(context, indexes, options)[0]

        assert issue.affected_rows == [2, 3, 5, 6]
        assert issue.metadata["available_values"] == ["B1", "B2"]

    def test_all_valid(self, build_context, build_indexes):
        """Test no issue when every value exists."""
        context = build_context([["branch_id"], ["B1"], [" b2 "]], {"branches.csv": BRANCHES})

        assert ReferentialIntegrityRule().validate(context, build_indexes(context), MANUAL) == []

    def test_affected_rows_capped(self, build_context, build_indexes):
        """Test at most 50 rows are listed and the message says so."""
        values = ["X1", "X2", "X3", "X4", "X5", "X6", "X7"]
        grid = [["branch_id"]] + [[values[i % len(values)]] for i in range(60)]
        context = build_context(grid, {"branches.csv": BRANCHES})

        issue = ReferentialIntegrityRule().validate(context, build_indexes(context), MANUAL)[0]

        assert len(issue.affected_rows) == 50
        assert issue.metadata["invalid_count"] == 60
        assert issue.message == "60 rows have invalid branch_id references (showing first 50 of 60 rows)"
        assert issue.suggestion.startswith("Missing values: X1, X2, X3, X4, X5 and 2 more.")


@pytest.mark.unit
class TestRelationshipSources:
    """Test where relationships come from."""

    def test_auto_detected_relationships(self, build_context, build_indexes):
        """Test detected relationships are checked when auto-detect is on."""
        context = build_context(
            [["customer_id", "amount"], ["C1", "10"], ["C3", "20"]],
            {"customers.csv": [["customer_id", "name"], ["C1", "Ann"], ["C2", "Bob"]]},
            detect=True,
        )

        issues = ReferentialIntegrityRule().validate(context, build_indexes(context))

        assert len(issues) == 1
        assert issues[0].affected_rows == [2]
        assert issues[0].metadata["missing_values"] == ["C3"]

    def test_manual_mode_ignores_detected(self, build_context, build_indexes):
        """Test auto_detect=False without key columns checks nothing."""
        context = build_context(
            [["customer_id"], ["C3"]],
            {"customers.csv": [["customer_id"], ["C1"]]},
            detect=True,
        )

        options = ReferentialIntegrityOptions(auto_detect=False)

        assert ReferentialIntegrityRule().validate(context, build_indexes(context), options) == []

    def test_no_references(self, build_context, build_indexes):
        """Test a primary file alone yields no issues."""
        context = build_context(ORDERS)

        assert ReferentialIntegrityRule().validate(context, build_indexes(context), MANUAL) == []


@pytest.mark.unit
class TestMissingColumns:
    """Test unresolved columns become critical issues."""

    def test_primary_column_not_found(self, orders_context):
        """Test an unknown key column."""
        context, indexes = orders_context
        options = ReferentialIntegrityOptions(key_columns=("warehouse_id",), auto_detect=False)

        issues = ReferentialIntegrityRule().validate(context, indexes, options)

        assert len(issues) == 1
        assert issues[0].severity == IssueSeverity.CRITICAL
        assert issues[0].message == 'Primary column "warehouse_id" not found'
        assert "order_id, branch_id" in issues[0].suggestion

    def test_reference_column_not_found(self, build_context, build_indexes):
        """Test a relationship pointing at a missing reference column."""
        context = build_context(ORDERS, {"branches.csv": BRANCHES})
        context = replace(
            context,
            relationships=[DetectedRelationship("branch_id", "branches.csv", "code", 1.0, MatchType.EXACT)],
        )

        issues = ReferentialIntegrityRule().validate(context, build_indexes(context))

        assert len(issues) == 1
        assert issues[0].message == 'Reference column "code" not found in branches.csv'
        assert issues[0].location.file == "branches.csv"
        assert issues[0].severity == IssueSeverity.CRITICAL

    def test_fuzzy_primary_column(self, build_context, build_indexes):
        """Test a typo in the key column still resolves."""
        context = build_context([["branch_idd"], ["B9"]], {"branches.csv": BRANCHES})

        issues = ReferentialIntegrityRule().validate(context, build_indexes(context), MANUAL)

        assert issues[0].affected_rows == [1]
