"""Unit tests for the JSON reporter."""

import json

import pytest

from data_consistency.core.exceptions import ReporterError
from data_consistency.core.results import (
    IssueLocation,
    IssueSeverity,
    ValidationIssue,
    ValidationResult,
    ValidationSummary,
)
from data_consistency.reporters import JSONReporter
from data_consistency.reporters.json_reporter import to_json_safe


@pytest.fixture
def result():
    issue = ValidationIssue(
        rule="referential_integrity",
        severity=IssueSeverity.CRITICAL,
        message="1 rows have invalid branch_id references",
        location=IssueLocation("sales.csv", 7, "branch_id"),
        suggestion="Missing values: 99. Add these to branches.csv or use existing values.",
        affected_rows=[7],
        metadata={"missing_values": ["99"], "invalid_count": 1},
    )
    summary = ValidationSummary.from_issues([issue], total_files=2, total_rows=15, validation_time_ms=3)
    return ValidationResult(success=False, summary=summary, issues=[issue], recommendations=["Fix it"], report="text")


@pytest.mark.unit
class TestJSONReporter:
    """Test JSON output."""

    def test_writes_result_schema(self, result, tmp_path):
        """Test the file holds the result dictionary."""
        output = tmp_path / "reports" / "result.json"

        JSONReporter().generate(result, str(output))

        data = json.loads(output.read_text(encoding="utf-8"))
        assert data == result.to_dict()
        assert data["issues"][0]["location"] == {"file": "sales.csv", "row": 7, "column": "branch_id"}
        assert data["summary"]["critical_issues"] == 1

    def test_non_ascii_kept(self, result, tmp_path):
        """Test report symbols are written unescaped."""
        result.report = "✓ VALIDATION PASSED"
        output = tmp_path / "result.json"

        JSONReporter().generate(result, str(output))

        assert "✓ VALIDATION PASSED" in output.read_text(encoding="utf-8")

    def test_unwritable_path(self, result, tmp_path):
        """Test write failures raise ReporterError."""
        with pytest.raises(ReporterError) as exc_info:
            JSONReporter().generate(result, str(tmp_path))

        assert exc_info.value.details["report_type"] == "json"

    def test_open_range_bounds_written_as_null(self, result, tmp_path):
        """Test infinite bounds produce strict JSON."""
        result.issues[0].metadata["expected_range"] = {"min": float("-inf"), "max": 100.0}
        output = tmp_path / "result.json"

        JSONReporter().generate(result, str(output))

        def reject_constant(token):
            raise ValueError(f"non-standard JSON token {token}")

        data = json.loads(output.read_text(encoding="utf-8"), parse_constant=reject_constant)
        assert data["issues"][0]["metadata"]["expected_range"] == {"min": None, "max": 100.0}


@pytest.mark.unit
class TestToJsonSafe:
    """Test conversion of non-finite numbers."""

    def test_nested_values(self):
        """Test dicts, lists and tuples are walked."""
        value = {"range": (float("inf"), 1.5), "rows": [1, float("nan")], "name": "amount"}

        assert to_json_safe(value) == {"range": [None, 1.5], "rows": [1, None], "name": "amount"}
