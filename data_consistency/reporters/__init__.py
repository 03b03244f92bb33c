"""Report generators for validation results."""

from data_consistency.reporters.json_reporter import JSONReporter
from data_consistency.reporters.text_reporter import ValidationReporter, get_top_issues

__all__ = ["JSONReporter", "ValidationReporter", "get_top_issues"]
