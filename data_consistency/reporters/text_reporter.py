"""
Plain-text validation reports.

Produces the summary, detailed and top-issues reports attached to a
ValidationResult. Reports are plain strings (no colour codes) so they can be
printed, logged or written to a file unchanged.
"""

from typing import Dict, List

from data_consistency.core.constants import (
    REPORT_DETAIL_ROW_SAMPLES,
    REPORT_FILE_RULE_WIDTH,
    REPORT_MISSING_VALUE_SAMPLES,
    REPORT_RULE_WIDTH,
    REPORT_TOP_ISSUES,
    REPORT_TOP_ROW_SAMPLES,
)
from data_consistency.core.pretty_output import PrettyOutput as po
from data_consistency.core.results import (
    SEVERITY_ORDER,
    IssueSeverity,
    ValidationIssue,
    ValidationResult,
    ValidationSummary,
)

SEVERITY_SYMBOLS = {
    IssueSeverity.CRITICAL: po.CROSS,
    IssueSeverity.WARNING: po.WARN,
    IssueSeverity.INFO: po.INFO_SYMBOL,
}

SEVERITY_HEADINGS = {
    IssueSeverity.CRITICAL: "CRITICAL ISSUES",
    IssueSeverity.WARNING: "WARNINGS",
    IssueSeverity.INFO: "INFO",
}


def _heading(title: str) -> str:
    return f"{title}\n{'=' * REPORT_RULE_WIDTH}\n\n"


def _sample_rows(rows: List[int], limit: int) -> str:
    sample = ", ".join(str(r) for r in rows[:limit])
    more = f" and {len(rows) - limit} more" if len(rows) > limit else ""
    return f"{sample}{more}"


def get_top_issues(issues: List[ValidationIssue], limit: int) -> List[ValidationIssue]:
    """
    Most important issues first.

    Sorted by severity (critical, warning, info), then by number of affected
    rows, both descending. The sort is stable and the input list is left
    untouched.
    """
    ranked = sorted(issues, key=lambda issue: (-issue.severity.rank, -len(issue.affected_rows)))
    return ranked[:limit]


class ValidationReporter:
    """
    Formats validation results as text.

    Example:
        >>> reporter = ValidationReporter()
        >>> print(reporter.generate_summary_report(result))
    """

    def generate_report(self, result: ValidationResult) -> str:
        """Short report: a success note, or the top issues to fix."""
        if not result.issues:
            return self._generate_success_report(result.summary)
        return self._generate_issues_report(result.summary, result.issues)

    def generate_summary_report(self, result: ValidationResult) -> str:
        """Status banner, counts and a per-file breakdown of issues."""
        summary = result.summary

        report = _heading("VALIDATION SUMMARY")

        if summary.critical_issues > 0:
            status = f"{po.CROSS} CRITICAL ISSUES FOUND"
        elif summary.warning_issues > 0:
            status = f"{po.WARN} WARNINGS FOUND"
        else:
            status = f"{po.CHECK} VALIDATION PASSED"

        report += f"Status: {status}\n"
        report += f"Files Validated: {summary.total_files}\n"
        report += f"Total Rows: {summary.total_rows:,}\n"
        report += f"Validation Time: {summary.validation_time_ms}ms\n\n"

        if summary.total_issues > 0:
            report += "Issues Found:\n"
            if summary.critical_issues > 0:
                report += f"  {po.CROSS} Critical: {summary.critical_issues}\n"
            if summary.warning_issues > 0:
                report += f"  {po.WARN} Warning: {summary.warning_issues}\n"
            if summary.info_issues > 0:
                report += f"  {po.INFO_SYMBOL} Info: {summary.info_issues}\n"
            report += "\n"

        if summary.files_with_issues:
            report += "Files with Issues:\n"
            for file in summary.files_with_issues:
                file_issues = [i for i in result.issues if i.location.file == file]
                counts = {severity: sum(1 for i in file_issues if i.severity == severity) for severity in SEVERITY_ORDER}

                report += f"  {po.ARROW} {file}\n"
                if counts[IssueSeverity.CRITICAL]:
                    report += f"     {po.CROSS} {counts[IssueSeverity.CRITICAL]} critical\n"
                if counts[IssueSeverity.WARNING]:
                    report += f"     {po.WARN} {counts[IssueSeverity.WARNING]} warnings\n"
                if counts[IssueSeverity.INFO]:
                    report += f"     {po.INFO_SYMBOL} {counts[IssueSeverity.INFO]} info\n"
            report += "\n"

        return report

    def generate_detailed_report(self, result: ValidationResult) -> str:
        """Summary report, every issue grouped by file and severity, then recommendations."""
        report = self.generate_summary_report(result)

        if result.issues:
            report += _heading("DETAILED ISSUES")

            for file, file_issues in self._group_issues_by_file(result.issues).items():
                report += f"File: {file}\n"
                report += f"{'-' * REPORT_FILE_RULE_WIDTH}\n\n"

                for severity in SEVERITY_ORDER:
                    severity_issues = [i for i in file_issues if i.severity == severity]
                    if severity_issues:
                        report += f"{SEVERITY_SYMBOLS[severity]} {SEVERITY_HEADINGS[severity]} ({len(severity_issues)})\n\n"
                        report += self._format_issue_list(severity_issues)

                report += "\n"

        if result.recommendations:
            report += _heading("RECOMMENDATIONS")
            for index, recommendation in enumerate(result.recommendations, 1):
                report += f"{index}. {recommendation}\n\n"

        return report

    get_top_issues = staticmethod(get_top_issues)

    @staticmethod
    def _generate_success_report(summary: ValidationSummary) -> str:
        report = _heading(f"{po.CHECK} VALIDATION PASSED")
        report += "All validation checks passed successfully!\n\n"
        report += "Summary:\n"
        report += f"  Files Validated: {summary.total_files}\n"
        report += f"  Total Rows: {summary.total_rows:,}\n"
        report += f"  Validation Time: {summary.validation_time_ms}ms\n\n"
        report += "Your data quality looks excellent!\n"
        return report

    @staticmethod
    def _generate_issues_report(summary: ValidationSummary, issues: List[ValidationIssue]) -> str:
        report = _heading(f"{po.WARN} VALIDATION ISSUES FOUND")

        report += f"Found {summary.total_issues} issues across {len(summary.files_with_issues)} files:\n"
        if summary.critical_issues > 0:
            report += f"  {po.CROSS} {summary.critical_issues} critical issues (fix immediately)\n"
        if summary.warning_issues > 0:
            report += f"  {po.WARN} {summary.warning_issues} warnings (should fix)\n"
        if summary.info_issues > 0:
            report += f"  {po.INFO_SYMBOL} {summary.info_issues} info items (consider reviewing)\n"
        report += "\n"

        top_issues = get_top_issues(issues, REPORT_TOP_ISSUES)
        if top_issues:
            report += "TOP ISSUES TO FIX:\n\n"
            for index, issue in enumerate(top_issues, 1):
                location = issue.location
                report += f"{index}. {SEVERITY_SYMBOLS[issue.severity]} {issue.message}\n"
                report += f"   {po.ARROW} {location.file}:{location.row}:{location.column}\n"
                report += f"   {po.DOT} {issue.suggestion}\n"
                if len(issue.affected_rows) > 1:
                    report += f"   {po.DOT} Affected rows: {_sample_rows(issue.affected_rows, REPORT_TOP_ROW_SAMPLES)}\n"
                report += "\n"

        return report

    @staticmethod
    def _group_issues_by_file(issues: List[ValidationIssue]) -> Dict[str, List[ValidationIssue]]:
        grouped: Dict[str, List[ValidationIssue]] = {}
        for issue in issues:
            grouped.setdefault(issue.location.file, []).append(issue)
        return grouped

    @staticmethod
    def _format_issue_list(issues: List[ValidationIssue]) -> str:
        output = ""

        for index, issue in enumerate(issues, 1):
            output += f"{index}. {issue.message}\n"
            output += f"   {po.ARROW} Row {issue.location.row}, Column: {issue.location.column}\n"
            output += f"   {po.DOT} {issue.suggestion}\n"

            if len(issue.affected_rows) > 1:
                output += f"   {po.DOT} Affected rows: {_sample_rows(issue.affected_rows, REPORT_DETAIL_ROW_SAMPLES)}\n"

            metadata = issue.metadata or {}
            if metadata.get("missing_values"):
                missing = ", ".join(str(v) for v in metadata["missing_values"][:REPORT_MISSING_VALUE_SAMPLES])
                output += f"   {po.DOT} Missing values: {missing}\n"

            expected = metadata.get("expected_range")
            if expected:
                output += f"   {po.DOT} Expected range: {expected['min']:.2f} - {expected['max']:.2f}\n"

            output += "\n"

        return output
