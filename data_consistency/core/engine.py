"""
Validation engine - orchestrates cross-file consistency validation.

The engine:
1. Loads the primary and reference files into a validation context
2. Builds the lookup indexes shared by every rule
3. Runs the selected rules concurrently with per-call options
4. Aggregates issues into a summary with recommendations
5. Renders a text report
"""

import time
import traceback
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from data_consistency.core.config import EngineConfig, ValidationOptions
from data_consistency.core.constants import (
    ENGINE_RULE_NAME,
    RULE_DATA_COMPLETENESS,
    RULE_REFERENTIAL_INTEGRITY,
    RULE_VALUE_RANGES,
)
from data_consistency.core.context import ContextBuilder, ValidationContext
from data_consistency.core.logging_config import get_logger
from data_consistency.core.results import (
    IssueLocation,
    IssueSeverity,
    ValidationIssue,
    ValidationResult,
    ValidationSummary,
)
from data_consistency.indexing.smart_indexer import DataIndexes, SmartIndexer
from data_consistency.reporters.text_reporter import ValidationReporter
from data_consistency.validations.base import ValidationRule
from data_consistency.validations.registry import RULE_REGISTRY, get_rule

logger = get_logger(__name__)

FAILURE_RECOMMENDATIONS = [
    "Verify all file paths are correct and files exist",
    "Check file formats are supported (.csv, .xlsx, .xls)",
    "Ensure files are not corrupted or locked",
]


def _elapsed_ms(start_time: float) -> int:
    return int((time.time() - start_time) * 1000)


class ValidationEngine:
    """
    Main validation engine.

    Example usage:
        engine = ValidationEngine(EngineConfig.from_yaml("engine.yaml"))
        result = engine.validate_data_consistency(
            "sales.csv",
            ["branches.csv"],
            ValidationOptions(key_columns=("branch_id",)),
        )
        if not result.success:
            print(result.report)
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        """
        Initialize the validation engine.

        Args:
            config: Engine configuration (defaults when None)
        """
        self.config: EngineConfig = config or EngineConfig()
        self.context_builder = ContextBuilder(max_workers=self.config.max_concurrent_validations)
        self.indexer = SmartIndexer(self.context_builder)
        self.reporter = ValidationReporter()
        self.rules: Dict[str, ValidationRule] = {rule_id: get_rule(rule_id) for rule_id in RULE_REGISTRY}

    @classmethod
    def from_config(cls, config_path: str) -> "ValidationEngine":
        """
        Create engine from YAML configuration file.

        Raises:
            ConfigError: If configuration is invalid
        """
        return cls(EngineConfig.from_yaml(config_path))

    def validate_data_consistency(
        self,
        primary_path: str,
        reference_paths: Sequence[str] = (),
        options: Optional[ValidationOptions] = None
    ) -> ValidationResult:
        """
        Validate a primary file against reference files.

        Never raises: any failure (including files that cannot be loaded) is
        reported as a single critical issue from the engine itself.

        Args:
            primary_path: File being validated
            reference_paths: Lookup files
            options: Per-call options

        Returns:
            ValidationResult; success is True when no critical issue was found
        """
        options = options or ValidationOptions()
        reference_paths = list(reference_paths)
        start_time = time.time()

        logger.info(f"Starting consistency validation: {primary_path} against {len(reference_paths)} reference file(s)")

        try:
            context = self.context_builder.build_context(primary_path, reference_paths, options.sheet)

            indexes = self.indexer.build_indexes(context)
            context = context.with_indexes(indexes)

            rule_ids = self._select_rules(options)
            issues = self._run_rules(rule_ids, context, indexes, options)

            summary = self._calculate_summary(context, issues, start_time)
            recommendations = self._generate_recommendations(issues)

            result = ValidationResult(
                success=summary.critical_issues == 0,
                summary=summary,
                issues=issues,
                recommendations=recommendations,
            )

            if self.config.report_format == "detailed":
                result.report = self.reporter.generate_detailed_report(result)
            else:
                result.report = self.reporter.generate_summary_report(result)

            logger.info(
                f"Validation completed in {summary.validation_time_ms}ms - "
                f"{summary.total_issues} issue(s): {summary.critical_issues} critical, "
                f"{summary.warning_issues} warning, {summary.info_issues} info"
            )
            return result

        except Exception as e:
            logger.error(f"Validation failed: {e}")
            logger.debug(f"Traceback:\n{traceback.format_exc()}")
            return self._failure_result(primary_path, reference_paths, e, start_time)

    def _select_rules(self, options: ValidationOptions) -> List[str]:
        """Rule ids for this call, unknown ids dropped."""
        requested = list(options.validation_rules) or self.config.active_rules()

        selected = []
        for rule_id in requested:
            if rule_id in self.rules:
                selected.append(rule_id)
            else:
                logger.warning(f"Unknown validation rule '{rule_id}' - skipping")
        return selected

    def _rule_options(self, rule_id: str, options: ValidationOptions) -> Any:
        """Options value passed to one rule for this call."""
        if rule_id == RULE_REFERENTIAL_INTEGRITY:
            auto_detect = self.config.auto_detect_relationships
            if options.auto_detect_relationships is not None:
                auto_detect = options.auto_detect_relationships

            rule_options = replace(self.config.referential_integrity, auto_detect=auto_detect)
            if options.key_columns:
                rule_options = replace(rule_options, key_columns=tuple(options.key_columns), auto_detect=False)
            return rule_options

        if rule_id == RULE_DATA_COMPLETENESS:
            return self.config.data_completeness

        if rule_id == RULE_VALUE_RANGES:
            tolerance = self.config.tolerance if options.tolerance is None else options.tolerance
            return replace(self.config.value_ranges, tolerance=tolerance)

        return None

    def _run_rules(
        self,
        rule_ids: List[str],
        context: ValidationContext,
        indexes: DataIndexes,
        options: ValidationOptions
    ) -> List[ValidationIssue]:
        """Run rules concurrently and merge issues in selection order."""
        if not rule_ids:
            return []

        jobs: List[Tuple[str, Any]] = [(rule_id, self._rule_options(rule_id, options)) for rule_id in rule_ids]

        with ThreadPoolExecutor(max_workers=min(self.config.max_concurrent_validations, len(jobs))) as executor:
            futures = [
                executor.submit(self.rules[rule_id].validate, context, indexes, rule_options)
                for rule_id, rule_options in jobs
            ]

            issues: List[ValidationIssue] = []
            for (rule_id, _), future in zip(jobs, futures):
                rule_issues = future.result()
                logger.debug(f"Rule {rule_id} reported {len(rule_issues)} issue(s)")
                issues.extend(rule_issues)

        return issues

    @staticmethod
    def _calculate_summary(
        context: ValidationContext,
        issues: List[ValidationIssue],
        start_time: float
    ) -> ValidationSummary:
        total_rows = context.primary_file.row_count + sum(f.row_count for f in context.reference_files.values())
        return ValidationSummary.from_issues(
            issues,
            total_files=len(context.reference_files) + 1,
            total_rows=total_rows,
            validation_time_ms=_elapsed_ms(start_time),
        )

    @staticmethod
    def _generate_recommendations(issues: List[ValidationIssue]) -> List[str]:
        recommendations = []

        critical = [i for i in issues if i.severity == IssueSeverity.CRITICAL]
        if critical:
            recommendations.append(
                f"Address {len(critical)} critical issues immediately - these may cause data integrity problems"
            )
            if any(i.rule == RULE_REFERENTIAL_INTEGRITY for i in critical):
                recommendations.append(
                    "Fix referential integrity: Add missing references to lookup tables or correct invalid values"
                )

        warnings = [i for i in issues if i.severity == IssueSeverity.WARNING]
        if warnings:
            recommendations.append(
                f"Review {len(warnings)} warnings - these indicate potential data quality issues"
            )
            if any(i.rule == RULE_DATA_COMPLETENESS for i in warnings):
                recommendations.append("Improve data completeness: Fill missing values in required fields")
            if any(i.rule == RULE_VALUE_RANGES for i in warnings):
                recommendations.append(
                    "Check outlier values: Verify if unusual values are legitimate or data entry errors"
                )

        if not issues:
            recommendations.append("Your data looks great! Consider running validation regularly to maintain quality")
        else:
            recommendations.append("Re-run validation after fixes to ensure all issues are resolved")
            recommendations.append("Consider setting up automated validation for ongoing data quality monitoring")

        return recommendations

    @staticmethod
    def _failure_result(
        primary_path: str,
        reference_paths: List[str],
        error: Exception,
        start_time: float
    ) -> ValidationResult:
        """Single synthetic critical issue describing why the call failed."""
        issue = ValidationIssue(
            rule=ENGINE_RULE_NAME,
            severity=IssueSeverity.CRITICAL,
            message=f"Validation failed: {error}",
            location=IssueLocation(file=primary_path, row=1, column="N/A"),
            suggestion="Check file paths and formats. Ensure all files are accessible and valid.",
            metadata={"error": str(error), "error_type": type(error).__name__},
        )

        summary = ValidationSummary(
            total_files=len(reference_paths) + 1,
            total_rows=0,
            total_issues=1,
            critical_issues=1,
            files_with_issues=[primary_path],
            validation_time_ms=_elapsed_ms(start_time),
        )

        return ValidationResult(
            success=False,
            summary=summary,
            issues=[issue],
            recommendations=list(FAILURE_RECOMMENDATIONS),
        )

    def get_available_rules(self) -> List[str]:
        """Rule ids this engine can run."""
        return list(self.rules)

    def get_rule_description(self, rule_id: str) -> str:
        """Description of a rule, or 'Unknown rule'."""
        rule = self.rules.get(rule_id)
        return rule.get_description() if rule else "Unknown rule"

    def generate_json_report(self, result: ValidationResult, output_path: str) -> None:
        """
        Write the result as JSON.

        Args:
            result: Result to serialize
            output_path: Path for output JSON file
        """
        from data_consistency.reporters.json_reporter import JSONReporter
        JSONReporter().generate(result, output_path)
