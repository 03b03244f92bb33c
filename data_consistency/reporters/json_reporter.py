"""
JSON report generator.

Writes the logical result schema (summary, issues, recommendations, rendered
report) so other tools can consume validation output.
"""

import json
import math
from pathlib import Path
from typing import Any

from data_consistency.core.exceptions import ReporterError
from data_consistency.core.logging_config import get_logger
from data_consistency.core.results import ValidationResult
from data_consistency.reporters.base import Reporter

logger = get_logger(__name__)


def to_json_safe(value: Any) -> Any:
    """Replace non-finite floats (open range bounds) with None, recursively."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {key: to_json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_safe(item) for item in value]
    return value


class JSONReporter(Reporter):
    """Writes ValidationResult.to_dict() as indented, strict UTF-8 JSON."""

    def generate(self, result: ValidationResult, output_path: str) -> None:
        output_file = Path(output_path)

        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(output_file, "w", encoding="utf-8") as f:
                json.dump(
                    to_json_safe(result.to_dict()),
                    f,
                    indent=2,
                    ensure_ascii=False,
                    allow_nan=False,
                    default=str,
                )
        except (OSError, TypeError, ValueError) as e:
            raise ReporterError(
                f"Error generating JSON report: {e}",
                report_type="json",
                output_path=str(output_path),
                original_exception=e,
            )

        logger.info(f"JSON report generated: {output_path}")
