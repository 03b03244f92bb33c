"""Engine configuration parsing and per-call validation options."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from data_consistency.core.constants import (
    DEFAULT_MAX_CONCURRENT_VALIDATIONS,
    DEFAULT_REPORT_FORMAT,
    DEFAULT_RULES,
    DEFAULT_TOLERANCE,
    MAX_STRING_LENGTH,
    MAX_YAML_FILE_SIZE,
    MAX_YAML_KEY_COUNT,
    MAX_YAML_NESTING_DEPTH,
    REPORT_FORMATS,
)
from data_consistency.core.exceptions import ConfigError, ConfigValidationError, YAMLSizeError
from data_consistency.validations.builtin.completeness import CompletenessOptions
from data_consistency.validations.builtin.referential_integrity import ReferentialIntegrityOptions
from data_consistency.validations.builtin.value_ranges import OUTLIER_METHODS, ValueRangeOptions
from data_consistency.validations.registry import RULE_REGISTRY

CONFIG_ROOT_KEY = "validation_engine"


def _string_tuple(value: Any, field_name: str) -> Tuple[str, ...]:
    """Coerce a YAML list (or single string) into a tuple of strings."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)):
        raise ConfigValidationError(
            f"'{field_name}' must be a list of strings",
            field=field_name,
            expected="list",
            actual=type(value).__name__
        )
    return tuple(str(v) for v in value)


def _number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigValidationError(
            f"'{field_name}' must be a number",
            field=field_name,
            expected="number",
            actual=repr(value)
        )
    return float(value)


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    section = raw.get(key) or {}
    if not isinstance(section, dict):
        raise ConfigValidationError(
            f"'{key}' must be a mapping",
            field=key,
            expected="mapping",
            actual=type(section).__name__
        )
    return section


@dataclass
class EngineConfig:
    """
    Engine-level configuration.

    Holds the defaults used for every validation call: which rules run, how
    the report is rendered and each rule's options. Per-call ValidationOptions
    can still override rule selection, key columns and auto-detection.
    """

    auto_detect_relationships: bool = True
    report_format: str = DEFAULT_REPORT_FORMAT
    max_concurrent_validations: int = DEFAULT_MAX_CONCURRENT_VALIDATIONS
    tolerance: float = DEFAULT_TOLERANCE
    rules: List[str] = field(default_factory=list)
    referential_integrity: ReferentialIntegrityOptions = field(default_factory=ReferentialIntegrityOptions)
    data_completeness: CompletenessOptions = field(default_factory=CompletenessOptions)
    value_ranges: ValueRangeOptions = field(default_factory=ValueRangeOptions)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check that every value is usable.

        Raises:
            ConfigValidationError: On the first invalid value
        """
        if self.report_format not in REPORT_FORMATS:
            raise ConfigValidationError(
                f"Invalid report format: '{self.report_format}'",
                field="report_format",
                expected=", ".join(REPORT_FORMATS),
                actual=str(self.report_format)
            )

        if self.max_concurrent_validations < 1:
            raise ConfigValidationError(
                "max_concurrent_validations must be at least 1",
                field="max_concurrent_validations",
                expected=">= 1",
                actual=str(self.max_concurrent_validations)
            )

        for rule_id in self.rules:
            if rule_id not in RULE_REGISTRY:
                raise ConfigValidationError(
                    f"Unknown rule: '{rule_id}'",
                    field="rules",
                    expected=", ".join(RULE_REGISTRY),
                    actual=rule_id
                )

        min_completeness = self.data_completeness.min_completeness
        if not 0 <= min_completeness <= 100:
            raise ConfigValidationError(
                f"min_completeness must be between 0 and 100, got {min_completeness}",
                field="data_completeness.min_completeness",
                expected="0-100",
                actual=str(min_completeness)
            )

        if self.value_ranges.outlier_method not in OUTLIER_METHODS:
            raise ConfigValidationError(
                f"Invalid outlier method: '{self.value_ranges.outlier_method}'",
                field="value_ranges.outlier_method",
                expected=", ".join(OUTLIER_METHODS),
                actual=str(self.value_ranges.outlier_method)
            )

        threshold = self.value_ranges.outlier_threshold
        if threshold is not None and threshold <= 0:
            raise ConfigValidationError(
                f"outlier_threshold must be positive, got {threshold}",
                field="value_ranges.outlier_threshold",
                expected="> 0",
                actual=str(threshold)
            )

    @classmethod
    def from_yaml(cls, config_path: str) -> "EngineConfig":
        """
        Load configuration from a YAML file.

        The file is size checked before parsing, parsed with yaml.safe_load and
        structure checked (nesting depth, key count, string length) afterwards.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            EngineConfig instance

        Raises:
            ConfigError: If the file is missing or is not valid YAML
            YAMLSizeError: If the file exceeds the size limit
            ConfigValidationError: If the structure is too complex or a value is invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        file_size = os.path.getsize(config_file)
        if file_size > MAX_YAML_FILE_SIZE:
            raise YAMLSizeError(
                f"Configuration file too large: {file_size:,} bytes. "
                f"Maximum allowed: {MAX_YAML_FILE_SIZE:,} bytes",
                file_size=file_size,
                max_size=MAX_YAML_FILE_SIZE
            )

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML file: {str(e)}")
        except UnicodeDecodeError as e:
            raise ConfigError(f"Invalid file encoding (expected UTF-8): {str(e)}")

        if config_dict is None:
            return cls()

        cls._validate_yaml_structure(config_dict)
        return cls.from_dict(config_dict)

    @classmethod
    def _validate_yaml_structure(cls, obj: Any, current_depth: int = 0, total_keys: Optional[List[int]] = None) -> None:
        """
        Reject configuration documents that are too deep, too large or hold huge strings.

        Raises:
            ConfigValidationError: If the structure is too complex
        """
        if total_keys is None:
            total_keys = [0]

        if current_depth > MAX_YAML_NESTING_DEPTH:
            raise ConfigValidationError(
                f"YAML nesting depth exceeds maximum of {MAX_YAML_NESTING_DEPTH} levels."
            )

        if isinstance(obj, (dict, list)):
            total_keys[0] += len(obj)
            if total_keys[0] > MAX_YAML_KEY_COUNT:
                raise ConfigValidationError(
                    f"YAML structure contains more than {MAX_YAML_KEY_COUNT:,} keys/items."
                )

            children = obj.values() if isinstance(obj, dict) else obj
            for child in children:
                cls._validate_yaml_structure(child, current_depth + 1, total_keys)

        elif isinstance(obj, str) and len(obj) > MAX_STRING_LENGTH:
            raise ConfigValidationError(
                f"YAML contains string exceeding maximum length ({MAX_STRING_LENGTH:,} bytes): '{obj[:50]}...'"
            )

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "EngineConfig":
        """
        Build configuration from a parsed document.

        Accepts either the full document (with a top-level ``validation_engine``
        key) or the inner mapping itself. Missing keys keep their defaults.
        """
        if not isinstance(config_dict, dict):
            raise ConfigError("Configuration must be a mapping")

        raw = config_dict.get(CONFIG_ROOT_KEY, config_dict)
        if not isinstance(raw, dict):
            raise ConfigError(f"'{CONFIG_ROOT_KEY}' must be a mapping")

        defaults = cls()

        ri = _section(raw, "referential_integrity")
        referential_integrity = ReferentialIntegrityOptions(
            key_columns=_string_tuple(ri.get("key_columns"), "referential_integrity.key_columns"),
            auto_detect=bool(raw.get("auto_detect_relationships", defaults.auto_detect_relationships)),
            case_sensitive=bool(ri.get("case_sensitive", False)),
            allow_empty=bool(ri.get("allow_empty", True)),
        )

        dc = _section(raw, "data_completeness")
        data_completeness = CompletenessOptions(
            required_columns=_string_tuple(dc.get("required_columns"), "data_completeness.required_columns"),
            min_completeness=_number(
                dc.get("min_completeness", defaults.data_completeness.min_completeness),
                "data_completeness.min_completeness"
            ),
            check_all_columns=bool(dc.get("check_all_columns", False)),
        )

        vr = _section(raw, "value_ranges")
        threshold = vr.get("outlier_threshold")
        fixed_ranges = vr.get("fixed_ranges") or {}
        if not isinstance(fixed_ranges, dict):
            raise ConfigValidationError(
                "'value_ranges.fixed_ranges' must map column names to {min, max}",
                field="value_ranges.fixed_ranges",
                expected="mapping",
                actual=type(fixed_ranges).__name__
            )
        tolerance = _number(raw.get("tolerance", defaults.tolerance), "tolerance")
        value_ranges = ValueRangeOptions(
            columns=_string_tuple(vr.get("columns"), "value_ranges.columns"),
            outlier_method=str(vr.get("outlier_method", defaults.value_ranges.outlier_method)),
            outlier_threshold=None if threshold is None else _number(threshold, "value_ranges.outlier_threshold"),
            fixed_ranges={
                str(column): {
                    side: _number(bound, f"value_ranges.fixed_ranges.{column}.{side}")
                    for side, bound in (bounds or {}).items()
                    if side in ("min", "max") and bound is not None
                }
                for column, bounds in fixed_ranges.items()
            },
            tolerance=tolerance,
        )

        max_workers = raw.get("max_concurrent_validations", defaults.max_concurrent_validations)
        if isinstance(max_workers, bool) or not isinstance(max_workers, int):
            raise ConfigValidationError(
                "'max_concurrent_validations' must be an integer",
                field="max_concurrent_validations",
                expected="integer",
                actual=repr(max_workers)
            )

        return cls(
            auto_detect_relationships=referential_integrity.auto_detect,
            report_format=str(raw.get("report_format", defaults.report_format)),
            max_concurrent_validations=max_workers,
            tolerance=tolerance,
            rules=list(_string_tuple(raw.get("rules"), "rules")),
            referential_integrity=referential_integrity,
            data_completeness=data_completeness,
            value_ranges=value_ranges,
        )

    def active_rules(self) -> List[str]:
        """Configured rule ids, or every default rule when none are configured."""
        return list(self.rules) if self.rules else list(DEFAULT_RULES)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the YAML document layout."""
        return {
            CONFIG_ROOT_KEY: {
                "auto_detect_relationships": self.auto_detect_relationships,
                "report_format": self.report_format,
                "max_concurrent_validations": self.max_concurrent_validations,
                "tolerance": self.tolerance,
                "rules": list(self.rules),
                "referential_integrity": {
                    "key_columns": list(self.referential_integrity.key_columns),
                    "case_sensitive": self.referential_integrity.case_sensitive,
                    "allow_empty": self.referential_integrity.allow_empty,
                },
                "data_completeness": {
                    "min_completeness": self.data_completeness.min_completeness,
                    "check_all_columns": self.data_completeness.check_all_columns,
                    "required_columns": list(self.data_completeness.required_columns),
                },
                "value_ranges": {
                    "outlier_method": self.value_ranges.outlier_method,
                    "outlier_threshold": self.value_ranges.outlier_threshold,
                    "columns": list(self.value_ranges.columns),
                    "fixed_ranges": {k: dict(v) for k, v in self.value_ranges.fixed_ranges.items()},
                },
            }
        }


# camelCase keys of the original tool schema -> snake_case field names
_OPTION_ALIASES = {
    "validationRules": "validation_rules",
    "keyColumns": "key_columns",
    "autoDetectRelationships": "auto_detect_relationships",
}


@dataclass(frozen=True)
class ValidationOptions:
    """
    Options for one validate_data_consistency() call.

    Attributes:
        validation_rules: Rule ids to run (engine configuration when empty)
        key_columns: Primary key columns; switches referential integrity to manual mode
        sheet: Worksheet name for Excel files
        auto_detect_relationships: Overrides the engine's auto-detection setting
        tolerance: Overrides the engine's numeric tolerance
    """

    validation_rules: Tuple[str, ...] = ()
    key_columns: Tuple[str, ...] = ()
    sheet: Optional[str] = None
    auto_detect_relationships: Optional[bool] = None
    tolerance: Optional[float] = None

    @classmethod
    def from_dict(cls, options: Optional[Dict[str, Any]]) -> "ValidationOptions":
        """
        Build options from a request payload.

        Accepts camelCase keys (``validationRules``, ``keyColumns``,
        ``autoDetectRelationships``) as well as snake_case. Unknown keys are
        ignored.
        """
        if not options:
            return cls()

        values = {}
        for key, value in options.items():
            name = _OPTION_ALIASES.get(key, key)
            if name in ("validation_rules", "key_columns"):
                values[name] = _string_tuple(value, name)
            elif name in ("sheet", "auto_detect_relationships", "tolerance"):
                values[name] = value

        return cls(**values)
