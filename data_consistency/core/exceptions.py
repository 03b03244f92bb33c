"""
Data Consistency Exception Hierarchy.

This module defines the exception hierarchy for the cross-file validation
pipeline, providing clear categorization of errors and standardized error
handling across all components.

Exception Severity Levels:
    - FATAL: Stop all processing immediately (bad configuration)
    - CRITICAL: Stop the validation call (a file cannot be loaded)
    - RECOVERABLE: Convert into an issue and keep validating
    - WARNING: Log warning, validation continues
"""

from typing import Optional, Dict, Any, List
from enum import Enum


class ErrorSeverity(Enum):
    """
    Classify error severity for handling decisions.

    Attributes:
        FATAL: Unrecoverable error, stop all processing
        CRITICAL: Load-level error, abort the validation call
        RECOVERABLE: Rule-level error, continue with other columns/rules
        WARNING: Non-critical issue, log and continue
    """
    FATAL = "fatal"
    CRITICAL = "critical"
    RECOVERABLE = "recoverable"
    WARNING = "warning"


class DataConsistencyError(Exception):
    """
    Base exception for all data consistency errors with enhanced context.

    Provides:
    - Severity classification for handling decisions
    - Structured details dictionary for logging/reporting
    - Original exception preservation for debugging
    - Serialization support for JSON/dict output

    Attributes:
        message (str): Human-readable error message
        severity (ErrorSeverity): Error severity level
        details (Dict[str, Any]): Additional context (file path, column, etc.)
        original_exception (Optional[Exception]): Original exception if wrapping

    Example:
        >>> try:
        ...     grid = loader.load_grid("sales.csv")
        ... except Exception as e:
        ...     raise DataConsistencyError(
        ...         "Loading failed",
        ...         severity=ErrorSeverity.CRITICAL,
        ...         details={'file': 'sales.csv'},
        ...         original_exception=e
        ...     )
    """

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.RECOVERABLE,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error description
            severity: Error severity level (default: RECOVERABLE)
            details: Additional context dictionary
            original_exception: Original exception if this wraps another error
        """
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.details = details or {}
        self.original_exception = original_exception

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for logging/reporting.

        Returns:
            Dictionary containing exception details suitable for JSON serialization
        """
        return {
            'type': self.__class__.__name__,
            'message': self.message,
            'severity': self.severity.value,
            'details': self.details,
            'original_error': str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Configuration Errors (Fatal)
# ============================================================================

class ConfigError(DataConsistencyError):
    """
    Engine configuration errors (fatal - stop all processing).

    Raised when:
    - Configuration file not found
    - Invalid YAML syntax
    - Invalid configuration structure or values

    Attributes:
        field (Optional[str]): Specific config field that caused error
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message,
            severity=ErrorSeverity.FATAL,
            details={'field': field} if field else {}
        )
        self.field = field


class YAMLSizeError(ConfigError):
    """
    YAML file too large.

    Example:
        >>> raise YAMLSizeError(
        ...     "Config file exceeds 1MB limit",
        ...     file_size=1500000,
        ...     max_size=1048576
        ... )
    """

    def __init__(self, message: str, file_size: Optional[int] = None, max_size: Optional[int] = None):
        super().__init__(message)
        self.details.update({
            'file_size': file_size,
            'max_size': max_size
        })


class ConfigValidationError(ConfigError):
    """
    Configuration is valid YAML but holds an unusable value.

    Example:
        >>> raise ConfigValidationError(
        ...     "Invalid outlier method: 'mad'",
        ...     field="value_ranges.outlier_method",
        ...     expected="iqr, zscore, fixed",
        ...     actual="mad"
        ... )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[str] = None
    ):
        super().__init__(message, field)
        self.details.update({
            'expected': expected,
            'actual': actual
        })


# ============================================================================
# Data Loading Errors (Critical)
# ============================================================================

class DataLoadError(DataConsistencyError):
    """
    Data file loading errors (critical - abort the validation call).

    Raised when a primary or reference file cannot be turned into a grid.

    Attributes:
        file_path (str): Path to file that failed to load
    """

    def __init__(
        self,
        message: str,
        file_path: str,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            message,
            severity=ErrorSeverity.CRITICAL,
            details={'file_path': file_path},
            original_exception=original_exception
        )
        self.file_path = file_path


class FileNotFoundError(DataLoadError):
    """
    Data file not found (or not accessible) at the specified path.

    Example:
        >>> raise FileNotFoundError("branches.csv")
    """

    def __init__(self, file_path: str):
        super().__init__(f"File not found: {file_path}", file_path)


class UnsupportedFormatError(DataLoadError):
    """
    File extension not supported by the grid loader.

    Example:
        >>> raise UnsupportedFormatError(
        ...     "customers.xml",
        ...     format=".xml",
        ...     supported_formats=[".csv", ".xlsx", ".xls"]
        ... )
    """

    def __init__(self, file_path: str, format: str, supported_formats: List[str]):
        super().__init__(
            f"Unsupported file format '{format}'. Please use {', '.join(supported_formats)} files.",
            file_path
        )
        self.details.update({
            'format': format,
            'supported_formats': list(supported_formats)
        })


class EmptyFileError(DataLoadError):
    """
    File loaded successfully but contains no rows at all (not even headers).
    """

    def __init__(self, file_path: str):
        super().__init__(f"File is empty: {file_path}", file_path)


# ============================================================================
# Validation Execution Errors (Recoverable)
# ============================================================================

class ValidationExecutionError(DataConsistencyError):
    """
    Error during rule execution.

    Raised when a rule cannot evaluate part of the data (not when data fails
    validation - that is a normal ValidationIssue).

    Attributes:
        validation_name (str): Rule id that failed
        recoverable (bool): Whether processing can continue
    """

    def __init__(
        self,
        message: str,
        validation_name: str,
        recoverable: bool = True,
        original_exception: Optional[Exception] = None
    ):
        severity = ErrorSeverity.RECOVERABLE if recoverable else ErrorSeverity.CRITICAL

        super().__init__(
            message,
            severity=severity,
            details={'validation_name': validation_name},
            original_exception=original_exception
        )
        self.validation_name = validation_name
        self.recoverable = recoverable


class ColumnNotFoundError(ValidationExecutionError):
    """
    Column could not be resolved against a file's headers.

    Rules convert this into a critical issue so the remaining columns and
    rules still get evaluated.

    Example:
        >>> raise ColumnNotFoundError(
        ...     validation_name="data_completeness",
        ...     column="email",
        ...     available_columns=["customer_id", "name", "phone"]
        ... )
    """

    def __init__(
        self,
        validation_name: str,
        column: str,
        available_columns: List[str]
    ):
        super().__init__(
            f"Column '{column}' not found in data. Available: {', '.join(available_columns)}",
            validation_name,
            recoverable=True
        )
        self.column = column
        self.available_columns = list(available_columns)
        self.details.update({
            'column': column,
            'available_columns': self.available_columns
        })


# ============================================================================
# Reporter Errors
# ============================================================================

class ReporterError(DataConsistencyError):
    """
    Report generation errors.

    Example:
        >>> raise ReporterError(
        ...     "Failed to write JSON report",
        ...     report_type="json",
        ...     output_path="/tmp/result.json"
        ... )
    """

    def __init__(
        self,
        message: str,
        report_type: Optional[str] = None,
        output_path: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            message,
            severity=ErrorSeverity.RECOVERABLE,
            details={
                'report_type': report_type,
                'output_path': output_path
            },
            original_exception=original_exception
        )
