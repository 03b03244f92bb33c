"""
Unit tests for the exception hierarchy.

Tests the data consistency exception classes and their serialization.
"""

import pytest
from data_consistency.core.exceptions import (
    DataConsistencyError,
    ErrorSeverity,
    ConfigError,
    YAMLSizeError,
    ConfigValidationError,
    DataLoadError,
    FileNotFoundError,
    UnsupportedFormatError,
    EmptyFileError,
    ValidationExecutionError,
    ColumnNotFoundError,
    ReporterError
)


@pytest.mark.unit
class TestDataConsistencyError:
    """Test base exception class."""

    def test_basic_exception(self):
        """Test basic exception creation."""
        exc = DataConsistencyError("Test error")

        assert str(exc) == "Test error"
        assert exc.message == "Test error"
        assert exc.severity == ErrorSeverity.RECOVERABLE
        assert exc.details == {}
        assert exc.original_exception is None

    def test_exception_serialization(self):
        """Test to_dict() serialization."""
        exc = DataConsistencyError(
            "Test error",
            severity=ErrorSeverity.CRITICAL,
            details={'file': 'sales.csv'},
            original_exception=ValueError("Original")
        )

        result = exc.to_dict()

        assert result['type'] == 'DataConsistencyError'
        assert result['message'] == "Test error"
        assert result['severity'] == "critical"
        assert result['details'] == {'file': 'sales.csv'}
        assert result['original_error'] == "Original"


@pytest.mark.unit
class TestConfigErrors:
    """Test configuration exception classes."""

    def test_config_error_is_fatal(self):
        """Test config errors stop processing."""
        exc = ConfigError("Bad config", field="report_format")

        assert exc.severity == ErrorSeverity.FATAL
        assert exc.field == "report_format"
        assert exc.details == {'field': 'report_format'}

    def test_yaml_size_error(self):
        """Test YAML size error carries sizes."""
        exc = YAMLSizeError("Too large", file_size=2000000, max_size=1048576)

        assert isinstance(exc, ConfigError)
        assert exc.details['file_size'] == 2000000
        assert exc.details['max_size'] == 1048576

    def test_config_validation_error(self):
        """Test validation error carries expected and actual values."""
        exc = ConfigValidationError(
            "Invalid outlier method",
            field="value_ranges.outlier_method",
            expected="iqr, zscore, fixed",
            actual="mad"
        )

        assert isinstance(exc, ConfigError)
        assert exc.details['field'] == "value_ranges.outlier_method"
        assert exc.details['expected'] == "iqr, zscore, fixed"
        assert exc.details['actual'] == "mad"


@pytest.mark.unit
class TestDataLoadErrors:
    """Test data loading exception classes."""

    def test_file_not_found(self):
        """Test file-not-found message and path."""
        exc = FileNotFoundError("branches.csv")

        assert isinstance(exc, DataLoadError)
        assert exc.message == "File not found: branches.csv"
        assert exc.file_path == "branches.csv"
        assert exc.severity == ErrorSeverity.CRITICAL

    def test_unsupported_format(self):
        """Test unsupported format lists the supported extensions."""
        exc = UnsupportedFormatError("data.xml", format=".xml", supported_formats=[".csv", ".xlsx", ".xls"])

        assert ".csv, .xlsx, .xls" in exc.message
        assert exc.details['format'] == ".xml"
        assert exc.details['supported_formats'] == [".csv", ".xlsx", ".xls"]

    def test_empty_file(self):
        """Test empty file error."""
        exc = EmptyFileError("empty.csv")

        assert exc.message == "File is empty: empty.csv"
        assert exc.details['file_path'] == "empty.csv"


@pytest.mark.unit
class TestValidationErrors:
    """Test rule execution exception classes."""

    def test_execution_error_recoverable_flag(self):
        """Test recoverable flag drives severity."""
        recoverable = ValidationExecutionError("oops", "value_ranges")
        fatal = ValidationExecutionError("oops", "value_ranges", recoverable=False)

        assert recoverable.severity == ErrorSeverity.RECOVERABLE
        assert fatal.severity == ErrorSeverity.CRITICAL
        assert fatal.validation_name == "value_ranges"

    def test_column_not_found(self):
        """Test column-not-found keeps the available columns."""
        exc = ColumnNotFoundError("data_completeness", "email", ["id", "name"])

        assert exc.column == "email"
        assert exc.available_columns == ["id", "name"]
        assert "Available: id, name" in exc.message
        assert exc.details['validation_name'] == "data_completeness"


@pytest.mark.unit
class TestReporterError:
    """Test reporter exception."""

    def test_reporter_error_details(self):
        """Test report type and path are recorded."""
        exc = ReporterError("Write failed", report_type="json", output_path="/tmp/out.json")

        assert exc.details == {'report_type': 'json', 'output_path': '/tmp/out.json'}
