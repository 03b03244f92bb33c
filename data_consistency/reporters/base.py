"""Base class for reporters that write a validation result to disk."""

from abc import ABC, abstractmethod

from data_consistency.core.results import ValidationResult


class Reporter(ABC):
    """Writes a ValidationResult to an output file."""

    @abstractmethod
    def generate(self, result: ValidationResult, output_path: str) -> None:
        """
        Generate the report.

        Args:
            result: Validation result to render
            output_path: Path of the file to write

        Raises:
            ReporterError: If the report cannot be written
        """
