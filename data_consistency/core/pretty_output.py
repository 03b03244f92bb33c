"""
Pretty output formatting for the CLI.

Provides consistent terminal output (colours and symbols) for the
validate, list-rules and init-config commands.
"""

from colorama import Fore, Style


class PrettyOutput:
    """
    Terminal formatter used by the CLI.

    The symbol constants are plain text and are also used by the text
    reporter, which must not emit colour codes.
    """

    # Color scheme
    SUCCESS = Fore.GREEN
    WARNING = Fore.YELLOW
    ERROR = Fore.RED
    INFO = Fore.BLUE
    DIM = Style.DIM
    RESET = Style.RESET_ALL

    # Symbols
    CHECK = "✓"
    CROSS = "✗"
    ARROW = "→"
    DOT = "•"
    WARN = "⚠"
    INFO_SYMBOL = "ℹ"

    @staticmethod
    def success(message, indent=0):
        """Print a success message with checkmark."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.SUCCESS}{PrettyOutput.CHECK}{PrettyOutput.RESET} {message}")

    @staticmethod
    def error(message, indent=0):
        """Print an error message with cross."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.ERROR}{PrettyOutput.CROSS}{PrettyOutput.RESET} {message}")

    @staticmethod
    def warning(message, indent=0):
        """Print a warning message."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.WARNING}{PrettyOutput.WARN}{PrettyOutput.RESET} {message}")

    @staticmethod
    def info(message, indent=0):
        """Print an info message."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.INFO}{PrettyOutput.INFO_SYMBOL}{PrettyOutput.RESET} {message}")

    @staticmethod
    def item(message, indent=0):
        """Print a list item."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.DIM}{PrettyOutput.DOT}{PrettyOutput.RESET} {message}")

    @staticmethod
    def output_file(label, path, indent=2):
        """Print an output file path."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.ARROW} {PrettyOutput.DIM}{label}:{PrettyOutput.RESET} {path}")

    @staticmethod
    def issue(message, severity="info", indent=2):
        """
        Print one validation issue line.

        Args:
            message: Issue text
            severity: One of "critical", "warning", "info"
            indent: Indentation spaces
        """
        spaces = " " * indent
        styles = {
            "critical": (PrettyOutput.ERROR, PrettyOutput.CROSS),
            "warning": (PrettyOutput.WARNING, PrettyOutput.WARN),
            "info": (PrettyOutput.INFO, PrettyOutput.INFO_SYMBOL),
        }
        color, symbol = styles.get(severity, styles["info"])
        print(f"{spaces}{color}{symbol}{PrettyOutput.RESET} {message}")

    @staticmethod
    def validation_result(passed, critical=0, warnings=0, info=0, duration_ms=None):
        """
        Print the one-line validation outcome.

        Args:
            passed: Whether validation passed (no critical issues)
            critical: Number of critical issues
            warnings: Number of warnings
            info: Number of info issues
            duration_ms: Optional duration in milliseconds
        """
        if passed and critical == 0 and warnings == 0:
            status = f"{PrettyOutput.SUCCESS}{PrettyOutput.CHECK} PASSED{PrettyOutput.RESET}"
        elif critical > 0 or not passed:
            status = f"{PrettyOutput.ERROR}{PrettyOutput.CROSS} FAILED{PrettyOutput.RESET}"
        else:
            status = f"{PrettyOutput.WARNING}{PrettyOutput.WARN} WARNINGS{PrettyOutput.RESET}"

        parts = [status]
        if critical > 0:
            parts.append(f"{PrettyOutput.ERROR}{critical} critical{PrettyOutput.RESET}")
        if warnings > 0:
            parts.append(f"{PrettyOutput.WARNING}{warnings} warnings{PrettyOutput.RESET}")
        if info > 0:
            parts.append(f"{PrettyOutput.INFO}{info} info{PrettyOutput.RESET}")
        if duration_ms is not None:
            parts.append(f"{PrettyOutput.DIM}{duration_ms}ms{PrettyOutput.RESET}")

        print(f"\n{'  │  '.join(parts)}")
