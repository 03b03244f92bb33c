"""Grid loader: reads CSV and Excel files into a rows + headers grid."""

import csv
import os
from pathlib import Path
from typing import Any, List, Optional

import pandas as pd

from data_consistency.core.constants import (
    CSV_CANDIDATE_ENCODINGS,
    CSV_SNIFF_SAMPLE_BYTES,
    SUPPORTED_EXTENSIONS,
)
from data_consistency.core.exceptions import (
    DataLoadError,
    EmptyFileError,
    FileNotFoundError,
    UnsupportedFormatError,
)
from data_consistency.core.logging_config import get_logger

logger = get_logger(__name__)

Grid = List[List[Any]]


def detect_delimiter(file_path: str, sample_size: int = CSV_SNIFF_SAMPLE_BYTES) -> str:
    """
    Auto-detect the delimiter used in a CSV file.

    Args:
        file_path: Path to the CSV file
        sample_size: Number of bytes to sample for detection

    Returns:
        Detected delimiter character, defaults to ',' if detection fails
    """
    for encoding in CSV_CANDIDATE_ENCODINGS:
        try:
            with open(file_path, 'r', newline='', encoding=encoding) as f:
                sample = f.read(sample_size)

            sniffer = csv.Sniffer()
            dialect = sniffer.sniff(sample, delimiters=',\t|;')
            return dialect.delimiter
        except UnicodeDecodeError:
            continue
        except csv.Error:
            break

    return ','


def detect_encoding(file_path: str) -> str:
    """
    Detect the encoding of a file by trying common encodings.

    Args:
        file_path: Path to the file

    Returns:
        Detected encoding name, defaults to 'utf-8'
    """
    for encoding in CSV_CANDIDATE_ENCODINGS:
        try:
            with open(file_path, 'r', encoding=encoding) as f:
                f.read(CSV_SNIFF_SAMPLE_BYTES)
            return encoding
        except UnicodeDecodeError:
            continue

    return 'utf-8'


def header_width(file_path: str, delimiter: str, encoding: str) -> int:
    """Number of fields in the first non-blank line of a CSV file."""
    with open(file_path, 'r', newline='', encoding=encoding) as f:
        for row in csv.reader(f, delimiter=delimiter):
            if row:
                return len(row)
    return 0


class GridLoader:
    """
    Loads a file into a list of rows, with the header row first.

    Every cell is kept as read: CSV cells are strings, Excel cells keep their
    native types. Missing cells (short rows, empty spreadsheet cells) become
    empty strings.

    Example:
        >>> grid = GridLoader().load_grid("branches.csv")
        >>> grid[0]
        ['id', 'name', 'city']
    """

    def __init__(self, delimiter: Optional[str] = None, encoding: Optional[str] = None):
        """
        Initialize GridLoader.

        Args:
            delimiter: CSV delimiter (auto-detected when None)
            encoding: CSV encoding (auto-detected when None)
        """
        self.delimiter = delimiter
        self.encoding = encoding

    def load_grid(self, file_path: str, sheet: Optional[str] = None) -> Grid:
        """
        Load a file into a grid.

        Args:
            file_path: Path to a .csv, .xlsx or .xls file
            sheet: Worksheet name for Excel files (first sheet when None)

        Returns:
            List of rows; row 0 holds the headers

        Raises:
            FileNotFoundError: Path does not exist or cannot be read
            UnsupportedFormatError: Extension is not supported
            EmptyFileError: File contains no rows
            DataLoadError: File exists but cannot be parsed
        """
        path = Path(file_path)
        if not path.is_file() or not os.access(path, os.R_OK):
            raise FileNotFoundError(file_path)

        extension = path.suffix.lower()
        if extension not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFormatError(file_path, extension or "(none)", list(SUPPORTED_EXTENSIONS))

        if extension == ".csv":
            frame = self._read_csv(file_path)
        else:
            frame = self._read_excel(file_path, sheet)

        grid = frame.fillna("").values.tolist()
        if not grid:
            raise EmptyFileError(file_path)

        logger.debug(f"Loaded {file_path}: {len(grid) - 1} data rows, {len(grid[0])} columns")
        return grid

    def _read_csv(self, file_path: str) -> pd.DataFrame:
        """Read a CSV file with every cell as a string and no NA conversion."""
        encoding = self.encoding or detect_encoding(file_path)
        delimiter = self.delimiter or detect_delimiter(file_path)
        if delimiter != ',':
            logger.info(f"Auto-detected delimiter {repr(delimiter)} for {file_path}")

        width = 0

        def trim_long_row(fields: List[str]) -> List[str]:
            logger.warning(
                f"Row with {len(fields)} fields in {file_path} trimmed to the {width} header columns"
            )
            return fields[:width]

        try:
            width = header_width(file_path, delimiter, encoding)
            return pd.read_csv(
                file_path,
                sep=delimiter,
                encoding=encoding,
                header=None,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                engine="python",
                on_bad_lines=trim_long_row,
            )
        except pd.errors.EmptyDataError:
            raise EmptyFileError(file_path)
        except pd.errors.ParserError as e:
            raise DataLoadError(
                f"CSV parsing error in {file_path}: rows have inconsistent column counts "
                f"or the delimiter {repr(delimiter)} is wrong. Original error: {e}",
                file_path,
                original_exception=e,
            )
        except UnicodeDecodeError as e:
            raise DataLoadError(
                f"Encoding error in {file_path}: cannot decode file with {encoding} encoding",
                file_path,
                original_exception=e,
            )

    def _read_excel(self, file_path: str, sheet: Optional[str]) -> pd.DataFrame:
        """Read one worksheet of an Excel workbook."""
        try:
            return pd.read_excel(
                file_path,
                sheet_name=sheet if sheet else 0,
                header=None,
                dtype=object,
            )
        except ValueError as e:
            raise DataLoadError(
                f"Could not read worksheet {sheet or 'first sheet'} from {file_path}: {e}",
                file_path,
                original_exception=e,
            )
        except ImportError as e:
            raise DataLoadError(
                f"Excel support is not installed for {file_path}: {e}",
                file_path,
                original_exception=e,
            )
