"""
Validation context - loaded files, detected relationships and column statistics.

The ContextBuilder:
1. Loads the primary file and every reference file into grids
2. Derives per-file metadata (headers, row and column counts)
3. Auto-detects cross-file column relationships by name, naming convention
   or fuzzy similarity
4. Computes descriptive statistics for a column on demand
"""

import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import numpy as np
import pandas as pd

from data_consistency.core.constants import (
    EXACT_MATCH_CONFIDENCE,
    FUZZY_CONFIDENCE_FACTOR,
    FUZZY_SIMILARITY_THRESHOLD,
    NAMING_CONVENTION_CONFIDENCE,
    RELATIONSHIP_CONFIDENCE_THRESHOLD,
    RELATIVE_DATE_WORDS,
    STATS_ROUNDING_DIGITS,
    TYPE_DETECTION_RATIO,
)
from data_consistency.core.logging_config import get_logger
from data_consistency.loaders.grid_loader import Grid, GridLoader
from data_consistency.utils.text_matching import (
    cell_to_text,
    is_blank,
    parse_number,
    string_similarity,
)

if TYPE_CHECKING:
    from data_consistency.indexing.smart_indexer import DataIndexes

logger = get_logger(__name__)


class MatchType(Enum):
    """How a relationship between two columns was established."""
    EXACT = "exact"
    FUZZY = "fuzzy"
    INFERRED = "inferred"
    MANUAL = "manual"


class DataType(Enum):
    """Detected data type of a column."""
    NUMBER = "number"
    TEXT = "text"
    DATE = "date"
    MIXED = "mixed"


def cell_at(row: List[Any], column_index: int) -> Any:
    """Cell value of a row, or None when the row is shorter than the header."""
    return row[column_index] if column_index < len(row) else None


@dataclass(frozen=True)
class FileContext:
    """
    One loaded file.

    Attributes:
        file_path: Path the file was loaded from (as requested)
        data: Grid of cells, row 0 holds the headers
        headers: Header row rendered as strings
        row_count: Number of data rows (header excluded)
        column_count: Number of header columns
    """

    file_path: str
    data: Grid
    headers: List[str]
    row_count: int
    column_count: int

    @classmethod
    def from_grid(cls, file_path: str, data: Grid) -> "FileContext":
        """Derive headers and counts from a loaded grid."""
        headers = [cell_to_text(h) for h in data[0]] if data else []
        return cls(
            file_path=file_path,
            data=data,
            headers=headers,
            row_count=max(len(data) - 1, 0),
            column_count=len(headers),
        )

    def data_rows(self) -> List[List[Any]]:
        """Data rows without the header row."""
        return self.data[1:]

    def column_values(self, column_index: int) -> List[Any]:
        """Every data cell of one column, in row order."""
        return [cell_at(row, column_index) for row in self.data[1:]]


@dataclass(frozen=True)
class DetectedRelationship:
    """A likely foreign-key link between a primary and a reference column."""

    primary_column: str
    reference_file: str
    reference_column: str
    confidence: float
    match_type: MatchType

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "primary_column": self.primary_column,
            "reference_file": self.reference_file,
            "reference_column": self.reference_column,
            "confidence": self.confidence,
            "match_type": self.match_type.value,
        }


@dataclass(frozen=True)
class ColumnStats:
    """
    Descriptive statistics for one column.

    min/max/mean/median/std_dev are only populated for numeric columns; the
    median is the value at position floor(n/2) of the ascending sort, which is
    an approximation for even n.
    """

    min: float = 0.0
    max: float = 0.0
    mean: float = 0.0
    median: float = 0.0
    std_dev: float = 0.0
    null_count: int = 0
    unique_count: int = 0
    data_type: DataType = DataType.TEXT
    value_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "min": self.min,
            "max": self.max,
            "mean": self.mean,
            "median": self.median,
            "std_dev": self.std_dev,
            "null_count": self.null_count,
            "unique_count": self.unique_count,
            "data_type": self.data_type.value,
            "value_count": self.value_count,
        }


@dataclass(frozen=True)
class ValidationContext:
    """Everything the rules need for one validation call."""

    primary_file: FileContext
    reference_files: Dict[str, FileContext] = field(default_factory=dict)
    relationships: List[DetectedRelationship] = field(default_factory=list)
    indexes: Optional["DataIndexes"] = None

    def with_indexes(self, indexes: "DataIndexes") -> "ValidationContext":
        """Return a copy of this context with indexes attached."""
        return replace(self, indexes=indexes)

    def all_files(self) -> List[FileContext]:
        """Primary file followed by reference files in request order."""
        return [self.primary_file, *self.reference_files.values()]


# Naming conventions tried before falling back to fuzzy matching. Each entry
# pairs the pattern the first name must match with the counterpart pattern
# for the second name.
NAMING_CONVENTION_PATTERNS = [
    (re.compile(r"^(.+)_id$"), re.compile(r"^id$|^(.+)$")),
    (re.compile(r"^id$"), re.compile(r"^(.+)_id$")),
    (re.compile(r"^(.+)_code$"), re.compile(r"^code$|^(.+)$")),
    (re.compile(r"^code$"), re.compile(r"^(.+)_code$")),
    (re.compile(r"^(.+)_name$"), re.compile(r"^name$|^(.+)$")),
    (re.compile(r"^name$"), re.compile(r"^(.+)_name$")),
]


def _base_token(match: "re.Match") -> str:
    """Captured base of a naming-convention match, or the whole match."""
    groups = match.groups()
    if groups and groups[0]:
        return groups[0]
    return match.group(0)


def calculate_column_match_confidence(first: str, second: str) -> float:
    """
    Estimate whether two column names describe the same field.

    Returns:
        1.0 for identical normalized names, 0.9 for naming-convention matches
        (``customer_id`` vs ``customer``), ``similarity * 0.8`` for names whose
        Levenshtein similarity exceeds 0.8, otherwise 0.0
    """
    c1 = first.lower().strip()
    c2 = second.lower().strip()

    if c1 == c2:
        return 1.0

    for pattern, counterpart in NAMING_CONVENTION_PATTERNS:
        match1 = pattern.match(c1)
        match2 = counterpart.match(c2)
        if match1 and match2:
            base1 = _base_token(match1)
            base2 = _base_token(match2)
            if base1 == base2 or base1 == c2 or c1 == base2:
                return NAMING_CONVENTION_CONFIDENCE

    similarity = string_similarity(c1, c2)
    if similarity > FUZZY_SIMILARITY_THRESHOLD:
        return similarity * FUZZY_CONFIDENCE_FACTOR
    return 0.0


def _count_dates(values: List[Any]) -> int:
    """Number of cells that are dates or parse as one, parsed as a single column."""
    texts = pd.Series([cell_to_text(value).strip() for value in values], dtype=object)
    texts = texts[~texts.str.lower().isin(RELATIVE_DATE_WORDS)]
    if texts.empty:
        return 0
    try:
        parsed = pd.to_datetime(texts, errors="coerce", format="mixed", utc=True)
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug(f"Date parsing failed for column sample: {e}")
        return 0
    return int(parsed.notna().sum())


class ContextBuilder:
    """
    Builds ValidationContext values.

    Example usage:
        builder = ContextBuilder()
        context = builder.build_context("sales.csv", ["branches.csv"])
        for rel in context.relationships:
            print(rel.primary_column, "->", rel.reference_column, rel.confidence)
    """

    def __init__(self, loader: Optional[GridLoader] = None, max_workers: int = 4):
        """
        Initialize the context builder.

        Args:
            loader: Grid loader used to read files (default: GridLoader())
            max_workers: Threads used to load files concurrently
        """
        self.loader = loader or GridLoader()
        self.max_workers = max(1, max_workers)

    def build_context(
        self,
        primary_path: str,
        reference_paths: List[str],
        sheet: Optional[str] = None
    ) -> ValidationContext:
        """
        Load all files and detect relationships.

        Args:
            primary_path: File being validated
            reference_paths: Lookup files, in the order they should be reported
            sheet: Worksheet name applied to every Excel file

        Returns:
            ValidationContext without indexes

        Raises:
            FileNotFoundError, UnsupportedFormatError, EmptyFileError, DataLoadError
        """
        paths = [primary_path, *reference_paths]
        logger.info(f"Loading {len(paths)} file(s) for validation")

        # map() returns results in submission order regardless of completion order
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(paths))) as executor:
            file_contexts = list(executor.map(lambda p: self.load_file_context(p, sheet), paths))

        primary_file = file_contexts[0]
        reference_files: Dict[str, FileContext] = {}
        for ref_path, ref_file in zip(reference_paths, file_contexts[1:]):
            reference_files[ref_path] = ref_file

        relationships = self.detect_relationships(primary_file, reference_files)
        logger.info(f"Detected {len(relationships)} relationship(s) across {len(reference_files)} reference file(s)")

        return ValidationContext(
            primary_file=primary_file,
            reference_files=reference_files,
            relationships=relationships,
        )

    def load_file_context(self, file_path: str, sheet: Optional[str] = None) -> FileContext:
        """Load a single file into a FileContext."""
        grid = self.loader.load_grid(file_path, sheet)
        return FileContext.from_grid(file_path, grid)

    def detect_relationships(
        self,
        primary_file: FileContext,
        reference_files: Dict[str, FileContext]
    ) -> List[DetectedRelationship]:
        """Match every primary header against every reference header."""
        relationships: List[DetectedRelationship] = []

        for ref_path, ref_file in reference_files.items():
            relationships.extend(self.find_column_matches(primary_file.headers, ref_file.headers, ref_path))

        return relationships

    def find_column_matches(
        self,
        primary_headers: List[str],
        reference_headers: List[str],
        reference_file: str
    ) -> List[DetectedRelationship]:
        """Return the header pairs whose match confidence exceeds the threshold."""
        relationships = []

        for primary_col in primary_headers:
            for ref_col in reference_headers:
                confidence = calculate_column_match_confidence(primary_col, ref_col)
                if confidence > RELATIONSHIP_CONFIDENCE_THRESHOLD:
                    match_type = MatchType.EXACT if confidence > EXACT_MATCH_CONFIDENCE else MatchType.FUZZY
                    logger.debug(
                        f"Relationship {primary_col} -> {reference_file}:{ref_col} "
                        f"({match_type.value}, confidence {confidence:.2f})"
                    )
                    relationships.append(DetectedRelationship(
                        primary_column=primary_col,
                        reference_file=reference_file,
                        reference_column=ref_col,
                        confidence=confidence,
                        match_type=match_type,
                    ))

        return relationships

    @staticmethod
    def calculate_column_stats(data: Grid, column_index: int) -> ColumnStats:
        """
        Compute descriptive statistics for one column of a grid.

        Empty cells are ignored. The column is numeric when more than 80% of
        the remaining values parse as numbers, a date column when more than
        80% parse as dates, and text otherwise.

        Args:
            data: Grid including the header row
            column_index: Zero-based column index

        Returns:
            ColumnStats for the column
        """
        total_rows = max(len(data) - 1, 0)
        values = [
            value for value in (cell_at(row, column_index) for row in data[1:])
            if not is_blank(value)
        ]

        if not values:
            return ColumnStats(null_count=total_rows, data_type=DataType.TEXT)

        null_count = total_rows - len(values)
        unique_count = len(set(values))

        numbers = [n for n in (parse_number(v) for v in values) if n is not None]
        if numbers and len(numbers) > len(values) * TYPE_DETECTION_RATIO:
            array = np.asarray(numbers, dtype=float)
            sorted_values = np.sort(array)
            return ColumnStats(
                min=float(array.min()),
                max=float(array.max()),
                mean=round(float(array.mean()), STATS_ROUNDING_DIGITS),
                median=float(sorted_values[len(sorted_values) // 2]),
                std_dev=round(float(array.std()), STATS_ROUNDING_DIGITS),
                null_count=null_count,
                unique_count=unique_count,
                data_type=DataType.NUMBER,
                value_count=len(values),
            )

        date_count = _count_dates(values)
        data_type = DataType.DATE if date_count > len(values) * TYPE_DETECTION_RATIO else DataType.TEXT

        return ColumnStats(
            null_count=null_count,
            unique_count=unique_count,
            data_type=data_type,
            value_count=len(values),
        )
