"""
Smart indexer - fast lookup structures shared by every validation rule.

The indexes are computed once per validation call from a ValidationContext and
handed to all rules at the same time. They are exposed through read-only views
(MappingProxyType and frozenset) so that rules running concurrently cannot
change what another rule sees.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

import numpy as np

from data_consistency.core.constants import ROW_HASH_SEPARATOR
from data_consistency.core.context import (
    ColumnStats,
    ContextBuilder,
    FileContext,
    ValidationContext,
    cell_at,
)
from data_consistency.core.logging_config import get_logger
from data_consistency.utils.text_matching import is_blank, normalize_value

logger = get_logger(__name__)

_INT32_MASK = 0xFFFFFFFF


def index_key(file_path: str, column: str) -> str:
    """Key used by every index: ``"file:column"``."""
    return f"{file_path}:{column}"


@dataclass(frozen=True)
class DataIndexes:
    """
    Immutable lookup indexes.

    Attributes:
        column_maps: "file:column" -> normalized value -> 1-based row numbers
        key_indexes: "refFile:refColumn" -> normalized non-empty values
            (reference files only)
        range_stats: "file:column" -> ColumnStats
        duplicate_hashes: primary file path -> hashes of rows seen more than once
    """

    column_maps: Mapping[str, Mapping[str, Tuple[int, ...]]]
    key_indexes: Mapping[str, FrozenSet[str]]
    range_stats: Mapping[str, ColumnStats]
    duplicate_hashes: Mapping[str, FrozenSet[str]]

    def duplicate_count(self, file_path: str) -> int:
        """Number of distinct row contents that occur more than once in a file."""
        return len(self.duplicate_hashes.get(file_path, frozenset()))


def find_rows(indexes: DataIndexes, file_path: str, column: str, value: Any) -> List[int]:
    """
    Look up the rows of a column holding a value.

    The value is normalized the same way the index was built, so ``" ABC "``
    finds rows containing ``abc``.

    Returns:
        1-based row numbers, empty if the column or value is unknown
    """
    column_map = indexes.column_maps.get(index_key(file_path, column))
    if column_map is None:
        return []
    return list(column_map.get(normalize_value(value), ()))


def rolling_hash(text: str) -> str:
    """
    32-bit multiply-add string hash rendered in base 36.

    Works over UTF-16 code units with signed 32-bit wraparound
    (``h = h * 31 + unit``) and renders the absolute value, so equal strings
    always give equal hashes across runs and platforms.
    """
    if not text:
        return "0"

    encoded = text.encode("utf-16-le")
    h = 0
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        h = (h * 31 + unit) & _INT32_MASK

    if h >= 0x80000000:
        h -= 0x100000000
    return np.base_repr(abs(h), 36).lower()


def row_hash(row: List[Any]) -> str:
    """Hash of a row's non-empty cells, normalized and joined with ``|``."""
    content = ROW_HASH_SEPARATOR.join(normalize_value(cell) for cell in row if not is_blank(cell))
    return rolling_hash(content)


class SmartIndexer:
    """
    Builds DataIndexes from a ValidationContext.

    build_indexes() has no hidden state: calling it twice on the same context
    returns equal indexes.
    """

    def __init__(self, context_builder: Optional[ContextBuilder] = None):
        self.context_builder = context_builder or ContextBuilder()

    def build_indexes(self, context: ValidationContext) -> DataIndexes:
        """
        Build every index for a context.

        Args:
            context: Loaded validation context

        Returns:
            Read-only DataIndexes
        """
        files: List[Tuple[str, FileContext]] = [(context.primary_file.file_path, context.primary_file)]
        files.extend(context.reference_files.items())

        column_maps: Dict[str, Mapping[str, Tuple[int, ...]]] = {}
        range_stats: Dict[str, ColumnStats] = {}
        for file_path, file_context in files:
            column_maps.update(self._create_column_maps(file_path, file_context))
            range_stats.update(self._calculate_range_stats(file_path, file_context))

        key_indexes: Dict[str, FrozenSet[str]] = {}
        for ref_path, ref_file in context.reference_files.items():
            key_indexes.update(self._create_key_indexes(ref_path, ref_file))

        duplicates = self._find_duplicate_hashes(context.primary_file)
        duplicate_hashes = {context.primary_file.file_path: duplicates}

        logger.debug(
            f"Built indexes: {len(column_maps)} column maps, {len(key_indexes)} key indexes, "
            f"{len(duplicates)} duplicate row hash(es)"
        )

        return DataIndexes(
            column_maps=MappingProxyType(column_maps),
            key_indexes=MappingProxyType(key_indexes),
            range_stats=MappingProxyType(range_stats),
            duplicate_hashes=MappingProxyType(duplicate_hashes),
        )

    @staticmethod
    def _create_column_maps(file_path: str, file_context: FileContext) -> Dict[str, Mapping[str, Tuple[int, ...]]]:
        maps = {}
        rows = file_context.data_rows()
        for column_index, column in enumerate(file_context.headers):
            value_rows: Dict[str, List[int]] = {}
            for row_number, row in enumerate(rows, start=1):
                key = normalize_value(cell_at(row, column_index))
                value_rows.setdefault(key, []).append(row_number)
            maps[index_key(file_path, column)] = MappingProxyType(
                {value: tuple(row_numbers) for value, row_numbers in value_rows.items()}
            )
        return maps

    @staticmethod
    def _create_key_indexes(ref_path: str, ref_file: FileContext) -> Dict[str, FrozenSet[str]]:
        keys = {}
        for column_index, column in enumerate(ref_file.headers):
            keys[index_key(ref_path, column)] = frozenset(
                normalize_value(value)
                for value in ref_file.column_values(column_index)
                if not is_blank(value)
            )
        return keys

    def _calculate_range_stats(self, file_path: str, file_context: FileContext) -> Dict[str, ColumnStats]:
        return {
            index_key(file_path, column): self.context_builder.calculate_column_stats(file_context.data, column_index)
            for column_index, column in enumerate(file_context.headers)
        }

    @staticmethod
    def _find_duplicate_hashes(primary_file: FileContext) -> FrozenSet[str]:
        seen = set()
        duplicates = set()
        for row in primary_file.data_rows():
            digest = row_hash(row)
            if digest in seen:
                duplicates.add(digest)
            else:
                seen.add(digest)
        return frozenset(duplicates)
