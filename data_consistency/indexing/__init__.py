"""Read-only lookup indexes built once per validation call."""

from data_consistency.indexing.smart_indexer import DataIndexes, SmartIndexer, find_rows

__all__ = ["DataIndexes", "SmartIndexer", "find_rows"]
