"""
Shared pytest fixtures.

File fixtures write small CSV/Excel files into tmp_path with pandas; context
fixtures build in-memory ValidationContext/DataIndexes values from grids so
rule tests do not touch the filesystem.
"""

import logging

import pandas as pd
import pytest

from data_consistency.core.context import ContextBuilder, FileContext, ValidationContext
from data_consistency.core.logging_config import PACKAGE_LOGGER
from data_consistency.indexing.smart_indexer import SmartIndexer


# ============================================================================
# File fixtures
# ============================================================================

@pytest.fixture
def write_csv(tmp_path):
    """Factory writing a CSV file and returning its path as a string."""
    def _write(name, columns, rows):
        path = tmp_path / name
        pd.DataFrame(rows, columns=columns).to_csv(path, index=False)
        return str(path)
    return _write


@pytest.fixture
def write_excel(tmp_path):
    """Factory writing a single-sheet Excel workbook."""
    def _write(name, columns, rows, sheet_name="Sheet1"):
        path = tmp_path / name
        pd.DataFrame(rows, columns=columns).to_excel(path, index=False, sheet_name=sheet_name)
        return str(path)
    return _write


@pytest.fixture
def branches_csv(write_csv):
    """Reference file: five branches keyed by numeric id."""
    return write_csv(
        "branches.csv",
        ["id", "name", "city"],
        [
            [1, "North", "Leeds"],
            [2, "South", "Brighton"],
            [3, "East", "Norwich"],
            [4, "West", "Bristol"],
            [5, "Central", "Birmingham"],
        ],
    )


@pytest.fixture
def sales_csv(write_csv):
    """Primary file: ten sales, row 7 references branch 99 which does not exist."""
    return write_csv(
        "sales.csv",
        ["sale_id", "branch_id", "amount"],
        [
            [1, 1, 120],
            [2, 2, 125],
            [3, 3, 118],
            [4, 4, 130],
            [5, 5, 122],
            [6, 1, 127],
            [7, 99, 121],
            [8, 2, 119],
            [9, 3, 124],
            [10, 4, 126],
        ],
    )


@pytest.fixture
def customers_csv(write_csv):
    """Clean primary file: every important column filled, numbers within range."""
    return write_csv(
        "customers.csv",
        ["customer_id", "name", "email", "amount"],
        [
            [i, f"Customer {i}", f"customer{i}@example.com", 100 + i]
            for i in range(1, 11)
        ],
    )


# ============================================================================
# In-memory context fixtures
# ============================================================================

@pytest.fixture
def build_context():
    """
    Factory building a ValidationContext from grids.

    Args (of the returned callable):
        primary_grid: Grid of the primary file (row 0 = headers)
        references: Optional {path: grid} of reference files
        primary_path: Path recorded for the primary file
        detect: Run relationship detection when True
    """
    def _build(primary_grid, references=None, primary_path="primary.csv", detect=False):
        primary = FileContext.from_grid(primary_path, primary_grid)
        refs = {path: FileContext.from_grid(path, grid) for path, grid in (references or {}).items()}
        relationships = ContextBuilder().detect_relationships(primary, refs) if detect else []
        return ValidationContext(primary_file=primary, reference_files=refs, relationships=relationships)
    return _build


@pytest.fixture
def build_indexes():
    """Factory building DataIndexes for a context."""
    indexer = SmartIndexer()

    def _build(context):
        return indexer.build_indexes(context)
    return _build


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers added by setup_logging() so later tests log nowhere stale."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
