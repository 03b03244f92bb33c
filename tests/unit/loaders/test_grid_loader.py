"""
Unit tests for the grid loader.

Tests CSV and Excel loading into header + rows grids and the load errors.
"""

import pytest

from data_consistency.core.exceptions import (
    DataLoadError,
    EmptyFileError,
    FileNotFoundError,
    UnsupportedFormatError,
)
from data_consistency.loaders.grid_loader import (
    GridLoader,
    detect_delimiter,
    detect_encoding,
    header_width,
)


@pytest.mark.unit
class TestCSVLoading:
    """Test loading CSV files."""

    def test_load_csv(self, branches_csv):
        """Test header row first, cells kept as strings."""
        grid = GridLoader().load_grid(branches_csv)

        assert grid[0] == ["id", "name", "city"]
        assert grid[1] == ["1", "North", "Leeds"]
        assert len(grid) == 6

    def test_empty_cells_and_null_tokens_kept(self, write_csv):
        """Test empty cells become empty strings and NULL stays literal."""
        path = write_csv("people.csv", ["id", "email"], [[1, ""], [2, "NULL"]])

        grid = GridLoader().load_grid(path)

        assert grid[1] == ["1", ""]
        assert grid[2] == ["2", "NULL"]

    def test_semicolon_delimiter_detected(self, tmp_path):
        """Test delimiter sniffing."""
        path = tmp_path / "semi.csv"
        path.write_text("id;name\n1;North\n2;South\n", encoding="utf-8")

        assert detect_delimiter(str(path)) == ";"
        assert GridLoader().load_grid(str(path))[2] == ["2", "South"]

    def test_explicit_delimiter(self, tmp_path):
        """Test a configured delimiter skips sniffing."""
        path = tmp_path / "pipes.csv"
        path.write_text("id|name\n1|North\n", encoding="utf-8")

        assert GridLoader(delimiter="|").load_grid(str(path)) == [["id", "name"], ["1", "North"]]

    def test_detect_encoding(self, tmp_path):
        """Test non-UTF-8 files fall back to a single-byte encoding."""
        path = tmp_path / "latin.csv"
        path.write_bytes("id,city\n1,Montr\xe9al\n".encode("cp1252"))

        assert detect_encoding(str(path)) == "cp1252"
        assert GridLoader().load_grid(str(path))[1] == ["1", "Montréal"]

    def test_long_row_trimmed_to_header(self, tmp_path):
        """Test a row with an extra field keeps its place and loses the extra cell."""
        path = tmp_path / "ragged.csv"
        path.write_text("id,email\n1,a@x.com\n2,b@x.com,extra\n3,c@x.com\n", encoding="utf-8")

        grid = GridLoader().load_grid(str(path))

        assert grid == [["id", "email"], ["1", "a@x.com"], ["2", "b@x.com"], ["3", "c@x.com"]]

    def test_short_row_padded(self, tmp_path):
        """Test missing trailing fields become empty cells."""
        path = tmp_path / "short.csv"
        path.write_text("id,email\n1\n2,b@x.com\n", encoding="utf-8")

        assert GridLoader(delimiter=",").load_grid(str(path))[1] == ["1", ""]

    def test_header_width(self, tmp_path):
        """Test the first non-blank line sets the width."""
        path = tmp_path / "semi.csv"
        path.write_text("\nid;name;city\n1;North\n", encoding="utf-8")

        assert header_width(str(path), ";", "utf-8") == 3



@pytest.mark.unit
class TestExcelLoading:
    """Test loading Excel workbooks."""

    def test_load_first_sheet(self, write_excel):
        """Test native cell types are kept."""
        path = write_excel("branches.xlsx", ["id", "name"], [[1, "North"], [2, "South"]])

        grid = GridLoader().load_grid(path)

        assert grid[0] == ["id", "name"]
        assert grid[1] == [1, "North"]

    def test_load_named_sheet(self, write_excel):
        """Test a worksheet can be selected by name."""
        path = write_excel("sales.xlsx", ["sale_id"], [[10]], sheet_name="Q1")

        assert GridLoader().load_grid(path, sheet="Q1") == [["sale_id"], [10]]

    def test_unknown_sheet(self, write_excel):
        """Test a missing worksheet is a load error."""
        path = write_excel("sales.xlsx", ["sale_id"], [[10]])

        with pytest.raises(DataLoadError):
            GridLoader().load_grid(path, sheet="Nope")


@pytest.mark.unit
class TestLoadErrors:
    """Test load failures."""

    def test_missing_file(self, tmp_path):
        """Test a missing path."""
        with pytest.raises(FileNotFoundError):
            GridLoader().load_grid(str(tmp_path / "missing.csv"))

    def test_unsupported_extension(self, tmp_path):
        """Test unsupported formats are rejected before reading."""
        path = tmp_path / "data.json"
        path.write_text("{}", encoding="utf-8")

        with pytest.raises(UnsupportedFormatError) as exc_info:
            GridLoader().load_grid(str(path))

        assert exc_info.value.details['format'] == ".json"

    def test_empty_file(self, tmp_path):
        """Test a zero-byte CSV."""
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")

        with pytest.raises(EmptyFileError):
            GridLoader().load_grid(str(path))
