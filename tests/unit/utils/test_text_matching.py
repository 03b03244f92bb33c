"""Unit tests for cell normalization and string similarity helpers."""

import math

import pytest

from data_consistency.utils.text_matching import (
    cell_to_text,
    format_number,
    is_blank,
    levenshtein_distance,
    normalize_value,
    parse_number,
    string_similarity,
)


@pytest.mark.unit
class TestCellText:
    """Test rendering cells as text."""

    def test_blank_cells(self):
        """Test None, NaN and empty strings are blank."""
        assert is_blank(None)
        assert is_blank(float("nan"))
        assert is_blank("")
        assert not is_blank(" ")
        assert not is_blank(0)

    def test_integral_floats_drop_decimal(self):
        """Test spreadsheet floats match their CSV text."""
        assert cell_to_text(12.0) == "12"
        assert cell_to_text(1.5) == "1.5"
        assert cell_to_text(7) == "7"

    def test_booleans(self):
        """Test booleans render lowercase."""
        assert cell_to_text(True) == "true"
        assert cell_to_text(False) == "false"

    def test_normalize_value(self):
        """Test lowercase and trim."""
        assert normalize_value("  North ") == "north"
        assert normalize_value(None) == ""
        assert normalize_value(3.0) == "3"


@pytest.mark.unit
class TestParseNumber:
    """Test numeric parsing of cells."""

    def test_numbers_and_numeric_strings(self):
        """Test numeric cells parse."""
        assert parse_number(5) == 5.0
        assert parse_number(" 42 ") == 42.0
        assert parse_number("-3.25") == -3.25
        assert parse_number("1e3") == 1000.0

    def test_non_numbers(self):
        """Test blank, text, NaN and booleans do not parse."""
        assert parse_number("") is None
        assert parse_number("abc") is None
        assert parse_number("nan") is None
        assert parse_number(float("nan")) is None
        assert parse_number(True) is None

    def test_infinity_is_a_number(self):
        """Test infinity parses."""
        assert math.isinf(parse_number("inf"))

    def test_format_number(self):
        """Test short number formatting."""
        assert format_number(1000.0) == "1000"
        assert format_number(2.5) == "2.5"


@pytest.mark.unit
class TestStringSimilarity:
    """Test edit distance and similarity."""

    def test_levenshtein(self):
        """Test classic distances."""
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("same", "same") == 0

    def test_similarity(self):
        """Test normalized similarity."""
        assert string_similarity("", "") == 1.0
        assert string_similarity("abc", "abc") == 1.0
        assert string_similarity("customer", "customers") == pytest.approx(8 / 9)
        assert string_similarity("abc", "xyz") == 0.0
