"""
Text helpers shared by the context builder, indexer and rules.

All matching in the pipeline works on *normalized* values: the cell rendered
as a string, lowercased and trimmed. Column names are compared with a plain
Levenshtein edit distance turned into a 0-1 similarity.
"""

import math
from datetime import date, datetime
from typing import Any, Optional

import numpy as np


def is_blank(value: Any) -> bool:
    """True for cells that carry no value at all (None, NaN or empty string)."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value == ""


def cell_to_text(value: Any) -> str:
    """
    Render a cell as text.

    Integral floats lose their trailing ``.0`` so ``12.0`` read from a
    spreadsheet matches ``"12"`` read from a CSV file.
    """
    if is_blank(value):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def normalize_value(value: Any) -> str:
    """Lowercased, trimmed string form of a cell; blank cells become ``""``."""
    return cell_to_text(value).lower().strip()


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a cell as a number.

    Returns:
        The float value, or None for blank, non-numeric or NaN cells
    """
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        number = float(value)
        return None if math.isnan(number) else number

    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return None if math.isnan(number) else number


def format_number(value: float) -> str:
    """Format a number the short way (``1000`` rather than ``1000.0``)."""
    return cell_to_text(float(value))


def levenshtein_distance(first: str, second: str) -> int:
    """
    Classic dynamic-programming edit distance (insert, delete, substitute).

    Only two rows of the matrix are kept in memory.
    """
    if first == second:
        return 0
    if not first:
        return len(second)
    if not second:
        return len(first)

    previous = list(range(len(first) + 1))
    for j, char_b in enumerate(second, 1):
        current = [j]
        for i, char_a in enumerate(first, 1):
            cost = 0 if char_a == char_b else 1
            current.append(min(
                current[i - 1] + 1,
                previous[i] + 1,
                previous[i - 1] + cost,
            ))
        previous = current

    return previous[-1]


def string_similarity(first: str, second: str) -> float:
    """
    Normalized similarity ``(maxLen - distance) / maxLen``.

    Two empty strings are identical (1.0).
    """
    longer = max(len(first), len(second))
    if longer == 0:
        return 1.0
    return (longer - levenshtein_distance(first, second)) / longer
