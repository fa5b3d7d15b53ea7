"""Decoding of individual cells from a row."""

import re
from typing import Optional, Sequence

from .headers import NOT_FOUND

LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

Row = Sequence[Optional[str]]


def cell_text(row: Row, index: int) -> str:
    """Return a cell's display value, or '' when the column or cell is missing."""
    if index == NOT_FOUND or index < 0 or index >= len(row):
        return ""
    value = row[index]
    return value if value is not None else ""


def parse_int(value: Optional[str]) -> int:
    """Parse the leading integer of a string ("12 people" -> 12), defaulting to 0."""
    match = LEADING_INT.match(value or "")
    if not match:
        return 0
    return int(match.group(1))


def cell_int(row: Row, index: int) -> int:
    """Return a cell's value as an integer, or 0 when missing or non-numeric."""
    return parse_int(cell_text(row, index))
