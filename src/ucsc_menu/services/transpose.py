"""Row/column transposition for fan-out results."""

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def transposed(rows: Sequence[Sequence[T]]) -> list[list[T]]:
    """Swap rows and columns; every row must have the same length."""
    if not rows:
        return []
    width = len(rows[0])
    if any(len(row) != width for row in rows):
        raise ValueError("All rows must have the same length to transpose")
    return [[row[column] for row in rows] for column in range(width)]
