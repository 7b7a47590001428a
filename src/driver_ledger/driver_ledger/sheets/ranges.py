"""A1-notation helpers for segment range specs."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_CELL = re.compile(r"^([A-Z]+)?(\d+)?$")


def column_letter(index: int) -> str:
    """1-based column index -> letter (1 -> A, 27 -> AA)."""
    if index < 1:
        raise ValueError(f"Column index must be >= 1: {index}")
    letters = ""
    while index:
        index, rem = divmod(index - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def column_index(letter: str) -> int:
    index = 0
    for ch in letter.upper():
        if not "A" <= ch <= "Z":
            raise ValueError(f"Invalid column letter: {letter!r}")
        index = index * 26 + (ord(ch) - ord("A") + 1)
    return index


def format_range(segment_id: str, cells: str) -> str:
    """``format_range("August 2025 Attendance", "A1:K1")`` -> ``'August 2025 Attendance'!A1:K1``."""
    escaped = segment_id.replace("'", "''")
    return f"'{escaped}'!{cells}"


def cell(column: str, row: int) -> str:
    return f"{column}{int(row)}"


def row_span(first_column: str, last_column: str, row: int) -> str:
    return f"{first_column}{int(row)}:{last_column}{int(row)}"


@dataclass(frozen=True)
class CellRange:
    """A parsed rectangular range; open bounds are None (``A:K`` has no rows)."""

    first_col: int
    last_col: int
    first_row: Optional[int]
    last_row: Optional[int]

    @classmethod
    def parse(cls, spec: str) -> "CellRange":
        cells = spec.rsplit("!", 1)[-1]
        start, _, end = cells.partition(":")
        end = end or start
        s, e = _CELL.match(start.upper()), _CELL.match(end.upper())
        if not s or not e or not s.group(1) or not e.group(1):
            raise ValueError(f"Unsupported range: {spec!r}")
        first_row = int(s.group(2)) if s.group(2) else None
        last_row = int(e.group(2)) if e.group(2) else None
        return cls(
            first_col=column_index(s.group(1)),
            last_col=column_index(e.group(1)),
            first_row=first_row,
            last_row=last_row,
        )
