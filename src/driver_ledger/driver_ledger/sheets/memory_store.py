from __future__ import annotations

import threading
from typing import Optional, Sequence

from ..core.exceptions import StorageUnavailable
from .ranges import CellRange, column_index
from .store import Matrix, RangeUpdate, SheetStore


def _trim(row: list[str]) -> list[str]:
    # The Sheets API omits trailing empty cells; mirror that.
    out = list(row)
    while out and out[-1] == "":
        out.pop()
    return out


class InMemorySheetStore(SheetStore):
    """Process-local spreadsheet used by the ``memory`` backend and by tests.

    ``fail_segments`` makes every call touching those segments raise
    ``StorageUnavailable``; ``calls`` records ``(operation, segment_id)``.
    """

    def __init__(self, segments: Optional[dict[str, Matrix]] = None):
        self._lock = threading.RLock()
        self._segments: dict[str, Matrix] = {
            name: [list(r) for r in rows] for name, rows in (segments or {}).items()
        }
        self.fail_segments: set[str] = set()
        self.calls: list[tuple[str, str]] = []

    def _sheet(self, operation: str, segment_id: str) -> Matrix:
        self.calls.append((operation, segment_id))
        if segment_id in self.fail_segments:
            raise StorageUnavailable(f"{operation} failed for {segment_id!r}: simulated outage")
        try:
            return self._segments[segment_id]
        except KeyError:
            raise StorageUnavailable(f"Unable to parse range: {segment_id!r}") from None

    def rows(self, segment_id: str) -> Matrix:
        """Raw copy of a segment including the header row (test helper)."""
        with self._lock:
            return [list(r) for r in self._segments.get(segment_id, [])]

    def get_values(self, segment_id: str, range_spec: str) -> Matrix:
        with self._lock:
            sheet = self._sheet("get", segment_id)
            r = CellRange.parse(range_spec)
            first = (r.first_row or 1) - 1
            last = r.last_row if r.last_row is not None else len(sheet)
            out = []
            for row in sheet[first:last]:
                out.append(_trim(row[r.first_col - 1:r.last_col]))
            while out and not out[-1]:
                out.pop()
            return out

    def _write(self, sheet: Matrix, range_spec: str, values: Matrix) -> None:
        r = CellRange.parse(range_spec)
        if r.first_row is None:
            raise ValueError(f"Writes need an explicit row: {range_spec!r}")
        for i, value_row in enumerate(values):
            row_idx = r.first_row - 1 + i
            while len(sheet) <= row_idx:
                sheet.append([])
            row = sheet[row_idx]
            for j, value in enumerate(value_row):
                col_idx = r.first_col - 1 + j
                while len(row) <= col_idx:
                    row.append("")
                row[col_idx] = "" if value is None else str(value)

    def update_values(self, segment_id: str, range_spec: str, values: Matrix) -> None:
        with self._lock:
            self._write(self._sheet("update", segment_id), range_spec, values)

    def batch_update_values(self, segment_id: str, updates: Sequence[RangeUpdate]) -> None:
        with self._lock:
            sheet = self._sheet("batchUpdate", segment_id)
            for u in updates:
                self._write(sheet, u.range_spec, u.values)

    def append_row(self, segment_id: str, range_spec: str, row: Sequence[str]) -> Optional[int]:
        with self._lock:
            sheet = self._sheet("append", segment_id)
            first_col = column_index(range_spec.split(":")[0].rstrip("0123456789") or "A")
            while sheet and not any(sheet[-1]):
                sheet.pop()
            sheet.append([""] * (first_col - 1) + ["" if v is None else str(v) for v in row])
            return len(sheet)

    def list_segments(self) -> list[str]:
        with self._lock:
            self.calls.append(("list", ""))
            return list(self._segments)

    def add_segment(self, segment_id: str) -> None:
        with self._lock:
            self.calls.append(("addSheet", segment_id))
            if segment_id in self._segments:
                raise StorageUnavailable(f"A sheet with the name {segment_id!r} already exists")
            self._segments[segment_id] = []

    def delete_segment(self, segment_id: str) -> None:
        with self._lock:
            self.calls.append(("deleteSheet", segment_id))
            self._segments.pop(segment_id, None)
