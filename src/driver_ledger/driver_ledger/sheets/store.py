from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

Matrix = list[list[str]]


@dataclass(frozen=True)
class RangeUpdate:
    """One ``{rangeSpec, matrix}`` entry of a batched overwrite."""

    range_spec: str
    values: Matrix


class SheetStore(Protocol):
    """The four storage primitives the ledger consumes, plus segment management.

    ``range_spec`` is A1 notation local to the segment (``"A1:K1"``, ``"A:K"``,
    ``"J5"``). Every method raises ``StorageUnavailable`` on transport failure.
    """

    def get_values(self, segment_id: str, range_spec: str) -> Matrix:
        raise NotImplementedError

    def update_values(self, segment_id: str, range_spec: str, values: Matrix) -> None:
        raise NotImplementedError

    def batch_update_values(self, segment_id: str, updates: Sequence[RangeUpdate]) -> None:
        raise NotImplementedError

    def append_row(self, segment_id: str, range_spec: str, row: Sequence[str]) -> Optional[int]:
        """Append after the last data row; returns the new 1-based row when known."""

        raise NotImplementedError

    def list_segments(self) -> list[str]:
        raise NotImplementedError

    def add_segment(self, segment_id: str) -> None:
        raise NotImplementedError

    def delete_segment(self, segment_id: str) -> None:
        raise NotImplementedError
