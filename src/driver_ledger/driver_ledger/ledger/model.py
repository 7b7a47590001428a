from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields as dc_fields
from typing import Any, Optional, Union

from ..common.datetime_utils import segment_name_from_text
from ..core.enums import LedgerField, SchemaVersion
from ..overtime.model import OvertimeResult

_ATTR_BY_FIELD: dict[LedgerField, str] = {
    LedgerField.DRIVER_NAME: "driver_name",
    LedgerField.DATE: "date",
    LedgerField.DAY_OF_WEEK: "day_of_week",
    LedgerField.CLOCK_IN: "clock_in",
    LedgerField.CLOCK_OUT: "clock_out",
    LedgerField.OT_START: "ot_start",
    LedgerField.OT_END: "ot_end",
    LedgerField.COMMENTS: "comments",
    LedgerField.SUBMITTED_AT: "submitted_at",
    LedgerField.OT_HOURS: "ot_hours",
    LedgerField.APPROVAL: "approval",
}
_FIELD_BY_ATTR = {attr: f for f, attr in _ATTR_BY_FIELD.items()}


@dataclass(frozen=True)
class AttendanceRecord:
    """One ledger row, always in the 11-field NEW shape."""

    driver_name: str
    date: str
    day_of_week: str = ""
    clock_in: str = ""
    clock_out: str = ""
    ot_start: str = ""
    ot_end: str = ""
    comments: str = ""
    submitted_at: str = ""
    ot_hours: str = ""
    approval: str = ""

    def value(self, f: LedgerField) -> str:
        return getattr(self, _ATTR_BY_FIELD[f])

    @property
    def is_pending(self) -> bool:
        return not self.approval.strip()

    def to_row(self) -> list[str]:
        return [self.value(f) for f in LedgerField]

    def to_dict(self) -> dict[str, str]:
        return {f.value: self.value(f) for f in LedgerField}


@dataclass(frozen=True)
class DriverDateKey:
    driver_name: str
    date: str

    @property
    def segment_id(self) -> str:
        return segment_name_from_text(self.date)


@dataclass(frozen=True)
class SubmittedAtKey:
    submitted_at: str


@dataclass(frozen=True)
class RowNumberKey:
    row_number: int


LedgerKey = Union[DriverDateKey, SubmittedAtKey, RowNumberKey]


@dataclass(frozen=True)
class LocatedRecord:
    segment_id: str
    schema: SchemaVersion
    row_index: int
    record: AttendanceRecord


@dataclass(frozen=True)
class AttendanceFields:
    """Partial record for upserts. ``None`` means "leave the column alone"."""

    clock_in: Optional[str] = None
    clock_out: Optional[str] = None
    ot_start: Optional[str] = None
    ot_end: Optional[str] = None
    ot_hours: Optional[str] = None
    comments: Optional[str] = None
    submitted_at: Optional[str] = None
    approval: Optional[str] = None

    def present(self) -> dict[LedgerField, str]:
        out = {}
        for f in dc_fields(self):
            v = getattr(self, f.name)
            if v is not None:
                out[_FIELD_BY_ATTR[f.name]] = v
        return out

    def replace(self, **changes) -> "AttendanceFields":
        return AttendanceFields(**{**asdict(self), **changes})


@dataclass(frozen=True)
class UpsertResult:
    created: bool
    row_index: Optional[int]
    segment_id: str
    schema: SchemaVersion
    written: dict[LedgerField, str] = field(default_factory=dict)
    overtime: Optional[OvertimeResult] = None


@dataclass(frozen=True)
class OperationResult:
    """Structured outcome of a business operation (never raised)."""

    success: bool
    message: str
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, **data: Any) -> "OperationResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, **data: Any) -> "OperationResult":
        return cls(success=False, message=message, data=data)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success, "message": self.message}
        if not self.success:
            out["error"] = self.message
        out.update(self.data)
        return out
