"""Logical field <-> physical column table for both segment layouts.

NEW inserts ``dayOfWeek`` at column C and shifts every later field one
column right relative to OLD.
"""
from __future__ import annotations

from typing import Union

from ..core.enums import LedgerField, SchemaVersion
from ..core.exceptions import InvalidField
from ..sheets.ranges import column_letter

LAYOUTS: dict[SchemaVersion, tuple[LedgerField, ...]] = {
    SchemaVersion.NEW: tuple(LedgerField),
    SchemaVersion.OLD: tuple(f for f in LedgerField if f is not LedgerField.DAY_OF_WEEK),
}

_COLUMNS: dict[SchemaVersion, dict[LedgerField, str]] = {
    schema: {f: column_letter(i + 1) for i, f in enumerate(fields)}
    for schema, fields in LAYOUTS.items()
}
_FIELDS: dict[SchemaVersion, dict[str, LedgerField]] = {
    schema: {col: f for f, col in cols.items()} for schema, cols in _COLUMNS.items()
}

HEADERS: dict[LedgerField, str] = {
    LedgerField.DRIVER_NAME: "Driver Name",
    LedgerField.DATE: "Date",
    LedgerField.DAY_OF_WEEK: "Day of Week",
    LedgerField.CLOCK_IN: "Clock In",
    LedgerField.CLOCK_OUT: "Clock Out",
    LedgerField.OT_START: "OT Start",
    LedgerField.OT_END: "OT End",
    LedgerField.COMMENTS: "Comments",
    LedgerField.SUBMITTED_AT: "Submitted At",
    LedgerField.OT_HOURS: "OT Hours",
    LedgerField.APPROVAL: "Approval",
}


def _layout(schema: SchemaVersion) -> SchemaVersion:
    if schema not in LAYOUTS:
        raise ValueError(f"No column layout for schema {schema!s}; resolve it first")
    return schema


def as_field(name: Union[str, LedgerField]) -> LedgerField:
    if isinstance(name, LedgerField):
        return name
    try:
        return LedgerField(name)
    except ValueError:
        raise InvalidField(f"Unknown ledger field: {name!r}") from None


def has_column(schema: SchemaVersion, name: Union[str, LedgerField]) -> bool:
    return as_field(name) in _COLUMNS[_layout(schema)]


def column_for(schema: SchemaVersion, name: Union[str, LedgerField]) -> str:
    field = as_field(name)
    try:
        return _COLUMNS[_layout(schema)][field]
    except KeyError:
        raise InvalidField(f"{field.value} has no column in the {schema.value} layout") from None


def index_for(schema: SchemaVersion, name: Union[str, LedgerField]) -> int:
    """0-based position within a row read from column A."""
    field = as_field(name)
    fields = LAYOUTS[_layout(schema)]
    if field not in fields:
        raise InvalidField(f"{field.value} has no column in the {schema.value} layout")
    return fields.index(field)


def field_for(schema: SchemaVersion, column: str) -> LedgerField:
    try:
        return _FIELDS[_layout(schema)][column.upper()]
    except KeyError:
        raise InvalidField(f"Column {column!r} is not part of the {schema.value} layout") from None


def fields_for(schema: SchemaVersion) -> tuple[LedgerField, ...]:
    return LAYOUTS[_layout(schema)]


def width(schema: SchemaVersion) -> int:
    return len(LAYOUTS[_layout(schema)])


def last_column(schema: SchemaVersion) -> str:
    return column_letter(width(schema))


def full_range(schema: SchemaVersion) -> str:
    """Whole-table range, e.g. ``A:K`` for NEW."""
    return f"A:{last_column(schema)}"


def header_row(schema: SchemaVersion) -> list[str]:
    return [HEADERS[f] for f in fields_for(schema)]
