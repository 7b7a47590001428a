from __future__ import annotations

import logging
from typing import Iterator, Optional, Sequence

from ..common.datetime_utils import localized_day_of_week, translate_day_of_week
from ..common.validators import require_data_row
from ..core.constants import DEFAULT_LANGUAGE, FIRST_DATA_ROW
from ..core.enums import LedgerField, NameMatchPolicy, SchemaVersion
from ..sheets.ranges import row_span
from ..sheets.store import SheetStore
from . import column_map
from .model import AttendanceRecord, DriverDateKey, LedgerKey, LocatedRecord, RowNumberKey, SubmittedAtKey
from .schema import SchemaRegistry, effective_read_schema

logger = logging.getLogger("driver_ledger.ledger.locator")


class RecordLocator:
    """Find ledger rows and decode them into the NEW record shape.

    Lookups are pure reads and may be retried freely. When a (driver, date)
    key matches several rows, the first physical row wins.
    """

    def __init__(
        self,
        store: SheetStore,
        schemas: SchemaRegistry,
        *,
        language: str = DEFAULT_LANGUAGE,
        name_policy: NameMatchPolicy = NameMatchPolicy.EXACT,
    ):
        self._store = store
        self._schemas = schemas
        self._language = language
        self._name_policy = name_policy

    @property
    def name_policy(self) -> NameMatchPolicy:
        return self._name_policy

    def schema_of(self, segment_id: str) -> SchemaVersion:
        return self._schemas.resolve(segment_id)

    def decode(self, schema: SchemaVersion, raw: Sequence[str]) -> AttendanceRecord:
        layout = effective_read_schema(schema)
        cells = list(raw) + [""] * (column_map.width(layout) - len(raw))
        values = {f: (cells[i] or "") for i, f in enumerate(column_map.fields_for(layout))}

        if layout is SchemaVersion.NEW:
            day = translate_day_of_week(values[LedgerField.DAY_OF_WEEK], self._language)
        else:
            day = localized_day_of_week(values[LedgerField.DATE], self._language, fallback_to_today=False)

        return AttendanceRecord(
            driver_name=values[LedgerField.DRIVER_NAME],
            date=values[LedgerField.DATE],
            day_of_week=day,
            clock_in=values[LedgerField.CLOCK_IN],
            clock_out=values[LedgerField.CLOCK_OUT],
            ot_start=values[LedgerField.OT_START],
            ot_end=values[LedgerField.OT_END],
            comments=values[LedgerField.COMMENTS],
            submitted_at=values[LedgerField.SUBMITTED_AT],
            ot_hours=values[LedgerField.OT_HOURS],
            approval=values[LedgerField.APPROVAL],
        )

    def read_rows(self, segment_id: str, schema: Optional[SchemaVersion] = None) -> tuple[SchemaVersion, list[list[str]]]:
        """Whole segment including the header row at index 0."""
        schema = schema or self.schema_of(segment_id)
        rows = self._store.get_values(segment_id, column_map.full_range(effective_read_schema(schema)))
        return schema, rows

    def iter_records(self, segment_id: str, schema: Optional[SchemaVersion] = None) -> Iterator[LocatedRecord]:
        schema, rows = self.read_rows(segment_id, schema)
        for i, raw in enumerate(rows[1:], start=FIRST_DATA_ROW):
            if not raw:
                continue
            yield LocatedRecord(segment_id=segment_id, schema=schema, row_index=i, record=self.decode(schema, raw))

    def find(self, segment_id: str, key: LedgerKey, schema: Optional[SchemaVersion] = None) -> Optional[LocatedRecord]:
        schema = schema or self.schema_of(segment_id)
        if isinstance(key, RowNumberKey):
            return self._find_by_row(segment_id, schema, key.row_number)

        layout = effective_read_schema(schema)
        _, rows = self.read_rows(segment_id, schema)
        for i, raw in enumerate(rows[1:], start=FIRST_DATA_ROW):
            if raw and self._matches(layout, raw, key):
                return LocatedRecord(segment_id=segment_id, schema=schema, row_index=i, record=self.decode(schema, raw))
        return None

    def _matches(self, layout: SchemaVersion, raw: Sequence[str], key: LedgerKey) -> bool:
        def cell(f: LedgerField) -> str:
            idx = column_map.index_for(layout, f)
            return raw[idx] if idx < len(raw) else ""

        if isinstance(key, DriverDateKey):
            return (
                self._name_policy.matches(cell(LedgerField.DRIVER_NAME), key.driver_name)
                and cell(LedgerField.DATE) == key.date
            )
        if isinstance(key, SubmittedAtKey):
            return bool(key.submitted_at) and cell(LedgerField.SUBMITTED_AT) == key.submitted_at
        raise TypeError(f"Unsupported key type: {type(key)!r}")

    def _find_by_row(self, segment_id: str, schema: SchemaVersion, row_number) -> Optional[LocatedRecord]:
        row = require_data_row(row_number)
        layout = effective_read_schema(schema)
        values = self._store.get_values(segment_id, row_span("A", column_map.last_column(layout), row))
        if not values or not values[0]:
            return None
        return LocatedRecord(segment_id=segment_id, schema=schema, row_index=row, record=self.decode(schema, values[0]))
