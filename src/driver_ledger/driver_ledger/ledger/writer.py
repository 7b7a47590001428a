from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Mapping, Optional

from ..common.datetime_utils import localized_day_of_week, now_local, submitted_at_now
from ..core.constants import DEFAULT_LANGUAGE
from ..core.enums import LedgerField, NameMatchPolicy, SchemaVersion
from ..core.exceptions import SchemaUnresolved
from ..overtime.calculator.base import OvertimeCalculator
from ..overtime.calculator.standard_calculator import StandardOvertimeCalculator
from ..overtime.model import OvertimeResult
from ..sheets.ranges import cell
from ..sheets.store import RangeUpdate, SheetStore
from . import column_map
from .locator import RecordLocator
from .locks import KeyedLocks
from .model import AttendanceFields, DriverDateKey, LocatedRecord, UpsertResult
from .schema import SchemaRegistry

logger = logging.getLogger("driver_ledger.ledger.writer")

OT_FIELDS = (LedgerField.OT_START, LedgerField.OT_END, LedgerField.OT_HOURS)


class LedgerWriter:
    """Find-or-create writes keyed by (driver, date).

    Writes for one key are serialized through an in-process mutex, and the
    segment is re-read right before an append so a row committed by another
    process in the meantime is updated instead of duplicated. Each branch ends
    in exactly one store write. Writes are never retried here.
    """

    def __init__(
        self,
        store: SheetStore,
        schemas: SchemaRegistry,
        locator: RecordLocator,
        *,
        calculator: Optional[OvertimeCalculator] = None,
        locks: Optional[KeyedLocks] = None,
        language: str = DEFAULT_LANGUAGE,
        recheck_before_append: bool = True,
        clock: Callable[[], datetime] = now_local,
    ):
        self._store = store
        self._schemas = schemas
        self._locator = locator
        self._calculator = calculator or StandardOvertimeCalculator()
        self._locks = locks or KeyedLocks()
        self._language = language
        self._recheck = bool(recheck_before_append)
        self._clock = clock

    def submitted_at(self) -> str:
        return submitted_at_now(self._clock)

    def schema_for_write(self, segment_id: str) -> SchemaVersion:
        """Layout to read with before a write; raises ``SchemaUnresolved``."""
        return self._schemas.resolve_for_write(segment_id)

    def _lock_key(self, segment_id: str, key: DriverDateKey) -> tuple[str, str, str]:
        name = key.driver_name
        if self._locator.name_policy is NameMatchPolicy.CASEFOLD:
            name = name.strip().casefold()
        return segment_id, name, key.date

    def upsert(
        self,
        key: DriverDateKey,
        fields: AttendanceFields,
        *,
        recompute_overtime: bool = True,
        segment_id: Optional[str] = None,
    ) -> UpsertResult:
        segment_id = segment_id or key.segment_id
        with self._locks.hold(self._lock_key(segment_id, key)):
            schema = self._schemas.resolve_for_write(segment_id)
            located = self._locator.find(segment_id, key, schema)
            if located is None:
                return self._append(segment_id, schema, key, fields, recompute_overtime)
            return self._update(located, key, fields, recompute_overtime)

    def create(
        self,
        key: DriverDateKey,
        fields: AttendanceFields,
        *,
        segment_id: Optional[str] = None,
    ) -> Optional[UpsertResult]:
        """Strict create: None when a row for the key already exists."""
        segment_id = segment_id or key.segment_id
        with self._locks.hold(self._lock_key(segment_id, key)):
            schema = self._schemas.resolve_for_write(segment_id)
            if self._locator.find(segment_id, key, schema) is not None:
                return None
            return self._append(segment_id, schema, key, fields, True, update_on_conflict=False)

    def _overtime(self, key: DriverDateKey, clock_in: str, clock_out: str) -> OvertimeResult:
        return self._calculator.compute(clock_in or None, clock_out or None, key.date)

    def _update(
        self,
        located: LocatedRecord,
        key: DriverDateKey,
        fields: AttendanceFields,
        recompute_overtime: bool,
    ) -> UpsertResult:
        written = dict(fields.present())
        ot = None
        # A cleared clock-out also clears the OT columns.
        if recompute_overtime and LedgerField.CLOCK_OUT in written:
            clock_in = written.get(LedgerField.CLOCK_IN) or located.record.clock_in
            ot = self._overtime(key, clock_in, written[LedgerField.CLOCK_OUT])
            written.update(zip(OT_FIELDS, (ot.start, ot.end, ot.hours_text)))

        self.update_cells(located.segment_id, located.schema, located.row_index, written)
        logger.info(
            "Updated %s / %s at %r row %d (%s)",
            key.driver_name, key.date, located.segment_id, located.row_index,
            ", ".join(f.value for f in written) or "no fields",
        )
        return UpsertResult(
            created=False,
            row_index=located.row_index,
            segment_id=located.segment_id,
            schema=located.schema,
            written=written,
            overtime=ot,
        )

    def _append(
        self,
        segment_id: str,
        schema: SchemaVersion,
        key: DriverDateKey,
        fields: AttendanceFields,
        recompute_overtime: bool,
        *,
        update_on_conflict: bool = True,
    ) -> Optional[UpsertResult]:
        values = {f: "" for f in LedgerField}
        values[LedgerField.DRIVER_NAME] = key.driver_name
        values[LedgerField.DATE] = key.date
        values[LedgerField.DAY_OF_WEEK] = localized_day_of_week(key.date, self._language)
        values[LedgerField.SUBMITTED_AT] = self.submitted_at()
        values.update(fields.present())

        ot = None
        if recompute_overtime and LedgerField.CLOCK_OUT in fields.present():
            ot = self._overtime(key, values[LedgerField.CLOCK_IN], values[LedgerField.CLOCK_OUT])
            values.update(zip(OT_FIELDS, (ot.start, ot.end, ot.hours_text)))

        if self._recheck:
            raced = self._locator.find(segment_id, key, schema)
            if raced is not None:
                logger.warning(
                    "Row for %s / %s appeared at %r row %d before append",
                    key.driver_name, key.date, segment_id, raced.row_index,
                )
                if not update_on_conflict:
                    return None
                return self._update(raced, key, fields, recompute_overtime)

        row = [values[f] for f in column_map.fields_for(schema)]
        row_index = self._store.append_row(segment_id, column_map.full_range(schema), row)
        logger.info("Created %s / %s in %r (%s layout)", key.driver_name, key.date, segment_id, schema.value)
        return UpsertResult(
            created=True,
            row_index=row_index,
            segment_id=segment_id,
            schema=schema,
            written={f: values[f] for f in column_map.fields_for(schema)},
            overtime=ot,
        )

    def update_cells(
        self,
        segment_id: str,
        schema: SchemaVersion,
        row_index: int,
        values: Mapping[LedgerField, str],
    ) -> None:
        """Overwrite some columns of one row in a single batched write."""
        if schema is SchemaVersion.UNKNOWN:
            raise SchemaUnresolved(f"Layout of segment {segment_id!r} is unknown; refusing to write")
        updates = [
            RangeUpdate(cell(column_map.column_for(schema, f), row_index), [[v]])
            for f, v in values.items()
            if column_map.has_column(schema, f)
        ]
        if updates:
            self._store.batch_update_values(segment_id, updates)
