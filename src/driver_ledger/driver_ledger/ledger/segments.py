from __future__ import annotations

import logging
from typing import Optional

from ..common.datetime_utils import localized_day_of_week, parse_segment_name, segment_name_for
from ..core.constants import DEFAULT_LANGUAGE, FIRST_DATA_ROW
from ..core.enums import LedgerField, SchemaVersion
from ..sheets.ranges import cell
from ..sheets.store import RangeUpdate, SheetStore
from . import column_map
from .model import OperationResult
from .schema import SchemaRegistry

logger = logging.getLogger("driver_ledger.ledger.segments")


class SegmentProvisioner:
    """Create monthly segments and tag their layout at creation time.

    Formatting copy from a template sheet is left to the spreadsheet itself.
    """

    def __init__(self, store: SheetStore, schemas: SchemaRegistry, *, language: str = DEFAULT_LANGUAGE):
        self._store = store
        self._schemas = schemas
        self._language = language

    def exists(self, segment_id: str) -> bool:
        return segment_id in self._store.list_segments()

    def create(self, segment_id: str, *, force: bool = False, schema: SchemaVersion = SchemaVersion.NEW) -> OperationResult:
        if self.exists(segment_id):
            if not force:
                return OperationResult.fail(f"Segment {segment_id!r} already exists", segment=segment_id)
            # Recreating discards every record of the old segment.
            logger.warning("Deleting existing segment %r before recreating it", segment_id)
            self._store.delete_segment(segment_id)
            self._schemas.forget(segment_id)

        self._store.add_segment(segment_id)
        self._store.update_values(
            segment_id,
            f"A1:{column_map.last_column(schema)}1",
            [column_map.header_row(schema)],
        )
        self._schemas.register(segment_id, schema)
        logger.info("Created segment %r with %s layout", segment_id, schema.value)
        return OperationResult.ok("Segment created", segment=segment_id, schema=schema.value)

    def create_for_month(self, month: int, year: int, *, force: bool = False) -> OperationResult:
        if not 1 <= int(month) <= 12:
            return OperationResult.fail(f"Invalid month: {month}")
        return self.create(segment_name_for(int(month), int(year)), force=force)

    def ensure(self, segment_id: str) -> bool:
        """Create the segment when missing; True when it had to be created."""
        if self._schemas.cached(segment_id) is not None or self.exists(segment_id):
            return False
        return self.create(segment_id).success

    def latest(self) -> Optional[str]:
        dated = [(parse_segment_name(name), name) for name in self._store.list_segments()]
        dated = [(ym, name) for ym, name in dated if ym is not None]
        return max(dated)[1] if dated else None

    def backfill_day_of_week(self, segment_id: str) -> OperationResult:
        """Fill empty day-of-week cells of a NEW segment in one batch write."""
        schema = self._schemas.resolve_for_write(segment_id)
        if schema is not SchemaVersion.NEW:
            return OperationResult.fail(f"Segment {segment_id!r} has no day-of-week column", segment=segment_id)

        rows = self._store.get_values(segment_id, column_map.full_range(schema))
        date_idx = column_map.index_for(schema, LedgerField.DATE)
        day_idx = column_map.index_for(schema, LedgerField.DAY_OF_WEEK)
        day_col = column_map.column_for(schema, LedgerField.DAY_OF_WEEK)

        updates = []
        for i, raw in enumerate(rows[1:], start=FIRST_DATA_ROW):
            date_text = raw[date_idx] if len(raw) > date_idx else ""
            current = raw[day_idx] if len(raw) > day_idx else ""
            if date_text and not current:
                day = localized_day_of_week(date_text, self._language, fallback_to_today=False)
                updates.append(RangeUpdate(cell(day_col, i), [[day]]))

        if updates:
            self._store.batch_update_values(segment_id, updates)
        return OperationResult.ok(f"Filled {len(updates)} day-of-week cells", segment=segment_id, updated=len(updates))
