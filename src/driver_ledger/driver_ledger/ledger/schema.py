from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from ..core.enums import SchemaVersion
from ..core.exceptions import SchemaUnresolved, StorageUnavailable
from ..sheets.store import SheetStore
from . import column_map

logger = logging.getLogger("driver_ledger.ledger.schema")


@dataclass
class SchemaDetector:
    """Classify a segment by sniffing its header row.

    Column C reading "Day of Week" (any case, any wording containing both
    tokens) means NEW. A read failure yields UNKNOWN rather than a guess.
    """

    store: SheetStore

    def detect(self, segment_id: str) -> SchemaVersion:
        try:
            rows = self.store.get_values(segment_id, f"A1:{column_map.last_column(SchemaVersion.NEW)}1")
        except StorageUnavailable as e:
            logger.warning("Schema detection failed for %r: %s", segment_id, e)
            return SchemaVersion.UNKNOWN

        headers = rows[0] if rows else []
        third = (headers[2] if len(headers) > 2 else "").lower()
        schema = SchemaVersion.NEW if "day" in third and "week" in third else SchemaVersion.OLD
        logger.info("Segment %r detected as %s layout", segment_id, schema.value)
        return schema


def effective_read_schema(schema: SchemaVersion) -> SchemaVersion:
    """Reads against an unresolved segment fall back to the legacy layout."""
    return SchemaVersion.OLD if schema is SchemaVersion.UNKNOWN else schema


class SchemaRegistry:
    """Per-segment schema memo.

    Schemas registered at segment creation win over header sniffing. UNKNOWN
    is never cached so the next call re-resolves.
    """

    def __init__(self, detector: SchemaDetector):
        self._detector = detector
        self._lock = threading.Lock()
        self._known: dict[str, SchemaVersion] = {}

    def register(self, segment_id: str, schema: SchemaVersion) -> None:
        if schema is SchemaVersion.UNKNOWN:
            raise ValueError("Cannot register an UNKNOWN schema")
        with self._lock:
            self._known[segment_id] = schema

    def forget(self, segment_id: str) -> None:
        with self._lock:
            self._known.pop(segment_id, None)

    def cached(self, segment_id: str) -> Optional[SchemaVersion]:
        with self._lock:
            return self._known.get(segment_id)

    def resolve(self, segment_id: str) -> SchemaVersion:
        known = self.cached(segment_id)
        if known is not None:
            return known
        schema = self._detector.detect(segment_id)
        if schema is not SchemaVersion.UNKNOWN:
            with self._lock:
                self._known.setdefault(segment_id, schema)
        return schema

    def resolve_for_write(self, segment_id: str) -> SchemaVersion:
        schema = self.resolve(segment_id)
        if schema is SchemaVersion.UNKNOWN:
            raise SchemaUnresolved(f"Layout of segment {segment_id!r} is unknown; refusing to write")
        return schema
