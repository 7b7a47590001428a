from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest

from src.driver_ledger.driver_ledger.core.constants import BANGKOK_TZ
from src.driver_ledger.driver_ledger.core.enums import LedgerField, SchemaVersion
from src.driver_ledger.driver_ledger.core.exceptions import SchemaUnresolved
from src.driver_ledger.driver_ledger.ledger import column_map
from src.driver_ledger.driver_ledger.ledger.locator import RecordLocator
from src.driver_ledger.driver_ledger.ledger.model import AttendanceFields, DriverDateKey
from src.driver_ledger.driver_ledger.ledger.schema import SchemaDetector, SchemaRegistry
from src.driver_ledger.driver_ledger.ledger.writer import LedgerWriter
from src.driver_ledger.driver_ledger.sheets.memory_store import InMemorySheetStore

SEG = "August 2025 Attendance"
NEW_HEADER = column_map.header_row(SchemaVersion.NEW)
OLD_HEADER = column_map.header_row(SchemaVersion.OLD)
KEY = DriverDateKey("Somchai", "5/8/2568")


class LocatorMissingFirstLookup(RecordLocator):
    """First lookup reports "not found" while another writer commits the row."""

    def __init__(self, *args, on_miss, **kwargs):
        super().__init__(*args, **kwargs)
        self._on_miss = on_miss
        self.misses_left = 1

    def find(self, segment_id, key, schema=None):
        if self.misses_left:
            self.misses_left -= 1
            self._on_miss()
            return None
        return super().find(segment_id, key, schema)


def _writer(store, *, on_miss=None, **kwargs):
    registry = SchemaRegistry(SchemaDetector(store))
    if on_miss is None:
        locator = RecordLocator(store, registry)
    else:
        locator = LocatorMissingFirstLookup(store, registry, on_miss=on_miss)
    return LedgerWriter(store, registry, locator, **kwargs)


def test_upsert_twice_keeps_one_row(make_ledger):
    store, c = make_ledger({SEG: [NEW_HEADER]})
    fields = AttendanceFields(clock_in="08:15", comments="late")

    first = c.writer.upsert(KEY, fields)
    second = c.writer.upsert(KEY, fields)

    assert first.created and not second.created
    assert first.row_index == second.row_index == 2
    assert len(store.rows(SEG)) == 2
    assert c.locator.find(SEG, KEY).record.comments == "late"


def test_new_row_is_full_width_with_day_and_timestamp():
    store = InMemorySheetStore({SEG: [NEW_HEADER]})
    writer = _writer(store, clock=lambda: datetime(2025, 8, 5, 8, 15, tzinfo=BANGKOK_TZ))

    result = writer.upsert(KEY, AttendanceFields(clock_in="08:15"))

    assert store.rows(SEG)[1] == [
        "Somchai", "5/8/2568", "Tuesday", "08:15", "", "", "", "", "2025-08-05T08:15:00+07:00", "", "",
    ]
    assert result.overtime is None


def test_old_segment_gets_ten_columns(make_ledger):
    store, c = make_ledger({SEG: [OLD_HEADER]})

    result = c.writer.upsert(KEY, AttendanceFields(clock_in="07:30", clock_out="17:45"))

    row = store.rows(SEG)[1]
    assert result.schema is SchemaVersion.OLD
    assert len(row) == 10
    assert row[2:6] == ["07:30", "17:45", "07:30", "17:45"]
    assert row[8] == "1.25"


def test_partial_update_is_one_batch_and_leaves_other_columns(make_ledger):
    store, c = make_ledger({SEG: [NEW_HEADER]})
    c.writer.upsert(KEY, AttendanceFields(clock_in="08:15", comments="late"))
    store.calls.clear()

    result = c.writer.upsert(KEY, AttendanceFields(clock_out="17:40"))

    writes = [op for op, _ in store.calls if op not in ("get", "list")]
    assert writes == ["batchUpdate"]
    record = c.locator.find(SEG, KEY).record
    assert (record.clock_in, record.clock_out, record.comments) == ("08:15", "17:40", "late")
    assert (record.ot_start, record.ot_end, record.ot_hours) == ("17:00", "17:40", "0.67")
    assert set(result.written) == {
        LedgerField.CLOCK_OUT, LedgerField.OT_START, LedgerField.OT_END, LedgerField.OT_HOURS,
    }


def test_suppressed_recompute_writes_only_given_fields(make_ledger):
    store, c = make_ledger({SEG: [NEW_HEADER]})
    c.writer.upsert(KEY, AttendanceFields(clock_in="08:15"))

    c.writer.upsert(KEY, AttendanceFields(clock_out="18:00"), recompute_overtime=False)

    record = c.locator.find(SEG, KEY).record
    assert record.clock_out == "18:00"
    assert record.ot_hours == ""


def test_row_appearing_before_append_is_updated_not_duplicated():
    store = InMemorySheetStore({SEG: [NEW_HEADER]})
    writer = _writer(
        store,
        on_miss=lambda: store.append_row(SEG, "A:K", ["Somchai", "5/8/2568", "Tuesday", "08:00"]),
    )

    result = writer.upsert(KEY, AttendanceFields(clock_out="17:40"))

    assert not result.created
    assert result.row_index == 2
    rows = store.rows(SEG)
    assert len(rows) == 2
    assert rows[1][3:7] == ["08:00", "17:40", "17:00", "17:40"]


def test_without_recheck_the_race_duplicates():
    store = InMemorySheetStore({SEG: [NEW_HEADER]})
    writer = _writer(
        store,
        on_miss=lambda: store.append_row(SEG, "A:K", ["Somchai", "5/8/2568", "Tuesday", "08:00"]),
        recheck_before_append=False,
    )

    assert writer.upsert(KEY, AttendanceFields(clock_out="17:40")).created
    assert len(store.rows(SEG)) == 3


def test_strict_create_refuses_existing_key(make_ledger):
    store, c = make_ledger({SEG: [NEW_HEADER]})

    assert c.writer.create(KEY, AttendanceFields(clock_in="08:15")).created
    assert c.writer.create(KEY, AttendanceFields(clock_in="09:00")) is None
    assert len(store.rows(SEG)) == 2


def test_concurrent_upserts_for_one_key_create_one_row(make_ledger):
    store, c = make_ledger({SEG: [NEW_HEADER]})

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda i: c.writer.upsert(KEY, AttendanceFields(comments=f"c{i}")), range(24)))

    assert sum(r.created for r in results) == 1
    assert len(store.rows(SEG)) == 2


def test_unknown_schema_blocks_writes(make_ledger):
    store, c = make_ledger({SEG: [NEW_HEADER]})
    store.fail_segments.add(SEG)

    with pytest.raises(SchemaUnresolved):
        c.writer.upsert(KEY, AttendanceFields(clock_in="08:15"))

    assert not [op for op, _ in store.calls if op in ("append", "update", "batchUpdate")]


def test_cell_updates_refuse_an_unresolved_layout(make_ledger):
    store, c = make_ledger({SEG: [NEW_HEADER, ["Somchai", "5/8/2568"]]})

    with pytest.raises(SchemaUnresolved):
        c.writer.update_cells(SEG, SchemaVersion.UNKNOWN, 2, {LedgerField.APPROVAL: "Approve"})

    assert store.calls == []
