from __future__ import annotations

from src.driver_ledger.driver_ledger.core.enums import SchemaVersion
from src.driver_ledger.driver_ledger.ledger import column_map

SEG = "August 2025 Attendance"
NEW_HEADER = column_map.header_row(SchemaVersion.NEW)
OLD_HEADER = column_map.header_row(SchemaVersion.OLD)


def test_create_for_month_writes_header_and_registers_layout(make_ledger):
    store, c = make_ledger()

    result = c.provisioner.create_for_month(8, 2568)

    assert result.success
    assert result.data == {"segment": SEG, "schema": "NEW"}
    assert store.rows(SEG) == [NEW_HEADER]
    assert c.schemas.cached(SEG) is SchemaVersion.NEW
    assert ("get", SEG) not in store.calls


def test_existing_segment_needs_force(make_ledger):
    store, c = make_ledger({SEG: [NEW_HEADER, ["A", "1/8/2568"]]})

    assert not c.provisioner.create(SEG).success
    assert c.provisioner.create(SEG, force=True).success
    assert store.rows(SEG) == [NEW_HEADER]


def test_invalid_month(make_ledger):
    _, c = make_ledger()

    assert not c.provisioner.create_for_month(13, 2025).success


def test_latest_ignores_non_attendance_sheets(make_ledger):
    _, c = make_ledger({
        "Template": [],
        "December 2024 Attendance": [],
        "August 2025 Attendance": [],
        "July 2025 Attendance": [],
    })

    assert c.provisioner.latest() == SEG


def test_latest_with_no_segments(make_ledger):
    _, c = make_ledger({"Template": []})

    assert c.provisioner.latest() is None


def test_backfill_fills_only_empty_day_cells_in_one_write(make_ledger):
    store, c = make_ledger({SEG: [
        NEW_HEADER,
        ["A", "4/8/2568", "", "08:00"],
        ["B", "5/8/2568", "Tuesday", "08:00"],
        ["C", "bad date", "", "08:00"],
    ]})
    store.calls.clear()

    result = c.provisioner.backfill_day_of_week(SEG)

    assert result.data["updated"] == 2
    assert [r[2] for r in store.rows(SEG)[1:]] == ["Monday", "Tuesday", "Unknown"]
    assert [op for op, _ in store.calls].count("batchUpdate") == 1


def test_backfill_rejects_old_layout(make_ledger):
    _, c = make_ledger({SEG: [OLD_HEADER]})

    assert not c.provisioner.backfill_day_of_week(SEG).success
