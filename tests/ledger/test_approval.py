from __future__ import annotations

import pytest

from src.driver_ledger.driver_ledger.core.enums import SchemaVersion
from src.driver_ledger.driver_ledger.core.exceptions import SchemaUnresolved
from src.driver_ledger.driver_ledger.ledger import column_map
from src.driver_ledger.driver_ledger.ledger.model import DriverDateKey, SubmittedAtKey

SEG = "August 2025 Attendance"
NEW_HEADER = column_map.header_row(SchemaVersion.NEW)
OLD_HEADER = column_map.header_row(SchemaVersion.OLD)


def _row(name, day, approval="", stamp=""):
    return [name, f"{day}/8/2568", "", "08:00", "17:00", "", "", "", stamp, "", approval]


def test_most_recent_pending_scans_from_the_bottom(make_ledger):
    store, c = make_ledger({SEG: [NEW_HEADER, _row("A", 1, "Approve"), _row("B", 2), _row("C", 3)]})

    result = c.approvals.approve_most_recent_pending(SEG)

    assert result.success
    assert result.data["row"] == 4
    approvals = [r[10] if len(r) > 10 else "" for r in store.rows(SEG)[1:]]
    assert approvals == ["Approve", "", "Approve"]


def test_denied_and_auto_rows_are_not_pending(make_ledger):
    _, c = make_ledger({SEG: [NEW_HEADER, _row("A", 1), _row("B", 2, "Deny"), _row("C", 3, "AUTO")]})

    assert c.approvals.approve_most_recent_pending(SEG).data["row"] == 2


def test_no_pending_records(make_ledger):
    _, c = make_ledger({SEG: [NEW_HEADER, _row("A", 1, "Approve")]})

    result = c.approvals.approve_most_recent_pending(SEG)

    assert not result.success
    assert result.message == "No unapproved requests found"


def test_approve_by_key_writes_the_layout_specific_column(make_ledger):
    store, c = make_ledger({SEG: [
        OLD_HEADER,
        ["A", "1/8/2568", "08:00", "17:00", "", "", "", "2025-08-01T08:00:00+07:00"],
    ]})

    result = c.approvals.approve(SEG, SubmittedAtKey("2025-08-01T08:00:00+07:00"))

    assert result.success
    assert store.rows(SEG)[1][9] == "Approve"


def test_approve_missing_row_fails(make_ledger):
    _, c = make_ledger({SEG: [NEW_HEADER, _row("A", 1)]})

    result = c.approvals.approve(SEG, DriverDateKey("Nobody", "1/8/2568"))

    assert not result.success
    assert result.to_dict()["error"] == "Row not found"


def test_unreadable_header_blocks_approval_instead_of_guessing_the_layout(make_ledger):
    # Read with the legacy layout, column J (OT hours here) looks empty on every row.
    store, c = make_ledger({SEG: [NEW_HEADER, _row("A", 1), _row("B", 2, "Approve")]}, flaky_header=True)

    with pytest.raises(SchemaUnresolved):
        c.approvals.approve_most_recent_pending(SEG)

    assert not [op for op, _ in store.calls if op == "batchUpdate"]
    assert [r[10] if len(r) > 10 else "" for r in store.rows(SEG)[1:]] == ["", "Approve"]

    retried = c.approvals.approve_most_recent_pending(SEG)

    assert retried.data == {"row": 2, "segment": SEG, "schema": "NEW"}
    assert [r[10] for r in store.rows(SEG)[1:]] == ["Approve", "Approve"]


def test_unreadable_header_blocks_approval_by_key(make_ledger):
    store, c = make_ledger({SEG: [NEW_HEADER, _row("A", 1)]}, flaky_header=True)

    with pytest.raises(SchemaUnresolved):
        c.approvals.approve(SEG, DriverDateKey("A", "1/8/2568"))

    assert not [op for op, _ in store.calls if op == "batchUpdate"]
