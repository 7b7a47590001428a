from __future__ import annotations

import pytest

from src.driver_ledger.driver_ledger.core.enums import SchemaVersion
from src.driver_ledger.driver_ledger.ledger import column_map
from src.driver_ledger.driver_ledger.main import create_app
from src.driver_ledger.driver_ledger.sheets.memory_store import InMemorySheetStore

SEG = "August 2025 Attendance"


@pytest.fixture
def store():
    return InMemorySheetStore({SEG: [column_map.header_row(SchemaVersion.NEW)]})


@pytest.fixture
def client(monkeypatch, store):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(store=store)
    return app.test_client()


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "backend": "memory"}


def test_clock_event_flow(client, store):
    resp = client.post("/clock-event", json={
        "driverName": "Somchai", "thaiDate": "5/8/2568", "type": "clockIn", "timestamp": "08:15",
    })
    assert resp.status_code == 200
    assert resp.get_json()["created"] is True

    resp = client.post("/clock-event", json={
        "driverName": "Somchai", "thaiDate": "5/8/2568", "type": "clockOut", "timestamp": "17:40",
    })
    body = resp.get_json()

    assert body["success"] is True
    assert body["otHours"] == "0.67"
    assert len(store.rows(SEG)) == 2


def test_validation_errors_are_400(client):
    resp = client.post("/clock-event", json={"driverName": "Somchai", "thaiDate": "5/8/2568", "type": "nap"})

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_business_failures_are_400(client):
    resp = client.post("/approve-most-recent", json={"thaiDate": "5/8/2568"})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "No unapproved requests found"


def test_storage_failures_are_503(client, store):
    store.fail_segments.add(SEG)

    resp = client.post("/check-existing", json={"driverName": "Somchai", "thaiDate": "5/8/2568"})

    assert resp.status_code == 503


def test_submit_update_and_approve(client, store):
    client.post("/submit", json={
        "driverName": "Somchai", "thaiDate": "5/8/2568", "clockIn": "07:30", "clockOut": "17:45",
    })
    client.post("/update-field", json={
        "driverName": "Somchai", "thaiDate": "5/8/2568", "field": "comments", "value": "traffic",
    })
    resp = client.post("/approve", json={"thaiDate": "5/8/2568", "driverName": "Somchai"})

    assert resp.status_code == 200
    row = store.rows(SEG)[1]
    assert row[9] == "1.25"
    assert row[7] == "traffic"
    assert row[10] == "Approve"


def test_create_only_submit_conflict(client):
    payload = {"driverName": "Somchai", "thaiDate": "5/8/2568", "clockIn": "08:00", "createOnly": True}

    assert client.post("/submit", json=payload).status_code == 200
    assert client.post("/submit", json=payload).status_code == 400


def test_calculate_and_recalculate(client):
    resp = client.post("/calculate-ot", json={"thaiDate": "10/8/2568", "clockIn": "07:30", "clockOut": "17:45"})
    assert resp.get_json()["otHours"] == "1.25"

    client.post("/submit", json={"driverName": "A", "thaiDate": "5/8/2568", "clockIn": "06:00", "clockOut": "18:00"})
    resp = client.post("/recalculate-ot", json={"sheetName": SEG, "rowNumber": 2})
    assert resp.get_json()["calculatedOT"]["otHours"] == "3.00"


def test_segments_and_last_clock_ins(client, store):
    resp = client.post("/segments", json={"month": 9, "year": 2568})
    assert resp.status_code == 200
    assert "September 2025 Attendance" in store.list_segments()

    resp = client.post("/last-clock-ins", json={"driverNames": ["Somchai"]})
    assert resp.get_json() == {"Somchai": {"success": False, "date": None, "time": None}}

    assert client.post("/last-clock-ins", json={"driverNames": "Somchai"}).status_code == 400
