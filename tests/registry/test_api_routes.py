from __future__ import annotations

import io
import json

import pytest

from event_checkin.container import build_container
from event_checkin.main import create_app


@pytest.fixture
def client(monkeypatch, slot, clock):
    monkeypatch.setenv("APP_ENV", "testing")
    container = build_container(slot=slot, clock=clock)
    app = create_app(container)
    return app.test_client()


def test_scan_then_duplicate_scan(client):
    ok = client.post("/api/scan", json={"ticket": "reg-003"})
    assert ok.status_code == 200
    assert ok.get_json()["attendee"]["id"] == "REG-003"
    assert ok.get_json()["attendee"]["checkedIn"] is True

    dup = client.post("/api/scan", json={"ticket": "REG-003"})
    assert dup.status_code == 409
    assert dup.get_json()["status"] == "ALREADY_CHECKED_IN"

    missing = client.post("/api/scan", json={"ticket": "nope"})
    assert missing.status_code == 404


def test_check_in_and_undo_routes(client):
    assert client.post("/api/attendees/REG-001/checkin").status_code == 200
    assert client.post("/api/attendees/REG-001/checkin").status_code == 409
    undo = client.post("/api/attendees/REG-001/undo")
    assert undo.status_code == 200
    assert undo.get_json()["attendee"]["checkInTime"] is None
    assert client.post("/api/attendees/REG-404/checkin").status_code == 404


def test_walk_in_lifecycle(client):
    created = client.post("/api/walkins", json={"name": "Test User", "quantity": 3, "transactionId": "TX-42"})
    assert created.status_code == 201
    walk_in = created.get_json()["attendee"]
    assert walk_in["amountPaid"] == 765
    assert walk_in["type"] == "WALK-IN"

    assert client.post("/api/walkins", json={"name": "", "quantity": 1}).status_code == 400
    assert client.post("/api/walkins", json={"name": "Bulk", "quantity": 50}).status_code == 400

    listed = client.get("/api/walkins").get_json()["walkIns"]
    assert [w["id"] for w in listed] == [walk_in["id"]]

    assert client.post(f"/api/attendees/{walk_in['id']}/undo").status_code == 409
    assert client.delete(f"/api/walkins/{walk_in['id']}").status_code == 200
    assert client.delete("/api/walkins/REG-001").status_code == 404


def test_config_update_and_validation(client):
    resp = client.patch("/api/config", json={"eventName": "Night Two", "ticketPrice": 300})
    assert resp.status_code == 200
    assert resp.get_json()["config"]["ticketPrice"] == 300

    assert client.patch("/api/config", json={"ticketPrice": -1}).status_code == 400
    assert client.patch("/api/config", json={"eventDate": "17/01/2026"}).status_code == 400
    assert client.patch("/api/config", json={"venue": "x"}).status_code == 400
    assert client.get("/api/config").get_json()["config"]["eventName"] == "Night Two"


def test_import_upload(client):
    data = {"file": (io.BytesIO(b"id,name,quantity,amount\nA1,Jane,2,400\n"), "people.csv")}
    resp = client.post("/api/import", data=data, content_type="multipart/form-data")
    assert resp.status_code == 200
    assert resp.get_json()["added"] == 1
    assert resp.get_json()["totalParsed"] == 1

    bad = {"file": (io.BytesIO(b"id,name\n"), "people.csv")}
    resp = client.post("/api/import", data=bad, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json()["added"] == 0

    wrong = {"file": (io.BytesIO(b"x"), "people.xlsx")}
    assert client.post("/api/import", data=wrong, content_type="multipart/form-data").status_code == 400


def test_stats_reset_and_clear(client):
    client.post("/api/attendees/REG-001/checkin")
    stats = client.get("/api/stats").get_json()["stats"]
    assert stats["preRegCheckedIn"] == 1
    assert stats["checkInPercentage"] == 20

    assert client.post("/api/checkins/reset").get_json()["reset"] == 1
    assert client.post("/api/clear", json={"confirm": "yes"}).status_code == 400
    assert client.post("/api/clear", json={"confirm": "DELETE"}).status_code == 200


def test_exports_are_attachments(client):
    resp = client.get("/api/export/summary")
    assert resp.status_code == 200
    assert "attachment; filename=The_Sound_Nexus_summary_2026-01-17.json" == resp.headers["Content-Disposition"]
    assert json.loads(resp.data)["statistics"]["preRegistered"] == 5

    csv_resp = client.get("/api/export/checkins")
    assert csv_resp.mimetype == "text/csv"
    assert client.get("/api/export/everything").status_code == 404


def test_attendee_list_filters(client):
    client.post("/api/attendees/REG-004/checkin")
    rows = client.get("/api/attendees?filter=checked").get_json()["attendees"]
    assert [r["id"] for r in rows] == ["REG-004"]
    assert client.get("/api/attendees?filter=bogus").status_code == 400
    assert client.get("/api/attendees/lookup?ticket=reg-002").get_json()["attendee"]["id"] == "REG-002"


def test_non_finite_numbers_are_validation_errors(client):
    resp = client.post("/api/walkins", data='{"name": "X", "quantity": Infinity}', content_type="application/json")
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False

    resp = client.patch("/api/config", data='{"ticketPrice": Infinity}', content_type="application/json")
    assert resp.status_code == 400
