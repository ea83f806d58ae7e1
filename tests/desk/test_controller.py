from __future__ import annotations

import pytest
from flask import Flask

from src.signin_desk.signin_desk.desk.controller import register


@pytest.fixture
def client(container):
    app = Flask(__name__)
    app.config["TESTING"] = True
    register(app, container)
    return app.test_client()


def test_ping(client):
    resp = client.get("/ping")

    assert resp.status_code == 200
    assert resp.get_json() == {"ok": True}


def test_sign_in_queue_and_claim_over_http(client):
    started = client.post("/api/sign-in/sessions", json={"label": "Drop-in", "date": "2025-03-01", "type": "individual"})
    sid = started.get_json()["session"]["id"]

    signed = client.post(f"/api/sign-in/sessions/{sid}/students", json={"student": {"id": "S1", "name": "Ana Lopez"}})
    row = signed.get_json()["rowIndex"]

    claim = client.post("/api/queue/claim", json={"rowKeys": [row]}, headers={"X-Staff-Email": "staff@example.org"})
    assert claim.get_json()["applied"] == [row]

    queue = client.get("/api/queue?date=2025-03-01", headers={"X-Staff-Email": "STAFF@example.org"}).get_json()
    assert queue["items"][0]["claimedBy"] == "staff@example.org"
    assert queue["items"][0]["mine"] is True

    flat = client.get("/api/queue/sign-ins?date=2025-03-01").get_json()
    assert flat == [
        {
            "rowIndex": row,
            "timestamp": "2025-03-01T10:00:00-06:00",
            "id": "S1",
            "name": "Ana Lopez",
            "school": "",
            "mentor": "",
            "status": "Claimed",
        }
    ]


def test_domain_errors_are_returned_as_ok_false(client):
    resp = client.post("/api/sign-in/sessions/nope/end")

    assert resp.status_code == 200
    assert resp.get_json() == {"ok": False, "error": "Session not found."}


def test_group_prefill_accepts_repeated_group_params(client):
    client.post(
        "/api/group-notes",
        json={"date": "2025-03-01", "group": "Robotics", "topic": "Kickoff", "summary": "", "durationMinutes": 30},
    )

    resp = client.get("/api/group-notes/prefill?date=2025-03-01&group=Robotics&group=Chess")

    groups = resp.get_json()["groups"]
    assert groups["Robotics"]["note"]["topic"] == "Kickoff"
    assert groups["Chess"]["contactId"] is None


def test_people_routes(client):
    client.post("/api/sign-in/sessions", json={"label": "Drop-in", "date": "2025-03-01"})

    assert client.get("/api/people/suggest?q=zzz").get_json() == []
    assert client.get("/api/people/S1").get_json()["ok"] is False
    assert client.post("/api/people/names", json={"ids": ["S1"]}).get_json() == [{"id": "S1", "name": "S1"}]
    assert [m["id"] for m in client.get("/api/mentors?active=0").get_json()] == ["STAFFC", "STAFFB", "STAFFA"]


def test_configuration_errors_map_to_500(client, store):
    store.drop_table("attendance")
    sid = client.post("/api/sign-in/sessions", json={"label": "Robotics", "date": "2025-03-01", "type": "group"}).get_json()[
        "session"
    ]["id"]

    resp = client.post(f"/api/sign-in/sessions/{sid}/students", json={"id": "S1"})

    assert resp.status_code == 500
    assert resp.get_json() == {"ok": False, "error": "Server configuration error."}


@pytest.mark.parametrize("shape", [str, int, lambda k: [k]], ids=["string", "int", "list"])
def test_individual_note_over_http_accepts_a_single_queue_row_key(client, shape):
    sid = client.post("/api/sign-in/sessions", json={"label": "Drop-in", "date": "2025-03-01"}).get_json()["session"]["id"]
    rows = [
        client.post(f"/api/sign-in/sessions/{sid}/students", json={"student": {"id": f"S{i}"}}).get_json()["rowIndex"]
        for i in range(12)
    ]
    target = rows[-1]

    resp = client.post(
        "/api/individual-notes",
        json={"date": "2025-03-01", "people": [{"id": "S11"}], "payload": {"topic": "Check-in"}, "queueRowKeys": shape(target)},
    )

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["ok"] is True
    assert body["processed"]["ok"] is True
    assert body["processed"]["rows"] == 1
    queue = client.get("/api/queue?date=2025-03-01").get_json()["items"]
    assert [item["rowKey"] for item in queue if item["status"] == "Processed"] == [target]
