from __future__ import annotations

import json

import pytest

from src.class_attendance.class_attendance import create_app, get_container
from src.class_attendance.class_attendance.reports.service import XLSX_MIMETYPE


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app({"DATA_PATH": str(tmp_path / "data.json")})


@pytest.fixture()
def anon_client(app):
    return app.test_client()


@pytest.fixture()
def client(app):
    c = app.test_client()
    resp = c.post("/api/register", json={"email": "prof@nitjsr.ac.in", "name": "Prof", "password": "secret1"})
    assert resp.status_code == 201
    return c


def _start(client, name="DSA Lab", **extra):
    resp = client.post("/api/start-session", json={"sessionName": name, **extra})
    assert resp.status_code == 200
    return resp.get_json()


def test_app_uses_testing_settings(app):
    settings = get_container(app).settings
    assert settings.testing is True
    assert settings.scheduler_enabled is False
    assert settings.public_base_url == "http://testserver"


def test_start_session_and_status(client):
    started = _start(client)

    assert started["success"] is True
    assert started["formUrl"] == f"http://testserver/s/{started['sessionCode']}"

    status = client.get("/api/status").get_json()
    assert status["active"] is True
    assert status["activeCount"] == 1
    assert status["policy"] == "multi"
    assert status["session"]["id"] == started["sessionId"]
    assert status["session"]["expiresAt"].endswith("Z")


def test_start_session_requires_name(client):
    resp = client.post("/api/start-session", json={"sessionName": "  "})
    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "error": "Session name is required"}


def test_student_form_and_submission(client, tmp_path):
    started = _start(client)

    page = client.get(f"/s/{started['sessionCode']}")
    assert page.status_code == 200
    assert b"DSA Lab" in page.data

    resp = client.post(
        "/submit",
        json={"email": "2046ugcm300@nitjsr.ac.in", "name": "Asha Rao", "sessionCode": started["sessionCode"]},
    )
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["message"] == "Attendance recorded!"
    assert body["rollNumber"] == "2046UGCM300"

    dup = client.post(
        "/submit",
        json={"email": "2046UGCM300@nitjsr.ac.in", "name": "Asha Rao", "sessionCode": started["sessionCode"]},
    )
    assert dup.status_code == 409
    assert dup.get_json()["success"] is False

    on_disk = json.loads((tmp_path / "data.json").read_text(encoding="utf-8"))
    assert len(on_disk["attendance"]) == 1
    assert on_disk["attendance"][0]["sessionId"] == started["sessionId"]


def test_submission_rejections(client):
    resp = client.post("/submit", json={"email": "", "name": ""})
    assert resp.status_code == 400

    resp = client.post("/submit", json={"email": "x@gmail.com", "name": "X"})
    assert resp.status_code == 403

    resp = client.post("/submit", json={"email": "2046ugcm300@nitjsr.ac.in", "name": "X"})
    assert resp.status_code == 404


def test_geofenced_session_needs_location(client):
    started = _start(client, lat=22.7768, lon=86.1444)

    resp = client.post(
        "/submit",
        json={
            "email": "2046ugcm300@nitjsr.ac.in",
            "name": "Asha",
            "sessionCode": started["sessionCode"],
            "lat": "not-a-number",
        },
    )
    assert resp.status_code == 400
    assert "Location is required" in resp.get_json()["error"]

    resp = client.post(
        "/submit",
        json={
            "email": "2046ugcm300@nitjsr.ac.in",
            "name": "Asha",
            "sessionCode": started["sessionCode"],
            "lat": 22.7768,
            "lon": 86.1444,
        },
    )
    assert resp.status_code == 200


def test_stopped_session_closes_form(client):
    started = _start(client)

    assert client.post("/api/stop-session").get_json()["stopped"] == [started["sessionId"]]
    assert client.get("/api/status").get_json()["active"] is False

    page = client.get(f"/s/{started['sessionCode']}")
    assert page.status_code == 410

    resp = client.post(f"/api/sessions/{started['sessionId']}/stop")
    assert resp.status_code == 409


def test_root_form_without_session(client):
    assert client.get("/").status_code == 404


def test_stop_unknown_session(client):
    assert client.post("/api/sessions/999/stop").status_code == 404


def test_history_responses_and_export(client):
    started = _start(client)
    client.post(
        "/submit",
        json={"email": "2046ugcm300@nitjsr.ac.in", "name": "Asha", "sessionCode": started["sessionCode"]},
    )

    history = client.get("/api/history").get_json()["sessions"]
    assert history[0]["responseCount"] == 1

    responses = client.get("/api/responses", query_string={"sessionName": "DSA Lab"}).get_json()
    assert responses["success"] is True
    assert responses["count"] == 1
    assert responses["headers"][0] == "Roll No"

    export = client.get("/api/export", query_string={"sessionName": "DSA Lab"})
    assert export.status_code == 200
    assert export.mimetype == XLSX_MIMETYPE
    assert "Attendance_DSA_Lab.xlsx" in export.headers["Content-Disposition"]

    multi = client.get("/api/export-multi", query_string={"ids": str(started["sessionId"])})
    assert multi.status_code == 200
    assert client.get("/api/export-multi").status_code == 400


def test_session_qr(client):
    started = _start(client)
    resp = client.get(f"/api/sessions/{started['sessionId']}/qr")
    assert resp.status_code == 200
    assert resp.data.startswith(b"\x89PNG")


def test_delete_sessions(client):
    a = _start(client, "A")
    b = _start(client, "B")

    assert client.delete(f"/api/sessions/{a['sessionId']}").status_code == 200
    assert client.delete(f"/api/sessions/{a['sessionId']}").status_code == 404
    assert client.post("/api/sessions/delete-many", json={"ids": []}).status_code == 400
    assert client.post("/api/sessions/delete-many", json={"ids": [b["sessionId"]]}).get_json()["deleted"] == 1
    assert client.get("/api/sessions").get_json()["sessions"] == []


def test_auth_routes(client):
    resp = client.post("/api/register", json={"email": "t@nitjsr.ac.in", "name": "T", "password": "secret1"})
    assert resp.status_code == 201
    assert "passwordHash" not in resp.get_json()["user"]

    assert client.get("/api/me").get_json()["user"]["email"] == "t@nitjsr.ac.in"
    client.post("/api/logout")
    assert client.get("/api/me").status_code == 401

    assert client.post("/api/login", json={"email": "t@nitjsr.ac.in", "password": "bad"}).status_code == 401
    assert client.post("/api/login", json={"email": "t@nitjsr.ac.in", "password": "secret1"}).status_code == 200


@pytest.mark.parametrize(
    "method, url",
    [
        ("post", "/api/start-session"),
        ("post", "/api/stop-session"),
        ("get", "/api/status"),
        ("get", "/api/history"),
        ("post", "/api/sessions/clear-all"),
        ("post", "/api/sessions/delete-many"),
        ("delete", "/api/sessions/1"),
        ("get", "/api/responses"),
        ("get", "/api/export"),
        ("get", "/api/export-multi?ids=1"),
    ],
)
def test_teacher_api_requires_login(anon_client, method, url):
    resp = getattr(anon_client, method)(url)
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_teacher_login_can_be_switched_off(tmp_path, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app({"DATA_PATH": str(tmp_path / "data.json"), "TEACHER_LOGIN_REQUIRED": False})

    resp = app.test_client().post("/api/start-session", json={"sessionName": "Open lab"})

    assert resp.status_code == 200


def test_student_routes_stay_open(client, anon_client):
    started = _start(client)

    assert anon_client.get(f"/s/{started['sessionCode']}").status_code == 200
    resp = anon_client.post(
        "/submit",
        json={"email": "2046ugcm300@nitjsr.ac.in", "name": "Asha", "sessionCode": started["sessionCode"]},
    )
    assert resp.status_code == 200


@pytest.mark.parametrize(
    "coords",
    [
        {"lat": "nan", "lon": "86.1"},
        {"lat": "inf", "lon": "86.1"},
        {"lat": 22.7768, "lon": "-inf"},
        {"lat": 95.0, "lon": 86.1444},
        {"lat": 22.7768},
    ],
)
def test_unusable_coordinates_count_as_missing_location(client, coords):
    started = _start(client, lat=22.7768, lon=86.1444)

    resp = client.post(
        "/submit",
        json={"email": "2046ugcm300@nitjsr.ac.in", "name": "Asha", "sessionCode": started["sessionCode"], **coords},
    )

    assert resp.status_code == 400
    assert "Location is required" in resp.get_json()["error"]


def test_non_string_fields_get_structured_errors(client):
    started = _start(client)

    resp = client.post("/submit", json={"email": 12345, "name": "X"})
    assert resp.status_code == 403
    assert resp.get_json()["success"] is False

    resp = client.post("/submit", json={"email": "2046ugcm300@nitjsr.ac.in", "name": ["X"], "sessionCode": 42})
    assert resp.status_code == 404
    assert "Invalid session link" in resp.get_json()["error"]

    resp = client.post(
        "/submit",
        json={"email": "2046ugcm300@nitjsr.ac.in", "name": 7, "sessionCode": started["sessionCode"]},
    )
    assert resp.status_code == 200
