from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from attendance_tracker.api import deps
from attendance_tracker.main import app
from attendance_tracker.models.attendance import AttendanceStatus
from attendance_tracker.models.user import UserRole


@pytest.fixture
def current_user():
    return SimpleNamespace(id="u1", email="u1@example.com", name="Student One", role=UserRole.STUDENT)


@pytest.fixture
def client(current_user, records, holidays, timetable, lifecycle):
    app.dependency_overrides[deps.get_current_user] = lambda: current_user
    app.dependency_overrides[deps.get_record_store] = lambda: records
    app.dependency_overrides[deps.get_holiday_store] = lambda: holidays
    app.dependency_overrides[deps.get_timetable_store] = lambda: timetable
    app.dependency_overrides[deps.get_lifecycle] = lambda: lifecycle
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health():
    assert TestClient(app).get("/health").json()["status"] == "ok"


def test_requires_authentication():
    response = TestClient(app).get("/api/attendance/")
    assert response.status_code == 401


def test_create_and_list_timetable_entries(client, timetable):
    response = client.post("/api/timetable/", json={"class_name": "Math", "day": "Monday", "time": "09:00-10:00"})
    assert response.status_code == 201
    assert response.json()["user"] == "u1"

    timetable.add("someone-else", "Art", "Monday")
    listed = client.get("/api/timetable/day/monday").json()
    assert [e["class_name"] for e in listed] == ["Math"]


def test_timetable_rejects_unknown_day(client):
    assert client.post("/api/timetable/", json={"class_name": "Math", "day": "Funday", "time": "9"}).status_code == 422
    assert client.get("/api/timetable/day/Funday").status_code == 400


def test_delete_timetable_entry_is_owner_scoped(client, timetable):
    mine = timetable.add("u1", "Math", "Monday")
    theirs = timetable.add("u2", "Art", "Monday")

    assert client.delete(f"/api/timetable/{mine.id}").status_code == 204
    assert client.delete(f"/api/timetable/{theirs.id}").status_code == 404
    assert timetable.entries == [theirs]


def test_students_cannot_declare_holidays(client):
    response = client.post("/api/timetable/holiday", json={"date": "2024-01-15", "reason": "Snow"})
    assert response.status_code == 403


def test_teacher_declares_holiday(client, current_user, holidays):
    current_user.role = UserRole.TEACHER

    response = client.post("/api/timetable/holiday", json={"date": "2024-01-15", "reason": "Snow"})

    assert response.status_code == 201
    assert response.json()["reason"] == "Snow"
    assert [h["reason"] for h in client.get("/api/timetable/holidays").json()] == ["Snow"]


def test_create_todays_record_once(client, records):
    first = client.post("/api/attendance/", json={"class_name": "Math"})
    assert first.status_code == 201
    assert first.json()["date"] == "2024-01-15"
    assert first.json()["status"] == "pending"

    assert client.post("/api/attendance/", json={"class_name": "Math"}).status_code == 400
    assert len(records.by_key) == 1


def test_list_attendance_is_owner_scoped_and_filterable(client, records):
    records.add("u1", "Math", "2024-01-14")
    records.add("u1", "Math", "2024-01-15")
    records.add("u2", "Math", "2024-01-15")

    assert len(client.get("/api/attendance/").json()) == 2
    only_today = client.get("/api/attendance/", params={"date": "2024-01-15"}).json()
    assert [r["date"] for r in only_today] == ["2024-01-15"]
    assert client.get("/api/attendance/", params={"date": "15-01-2024"}).status_code == 400


def test_mark_pending_record_present(client, records):
    records.add("u1", "Math", "2024-01-15")

    response = client.put("/api/attendance/Math/2024-01-15", json={"status": "present"})

    assert response.status_code == 200
    assert records.by_key[("u1", "Math", "2024-01-15")].status == AttendanceStatus.PRESENT


def test_mark_resolved_or_missing_record_is_not_found(client, records):
    records.add("u1", "Math", "2024-01-14", AttendanceStatus.ABSENT)

    assert client.put("/api/attendance/Math/2024-01-14", json={"status": "present"}).status_code == 404
    assert client.put("/api/attendance/Art/2024-01-14", json={"status": "present"}).status_code == 404
    assert records.by_key[("u1", "Math", "2024-01-14")].status == AttendanceStatus.ABSENT


def test_mark_rejects_pending_and_bad_dates(client, records):
    records.add("u1", "Math", "2024-01-15")

    assert client.put("/api/attendance/Math/2024-01-15", json={"status": "pending"}).status_code == 422
    assert client.put("/api/attendance/Math/yesterday", json={"status": "absent"}).status_code == 400


def test_count_and_summary(client, records):
    records.add("u1", "Math", "2024-01-12", AttendanceStatus.PRESENT)
    records.add("u1", "Math", "2024-01-13", AttendanceStatus.PRESENT)
    records.add("u1", "Math", "2024-01-14", AttendanceStatus.ABSENT)
    records.add("u1", "Math", "2024-01-15")
    records.add("u1", "Art", "2024-01-15")

    assert client.get("/api/attendance/count").json() == {"total_present": 2}

    summary = client.get("/api/attendance/summary").json()
    assert summary == [
        {"class_name": "Art", "present": 0, "absent": 0, "pending": 1, "total": 1, "percentage": 0},
        {"class_name": "Math", "present": 2, "absent": 1, "pending": 1, "total": 4, "percentage": 67},
    ]


def test_me(client):
    assert client.get("/api/auth/me").json() == {
        "id": "u1",
        "email": "u1@example.com",
        "name": "Student One",
        "role": "student",
    }
