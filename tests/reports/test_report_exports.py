from __future__ import annotations

import io
from datetime import datetime, timedelta, timezone

import pytest
from openpyxl import load_workbook

from src.class_attendance.class_attendance.attendance.json_attendance_repository import JsonAttendanceRepository
from src.class_attendance.class_attendance.attendance.service import SubmissionService
from src.class_attendance.class_attendance.core.constants import EXPORT_COLUMNS
from src.class_attendance.class_attendance.core.exceptions import ValidationError
from src.class_attendance.class_attendance.database.json_store import JsonStore
from src.class_attendance.class_attendance.reports.service import ReportService, natural_key, safe_filename
from src.class_attendance.class_attendance.sessions.json_session_repository import JsonSessionRepository
from src.class_attendance.class_attendance.sessions.service import SessionService

T0 = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


class Fixture:
    def __init__(self):
        store = JsonStore.in_memory()
        sessions_repo = JsonSessionRepository(store)
        attendance_repo = JsonAttendanceRepository(store)
        self.sessions = SessionService(sessions_repo, attendance_repo, transaction=store.transaction)
        self.submissions = SubmissionService(attendance_repo, sessions_repo, transaction=store.transaction)
        self.reports = ReportService(attendance_repo, sessions_repo, transaction=store.transaction)

    def submit(self, session, local: str, name: str = "Student", minute: int = 1):
        return self.submissions.validate_and_record(
            email=f"{local}@nitjsr.ac.in",
            name=name,
            session_code=session.code,
            now=T0 + timedelta(minutes=minute),
        )


def _sheet_rows(content: bytes) -> list[tuple]:
    wb = load_workbook(io.BytesIO(content))
    assert wb.sheetnames == ["Attendance"]
    return list(wb["Attendance"].iter_rows(values_only=True))


def test_natural_key_orders_numbers_by_value():
    rolls = ["2046UGCM10", "2046UGCM9", "2046UGCM100", "2045UGCM50"]
    assert sorted(rolls, key=natural_key) == ["2045UGCM50", "2046UGCM9", "2046UGCM10", "2046UGCM100"]


def test_safe_filename():
    assert safe_filename("DSA Lab/1") == "DSA_Lab_1"


def test_responses_sorted_by_roll_number():
    f = Fixture()
    s = f.sessions.start_session("DSA", now=T0)
    f.submit(s, "2046ugcm10", minute=1)
    f.submit(s, "2046ugcm9", minute=2)
    f.submit(s, "2046ugcm100", minute=3)

    data = f.reports.responses(session_name="DSA")

    assert data["count"] == 3
    assert data["headers"] == EXPORT_COLUMNS
    assert [r["Reg No"] for r in data["responses"]] == ["2046UGCM9", "2046UGCM10", "2046UGCM100"]
    assert data["responses"][0]["Session"] == "DSA"


def test_responses_for_unknown_session_are_empty():
    f = Fixture()
    assert f.reports.responses(session_name="nothing")["count"] == 0
    assert f.reports.responses()["count"] == 0


def test_empty_export_still_has_header_row():
    f = Fixture()

    export = f.reports.export_for_session_name()

    assert export.filename == "Attendance_All.xlsx"
    assert _sheet_rows(export.content) == [tuple(EXPORT_COLUMNS)]


def test_export_by_name_has_fixed_columns_and_values():
    f = Fixture()
    s = f.sessions.start_session("DSA Lab", now=T0)
    f.submit(s, "2046ugcm300", name="Asha Rao")
    f.submit(s, "john.doe", name="John")

    export = f.reports.export_for_session_name("DSA Lab")
    rows = _sheet_rows(export.content)

    assert export.filename == "Attendance_DSA_Lab.xlsx"
    assert rows[0] == tuple(EXPORT_COLUMNS)
    by_email = {row[3]: row for row in rows[1:]}
    assert by_email["2046ugcm300@nitjsr.ac.in"][:8] == (
        "300",
        "Asha Rao",
        "2046UGCM300",
        "2046ugcm300@nitjsr.ac.in",
        "2046",
        "UG",
        "CM",
        "DSA Lab",
    )
    assert by_email["john.doe@nitjsr.ac.in"][:3] == ("-", "John", "JOHN.DOE")


def test_export_multi_merges_sessions():
    f = Fixture()
    a = f.sessions.start_session("A", now=T0)
    b = f.sessions.start_session("B", now=T0)
    c = f.sessions.start_session("C", now=T0)
    f.submit(a, "2046ugcm2")
    f.submit(b, "2046ugcm1")
    f.submit(c, "2046ugcm3")

    export = f.reports.export_for_ids([a.session_id, b.session_id])
    rows = _sheet_rows(export.content)

    assert export.filename == "Attendance_2_sessions.xlsx"
    assert [row[7] for row in rows[1:]] == ["B", "A"]


def test_export_multi_requires_ids():
    with pytest.raises(ValidationError):
        Fixture().reports.export_for_ids([])


def test_qr_png():
    png = ReportService.qr_png("http://testserver/s/ABC123")
    assert png.startswith(b"\x89PNG")
