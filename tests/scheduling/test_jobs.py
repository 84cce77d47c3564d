from __future__ import annotations

import logging
from datetime import timedelta

from src.class_attendance.class_attendance.attendance.json_attendance_repository import JsonAttendanceRepository
from src.class_attendance.class_attendance.attendance.service import SubmissionService
from src.class_attendance.class_attendance.common.datetime_utils import now_utc
from src.class_attendance.class_attendance.database.json_store import JsonStore
from src.class_attendance.class_attendance.retention.service import RetentionService
from src.class_attendance.class_attendance.scheduling.jobs import (
    run_expire_sweep,
    run_retention_sweep,
    shutdown_scheduler,
    start_background_jobs,
)
from src.class_attendance.class_attendance.sessions.json_session_repository import JsonSessionRepository
from src.class_attendance.class_attendance.sessions.service import SessionService


def _services(store: JsonStore):
    sessions_repo = JsonSessionRepository(store)
    attendance_repo = JsonAttendanceRepository(store)
    sessions = SessionService(sessions_repo, attendance_repo, transaction=store.transaction)
    submissions = SubmissionService(attendance_repo, sessions_repo, transaction=store.transaction)
    retention = RetentionService(sessions_repo, attendance_repo, retention=timedelta(days=2), transaction=store.transaction)
    return sessions, submissions, retention


class FailingSessions:
    def expire_sweep(self):
        raise RuntimeError("disk gone")


class FailingRetention:
    def sweep(self):
        raise RuntimeError("disk gone")


def test_startup_purges_sessions_left_active_by_a_previous_run():
    store = JsonStore.in_memory()
    sessions, submissions, retention = _services(store)
    created = now_utc() - timedelta(days=3)
    old = sessions.start_session("old", now=created)
    submissions.validate_and_record(
        email="2046ugcm300@nitjsr.ac.in", name="Asha", session_code=old.code, now=created + timedelta(minutes=1)
    )
    fresh = sessions.start_session("fresh")

    scheduler = start_background_jobs(sessions=sessions, retention=retention, expire_seconds=10, retention_minutes=60)
    try:
        doc = store.snapshot()
        assert [row["id"] for row in doc["sessions"]] == [fresh.session_id]
        assert doc["attendance"] == []

        jobs = {job.id: job for job in scheduler.get_jobs()}
        assert set(jobs) == {"expire_sessions", "retention_sweep"}
        assert jobs["expire_sessions"].trigger.interval == timedelta(seconds=10)
        assert jobs["retention_sweep"].trigger.interval == timedelta(minutes=60)
        assert all(job.max_instances == 1 and job.coalesce for job in jobs.values())
    finally:
        shutdown_scheduler(scheduler)

    assert not scheduler.running
    # Second call (as at interpreter exit) is a no-op
    shutdown_scheduler(scheduler)


def test_failing_expire_sweep_is_logged_not_raised(caplog):
    with caplog.at_level(logging.ERROR):
        assert run_expire_sweep(FailingSessions()) == 0

    assert "Error in expire sweep" in caplog.text


def test_failing_retention_sweep_is_logged_not_raised(caplog):
    with caplog.at_level(logging.ERROR):
        run_retention_sweep(FailingRetention())

    assert "Error in retention sweep" in caplog.text
