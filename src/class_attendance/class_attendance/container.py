from __future__ import annotations

from dataclasses import dataclass

from .attendance.json_attendance_repository import JsonAttendanceRepository
from .attendance.service import SubmissionService
from .core.settings import AppSettings
from .database.json_store import JsonStore
from .reports.service import ReportService
from .retention.service import RetentionService
from .sessions.json_session_repository import JsonSessionRepository
from .sessions.service import SessionService
from .users.json_user_repository import JsonOtpRepository, JsonUserRepository
from .users.service import AuthService, OtpNotifier


@dataclass(frozen=True)
class Container:
    settings: AppSettings
    store: JsonStore

    sessions_repo: JsonSessionRepository
    attendance_repo: JsonAttendanceRepository
    users_repo: JsonUserRepository
    otps_repo: JsonOtpRepository

    session_service: SessionService
    submission_service: SubmissionService
    report_service: ReportService
    retention_service: RetentionService
    auth_service: AuthService


def build_container(settings: AppSettings, *, store: JsonStore | None = None, notifier: OtpNotifier | None = None) -> Container:
    store = store or JsonStore(settings.data_path)
    tx = store.transaction

    sessions_repo = JsonSessionRepository(store)
    attendance_repo = JsonAttendanceRepository(store)
    users_repo = JsonUserRepository(store)
    otps_repo = JsonOtpRepository(store)

    session_service = SessionService(
        sessions_repo,
        attendance_repo,
        policy=settings.session_policy,
        duration=settings.session_duration,
        transaction=tx,
        public_base_url=settings.public_base_url,
        port=settings.port,
    )
    submission_service = SubmissionService(
        attendance_repo,
        sessions_repo,
        allowed_domain=settings.allowed_email_domain,
        duration=settings.session_duration,
        geofence_radius_m=settings.geofence_radius_m,
        timezone=settings.timezone,
        accept_superseded=settings.accept_superseded_submissions,
        transaction=tx,
    )
    report_service = ReportService(attendance_repo, sessions_repo, transaction=tx)
    retention_service = RetentionService(sessions_repo, attendance_repo, retention=settings.retention, transaction=tx)
    auth_service = AuthService(
        users_repo,
        otps_repo,
        notifier=notifier,
        otp_ttl=settings.otp_ttl,
        transaction=tx,
    )

    return Container(
        settings=settings,
        store=store,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        users_repo=users_repo,
        otps_repo=otps_repo,
        session_service=session_service,
        submission_service=submission_service,
        report_service=report_service,
        retention_service=retention_service,
        auth_service=auth_service,
    )
