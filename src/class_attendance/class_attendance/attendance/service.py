from __future__ import annotations

import logging
import math
from contextlib import nullcontext
from datetime import datetime, timedelta
from typing import Any, Callable, ContextManager, Optional

from ..common.datetime_utils import local_date_time, now_utc
from ..common.geo import within_radius
from ..core.constants import (
    DEFAULT_ALLOWED_EMAIL_DOMAIN,
    DEFAULT_GEOFENCE_RADIUS_M,
    DEFAULT_SESSION_DURATION_SECONDS,
    DEFAULT_TIMEZONE,
)
from ..core.enums import SessionState
from ..core.exceptions import (
    DomainRejectedError,
    DuplicateSubmissionError,
    LocationRequiredError,
    MissingFieldError,
    NoActiveSessionError,
    SessionEndedError,
    SessionExpiredError,
    SubmissionError,
    TooFarError,
)
from ..identity.parser import parse_email
from ..sessions.model import ClassSession
from ..sessions.repository import SessionRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

Coordinates = tuple[float, float]


def _text(value: Any) -> str:
    # JSON bodies may carry numbers or lists where a string is expected
    return "" if value is None else str(value).strip()


class SubmissionService:
    """Use case: accept or reject one student's attendance submission.

    Checks run in a fixed order and the first failure wins:
    fields, email domain, session lookup, ended, duplicate, time window,
    geofence. Lookup through append runs in one store transaction.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        *,
        allowed_domain: str = DEFAULT_ALLOWED_EMAIL_DOMAIN,
        duration: timedelta = timedelta(seconds=DEFAULT_SESSION_DURATION_SECONDS),
        geofence_radius_m: float = DEFAULT_GEOFENCE_RADIUS_M,
        timezone: str = DEFAULT_TIMEZONE,
        accept_superseded: bool = True,
        transaction: Optional[Callable[[], ContextManager]] = None,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._domain_suffix = "@" + allowed_domain.strip().lower().lstrip("@")
        self._duration = duration
        self._radius_m = float(geofence_radius_m)
        self._timezone = timezone
        self._accept_superseded = accept_superseded
        self._transaction = transaction or nullcontext

    @property
    def allowed_domain(self) -> str:
        return self._domain_suffix[1:]

    def validate_and_record(
        self,
        *,
        email: Optional[str],
        name: Optional[str],
        session_code: Optional[str] = None,
        coords: Optional[Coordinates] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        try:
            return self._validate_and_record(email=email, name=name, session_code=session_code, coords=coords, now=now)
        except SubmissionError as e:
            logger.info("Submission rejected (%s) email=%r code=%r: %s", type(e).__name__, email, session_code, e)
            raise

    def _validate_and_record(
        self,
        *,
        email: Optional[str],
        name: Optional[str],
        session_code: Optional[str],
        coords: Optional[Coordinates],
        now: Optional[datetime],
    ) -> AttendanceRecord:
        email = _text(email).lower()
        name = _text(name)
        if not email or not name:
            raise MissingFieldError("Email and name are required")

        local, _, _ = email.partition("@")
        if not local or email.count("@") != 1 or not email.endswith(self._domain_suffix):
            raise DomainRejectedError(f"Only {self._domain_suffix} email addresses are allowed")

        now = now or now_utc()
        with self._transaction():
            session = self._resolve_session(session_code)
            self.ensure_open(session)

            if self._attendance.get_for_session_and_email(session.session_id, email):
                raise DuplicateSubmissionError("You have already submitted for this session.")

            if session.is_expired(now, self._duration):
                raise SessionExpiredError("This session has expired.")

            self._check_geofence(session, coords)

            record = self._build_record(session, email=email, name=name, now=now)
            self._attendance.add(record)

        logger.info("Attendance recorded session=%s roll=%s", record.session_id, record.roll_number)
        return record

    def _resolve_session(self, session_code: Optional[str]) -> ClassSession:
        code = _text(session_code)
        if code:
            session = self._sessions.get_by_code(code)
            if not session:
                raise NoActiveSessionError("Invalid session link. Ask your teacher for a new one.")
            return session

        active = sorted(self._sessions.list_active(), key=lambda s: s.session_id, reverse=True)
        if not active:
            raise NoActiveSessionError("No active session. Please wait for your teacher to start one.")
        return active[0]

    def ensure_open(self, session: ClassSession) -> None:
        """Terminal-state checks; ended wins over every later check."""

        if session.state == SessionState.ENDED:
            raise SessionEndedError("This session has ended.")
        if session.state == SessionState.SUPERSEDED and not self._accept_superseded:
            raise SessionEndedError("This session has ended.")

    def form_session(self, session_code: Optional[str], *, now: Optional[datetime] = None) -> ClassSession:
        """Session the student form should bind to, or the reason it cannot be shown."""

        now = now or now_utc()
        with self._transaction():
            session = self._resolve_session(session_code)
        self.ensure_open(session)
        if session.is_expired(now, self._duration):
            raise SessionExpiredError("This session has expired.")
        return session

    def _check_geofence(self, session: ClassSession, coords: Optional[Coordinates]) -> None:
        if not session.has_geofence:
            return
        if coords is None or not all(math.isfinite(c) for c in coords):
            raise LocationRequiredError("Location is required for this session. Please allow location access.")

        inside, distance = within_radius(coords[0], coords[1], session.lat, session.lon, self._radius_m)
        if not inside:
            raise TooFarError(
                f"You are {round(distance)}m away from the class. "
                f"Move within {round(self._radius_m)}m to mark attendance.",
                distance_m=distance,
            )

    def _build_record(self, session: ClassSession, *, email: str, name: str, now: datetime) -> AttendanceRecord:
        info = parse_email(email)
        date_s, time_s = local_date_time(now, self._timezone)
        return AttendanceRecord(
            session_id=session.session_id,
            email=email,
            name=name,
            roll_number=info.roll_number,
            year=info.year,
            program=info.program,
            branch=info.branch,
            roll_no=info.roll_no,
            submitted_at=now,
            date=date_s,
            time=time_s,
        )
