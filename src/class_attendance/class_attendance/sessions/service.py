from __future__ import annotations

import logging
import secrets
import string
from contextlib import nullcontext
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, ContextManager, Iterable, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_utc, to_millis
from ..common.netinfo import get_local_ip
from ..common.validators import require_coordinates, require_non_empty
from ..core.constants import DEFAULT_SESSION_DURATION_SECONDS, SESSION_CODE_LENGTH
from ..core.enums import SessionPolicy
from ..core.exceptions import AlreadyStoppedError, NotFoundError
from .model import ClassSession
from .repository import SessionRepository

logger = logging.getLogger(__name__)

Transaction = Callable[[], ContextManager]


def generate_session_code(length: int = SESSION_CODE_LENGTH) -> str:
    # No uniqueness check: 62**6 codes against a few sessions a day
    characters = string.ascii_letters + string.digits
    return "".join(secrets.choice(characters) for _ in range(length))


class SessionService:
    """Use case: start, stop and expire attendance sessions."""

    def __init__(
        self,
        sessions: SessionRepository,
        attendance: AttendanceRepository,
        *,
        policy: SessionPolicy = SessionPolicy.MULTI_ACTIVE,
        duration: timedelta = timedelta(seconds=DEFAULT_SESSION_DURATION_SECONDS),
        transaction: Optional[Transaction] = None,
        public_base_url: Optional[str] = None,
        port: int = 3000,
        code_factory: Callable[[], str] = generate_session_code,
    ):
        self._sessions = sessions
        self._attendance = attendance
        self._policy = policy
        self._duration = duration
        self._transaction = transaction or nullcontext
        self._public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self._port = int(port)
        self._code_factory = code_factory

    @property
    def policy(self) -> SessionPolicy:
        return self._policy

    @property
    def duration(self) -> timedelta:
        return self._duration

    def start_session(
        self,
        name: str,
        *,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> ClassSession:
        name = require_non_empty(name, "Session name")
        coords = require_coordinates(lat, lon)
        now = now or now_utc()

        with self._transaction():
            if self._policy == SessionPolicy.SINGLE_ACTIVE:
                for other in self._sessions.list_active():
                    # superseded: inactive but not stopped
                    self._sessions.save(replace(other, active=False))
                    logger.info("Session %s superseded by a new session", other.session_id)

            session = ClassSession(
                session_id=self._sessions.next_id(to_millis(now)),
                name=name,
                code=self._code_factory(),
                created_at=now,
                active=True,
                lat=coords[0] if coords else None,
                lon=coords[1] if coords else None,
            )
            self._sessions.add(session)

        logger.info(
            "Session started id=%s name=%r geofence=%s policy=%s",
            session.session_id,
            session.name,
            session.has_geofence,
            self._policy.value,
        )
        return session

    def stop_session(self, session_id: Optional[int] = None, *, now: Optional[datetime] = None) -> list[ClassSession]:
        """Stop one session by id, or every active session when no id is given."""

        now = now or now_utc()
        with self._transaction():
            if session_id is None:
                targets = list(self._sessions.list_active())
            else:
                session = self._sessions.get_by_id(int(session_id))
                if not session:
                    raise NotFoundError("Session not found")
                if session.stopped_at is not None:
                    raise AlreadyStoppedError("Session has already ended")
                targets = [session]

            stopped = []
            for session in targets:
                updated = replace(session, active=False, stopped_at=now)
                self._sessions.save(updated)
                stopped.append(updated)

        for session in stopped:
            logger.info("Session stopped id=%s", session.session_id)
        return stopped

    def expire_sweep(self, now: Optional[datetime] = None) -> int:
        """Close active sessions past their window; stopped_at is creation + duration."""

        now = now or now_utc()
        expired = 0
        with self._transaction():
            for session in self._sessions.list_active():
                if session.is_expired(now, self._duration):
                    self._sessions.save(replace(session, active=False, stopped_at=session.expires_at(self._duration)))
                    expired += 1
                    logger.info("Session expired id=%s", session.session_id)
        return expired

    def status(self) -> Optional[ClassSession]:
        """The most recently created active session, if any."""
        active = self.active_sessions()
        return active[0] if active else None

    def active_sessions(self) -> list[ClassSession]:
        return sorted(self._sessions.list_active(), key=lambda s: s.session_id, reverse=True)

    def get(self, session_id: int) -> ClassSession:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise NotFoundError("Session not found")
        return session

    def get_by_code(self, code: str) -> Optional[ClassSession]:
        return self._sessions.get_by_code(code)

    def history(self) -> list[dict]:
        with self._transaction():
            counts = self._attendance.count_by_session()
            sessions = list(self._sessions.list_all())
        sessions.sort(key=lambda s: s.session_id, reverse=True)
        return [
            {
                "id": s.session_id,
                "name": s.name,
                "code": s.code,
                "createdAt": s.to_dict()["createdAt"],
                "stoppedAt": s.to_dict()["stoppedAt"],
                "active": s.active,
                "state": s.state.value,
                "geofence": s.has_geofence,
                "responseCount": counts.get(s.session_id, 0),
            }
            for s in sessions
        ]

    def delete_session(self, session_id: int) -> None:
        with self._transaction():
            if not self._sessions.get_by_id(int(session_id)):
                raise NotFoundError("Session not found")
            self._purge([int(session_id)])

    def delete_many(self, session_ids: Iterable[int]) -> int:
        ids = [int(i) for i in session_ids]
        with self._transaction():
            return self._purge(ids)

    def clear_all(self) -> int:
        with self._transaction():
            return self._purge([s.session_id for s in self._sessions.list_all()])

    def _purge(self, ids: list[int]) -> int:
        records = self._attendance.delete_for_sessions(ids)
        removed = self._sessions.delete_many(ids)
        logger.info("Deleted %s session(s) and %s attendance record(s)", removed, records)
        return removed

    def base_url(self) -> str:
        if self._public_base_url:
            return self._public_base_url
        return f"http://{get_local_ip()}:{self._port}"

    def form_url(self, session: ClassSession) -> str:
        return f"{self.base_url()}/s/{session.code}"
