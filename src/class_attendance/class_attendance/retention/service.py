from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, ContextManager, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_RETENTION_DAYS
from ..sessions.repository import SessionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetentionResult:
    sessions_removed: int
    records_removed: int


class RetentionService:
    """Purge sessions older than the retention window, with their attendance.

    Active sessions are kept regardless of age.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        attendance: AttendanceRepository,
        *,
        retention: timedelta = timedelta(days=DEFAULT_RETENTION_DAYS),
        transaction: Optional[Callable[[], ContextManager]] = None,
    ):
        self._sessions = sessions
        self._attendance = attendance
        self._retention = retention
        self._transaction = transaction or nullcontext

    def sweep(self, now: Optional[datetime] = None) -> RetentionResult:
        cutoff = (now or now_utc()) - self._retention
        with self._transaction():
            stale = [s.session_id for s in self._sessions.list_created_before(cutoff) if not s.active]
            if not stale:
                return RetentionResult(sessions_removed=0, records_removed=0)
            records = self._attendance.delete_for_sessions(stale)
            removed = self._sessions.delete_many(stale)

        logger.info("Retention sweep removed %s session(s), %s record(s) older than %s", removed, records, cutoff)
        return RetentionResult(sessions_removed=removed, records_removed=records)
