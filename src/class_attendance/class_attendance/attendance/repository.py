from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def add(self, record: AttendanceRecord) -> None:
        raise NotImplementedError

    def get_for_session_and_email(self, session_id: int, email: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_sessions(self, session_ids: Iterable[int]) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_all(self) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_by_session(self) -> dict[int, int]:
        raise NotImplementedError

    def delete_for_sessions(self, session_ids: Iterable[int]) -> int:
        raise NotImplementedError
