from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from .model import ClassSession


class SessionRepository(Protocol):
    """Repository interface for ClassSession.

    Note (DIP): services depend on this interface, not on the JSON file.
    """

    def next_id(self, now_ms: int) -> int:
        """Millisecond id, strictly greater than every id handed out so far."""
        raise NotImplementedError

    def add(self, session: ClassSession) -> None:
        raise NotImplementedError

    def save(self, session: ClassSession) -> None:
        raise NotImplementedError

    def get_by_id(self, session_id: int) -> Optional[ClassSession]:
        raise NotImplementedError

    def get_by_code(self, code: str) -> Optional[ClassSession]:
        raise NotImplementedError

    def find_latest_by_name(self, name: str) -> Optional[ClassSession]:
        raise NotImplementedError

    def list_all(self) -> Sequence[ClassSession]:
        """Oldest first (insertion order)."""
        raise NotImplementedError

    def list_active(self) -> Sequence[ClassSession]:
        raise NotImplementedError

    def list_created_before(self, cutoff: datetime) -> Sequence[ClassSession]:
        raise NotImplementedError

    def delete_many(self, session_ids: Iterable[int]) -> int:
        raise NotImplementedError
