from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Optional

from ..database.json_store import JsonStore
from .model import AttendanceRecord


class JsonAttendanceRepository:
    def __init__(self, store: JsonStore):
        self._store = store

    def add(self, record: AttendanceRecord) -> None:
        with self._store.transaction() as doc:
            doc["attendance"].append(record.to_dict())

    def get_for_session_and_email(self, session_id: int, email: str) -> Optional[AttendanceRecord]:
        email = email.strip().lower()
        with self._store.read() as doc:
            for row in doc["attendance"]:
                if int(row["sessionId"]) == int(session_id) and row.get("email") == email:
                    return AttendanceRecord.from_dict(row)
        return None

    def list_for_sessions(self, session_ids: Iterable[int]) -> List[AttendanceRecord]:
        ids = {int(i) for i in session_ids}
        with self._store.read() as doc:
            return [AttendanceRecord.from_dict(row) for row in doc["attendance"] if int(row["sessionId"]) in ids]

    def list_all(self) -> List[AttendanceRecord]:
        with self._store.read() as doc:
            return [AttendanceRecord.from_dict(row) for row in doc["attendance"]]

    def count_by_session(self) -> dict[int, int]:
        with self._store.read() as doc:
            return dict(Counter(int(row["sessionId"]) for row in doc["attendance"]))

    def delete_for_sessions(self, session_ids: Iterable[int]) -> int:
        ids = {int(i) for i in session_ids}
        with self._store.transaction() as doc:
            before = len(doc["attendance"])
            doc["attendance"] = [row for row in doc["attendance"] if int(row["sessionId"]) not in ids]
            return before - len(doc["attendance"])
