from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from ..database.json_store import JsonStore
from .model import ClassSession


class JsonSessionRepository:
    def __init__(self, store: JsonStore):
        self._store = store

    def next_id(self, now_ms: int) -> int:
        with self._store.read() as doc:
            last = max((int(s["id"]) for s in doc["sessions"]), default=0)
        return max(int(now_ms), last + 1)

    def add(self, session: ClassSession) -> None:
        with self._store.transaction() as doc:
            doc["sessions"].append(session.to_dict())

    def save(self, session: ClassSession) -> None:
        with self._store.transaction() as doc:
            for i, row in enumerate(doc["sessions"]):
                if int(row["id"]) == session.session_id:
                    doc["sessions"][i] = session.to_dict()
                    return
            raise KeyError(session.session_id)

    def get_by_id(self, session_id: int) -> Optional[ClassSession]:
        with self._store.read() as doc:
            for row in doc["sessions"]:
                if int(row["id"]) == int(session_id):
                    return ClassSession.from_dict(row)
        return None

    def get_by_code(self, code: str) -> Optional[ClassSession]:
        with self._store.read() as doc:
            for row in doc["sessions"]:
                if row.get("code") == code:
                    return ClassSession.from_dict(row)
        return None

    def find_latest_by_name(self, name: str) -> Optional[ClassSession]:
        with self._store.read() as doc:
            matches = [row for row in doc["sessions"] if row.get("name") == name]
        if not matches:
            return None
        return ClassSession.from_dict(max(matches, key=lambda r: int(r["id"])))

    def list_all(self) -> List[ClassSession]:
        with self._store.read() as doc:
            return [ClassSession.from_dict(row) for row in doc["sessions"]]

    def list_active(self) -> List[ClassSession]:
        return [s for s in self.list_all() if s.active]

    def list_created_before(self, cutoff: datetime) -> List[ClassSession]:
        return [s for s in self.list_all() if s.created_at < cutoff]

    def delete_many(self, session_ids: Iterable[int]) -> int:
        ids = {int(i) for i in session_ids}
        with self._store.transaction() as doc:
            before = len(doc["sessions"])
            doc["sessions"] = [row for row in doc["sessions"] if int(row["id"]) not in ids]
            return before - len(doc["sessions"])
