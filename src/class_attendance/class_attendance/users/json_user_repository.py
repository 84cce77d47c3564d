from __future__ import annotations

from typing import Optional

from ..database.json_store import JsonStore
from .model import Otp, User


class JsonUserRepository:
    def __init__(self, store: JsonStore):
        self._store = store

    def next_id(self) -> int:
        with self._store.read() as doc:
            return max((int(u["id"]) for u in doc["users"]), default=0) + 1

    def get_by_id(self, user_id: int) -> Optional[User]:
        with self._store.read() as doc:
            for row in doc["users"]:
                if int(row["id"]) == int(user_id):
                    return User.from_dict(row)
        return None

    def get_by_email(self, email: str) -> Optional[User]:
        email = email.strip().lower()
        with self._store.read() as doc:
            for row in doc["users"]:
                if str(row["email"]).lower() == email:
                    return User.from_dict(row)
        return None

    def add(self, user: User) -> None:
        with self._store.transaction() as doc:
            doc["users"].append(user.to_dict())

    def save(self, user: User) -> None:
        with self._store.transaction() as doc:
            for i, row in enumerate(doc["users"]):
                if int(row["id"]) == user.user_id:
                    doc["users"][i] = user.to_dict()
                    return
            raise KeyError(user.user_id)


class JsonOtpRepository:
    def __init__(self, store: JsonStore):
        self._store = store

    def replace_for_email(self, otp: Otp) -> None:
        with self._store.transaction() as doc:
            doc["otps"] = [row for row in doc["otps"] if row.get("email") != otp.email]
            doc["otps"].append(otp.to_dict())

    def get_for_email(self, email: str) -> Optional[Otp]:
        with self._store.read() as doc:
            for row in doc["otps"]:
                if row.get("email") == email:
                    return Otp.from_dict(row)
        return None

    def delete_for_email(self, email: str) -> None:
        with self._store.transaction() as doc:
            doc["otps"] = [row for row in doc["otps"] if row.get("email") != email]
