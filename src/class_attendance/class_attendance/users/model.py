from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import parse_iso, to_iso


@dataclass(frozen=True)
class User:
    """Domain entity: a teacher account. Plain data, no storage code."""

    user_id: int
    email: str
    name: str
    password_hash: str
    created_at: datetime
    college: Optional[str] = None
    department: Optional[str] = None

    def public_view(self) -> dict[str, Any]:
        return {
            "id": self.user_id,
            "email": self.email,
            "name": self.name,
            "college": self.college,
            "department": self.department,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.user_id,
            "email": self.email,
            "name": self.name,
            "college": self.college,
            "department": self.department,
            "passwordHash": self.password_hash,
            "createdAt": to_iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "User":
        return cls(
            user_id=int(row["id"]),
            email=str(row["email"]).lower(),
            name=str(row.get("name", "")),
            password_hash=str(row.get("passwordHash", "")),
            created_at=parse_iso(row["createdAt"]),
            college=row.get("college"),
            department=row.get("department"),
        )


@dataclass(frozen=True)
class Otp:
    email: str
    otp: str
    expires_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {"email": self.email, "otp": self.otp, "expiresAt": to_iso(self.expires_at)}

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "Otp":
        return cls(email=str(row["email"]), otp=str(row["otp"]), expires_at=parse_iso(row["expiresAt"]))
