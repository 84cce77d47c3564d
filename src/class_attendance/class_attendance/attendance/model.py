from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..common.datetime_utils import parse_iso, to_iso


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one accepted submission. Unique on (session_id, email)."""

    session_id: int
    email: str
    name: str
    roll_number: str
    year: str
    program: str
    branch: str
    roll_no: str
    submitted_at: datetime
    date: str
    time: str

    @property
    def reg_no(self) -> str:
        return self.roll_number

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "email": self.email,
            "name": self.name,
            "rollNumber": self.roll_number,
            "regNo": self.reg_no,
            "year": self.year,
            "program": self.program,
            "branch": self.branch,
            "rollNo": self.roll_no,
            "submittedAt": to_iso(self.submitted_at),
            "date": self.date,
            "time": self.time,
        }

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "AttendanceRecord":
        return cls(
            session_id=int(row["sessionId"]),
            email=str(row["email"]),
            name=str(row.get("name", "")),
            roll_number=str(row.get("rollNumber") or row.get("regNo") or ""),
            year=str(row.get("year", "-")),
            program=str(row.get("program", "-")),
            branch=str(row.get("branch", "-")),
            roll_no=str(row.get("rollNo", "-")),
            submitted_at=parse_iso(row["submittedAt"]),
            date=str(row.get("date", "")),
            time=str(row.get("time", "")),
        )
