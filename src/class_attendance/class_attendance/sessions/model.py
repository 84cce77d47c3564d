from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from ..common.datetime_utils import from_millis, parse_iso, to_iso, to_millis
from ..core.enums import SessionState


@dataclass(frozen=True)
class ClassSession:
    """Domain entity: one attendance-taking window.

    session_id is the creation wall-clock in milliseconds and is what expiry
    is computed from. stopped_at marks the terminal "ended" state (explicit
    stop or expiry); inactive without stopped_at means superseded by a newer
    session under the single-active policy.
    """

    session_id: int
    name: str
    code: str
    created_at: datetime
    active: bool
    stopped_at: Optional[datetime] = None
    lat: Optional[float] = None
    lon: Optional[float] = None

    @property
    def state(self) -> SessionState:
        if self.stopped_at is not None:
            return SessionState.ENDED
        if self.active:
            return SessionState.ACTIVE
        return SessionState.SUPERSEDED

    @property
    def has_geofence(self) -> bool:
        return self.lat is not None and self.lon is not None

    def expires_at(self, duration: timedelta) -> datetime:
        return from_millis(self.session_id) + duration

    def is_expired(self, now: datetime, duration: timedelta) -> bool:
        # Shared by the expiry sweep and the submission time-window check
        return to_millis(now) - self.session_id >= int(duration.total_seconds() * 1000)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.session_id,
            "name": self.name,
            "code": self.code,
            "createdAt": to_iso(self.created_at),
            "active": self.active,
            "stoppedAt": to_iso(self.stopped_at) if self.stopped_at else None,
            "lat": self.lat,
            "lon": self.lon,
        }

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "ClassSession":
        created = row.get("createdAt")
        stopped = row.get("stoppedAt")
        return cls(
            session_id=int(row["id"]),
            name=str(row.get("name", "")),
            code=str(row.get("code", "")),
            created_at=parse_iso(created) if created else from_millis(int(row["id"])),
            active=bool(row.get("active", False)),
            stopped_at=parse_iso(stopped) if stopped else None,
            lat=float(row["lat"]) if row.get("lat") is not None else None,
            lon=float(row["lon"]) if row.get("lon") is not None else None,
        )
