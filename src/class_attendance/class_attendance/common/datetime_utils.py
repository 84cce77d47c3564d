from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def now_utc() -> datetime:
    """Current time, timezone-aware UTC.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def to_millis(value: datetime) -> int:
    return int(round(value.timestamp() * 1000))


def from_millis(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def to_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """Parse the ISO strings written by to_iso (and plain offsets)."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def local_date_time(value: datetime, tz_name: str) -> tuple[str, str]:
    """Date as dd/mm/yyyy and 24h time, in the configured timezone."""
    local = value.astimezone(ZoneInfo(tz_name))
    return local.strftime("%d/%m/%Y"), local.strftime("%H:%M:%S")
