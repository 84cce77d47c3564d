from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import timedelta
from pathlib import Path
from types import ModuleType
from typing import Any, Mapping, Optional

from . import constants
from .enums import SessionPolicy


@dataclass(frozen=True)
class AppSettings:
    """Typed view over the active settings module (config.development, ...)."""

    secret_key: str
    data_path: Path
    debug: bool = False
    testing: bool = False
    port: int = 3000
    public_base_url: Optional[str] = None
    allowed_email_domain: str = constants.DEFAULT_ALLOWED_EMAIL_DOMAIN
    session_policy: SessionPolicy = SessionPolicy.MULTI_ACTIVE
    accept_superseded_submissions: bool = True
    session_duration_seconds: int = constants.DEFAULT_SESSION_DURATION_SECONDS
    expire_sweep_seconds: int = constants.DEFAULT_EXPIRE_SWEEP_SECONDS
    retention_days: int = constants.DEFAULT_RETENTION_DAYS
    retention_sweep_minutes: int = constants.DEFAULT_RETENTION_SWEEP_MINUTES
    geofence_radius_m: float = constants.DEFAULT_GEOFENCE_RADIUS_M
    timezone: str = constants.DEFAULT_TIMEZONE
    otp_ttl_minutes: int = constants.DEFAULT_OTP_TTL_MINUTES
    scheduler_enabled: bool = True
    teacher_login_required: bool = True
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def session_duration(self) -> timedelta:
        return timedelta(seconds=self.session_duration_seconds)

    @property
    def retention(self) -> timedelta:
        return timedelta(days=self.retention_days)

    @property
    def otp_ttl(self) -> timedelta:
        return timedelta(minutes=self.otp_ttl_minutes)

    @classmethod
    def from_module(cls, settings: ModuleType, overrides: Optional[Mapping[str, Any]] = None) -> "AppSettings":
        """Read UPPER_CASE attributes of a settings module, then apply overrides.

        Overrides use the same UPPER_CASE keys (e.g. {"DATA_PATH": tmp_path / "db.json"}).
        """

        values: dict[str, Any] = {}
        for f in fields(cls):
            key = f.name.upper()
            if hasattr(settings, key):
                values[f.name] = getattr(settings, key)
        for key, value in (overrides or {}).items():
            values[key.lower()] = value

        if "secret_key" not in values or "data_path" not in values:
            raise RuntimeError("Settings module must define SECRET_KEY and DATA_PATH")

        built = cls(secret_key=str(values.pop("secret_key")), data_path=Path(values.pop("data_path")))
        return replace(built, **_coerce(values))


def _coerce(values: dict[str, Any]) -> dict[str, Any]:
    out = dict(values)
    if "session_policy" in out:
        out["session_policy"] = SessionPolicy(str(out["session_policy"]).lower())
    for key in ("debug", "testing", "accept_superseded_submissions", "scheduler_enabled", "teacher_login_required"):
        if key in out:
            out[key] = _as_bool(out[key])
    for key in (
        "port",
        "session_duration_seconds",
        "expire_sweep_seconds",
        "retention_days",
        "retention_sweep_minutes",
        "otp_ttl_minutes",
    ):
        if key in out:
            out[key] = int(out[key])
    if "geofence_radius_m" in out:
        out["geofence_radius_m"] = float(out["geofence_radius_m"])
    if "allowed_email_domain" in out:
        out["allowed_email_domain"] = str(out["allowed_email_domain"]).strip().lower().lstrip("@")
    return out


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)
