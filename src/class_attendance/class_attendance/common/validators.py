from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def optional_float(value: Any, field_name: str) -> Optional[float]:
    """Accept numbers or numeric strings from JSON/form bodies; blank means None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def require_coordinates(lat: Optional[float], lon: Optional[float]) -> Optional[tuple[float, float]]:
    if lat is None and lon is None:
        return None
    if lat is None or lon is None:
        raise ValidationError("Latitude and longitude must be given together")
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
        raise ValidationError("Coordinates out of range")
    return lat, lon
