"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DURATION_SECONDS = 10 * 60
DEFAULT_EXPIRE_SWEEP_SECONDS = 10
DEFAULT_RETENTION_DAYS = 2
DEFAULT_RETENTION_SWEEP_MINUTES = 60
DEFAULT_GEOFENCE_RADIUS_M = 80.0
DEFAULT_OTP_TTL_MINUTES = 10
DEFAULT_TIMEZONE = "Asia/Kolkata"
DEFAULT_ALLOWED_EMAIL_DOMAIN = "nitjsr.ac.in"

SESSION_CODE_LENGTH = 6
OTP_LENGTH = 6
MIN_PASSWORD_LENGTH = 6

EARTH_RADIUS_KM = 6371

MISSING = "-"

EXPORT_COLUMNS = [
    "Roll No",
    "Name",
    "Reg No",
    "Email",
    "Year",
    "Program",
    "Branch",
    "Session",
    "Date",
    "Time",
]
