"""Shared settings read from the environment.

Environment-specific modules (development/testing/production) star-import this
one and override what differs.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]

SECRET_KEY = os.environ.get("SECRET_KEY") or "class-attendance-secret"

# Single JSON document holding users, otps, sessions and attendance
DATA_PATH = os.environ.get("DATA_PATH", str(BASE_DIR / "data.json"))

PORT = int(os.environ.get("PORT", "3000"))
# e.g. https://attendance.example.edu ; empty means http://<local-ip>:<PORT>
PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL") or None

ALLOWED_EMAIL_DOMAIN = os.environ.get("ALLOWED_EMAIL_DOMAIN", "nitjsr.ac.in")

# "multi": sessions run side by side, each on its own timer
# "single": starting a session supersedes the others
SESSION_POLICY = os.environ.get("SESSION_POLICY", "multi")
ACCEPT_SUPERSEDED_SUBMISSIONS = bool(int(os.environ.get("ACCEPT_SUPERSEDED_SUBMISSIONS", "1")))

SESSION_DURATION_SECONDS = int(os.environ.get("SESSION_DURATION_SECONDS", "600"))
EXPIRE_SWEEP_SECONDS = int(os.environ.get("EXPIRE_SWEEP_SECONDS", "10"))
RETENTION_DAYS = int(os.environ.get("RETENTION_DAYS", "2"))
RETENTION_SWEEP_MINUTES = int(os.environ.get("RETENTION_SWEEP_MINUTES", "60"))
GEOFENCE_RADIUS_M = float(os.environ.get("GEOFENCE_RADIUS_M", "80"))
TIMEZONE = os.environ.get("TIMEZONE", "Asia/Kolkata")
OTP_TTL_MINUTES = int(os.environ.get("OTP_TTL_MINUTES", "10"))

SCHEDULER_ENABLED = bool(int(os.environ.get("SCHEDULER_ENABLED", "1")))

# Teacher API (start/stop/history/export) needs a logged-in account; 0 leaves it open
TEACHER_LOGIN_REQUIRED = bool(int(os.environ.get("TEACHER_LOGIN_REQUIRED", "1")))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FILE = os.environ.get("LOG_FILE") or None
