from __future__ import annotations

import logging
import secrets
from contextlib import nullcontext
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, ContextManager, Optional, Protocol

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_utc
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import DEFAULT_OTP_TTL_MINUTES, MIN_PASSWORD_LENGTH, OTP_LENGTH
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from .model import Otp, User
from .repository import OtpRepository, UserRepository

logger = logging.getLogger(__name__)


class OtpNotifier(Protocol):
    def send_otp(self, *, email: str, name: str, otp: str, expires_at: datetime) -> None:
        raise NotImplementedError


class LoggingOtpNotifier:
    """Default delivery: write the code to the server log (no mail server configured)."""

    def send_otp(self, *, email: str, name: str, otp: str, expires_at: datetime) -> None:
        logger.warning("Password reset code for %s: %s (expires %s)", email, otp, expires_at.isoformat())


def _normalize_email(email: Optional[str]) -> str:
    email = require_non_empty(email, "Email").lower()
    if "@" not in email:
        raise ValidationError("Email is not valid")
    return email


class AuthService:
    """Use case: teacher accounts (register, login, password reset, profile)."""

    def __init__(
        self,
        users: UserRepository,
        otps: OtpRepository,
        *,
        notifier: Optional[OtpNotifier] = None,
        otp_ttl: timedelta = timedelta(minutes=DEFAULT_OTP_TTL_MINUTES),
        transaction: Optional[Callable[[], ContextManager]] = None,
    ):
        self._users = users
        self._otps = otps
        self._notifier = notifier or LoggingOtpNotifier()
        self._otp_ttl = otp_ttl
        self._transaction = transaction or nullcontext

    def register(
        self,
        *,
        email: str,
        name: str,
        password: str,
        college: Optional[str] = None,
        department: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> User:
        email = _normalize_email(email)
        name = require_non_empty(name, "Name")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        with self._transaction():
            if self._users.get_by_email(email):
                raise ValidationError("An account with this email already exists")

            user = User(
                user_id=self._users.next_id(),
                email=email,
                name=name,
                password_hash=generate_password_hash(password),
                created_at=now or now_utc(),
                college=(college or "").strip() or None,
                department=(department or "").strip() or None,
            )
            self._users.add(user)

        logger.info("Registered user id=%s", user.user_id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not self._password_matches(user, password):
            raise AuthenticationError("Invalid email or password")
        return user

    def request_password_reset(self, email: str, *, now: Optional[datetime] = None) -> Otp:
        email = _normalize_email(email)
        user = self._users.get_by_email(email)
        if not user:
            raise NotFoundError("No account found with this email")

        otp = Otp(
            email=email,
            otp="".join(str(secrets.randbelow(10)) for _ in range(OTP_LENGTH)),
            expires_at=(now or now_utc()) + self._otp_ttl,
        )
        self._otps.replace_for_email(otp)
        self._notifier.send_otp(email=email, name=user.name, otp=otp.otp, expires_at=otp.expires_at)
        return otp

    def reset_password(self, *, email: str, otp: str, new_password: str, now: Optional[datetime] = None) -> None:
        email = _normalize_email(email)
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)
        now = now or now_utc()

        with self._transaction():
            stored = self._otps.get_for_email(email)
            if not stored or not secrets.compare_digest(stored.otp, (otp or "").strip()):
                raise AuthenticationError("Invalid code")
            expired = stored.expires_at < now
            if expired:
                self._otps.delete_for_email(email)

        if expired:
            raise AuthenticationError("Code has expired. Request a new one.")

        with self._transaction():
            user = self._users.get_by_email(email)
            if not user:
                raise NotFoundError("No account found with this email")

            self._users.save(replace(user, password_hash=generate_password_hash(new_password)))
            self._otps.delete_for_email(email)

        logger.info("Password reset for user id=%s", user.user_id)

    def change_password(self, *, user_id: int, current_password: str, new_password: str) -> None:
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)
        with self._transaction():
            user = self._require_user(user_id)
            if not self._password_matches(user, current_password):
                raise AuthenticationError("Current password is incorrect")
            self._users.save(replace(user, password_hash=generate_password_hash(new_password)))

    def update_profile(
        self,
        *,
        user_id: int,
        name: Optional[str] = None,
        college: Optional[str] = None,
        department: Optional[str] = None,
    ) -> User:
        with self._transaction():
            user = self._require_user(user_id)
            updated = replace(
                user,
                name=require_non_empty(name, "Name") if name is not None else user.name,
                college=(college.strip() or None) if college is not None else user.college,
                department=(department.strip() or None) if department is not None else user.department,
            )
            self._users.save(updated)
        return updated

    def get_user(self, user_id: int) -> User:
        return self._require_user(user_id)

    def _require_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def _password_matches(user: User, password: Optional[str]) -> bool:
        try:
            return check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hashes in a hand-edited data file
            return False
