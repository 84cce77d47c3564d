from __future__ import annotations

from typing import Optional, Protocol

from .model import Otp, User


class UserRepository(Protocol):
    """Repository interface for User."""

    def next_id(self) -> int:
        raise NotImplementedError

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def add(self, user: User) -> None:
        raise NotImplementedError

    def save(self, user: User) -> None:
        raise NotImplementedError


class OtpRepository(Protocol):
    def replace_for_email(self, otp: Otp) -> None:
        """Drop any previous OTP for the email, then store this one."""
        raise NotImplementedError

    def get_for_email(self, email: str) -> Optional[Otp]:
        raise NotImplementedError

    def delete_for_email(self, email: str) -> None:
        raise NotImplementedError
