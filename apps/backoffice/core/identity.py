"""
Verified caller identity handed to the ledger.

Authentication happens before the ledger is reached; the ledger only
sees who is calling and with which role.
"""

from dataclasses import dataclass
from typing import Any

from .models import User


@dataclass(frozen=True)
class Caller:
    """An authenticated caller: user id plus role."""

    user_id: int
    role: str = User.Role.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == User.Role.ADMIN

    @classmethod
    def from_user(cls, user: Any) -> "Caller":
        """Build a Caller from an authenticated Django user."""
        role = User.Role.ADMIN if user.is_admin else User.Role.CUSTOMER
        return cls(user_id=user.pk, role=role)
