from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an account that can join committees.

    Note: plain data object, no DB access code here.
    """

    user_id: int
    email: str
    name: str
    password_hash: str
    role: Role

    def summary(self) -> "UserSummary":
        return UserSummary(user_id=self.user_id, name=self.name, email=self.email)

    def to_public_dict(self) -> dict:
        return {"id": self.user_id, "email": self.email, "name": self.name, "role": self.role.value}


@dataclass(frozen=True)
class UserSummary:
    """Projection embedded in rosters and reports."""

    user_id: int
    name: str
    email: str

    def to_dict(self) -> dict:
        return {"id": self.user_id, "name": self.name, "email": self.email}


@dataclass(frozen=True)
class Principal:
    """Resolved caller identity. Core services only consume this."""

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
