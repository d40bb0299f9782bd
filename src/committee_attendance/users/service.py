from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from .model import Principal, User
from .repository import UserRepository
from .tokens import TokenCodec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    """Returned by register/login: the account and a bearer token."""

    user: User
    token: str

    def to_dict(self) -> dict:
        return {"user": self.user.to_public_dict(), "token": self.token}


class AuthService:
    """Use cases: register, login and resolving bearer tokens to a Principal."""

    def __init__(self, users: UserRepository, tokens: TokenCodec):
        self._users = users
        self._tokens = tokens

    def register(self, *, email: str, password: str, name: str) -> AuthResult:
        email = require_non_empty(email, "Email").lower()
        name = require_non_empty(name, "Name")
        require_non_empty(password, "Password")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._users.get_by_email(email):
            raise ValidationError("User already exists")

        user_id = self._users.create_user(
            email=email,
            name=name,
            password_hash=generate_password_hash(password),
            role=Role.MEMBER,
        )
        user = self._users.get_by_id(user_id)
        if not user:
            raise ValidationError("Registration failed")

        logger.info("Registered user %s", user.user_id)
        return AuthResult(user=user, token=self._tokens.issue(user.user_id))

    def login(self, *, email: str, password: str) -> AuthResult:
        if not isinstance(email, str) or not isinstance(password, str) or not email.strip() or not password:
            raise ValidationError("Email and password are required")

        user = self._users.get_by_email(email.strip().lower())
        if not user:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # placeholder or corrupted hashes
            ok = False
        if not ok:
            logger.warning("Failed login for user %s", user.user_id)
            raise AuthenticationError("Invalid credentials")

        return AuthResult(user=user, token=self._tokens.issue(user.user_id))

    def resolve_principal(self, token: Optional[str]) -> Principal:
        if not token:
            raise AuthenticationError("Authentication required")

        user_id = self._tokens.decode(token)
        user = self._users.get_by_id(user_id)
        if not user:
            raise AuthenticationError("User not found")
        return Principal(user_id=user.user_id, role=user.role)
