from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from ..core.constants import JWT_ALGORITHM, TOKEN_TTL_DAYS
from ..core.exceptions import AuthenticationError


class TokenCodec:
    """Issues and verifies signed bearer tokens carrying a `userId` claim."""

    def __init__(self, secret: str, *, ttl_days: int = TOKEN_TTL_DAYS, algorithm: str = JWT_ALGORITHM):
        if not secret:
            raise ValueError("JWT secret must be configured")
        self._secret = secret
        self._ttl = timedelta(days=int(ttl_days))
        self._algorithm = algorithm

    def issue(self, user_id: int, *, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {"userId": int(user_id), "iat": now, "exp": now + self._ttl}
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> int:
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.PyJWTError:
            raise AuthenticationError("Invalid or expired token")

        user_id = claims.get("userId")
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise AuthenticationError("Invalid or expired token")
        return user_id
