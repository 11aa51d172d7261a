from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from ..core.constants import DEFAULT_TOKEN_MINUTES
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .model import Principal, User

ALGORITHM = "HS256"


class TokenService:
    """Issue and verify HS256 bearer tokens."""

    def __init__(
        self,
        secret: str,
        *,
        expires_minutes: int = DEFAULT_TOKEN_MINUTES,
        now: Optional[Callable[[], datetime]] = None,
    ):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._ttl = timedelta(minutes=int(expires_minutes))
        self._now = now or (lambda: datetime.now(timezone.utc))

    def issue(self, user: User) -> str:
        issued_at = self._now()
        payload = {
            "sub": str(user.user_id),
            "role": user.role.value,
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def decode(self, token: str) -> Principal:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token expired") from None
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid token") from None

        try:
            return Principal(user_id=int(payload["sub"]), role=Role(payload["role"]))
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError("Invalid token claims") from None
