from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from .model import User
from .repository import UserRepository
from .tokens import TokenService


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User


class AuthService:
    """Use case: register accounts and log in with email + password."""

    def __init__(self, users: UserRepository, tokens: TokenService):
        self._users = users
        self._tokens = tokens

    def register(self, *, name: str, email: str, password: str, role: str) -> User:
        name = require_non_empty(name, "name")
        email = require_non_empty(email, "email").lower()
        require_min_length(password, "password", MIN_PASSWORD_LENGTH)

        try:
            parsed_role = Role(str(role).lower())
        except ValueError:
            raise ValidationError("role must be one of: driver, assistant") from None
        if parsed_role == Role.ADMIN:
            raise ValidationError("admin accounts cannot self-register")

        if self._users.get_by_email(email):
            raise ValidationError("email already registered")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=parsed_role,
        )
        return User(user_id=user_id, name=name, email=email, password_hash="", role=parsed_role)

    def login(self, email: str, password: str) -> LoginResult:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials")

        return LoginResult(token=self._tokens.issue(user), user=user)
