from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a driver, assistant or admin account.

    Note: plain data object, no DB access here.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    created_at: Optional[datetime] = None

    def to_public_dict(self) -> Dict[str, Any]:
        return {"id": self.user_id, "name": self.name, "email": self.email, "role": self.role.value}


@dataclass(frozen=True)
class Principal:
    """Authenticated caller resolved from a bearer token."""

    user_id: int
    role: Role
