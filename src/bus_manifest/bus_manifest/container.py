from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .common.datetime_utils import LocalClock, resolve_timezone
from .core.constants import DEFAULT_TOKEN_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .manifests.mysql_manifest_repository import MySQLManifestRepository
from .manifests.repository import ManifestRepository
from .manifests.service import ManifestLedger
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    manifests_repo: ManifestRepository

    clock: LocalClock
    token_service: TokenService
    auth_service: AuthService
    manifest_ledger: ManifestLedger


def build_container(
    *,
    db_config: dict,
    jwt_secret: str,
    jwt_expires_minutes: int = DEFAULT_TOKEN_MINUTES,
    timezone_name: Optional[str] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    manifests_repo = MySQLManifestRepository(conn)

    clock = LocalClock(resolve_timezone(timezone_name))
    token_service = TokenService(jwt_secret, expires_minutes=jwt_expires_minutes)
    auth_service = AuthService(users_repo, token_service)
    manifest_ledger = ManifestLedger(manifests_repo, clock=clock)

    return Container(
        conn=conn,
        users_repo=users_repo,
        manifests_repo=manifests_repo,
        clock=clock,
        token_service=token_service,
        auth_service=auth_service,
        manifest_ledger=manifest_ledger,
    )
