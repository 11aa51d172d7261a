from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.bus_manifest.bus_manifest.common.datetime_utils import LocalClock
from src.bus_manifest.bus_manifest.container import Container
from src.bus_manifest.bus_manifest.core.enums import ManifestStatus, Role
from src.bus_manifest.bus_manifest.manifests.model import (
    BusSummary,
    ManifestRecord,
    NewManifest,
    StudentSummary,
    UserSummary,
)
from src.bus_manifest.bus_manifest.manifests.service import ManifestLedger
from src.bus_manifest.bus_manifest.users.model import User
from src.bus_manifest.bus_manifest.users.service import AuthService
from src.bus_manifest.bus_manifest.users.tokens import TokenService

EAT = timezone(timedelta(hours=3), "EAT")


class FixedClock(LocalClock):
    """Clock pinned to a settable instant; `advance` moves it forward."""

    def __init__(self, now: datetime):
        super().__init__(now.tzinfo)
        self.set(now)

    def set(self, now: datetime) -> None:
        if now.tzinfo is None:
            raise ValueError("FixedClock needs an aware datetime")
        self._now = now

    def advance(self, delta: timedelta) -> None:
        self._now = self._now + delta

    def now(self) -> datetime:
        return self._now


class InMemoryManifests:
    """Manifest store keyed like the MySQL unique key (student, status, day)."""

    def __init__(self, *, students=None, buses=None, users=None):
        self.records: list[ManifestRecord] = []
        self.students: dict[int, StudentSummary] = students or {}
        self.buses: dict[int, BusSummary] = buses or {}
        self.users: dict[int, UserSummary] = users or {}
        self.fail_with: Optional[Exception] = None
        self._lock = threading.Lock()
        self._id = 0

    def _check_fault(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def create_unique(self, manifest: NewManifest) -> Optional[ManifestRecord]:
        self._check_fault()
        with self._lock:
            for r in self.records:
                if (r.student_id, r.status, r.scan_day) == (manifest.student_id, manifest.status, manifest.scan_day):
                    return None
            self._id += 1
            rec = ManifestRecord(
                manifest_id=self._id,
                student_id=manifest.student_id,
                bus_id=manifest.bus_id,
                assistant_id=manifest.assistant_id,
                status=manifest.status,
                latitude=manifest.latitude,
                longitude=manifest.longitude,
                created_at=manifest.created_at,
                scan_day=manifest.scan_day,
            )
            self.records.append(rec)
            return rec

    def find_for_student_in_window(self, *, student_id: int, status: ManifestStatus, start: datetime, end: datetime):
        self._check_fault()
        for r in self.records:
            if r.student_id == student_id and r.status == status and start <= r.created_at <= end:
                return r
        return None

    def list_by_bus(self, bus_id: int):
        self._check_fault()
        items = [
            replace(r, student=self.students.get(r.student_id), assistant=self.users.get(r.assistant_id))
            for r in self.records
            if r.bus_id == bus_id
        ]
        items.sort(key=lambda r: r.created_at, reverse=True)
        return items

    def list_by_student(self, student_id: int):
        self._check_fault()
        items = [
            replace(r, bus=self.buses.get(r.bus_id), assistant=self.users.get(r.assistant_id))
            for r in self.records
            if r.student_id == student_id
        ]
        items.sort(key=lambda r: r.created_at, reverse=True)
        return items


@dataclass
class InMemoryUsers:
    users_by_id: dict[int, User] = field(default_factory=dict)

    def get_by_email(self, email: str) -> Optional[User]:
        for u in self.users_by_id.values():
            if u.email == email:
                return u
        return None

    def create_user(self, *, name: str, email: str, password_hash: str, role: Role) -> int:
        user_id = len(self.users_by_id) + 1
        self.users_by_id[user_id] = User(user_id=user_id, name=name, email=email, password_hash=password_hash, role=role)
        return user_id


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 7, 0, 0, tzinfo=EAT)


@pytest.fixture
def clock(fixed_now) -> FixedClock:
    return FixedClock(fixed_now)


@pytest.fixture
def manifests_repo() -> InMemoryManifests:
    return InMemoryManifests(
        students={1: StudentSummary(student_id=1, name="Emma Student", grade="Grade 5")},
        buses={7: BusSummary(bus_id=7, name="Morning Express", plate_number="KAA123X")},
        users={3: UserSummary(user_id=3, name="Alice Assistant", email="alice.assistant@example.com", role=Role.ASSISTANT)},
    )


@pytest.fixture
def ledger(manifests_repo, clock) -> ManifestLedger:
    return ManifestLedger(manifests_repo, clock=clock)


@pytest.fixture
def users_repo() -> InMemoryUsers:
    alice = User(
        user_id=3,
        name="Alice Assistant",
        email="alice.assistant@example.com",
        password_hash=generate_password_hash("assistant123"),
        role=Role.ASSISTANT,
    )
    return InMemoryUsers({3: alice})


@pytest.fixture
def token_service() -> TokenService:
    return TokenService("test-jwt-secret", expires_minutes=60)


@pytest.fixture
def container(users_repo, manifests_repo, clock, token_service, ledger) -> Container:
    return Container(
        conn=None,
        users_repo=users_repo,
        manifests_repo=manifests_repo,
        clock=clock,
        token_service=token_service,
        auth_service=AuthService(users_repo, token_service),
        manifest_ledger=ledger,
    )


@pytest.fixture
def client(container, monkeypatch):
    from src.bus_manifest.bus_manifest.main import create_app

    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()


@pytest.fixture
def auth_header(users_repo, token_service) -> dict:
    token = token_service.issue(users_repo.users_by_id[3])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def scan():
    def _scan(**overrides) -> dict:
        body = {"studentId": 1, "busId": 7, "assistantId": 3, "latitude": -1.2921, "longitude": 36.8219}
        body.update(overrides)
        return body

    return _scan
