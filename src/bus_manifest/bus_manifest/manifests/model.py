from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..core.enums import ManifestStatus, Role


@dataclass(frozen=True)
class StudentSummary:
    student_id: int
    name: str
    grade: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.student_id, "name": self.name, "grade": self.grade}


@dataclass(frozen=True)
class BusSummary:
    bus_id: int
    name: str
    plate_number: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.bus_id, "name": self.name, "plateNumber": self.plate_number}


@dataclass(frozen=True)
class UserSummary:
    user_id: int
    name: str
    email: str
    role: Role

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.user_id, "name": self.name, "email": self.email, "role": self.role.value}


@dataclass(frozen=True)
class ManifestRecord:
    """Domain entity: one check-in or check-out scan.

    Records are immutable once written. ``created_at`` is the creation instant
    (aware); ``scan_day`` is the local day it counts against. The associations
    are only filled in by list queries.
    """

    manifest_id: int
    student_id: int
    bus_id: int
    assistant_id: int
    status: ManifestStatus
    latitude: float
    longitude: float
    created_at: datetime
    scan_day: date
    student: Optional[StudentSummary] = None
    bus: Optional[BusSummary] = None
    assistant: Optional[UserSummary] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.manifest_id,
            "studentId": self.student_id,
            "busId": self.bus_id,
            "assistantId": self.assistant_id,
            "status": self.status.value,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "date": self.created_at.isoformat(timespec="milliseconds"),
        }
        if self.student is not None:
            out["student"] = self.student.to_dict()
        if self.bus is not None:
            out["bus"] = self.bus.to_dict()
        if self.assistant is not None:
            out["assistant"] = self.assistant.to_dict()
        return out


@dataclass(frozen=True)
class NewManifest:
    """Write model handed to the repository's conditional insert."""

    student_id: int
    bus_id: int
    assistant_id: int
    status: ManifestStatus
    latitude: float
    longitude: float
    created_at: datetime
    scan_day: date


@dataclass(frozen=True)
class DailyManifestState:
    """Both independent daily axes for one student."""

    student_id: int
    day: date
    checked_in: Optional[ManifestRecord] = None
    checked_out: Optional[ManifestRecord] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "studentId": self.student_id,
            "day": self.day.isoformat(),
            "checkedIn": self.checked_in.to_dict() if self.checked_in else None,
            "checkedOut": self.checked_out.to_dict() if self.checked_out else None,
        }
