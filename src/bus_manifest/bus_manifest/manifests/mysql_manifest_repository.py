from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..core.enums import ManifestStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import BusSummary, ManifestRecord, NewManifest, StudentSummary, UserSummary
from .repository import ManifestRepository

_COLUMNS = """
    m.manifest_id, m.student_id, m.bus_id, m.assistant_id, m.status,
    m.latitude, m.longitude, m.created_at, m.scan_day
"""


def _to_record(r: Dict[str, Any], **associations) -> ManifestRecord:
    return ManifestRecord(
        manifest_id=int(r["manifest_id"]),
        student_id=int(r["student_id"]),
        bus_id=int(r["bus_id"]),
        assistant_id=int(r["assistant_id"]),
        status=ManifestStatus(r["status"]),
        latitude=float(r["latitude"]),
        longitude=float(r["longitude"]),
        created_at=from_utc_naive(r["created_at"]),
        scan_day=r["scan_day"],
        **associations,
    )


def _assistant(r: Dict[str, Any]) -> Optional[UserSummary]:
    if r.get("assistant_name") is None:
        return None
    return UserSummary(
        user_id=int(r["assistant_id"]),
        name=r["assistant_name"],
        email=r["assistant_email"],
        role=Role(r["assistant_role"]),
    )


class MySQLManifestRepository(ManifestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_unique(self, manifest: NewManifest) -> Optional[ManifestRecord]:
        # uq_manifest_student_status_day makes this insert the whole
        # check-and-write; a concurrent twin fails with ER_DUP_ENTRY.
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO manifests(
                        student_id, bus_id, assistant_id, status,
                        latitude, longitude, created_at, scan_day
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        manifest.student_id,
                        manifest.bus_id,
                        manifest.assistant_id,
                        manifest.status.value,
                        manifest.latitude,
                        manifest.longitude,
                        to_utc_naive(manifest.created_at),
                        manifest.scan_day,
                    ),
                )
                manifest_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                return None
            raise

        return ManifestRecord(
            manifest_id=manifest_id,
            student_id=manifest.student_id,
            bus_id=manifest.bus_id,
            assistant_id=manifest.assistant_id,
            status=manifest.status,
            latitude=manifest.latitude,
            longitude=manifest.longitude,
            created_at=manifest.created_at,
            scan_day=manifest.scan_day,
        )

    def find_for_student_in_window(
        self,
        *,
        student_id: int,
        status: ManifestStatus,
        start: datetime,
        end: datetime,
    ) -> Optional[ManifestRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM manifests m
                WHERE m.student_id=%s AND m.status=%s AND m.created_at BETWEEN %s AND %s
                ORDER BY m.created_at DESC, m.manifest_id DESC
                LIMIT 1
                """,
                (student_id, status.value, to_utc_naive(start), to_utc_naive(end)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_by_bus(self, bus_id: int) -> Sequence[ManifestRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS},
                       s.name AS student_name, s.grade AS student_grade,
                       u.name AS assistant_name, u.email AS assistant_email, u.role AS assistant_role
                FROM manifests m
                LEFT JOIN students s ON s.student_id = m.student_id
                LEFT JOIN users u ON u.user_id = m.assistant_id
                WHERE m.bus_id=%s
                ORDER BY m.created_at DESC, m.manifest_id DESC
                """,
                (bus_id,),
            )
            rows = fetchall(cur)
            return [
                _to_record(
                    r,
                    student=(
                        StudentSummary(
                            student_id=int(r["student_id"]),
                            name=r["student_name"],
                            grade=r.get("student_grade"),
                        )
                        if r.get("student_name") is not None
                        else None
                    ),
                    assistant=_assistant(r),
                )
                for r in rows
            ]

    def list_by_student(self, student_id: int) -> Sequence[ManifestRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS},
                       b.name AS bus_name, b.plate_number AS bus_plate_number,
                       u.name AS assistant_name, u.email AS assistant_email, u.role AS assistant_role
                FROM manifests m
                LEFT JOIN buses b ON b.bus_id = m.bus_id
                LEFT JOIN users u ON u.user_id = m.assistant_id
                WHERE m.student_id=%s
                ORDER BY m.created_at DESC, m.manifest_id DESC
                """,
                (student_id,),
            )
            rows = fetchall(cur)
            return [
                _to_record(
                    r,
                    bus=(
                        BusSummary(
                            bus_id=int(r["bus_id"]),
                            name=r["bus_name"],
                            plate_number=r["bus_plate_number"],
                        )
                        if r.get("bus_name") is not None
                        else None
                    ),
                    assistant=_assistant(r),
                )
                for r in rows
            ]
