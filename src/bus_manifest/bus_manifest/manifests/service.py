from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Type

from ..common.datetime_utils import LocalClock, day_window, truncate_to_millis
from ..core.enums import ManifestStatus
from ..core.exceptions import DuplicateCheckInError, DuplicateCheckOutError, DuplicateManifestError
from .model import DailyManifestState, ManifestRecord, NewManifest
from .repository import ManifestRepository

logger = logging.getLogger(__name__)


class ManifestLedger:
    """Use case: record and read bus check-in/check-out scans.

    Per student and local calendar day there is at most one CHECKED_IN and at
    most one CHECKED_OUT record. The two are independent: a check-out is
    accepted without a check-in on the same day.
    """

    def __init__(self, manifests: ManifestRepository, *, clock: LocalClock):
        self._manifests = manifests
        self._clock = clock

    def record_check_in(
        self,
        *,
        student_id: int,
        bus_id: int,
        assistant_id: int,
        latitude: float,
        longitude: float,
    ) -> ManifestRecord:
        return self._record(
            ManifestStatus.CHECKED_IN,
            DuplicateCheckInError,
            student_id=student_id,
            bus_id=bus_id,
            assistant_id=assistant_id,
            latitude=latitude,
            longitude=longitude,
        )

    def record_check_out(
        self,
        *,
        student_id: int,
        bus_id: int,
        assistant_id: int,
        latitude: float,
        longitude: float,
    ) -> ManifestRecord:
        return self._record(
            ManifestStatus.CHECKED_OUT,
            DuplicateCheckOutError,
            student_id=student_id,
            bus_id=bus_id,
            assistant_id=assistant_id,
            latitude=latitude,
            longitude=longitude,
        )

    def list_by_bus(self, bus_id: int) -> List[ManifestRecord]:
        return self._newest_first(self._manifests.list_by_bus(int(bus_id)))

    def list_by_student(self, student_id: int) -> List[ManifestRecord]:
        return self._newest_first(self._manifests.list_by_student(int(student_id)))

    def today_for_student(self, student_id: int) -> DailyManifestState:
        window = day_window(self._clock.now())

        def find(status: ManifestStatus) -> Optional[ManifestRecord]:
            found = self._manifests.find_for_student_in_window(
                student_id=int(student_id),
                status=status,
                start=window.start,
                end=window.end,
            )
            return self._localized(found) if found is not None else None

        return DailyManifestState(
            student_id=int(student_id),
            day=window.day,
            checked_in=find(ManifestStatus.CHECKED_IN),
            checked_out=find(ManifestStatus.CHECKED_OUT),
        )

    def _record(
        self,
        status: ManifestStatus,
        duplicate_error: Type[DuplicateManifestError],
        *,
        student_id: int,
        bus_id: int,
        assistant_id: int,
        latitude: float,
        longitude: float,
    ) -> ManifestRecord:
        now = truncate_to_millis(self._clock.now())
        window = day_window(now)

        created = self._manifests.create_unique(
            NewManifest(
                student_id=int(student_id),
                bus_id=int(bus_id),
                assistant_id=int(assistant_id),
                status=status,
                latitude=float(latitude),
                longitude=float(longitude),
                created_at=now,
                scan_day=window.day,
            )
        )
        if created is None:
            logger.warning(
                "rejected duplicate %s for student=%s on %s", status.value, student_id, window.day
            )
            raise duplicate_error()

        logger.info(
            "recorded %s manifest=%s student=%s bus=%s assistant=%s",
            status.value,
            created.manifest_id,
            created.student_id,
            created.bus_id,
            created.assistant_id,
        )
        return created

    def _localized(self, record: ManifestRecord) -> ManifestRecord:
        return replace(record, created_at=self._clock.localize(record.created_at))

    def _newest_first(self, records) -> List[ManifestRecord]:
        # newest first, ties by id
        ordered = sorted(records, key=lambda r: (r.created_at, r.manifest_id), reverse=True)
        return [self._localized(r) for r in ordered]
