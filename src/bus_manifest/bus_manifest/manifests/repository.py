from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ManifestStatus
from .model import ManifestRecord, NewManifest


class ManifestRepository(Protocol):
    """Query/write contract the manifest ledger relies on.

    Note (DIP): the ledger depends on this interface, not on MySQL.
    """

    def create_unique(self, manifest: NewManifest) -> Optional[ManifestRecord]:
        """Insert ``manifest`` unless the student already has a record with the
        same status on ``manifest.scan_day``.

        The existence check and the insert must be one atomic operation.
        Returns the stored record, or None when the conflict prevented the
        write. Store faults are raised, never reported as a conflict.
        """

        raise NotImplementedError

    def find_for_student_in_window(
        self,
        *,
        student_id: int,
        status: ManifestStatus,
        start: datetime,
        end: datetime,
    ) -> Optional[ManifestRecord]:
        raise NotImplementedError

    def list_by_bus(self, bus_id: int) -> Sequence[ManifestRecord]:
        """Records for the bus with student and assistant attached, newest first."""

        raise NotImplementedError

    def list_by_student(self, student_id: int) -> Sequence[ManifestRecord]:
        """Records for the student with bus and assistant attached, newest first."""

        raise NotImplementedError
