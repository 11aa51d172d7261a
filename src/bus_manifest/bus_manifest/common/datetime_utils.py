from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

_END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class DayWindow:
    """Inclusive [start, end] span of one local calendar day."""

    start: datetime
    end: datetime

    @property
    def day(self) -> date:
        return self.start.date()

    def contains(self, value: datetime) -> bool:
        return self.start <= value <= self.end


def day_window(now: datetime) -> DayWindow:
    """Local midnight to 23:59:59.999 of the day containing ``now``.

    The window is built in ``now``'s own timezone (naive stays naive).
    """
    start = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)
    end = datetime.combine(now.date(), _END_OF_DAY, tzinfo=now.tzinfo)
    return DayWindow(start=start, end=end)


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """IANA zone by name; None means "follow the server's local zone"."""
    return ZoneInfo(name) if name else None


class LocalClock:
    """Time source for the ledger.

    Wrapped so tests can inject a fixed instant and so the zone that defines
    "today" is an explicit setting instead of the process default. Without a
    zone, every instant is converted with the system's local rules at that
    instant, so DST changes move the day boundary with them.
    """

    def __init__(self, tz: Optional[tzinfo] = None):
        self._tz = tz

    def now(self) -> datetime:
        return self.localize(datetime.now(timezone.utc))

    def localize(self, value: datetime) -> datetime:
        """Render an aware instant in the clock's zone."""
        if self._tz is None:
            return value.astimezone()
        return value.astimezone(self._tz)


def to_utc_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC for DATETIME columns."""
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_utc_naive(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc)


def truncate_to_millis(value: datetime) -> datetime:
    """Drop sub-millisecond precision to match DATETIME(3) storage."""
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)
