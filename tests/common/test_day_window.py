from __future__ import annotations

import time as time_module
from datetime import date, datetime, time, timedelta, timezone

import pytest

from src.bus_manifest.bus_manifest.common.datetime_utils import (
    LocalClock,
    day_window,
    from_utc_naive,
    resolve_timezone,
    to_utc_naive,
    truncate_to_millis,
)

EAT = timezone(timedelta(hours=3))


def test_window_spans_local_midnight_to_last_millisecond():
    w = day_window(datetime(2026, 2, 2, 15, 30, tzinfo=EAT))

    assert w.start == datetime(2026, 2, 2, 0, 0, tzinfo=EAT)
    assert w.end == datetime(2026, 2, 2, 23, 59, 59, 999000, tzinfo=EAT)
    assert w.day == date(2026, 2, 2)


def test_window_boundaries_are_inclusive():
    w = day_window(datetime(2026, 2, 2, 9, 0, tzinfo=EAT))

    assert w.contains(w.start)
    assert w.contains(w.end)
    assert not w.contains(w.start - timedelta(milliseconds=1))
    assert not w.contains(w.end + timedelta(milliseconds=1))


def test_window_uses_the_zone_of_now():
    # 22:30 UTC on Feb 1 is already Feb 2 in EAT
    utc_now = datetime(2026, 2, 1, 22, 30, tzinfo=timezone.utc)

    assert day_window(utc_now).day == date(2026, 2, 1)
    assert day_window(utc_now.astimezone(EAT)).day == date(2026, 2, 2)


def test_naive_now_gives_naive_window():
    w = day_window(datetime(2026, 2, 2, 12, 0))

    assert w.start.tzinfo is None
    assert w.end.time() == time(23, 59, 59, 999000)


def test_local_clock_reports_its_zone():
    clock = LocalClock(EAT)

    assert clock.now().utcoffset() == timedelta(hours=3)
    assert day_window(clock.now()).contains(clock.now())


def test_resolve_timezone_without_name_follows_server_zone():
    assert resolve_timezone(None) is None
    assert resolve_timezone("Africa/Nairobi").utcoffset(datetime(2026, 2, 2)) == timedelta(hours=3)


@pytest.fixture
def new_york_local(monkeypatch):
    if not hasattr(time_module, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "America/New_York")
    time_module.tzset()
    yield
    monkeypatch.undo()
    time_module.tzset()


def test_server_zone_clock_follows_dst_changes(new_york_local):
    clock = LocalClock()

    winter = clock.localize(datetime(2026, 12, 1, 4, 30, tzinfo=timezone.utc))
    summer = clock.localize(datetime(2026, 7, 1, 3, 30, tzinfo=timezone.utc))

    assert winter.utcoffset() == timedelta(hours=-5)
    assert day_window(winter).day == date(2026, 11, 30)
    assert summer.utcoffset() == timedelta(hours=-4)
    assert day_window(summer).day == date(2026, 6, 30)


def test_server_zone_clock_now_is_aware():
    assert LocalClock().now().tzinfo is not None


def test_utc_naive_round_trip_preserves_instant():
    local = datetime(2026, 2, 2, 7, 0, tzinfo=EAT)
    stored = to_utc_naive(local)

    assert stored == datetime(2026, 2, 2, 4, 0)
    assert from_utc_naive(stored) == local


def test_truncate_to_millis():
    value = datetime(2026, 2, 2, 7, 0, 0, 123456, tzinfo=EAT)

    assert truncate_to_millis(value).microsecond == 123000
