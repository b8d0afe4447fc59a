from __future__ import annotations

import calendar
from datetime import datetime, time, timedelta

_ONE_MS = timedelta(milliseconds=1)



def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def truncate_to_millis(value: datetime) -> datetime:
    """Drop sub-millisecond precision (durations are stored in ms)."""
    return value.replace(microsecond=value.microsecond - value.microsecond % 1000)


def to_millis(value: timedelta) -> int:
    return value // _ONE_MS


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max)


def start_of_week(value: datetime) -> datetime:
    """Monday 00:00 of the week containing ``value``."""
    return start_of_day(value) - timedelta(days=value.weekday())


def end_of_week(value: datetime) -> datetime:
    return end_of_day(start_of_week(value) + timedelta(days=6))


def start_of_month(value: datetime) -> datetime:
    return datetime.combine(value.date().replace(day=1), time.min)


def end_of_month(value: datetime) -> datetime:
    last_day = calendar.monthrange(value.year, value.month)[1]
    return datetime.combine(value.date().replace(day=last_day), time.max)


def format_duration(value: timedelta) -> str:
    """Render a duration as ``Xh Ym`` (seconds are dropped)."""
    total_minutes = int(value.total_seconds()) // 60
    return f"{total_minutes // 60}h {total_minutes % 60}m"
