from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Optional

from ..common.validators import require_number
from ..core.enums import BreakKind
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Location:
    """GPS stamp captured by the client at a transition."""

    latitude: float
    longitude: float
    accuracy: Optional[float] = None

    @classmethod
    def from_dict(cls, payload: Any) -> "Location":
        if not isinstance(payload, dict):
            raise ValidationError("location is required")
        accuracy = payload.get("accuracy")
        return cls(
            latitude=require_number(payload.get("latitude"), "latitude", minimum=-90, maximum=90),
            longitude=require_number(payload.get("longitude"), "longitude", minimum=-180, maximum=180),
            accuracy=None if accuracy is None else require_number(accuracy, "accuracy", minimum=0),
        )

    def to_dict(self) -> dict:
        data = {"latitude": self.latitude, "longitude": self.longitude}
        if self.accuracy is not None:
            data["accuracy"] = self.accuracy
        return data


@dataclass(frozen=True)
class Interval:
    """A start/end pair; ``end`` is None while the interval is still running."""

    start: datetime
    end: Optional[datetime] = None

    def __post_init__(self):
        if self.end is not None and self.end < self.start:
            raise ValueError(f"Interval end {self.end!r} precedes start {self.start!r}")

    @property
    def is_open(self) -> bool:
        return self.end is None

    def duration(self, now: datetime) -> timedelta:
        """Length of the interval, valuing an open end at ``now``."""
        return (self.end if self.end is not None else now) - self.start

    def close(self, at: datetime) -> "Interval":
        if self.end is not None:
            raise ValueError("Interval is already closed")
        return Interval(start=self.start, end=at)


@dataclass(frozen=True)
class BreakRecord:
    """Domain entity: a typed rest interval inside a shift."""

    kind: BreakKind
    interval: Interval
    location: Location

    @property
    def start_time(self) -> datetime:
        return self.interval.start

    @property
    def end_time(self) -> Optional[datetime]:
        return self.interval.end

    def closed(self, at: datetime) -> "BreakRecord":
        return replace(self, interval=self.interval.close(at))

    def to_dict(self) -> dict:
        return {
            "type": self.kind.value,
            "startTime": _iso(self.interval.start),
            "endTime": _iso(self.interval.end),
            "location": self.location.to_dict(),
        }


@dataclass
class ShiftState:
    """Domain entity: one shift and its breaks.

    ``breaks`` is append-only; only its last element may be open. The break
    flag and kind are derived from that last element instead of being stored.
    ``total_working_time`` / ``total_break_time`` are milliseconds and are set
    only when the shift is closed.
    """

    employee_id: int
    interval: Interval
    start_location: Location
    end_location: Optional[Location] = None
    breaks: list[BreakRecord] = field(default_factory=list)
    total_working_time: Optional[int] = None
    total_break_time: Optional[int] = None
    shift_id: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.interval.is_open

    @property
    def last_break(self) -> Optional[BreakRecord]:
        return self.breaks[-1] if self.breaks else None

    @property
    def on_break(self) -> bool:
        last = self.last_break
        return last is not None and last.interval.is_open

    @property
    def active_break_kind(self) -> Optional[BreakKind]:
        return self.last_break.kind if self.on_break else None

    @property
    def latest_timestamp(self) -> datetime:
        """Most recent instant recorded anywhere in the shift."""
        latest = self.interval.end or self.interval.start
        for b in self.breaks:
            latest = max(latest, b.interval.end or b.interval.start)
        return latest

    def to_dict(self) -> dict:
        kind = self.active_break_kind
        return {
            "id": self.shift_id,
            "employeeId": self.employee_id,
            "startTime": _iso(self.interval.start),
            "endTime": _iso(self.interval.end),
            "location": self.start_location.to_dict(),
            "endLocation": self.end_location.to_dict() if self.end_location else None,
            "breaks": [b.to_dict() for b in self.breaks],
            "onBreak": self.on_break,
            "breakType": kind.value if kind else None,
            "totalWorkingTime": self.total_working_time,
            "totalBreakTime": self.total_break_time,
        }


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(timespec="milliseconds") if value else None
