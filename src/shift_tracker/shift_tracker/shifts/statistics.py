"""Working-hour totals over calendar windows.

A shift is counted in a window when its *start time* falls inside the window.
A shift that starts before the window and runs into it contributes nothing to
that window, and a shift that starts inside it is counted in full even if it
runs past the window's end.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from ..common.datetime_utils import (
    end_of_day,
    end_of_month,
    end_of_week,
    start_of_day,
    start_of_month,
    start_of_week,
    to_millis,
)
from ..core.constants import MS_PER_HOUR
from .accounting import compute_working_time
from .model import ShiftState
from .repository import ShiftRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive [start, end] range."""

    start: datetime
    end: datetime

    def contains(self, value: datetime) -> bool:
        return self.start <= value <= self.end


@dataclass(frozen=True)
class ShiftStatistics:
    today: float
    weekly: float
    monthly: float

    def to_dict(self) -> dict:
        return {"today": self.today, "weekly": self.weekly, "monthly": self.monthly}


def day_window(now: datetime) -> TimeWindow:
    return TimeWindow(start_of_day(now), end_of_day(now))


def week_window(now: datetime) -> TimeWindow:
    return TimeWindow(start_of_week(now), end_of_week(now))


def month_window(now: datetime) -> TimeWindow:
    return TimeWindow(start_of_month(now), end_of_month(now))


class StatisticsAggregator:
    def __init__(self, shifts: ShiftRepository):
        self._shifts = shifts

    @staticmethod
    def total_hours(shifts: Iterable[ShiftState], now: datetime) -> float:
        """Net working hours of ``shifts``; open shifts run until ``now``."""
        total = timedelta(0)
        for shift in shifts:
            total += compute_working_time(shift, now)
        return to_millis(total) / MS_PER_HOUR

    def hours_in_window(self, employee_id: int, window: TimeWindow, now: datetime) -> float:
        shifts = self._shifts.find_shifts_in_range(employee_id, window.start, window.end)
        return self.total_hours((s for s in shifts if window.contains(s.interval.start)), now)

    def compute(self, employee_id: int, now: datetime) -> ShiftStatistics:
        stats = ShiftStatistics(
            today=self.hours_in_window(employee_id, day_window(now), now),
            weekly=self.hours_in_window(employee_id, week_window(now), now),
            monthly=self.hours_in_window(employee_id, month_window(now), now),
        )
        logger.debug("Statistics for employee %s at %s: %s", employee_id, now.isoformat(), stats)
        return stats
