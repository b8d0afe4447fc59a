"""Time accounting for a single shift.

All functions are pure: they read a ``ShiftState`` and never mutate it. Only
``ShiftLifecycle.end`` writes their results back into the shift.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..common.datetime_utils import to_millis
from ..core.exceptions import InternalInvariantViolation
from .model import ShiftState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShiftTotals:
    working_ms: int
    break_ms: int


def _violation(message: str, shift: ShiftState) -> InternalInvariantViolation:
    logger.error("%s; shift state: %r", message, shift.to_dict())
    return InternalInvariantViolation(message)


def compute_elapsed(shift: ShiftState, now: datetime) -> timedelta:
    return shift.interval.duration(now)


def compute_break_time(shift: ShiftState, now: datetime) -> timedelta:
    """Sum of all break durations; open breaks run until ``now``.

    An open break is only meaningful while the shift itself is open.
    """
    total = timedelta(0)
    for b in shift.breaks:
        if b.interval.is_open and not shift.is_active:
            raise _violation("Closed shift has an open break", shift)
        total += b.interval.duration(now)
    return total


def compute_working_time(shift: ShiftState, now: datetime) -> timedelta:
    working = compute_elapsed(shift, now) - compute_break_time(shift, now)
    if working < timedelta(0):
        raise _violation(f"Negative working time {working}", shift)
    return working


def compute_totals(shift: ShiftState) -> ShiftTotals:
    """Persistable totals of a closed shift, in milliseconds.

    Working time is derived by subtraction so that working + break equals the
    elapsed shift length exactly.
    """
    if shift.is_active:
        raise _violation("Totals requested for a shift that is still open", shift)

    end = shift.interval.end
    compute_working_time(shift, end)  # raises on negative working time
    break_ms = to_millis(compute_break_time(shift, end))
    working_ms = to_millis(compute_elapsed(shift, end)) - break_ms
    return ShiftTotals(working_ms=working_ms, break_ms=break_ms)
