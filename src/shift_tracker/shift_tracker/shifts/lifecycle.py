from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional, Union

from ..common.datetime_utils import truncate_to_millis
from ..core.enums import BreakKind, ShiftPhase
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .accounting import compute_totals
from .model import BreakRecord, Interval, Location, ShiftState

logger = logging.getLogger(__name__)


class ShiftLifecycle:
    """State machine for one employee's shift.

    NoActiveShift -> OnShift (start), OnShift <-> OnBreak (break start/end),
    OnShift/OnBreak -> NoActiveShift (end). Every guard runs before the first
    mutation, so a rejected transition leaves the shift exactly as it was.
    """

    @staticmethod
    def phase(shift: Optional[ShiftState]) -> ShiftPhase:
        if shift is None or not shift.is_active:
            return ShiftPhase.NO_ACTIVE_SHIFT
        if shift.on_break:
            return ShiftPhase.ON_BREAK
        return ShiftPhase.ON_SHIFT

    @staticmethod
    def parse_break_kind(kind: Union[BreakKind, str, None]) -> BreakKind:
        if isinstance(kind, BreakKind):
            return kind
        try:
            return BreakKind(kind)
        except ValueError:
            raise ValidationError("Invalid break type")

    @staticmethod
    def _check_not_before(shift: ShiftState, now: datetime) -> None:
        if now < shift.latest_timestamp:
            raise ValidationError("Timestamp precedes the last recorded shift event")

    def start(
        self,
        employee_id: int,
        location: Location,
        now: datetime,
        *,
        active: Optional[ShiftState] = None,
    ) -> ShiftState:
        """Open a new shift; ``active`` is the employee's current open shift, if any."""
        if self.phase(active) is not ShiftPhase.NO_ACTIVE_SHIFT:
            raise ConflictError("You already have an active shift")

        now = truncate_to_millis(now)
        shift = ShiftState(
            employee_id=employee_id,
            interval=Interval(start=now),
            start_location=location,
        )
        logger.info("Shift started for employee %s at %s", employee_id, now.isoformat())
        return shift

    def start_break(
        self,
        shift: ShiftState,
        kind: Union[BreakKind, str],
        location: Location,
        now: datetime,
    ) -> ShiftState:
        break_kind = self.parse_break_kind(kind)
        phase = self.phase(shift)
        if phase is ShiftPhase.NO_ACTIVE_SHIFT:
            raise NotFoundError("No active shift found")
        if phase is ShiftPhase.ON_BREAK:
            raise ConflictError("You are already on break")

        now = truncate_to_millis(now)
        self._check_not_before(shift, now)

        shift.breaks.append(BreakRecord(kind=break_kind, interval=Interval(start=now), location=location))
        logger.info("Employee %s started %s break at %s", shift.employee_id, break_kind.value, now.isoformat())
        return shift

    def end_break(self, shift: ShiftState, now: datetime) -> ShiftState:
        if self.phase(shift) is not ShiftPhase.ON_BREAK:
            raise NotFoundError("No active break found")

        now = truncate_to_millis(now)
        self._check_not_before(shift, now)

        self._close_last_break(shift, now)
        logger.info("Employee %s ended break at %s", shift.employee_id, now.isoformat())
        return shift

    def end(self, shift: Optional[ShiftState], location: Optional[Location], now: datetime) -> ShiftState:
        """Close the shift, closing a dangling break at the same instant."""
        if self.phase(shift) is ShiftPhase.NO_ACTIVE_SHIFT:
            raise NotFoundError("No active shift found")

        now = truncate_to_millis(now)
        self._check_not_before(shift, now)

        breaks = list(shift.breaks)
        if shift.on_break:
            breaks[-1] = breaks[-1].closed(now)
        closed = replace(shift, interval=shift.interval.close(now), end_location=location, breaks=breaks)
        totals = compute_totals(closed)

        shift.breaks[:] = breaks
        shift.interval = closed.interval
        shift.end_location = location
        shift.total_working_time = totals.working_ms
        shift.total_break_time = totals.break_ms
        logger.info(
            "Shift ended for employee %s at %s (working=%sms, break=%sms)",
            shift.employee_id,
            now.isoformat(),
            totals.working_ms,
            totals.break_ms,
        )
        return shift

    @staticmethod
    def _close_last_break(shift: ShiftState, now: datetime) -> None:
        shift.breaks[-1] = shift.breaks[-1].closed(now)
