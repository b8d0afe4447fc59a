from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import ShiftState


class ShiftRepository(Protocol):
    """Repository interface for ShiftState.

    ``save`` must reject a second open shift for the same employee with
    ``ConflictError``; the service layer relies on it as the last line of the
    one-active-shift rule.
    """

    def find_active_shift(self, employee_id: int) -> Optional[ShiftState]:
        raise NotImplementedError

    def find_shifts_in_range(self, employee_id: int, start: datetime, end: datetime) -> Sequence[ShiftState]:
        """Shifts whose start time lies in [start, end]."""

        raise NotImplementedError

    def save(self, shift: ShiftState) -> ShiftState:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, limit: int, offset: int) -> Sequence[ShiftState]:
        raise NotImplementedError

    def count_for_employee(self, employee_id: int) -> int:
        raise NotImplementedError

    def list_all(self, *, limit: int, offset: int) -> Sequence[ShiftState]:
        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError
