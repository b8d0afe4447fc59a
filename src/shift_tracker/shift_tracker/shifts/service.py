from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence, Union

from ..common.datetime_utils import now_local
from ..common.locks import KeyedLocks
from ..common.validators import require_positive_int
from ..core.constants import DEFAULT_ADMIN_PAGE_LIMIT, DEFAULT_HISTORY_LIMIT
from ..core.enums import BreakKind
from ..core.exceptions import NotFoundError
from ..notifications.notifier import NullNotifier, ShiftNotifier
from ..users.model import User
from ..users.repository import UserRepository
from .lifecycle import ShiftLifecycle
from .model import Location, ShiftState
from .repository import ShiftRepository
from .statistics import ShiftStatistics, StatisticsAggregator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShiftPage:
    shifts: Sequence[ShiftState]
    page: int
    pages: int
    total: int

    def to_dict(self) -> dict:
        return {
            "shifts": [s.to_dict() for s in self.shifts],
            "page": self.page,
            "pages": self.pages,
            "total": self.total,
        }


class ShiftService:
    """Use case: clock in/out and breaks for the authenticated employee.

    Each mutating call is a find-then-save under a per-employee lock; the
    store's one-open-shift constraint backs it up across processes.
    """

    def __init__(
        self,
        shifts: ShiftRepository,
        users: UserRepository,
        *,
        notifier: Optional[ShiftNotifier] = None,
        lifecycle: Optional[ShiftLifecycle] = None,
        locks: Optional[KeyedLocks] = None,
    ):
        self._shifts = shifts
        self._users = users
        self._notifier = notifier or NullNotifier()
        self._lifecycle = lifecycle or ShiftLifecycle()
        self._locks = locks or KeyedLocks()
        self._statistics = StatisticsAggregator(shifts)

    def get_current_shift(self, employee_id: int) -> Optional[ShiftState]:
        return self._shifts.find_active_shift(employee_id)

    def start_shift(
        self,
        employee_id: int,
        location: Location,
        *,
        now: Optional[datetime] = None,
        user: Optional[User] = None,
    ) -> ShiftState:
        now = now or now_local()
        with self._locks.hold(employee_id):
            active = self._shifts.find_active_shift(employee_id)
            shift = self._lifecycle.start(employee_id, location, now, active=active)
            shift = self._shifts.save(shift)

        self._notify(employee_id, shift, started=True, user=user)
        return shift

    def start_break(
        self,
        employee_id: int,
        kind: Union[BreakKind, str],
        location: Location,
        *,
        now: Optional[datetime] = None,
    ) -> ShiftState:
        now = now or now_local()
        break_kind = self._lifecycle.parse_break_kind(kind)
        with self._locks.hold(employee_id):
            shift = self._require_active(employee_id, "No active shift found")
            self._lifecycle.start_break(shift, break_kind, location, now)
            return self._shifts.save(shift)

    def end_break(self, employee_id: int, *, now: Optional[datetime] = None) -> ShiftState:
        now = now or now_local()
        with self._locks.hold(employee_id):
            shift = self._require_active(employee_id, "No active break found")
            self._lifecycle.end_break(shift, now)
            return self._shifts.save(shift)

    def end_shift(
        self,
        employee_id: int,
        location: Optional[Location],
        *,
        now: Optional[datetime] = None,
        user: Optional[User] = None,
    ) -> ShiftState:
        now = now or now_local()
        with self._locks.hold(employee_id):
            shift = self._require_active(employee_id, "No active shift found")
            self._lifecycle.end(shift, location, now)
            shift = self._shifts.save(shift)

        self._notify(employee_id, shift, started=False, user=user)
        return shift

    def get_history(self, employee_id: int, *, page=1, limit=DEFAULT_HISTORY_LIMIT) -> ShiftPage:
        page = require_positive_int(page, 1)
        limit = require_positive_int(limit, DEFAULT_HISTORY_LIMIT)
        total = self._shifts.count_for_employee(employee_id)
        rows = self._shifts.list_for_employee(employee_id, limit=limit, offset=(page - 1) * limit)
        return ShiftPage(shifts=rows, page=page, pages=math.ceil(total / limit), total=total)

    def get_employee_shifts(self, employee_id: int, *, page=1, limit=DEFAULT_HISTORY_LIMIT) -> ShiftPage:
        return self.get_history(employee_id, page=page, limit=limit)

    def get_all_shifts(self, *, page=1, limit=DEFAULT_ADMIN_PAGE_LIMIT) -> ShiftPage:
        page = require_positive_int(page, 1)
        limit = require_positive_int(limit, DEFAULT_ADMIN_PAGE_LIMIT)
        total = self._shifts.count_all()
        rows = self._shifts.list_all(limit=limit, offset=(page - 1) * limit)
        return ShiftPage(shifts=rows, page=page, pages=math.ceil(total / limit), total=total)

    def get_statistics(self, employee_id: int, *, now: Optional[datetime] = None) -> ShiftStatistics:
        return self._statistics.compute(employee_id, now or now_local())

    def _require_active(self, employee_id: int, message: str) -> ShiftState:
        shift = self._shifts.find_active_shift(employee_id)
        if not shift:
            raise NotFoundError(message)
        return shift

    def _notify(self, employee_id: int, shift: ShiftState, *, started: bool, user: Optional[User] = None) -> None:
        # The transition is already committed; nothing here may fail it.
        # Callers holding the account pass it in so no lookup runs on the request path.
        try:
            if user is None:
                user = self._users.get_by_id(employee_id)
            if not user or not user.email:
                return
            if started:
                self._notifier.shift_started(user, shift)
            else:
                self._notifier.shift_ended(user, shift)
        except Exception:
            logger.exception("Could not hand off notification for employee %s", employee_id)
