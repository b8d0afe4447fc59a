from __future__ import annotations

import copy
from datetime import datetime
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.shift_tracker.shift_tracker.core.enums import Role
from src.shift_tracker.shift_tracker.core.exceptions import ConflictError
from src.shift_tracker.shift_tracker.shifts.model import Location, ShiftState
from src.shift_tracker.shift_tracker.users.model import User


class InMemoryShifts:
    """Stores copies, like a real database would."""

    def __init__(self):
        self._rows: dict[int, ShiftState] = {}
        self._id = 0
        self.saves = 0

    def find_active_shift(self, employee_id: int) -> Optional[ShiftState]:
        for s in self._rows.values():
            if s.employee_id == employee_id and s.is_active:
                return copy.deepcopy(s)
        return None

    def find_shifts_in_range(self, employee_id: int, start: datetime, end: datetime):
        items = [
            copy.deepcopy(s)
            for s in self._rows.values()
            if s.employee_id == employee_id and start <= s.interval.start <= end
        ]
        items.sort(key=lambda s: s.interval.start)
        return items

    def save(self, shift: ShiftState) -> ShiftState:
        if shift.is_active:
            for sid, s in self._rows.items():
                if s.employee_id == shift.employee_id and s.is_active and sid != shift.shift_id:
                    raise ConflictError("You already have an active shift")
        if shift.shift_id is None:
            self._id += 1
            shift.shift_id = self._id
        self._rows[shift.shift_id] = copy.deepcopy(shift)
        self.saves += 1
        return shift

    def _newest_first(self, items):
        return sorted(items, key=lambda s: s.interval.start, reverse=True)

    def list_for_employee(self, employee_id: int, *, limit: int, offset: int):
        items = self._newest_first(s for s in self._rows.values() if s.employee_id == employee_id)
        return [copy.deepcopy(s) for s in items[offset : offset + limit]]

    def count_for_employee(self, employee_id: int) -> int:
        return sum(1 for s in self._rows.values() if s.employee_id == employee_id)

    def list_all(self, *, limit: int, offset: int):
        items = self._newest_first(self._rows.values())
        return [copy.deepcopy(s) for s in items[offset : offset + limit]]

    def count_all(self) -> int:
        return len(self._rows)

    def get(self, shift_id: int) -> ShiftState:
        return copy.deepcopy(self._rows[shift_id])


class InMemoryUsers:
    def __init__(self):
        self._users: dict[int, User] = {}
        self._id = 0
        self.lookups = 0

    def add(self, *, name: str, email: Optional[str], password: str = "secret1", role: Role = Role.EMPLOYEE, is_active: bool = True) -> User:
        self._id += 1
        user = User(
            user_id=self._id,
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            is_active=is_active,
        )
        self._users[user.user_id] = user
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        self.lookups += 1
        return self._users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._users.values() if u.email == email), None)

    def create_user(self, *, name: str, email: str, password_hash: str, role: Role) -> int:
        self._id += 1
        self._users[self._id] = User(user_id=self._id, name=name, email=email, password_hash=password_hash, role=role)
        return self._id

    def list_all(self):
        return list(self._users.values())

    def _replace(self, user_id: int, **changes) -> bool:
        user = self._users.get(user_id)
        if not user:
            return False
        self._users[user_id] = User(**{**user.__dict__, **changes})
        return True

    def set_role(self, user_id: int, *, role: Role) -> bool:
        return self._replace(user_id, role=role)

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        return self._replace(user_id, is_active=is_active)


class RecordingNotifier:
    def __init__(self, *, fail: bool = False):
        self.events: list[tuple[str, int, ShiftState]] = []
        self._fail = fail

    def shift_started(self, user, shift):
        self.events.append(("started", user.user_id, shift))
        if self._fail:
            raise ConnectionError("smtp down")

    def shift_ended(self, user, shift):
        self.events.append(("ended", user.user_id, shift))
        if self._fail:
            raise ConnectionError("smtp down")


@pytest.fixture
def fixed_now() -> datetime:
    # Wednesday
    return datetime(2026, 2, 4, 9, 0, 0)


@pytest.fixture
def office() -> Location:
    return Location(latitude=10.776889, longitude=106.700806, accuracy=12.5)


@pytest.fixture
def shifts_repo() -> InMemoryShifts:
    return InMemoryShifts()


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def failing_notifier() -> RecordingNotifier:
    return RecordingNotifier(fail=True)
