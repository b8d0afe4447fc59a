from __future__ import annotations

from typing import Protocol

from ..shifts.model import ShiftState
from ..users.model import User


class ShiftNotifier(Protocol):
    """Receives shift-start / shift-end events for one employee."""

    def shift_started(self, user: User, shift: ShiftState) -> None:
        raise NotImplementedError

    def shift_ended(self, user: User, shift: ShiftState) -> None:
        raise NotImplementedError


class NullNotifier(ShiftNotifier):
    """Used when no mail transport is configured."""

    def shift_started(self, user: User, shift: ShiftState) -> None:
        return None

    def shift_ended(self, user: User, shift: ShiftState) -> None:
        return None
