from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class BreakKind(str, Enum):
    """Kind of rest break taken during a shift."""

    SHORT = "SHORT"
    LUNCH = "LUNCH"


class ShiftPhase(str, Enum):
    """Where an employee currently is in the shift lifecycle."""

    NO_ACTIVE_SHIFT = "NO_ACTIVE_SHIFT"
    ON_SHIFT = "ON_SHIFT"
    ON_BREAK = "ON_BREAK"
