from __future__ import annotations

import logging
from datetime import datetime, timedelta

import pytest

from src.shift_tracker.shift_tracker.core.enums import BreakKind
from src.shift_tracker.shift_tracker.core.exceptions import InternalInvariantViolation
from src.shift_tracker.shift_tracker.shifts.accounting import (
    compute_break_time,
    compute_totals,
    compute_working_time,
)
from src.shift_tracker.shift_tracker.shifts.model import BreakRecord, Interval, ShiftState

T0 = datetime(2026, 2, 4, 9, 0)


def _shift(office, *, end=None, breaks=()):
    return ShiftState(
        employee_id=1,
        interval=Interval(start=T0, end=end),
        start_location=office,
        breaks=[BreakRecord(kind=k, interval=Interval(start=s, end=e), location=office) for k, s, e in breaks],
    )


def test_open_shift_values_open_break_against_now(office):
    shift = _shift(
        office,
        breaks=[
            (BreakKind.SHORT, T0 + timedelta(hours=1), T0 + timedelta(hours=1, minutes=10)),
            (BreakKind.LUNCH, T0 + timedelta(hours=3), None),
        ],
    )
    now = T0 + timedelta(hours=3, minutes=20)

    assert compute_break_time(shift, now) == timedelta(minutes=30)
    assert compute_working_time(shift, now) == timedelta(hours=2, minutes=50)


def test_functions_do_not_mutate(office):
    shift = _shift(office, breaks=[(BreakKind.SHORT, T0 + timedelta(hours=1), None)])
    now = T0 + timedelta(hours=2)

    compute_working_time(shift, now)

    assert shift.on_break
    assert shift.total_working_time is None


def test_open_break_in_closed_shift_is_fatal(office, caplog):
    shift = _shift(
        office,
        end=T0 + timedelta(hours=8),
        breaks=[(BreakKind.LUNCH, T0 + timedelta(hours=4), None)],
    )

    with caplog.at_level(logging.ERROR):
        with pytest.raises(InternalInvariantViolation):
            compute_break_time(shift, T0 + timedelta(hours=9))

    assert "open break" in caplog.text
    assert "'employeeId': 1" in caplog.text


def test_negative_working_time_fails_loudly(office):
    shift = _shift(
        office,
        end=T0 + timedelta(hours=1),
        breaks=[(BreakKind.SHORT, T0 - timedelta(hours=1), T0 + timedelta(hours=1))],
    )

    with pytest.raises(InternalInvariantViolation):
        compute_working_time(shift, T0 + timedelta(hours=1))


def test_totals_for_closed_shift(office):
    shift = _shift(
        office,
        end=T0 + timedelta(hours=8),
        breaks=[(BreakKind.LUNCH, T0 + timedelta(hours=4), T0 + timedelta(hours=4, minutes=30))],
    )

    totals = compute_totals(shift)

    assert totals.break_ms == 30 * 60 * 1000
    assert totals.working_ms == 7 * 60 * 60 * 1000 + 30 * 60 * 1000


def test_totals_refused_for_open_shift(office):
    with pytest.raises(InternalInvariantViolation):
        compute_totals(_shift(office))
