from __future__ import annotations

import copy
from datetime import datetime, timedelta

import pytest

from src.shift_tracker.shift_tracker.core.enums import BreakKind, ShiftPhase
from src.shift_tracker.shift_tracker.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.shift_tracker.shift_tracker.shifts.lifecycle import ShiftLifecycle


@pytest.fixture
def lifecycle() -> ShiftLifecycle:
    return ShiftLifecycle()


def test_start_opens_shift(lifecycle, office, fixed_now):
    shift = lifecycle.start(7, office, fixed_now)

    assert shift.employee_id == 7
    assert shift.interval.start == fixed_now
    assert shift.interval.is_open
    assert shift.start_location == office
    assert shift.breaks == []
    assert not shift.on_break
    assert lifecycle.phase(shift) is ShiftPhase.ON_SHIFT


def test_second_start_conflicts_and_leaves_first_untouched(lifecycle, office, fixed_now):
    first = lifecycle.start(7, office, fixed_now)
    before = copy.deepcopy(first)

    with pytest.raises(ConflictError):
        lifecycle.start(7, office, fixed_now + timedelta(minutes=5), active=first)

    assert first == before


def test_break_round_trip_keeps_flag_in_sync(lifecycle, office, fixed_now):
    shift = lifecycle.start(1, office, fixed_now)

    lifecycle.start_break(shift, BreakKind.SHORT, office, fixed_now + timedelta(hours=1))
    assert shift.on_break
    assert shift.active_break_kind == BreakKind.SHORT
    assert shift.breaks[-1].end_time is None
    assert lifecycle.phase(shift) is ShiftPhase.ON_BREAK

    lifecycle.end_break(shift, fixed_now + timedelta(hours=1, minutes=15))
    assert not shift.on_break
    assert shift.active_break_kind is None
    assert shift.breaks[-1].end_time == fixed_now + timedelta(hours=1, minutes=15)

    lifecycle.start_break(shift, "LUNCH", office, fixed_now + timedelta(hours=3))
    assert shift.on_break
    assert [b.kind for b in shift.breaks] == [BreakKind.SHORT, BreakKind.LUNCH]


@pytest.mark.parametrize("kind", ["COFFEE", "short", "", None])
def test_invalid_break_kind_is_rejected(lifecycle, office, fixed_now, kind):
    shift = lifecycle.start(1, office, fixed_now)
    before = copy.deepcopy(shift)

    with pytest.raises(ValidationError):
        lifecycle.start_break(shift, kind, office, fixed_now + timedelta(minutes=1))

    assert shift == before


def test_double_break_conflicts(lifecycle, office, fixed_now):
    shift = lifecycle.start(1, office, fixed_now)
    lifecycle.start_break(shift, BreakKind.SHORT, office, fixed_now + timedelta(minutes=10))
    before = copy.deepcopy(shift)

    with pytest.raises(ConflictError):
        lifecycle.start_break(shift, BreakKind.LUNCH, office, fixed_now + timedelta(minutes=20))

    assert shift == before


def test_end_break_without_open_break_is_not_found(lifecycle, office, fixed_now):
    shift = lifecycle.start(1, office, fixed_now)
    before = copy.deepcopy(shift)

    with pytest.raises(NotFoundError):
        lifecycle.end_break(shift, fixed_now + timedelta(minutes=5))

    assert shift == before


def test_start_then_end_at_same_instant_is_zero(lifecycle, office, fixed_now):
    shift = lifecycle.start(1, office, fixed_now)
    lifecycle.end(shift, office, fixed_now)

    assert shift.total_working_time == 0
    assert shift.total_break_time == 0
    assert lifecycle.phase(shift) is ShiftPhase.NO_ACTIVE_SHIFT


def test_eight_hour_shift_with_short_break(lifecycle, office, fixed_now):
    shift = lifecycle.start(1, office, fixed_now)
    lifecycle.start_break(shift, BreakKind.SHORT, office, fixed_now + timedelta(hours=1))
    lifecycle.end_break(shift, fixed_now + timedelta(hours=1, minutes=15))
    lifecycle.end(shift, office, fixed_now + timedelta(hours=8))

    assert shift.total_break_time == 15 * 60 * 1000
    assert shift.total_working_time == (7 * 60 + 45) * 60 * 1000


def test_end_while_on_break_closes_break_at_shift_end(lifecycle, office, fixed_now):
    shift = lifecycle.start(1, office, fixed_now)
    lifecycle.start_break(shift, BreakKind.LUNCH, office, fixed_now + timedelta(hours=4))
    end = fixed_now + timedelta(hours=4, minutes=40)

    lifecycle.end(shift, None, end)

    assert not shift.on_break
    assert shift.breaks[-1].end_time == end == shift.interval.end
    assert shift.total_break_time == 40 * 60 * 1000
    assert shift.end_location is None


def test_totals_add_up_exactly_with_sub_second_timestamps(lifecycle, office):
    t0 = datetime(2026, 2, 4, 8, 59, 59, 999_999)
    shift = lifecycle.start(1, office, t0)
    lifecycle.start_break(shift, BreakKind.SHORT, office, t0 + timedelta(minutes=37, microseconds=123_456))
    lifecycle.end_break(shift, t0 + timedelta(minutes=52, seconds=3, microseconds=7))
    lifecycle.start_break(shift, BreakKind.LUNCH, office, t0 + timedelta(hours=4, microseconds=999))
    lifecycle.end(shift, office, t0 + timedelta(hours=8, minutes=1, microseconds=501_001))

    elapsed_ms = (shift.interval.end - shift.interval.start) // timedelta(milliseconds=1)
    assert shift.total_working_time + shift.total_break_time == elapsed_ms
    assert shift.total_working_time > 0


def test_timestamp_before_last_event_is_rejected(lifecycle, office, fixed_now):
    shift = lifecycle.start(1, office, fixed_now)
    lifecycle.start_break(shift, BreakKind.SHORT, office, fixed_now + timedelta(hours=1))
    before = copy.deepcopy(shift)

    with pytest.raises(ValidationError):
        lifecycle.end(shift, office, fixed_now + timedelta(minutes=30))

    assert shift == before


def test_ending_closed_or_missing_shift_is_not_found(lifecycle, office, fixed_now):
    with pytest.raises(NotFoundError):
        lifecycle.end(None, office, fixed_now)

    shift = lifecycle.start(1, office, fixed_now)
    lifecycle.end(shift, office, fixed_now + timedelta(hours=1))
    with pytest.raises(NotFoundError):
        lifecycle.end(shift, office, fixed_now + timedelta(hours=2))
    with pytest.raises(NotFoundError):
        lifecycle.start_break(shift, BreakKind.SHORT, office, fixed_now + timedelta(hours=2))
