from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

import mysql.connector

from ..core.enums import BreakKind
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import BreakRecord, Interval, Location, ShiftState
from .repository import ShiftRepository

_SHIFT_COLUMNS = """
    shift_id, employee_id, start_time, end_time,
    start_latitude, start_longitude, start_accuracy,
    end_latitude, end_longitude, end_accuracy,
    total_working_time, total_break_time
"""

_DUPLICATE_ENTRY = 1062


def _location(r: dict, prefix: str) -> Optional[Location]:
    if r.get(f"{prefix}latitude") is None:
        return None
    accuracy = r.get(f"{prefix}accuracy")
    return Location(
        latitude=float(r[f"{prefix}latitude"]),
        longitude=float(r[f"{prefix}longitude"]),
        accuracy=None if accuracy is None else float(accuracy),
    )


def _location_params(location: Optional[Location]) -> tuple:
    if location is None:
        return (None, None, None)
    return (location.latitude, location.longitude, location.accuracy)


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_breaks(self, cur, shift_ids: Sequence[int]) -> dict[int, list[BreakRecord]]:
        out: dict[int, list[BreakRecord]] = {sid: [] for sid in shift_ids}
        if not shift_ids:
            return out

        placeholders = ",".join(["%s"] * len(shift_ids))
        cur.execute(
            f"""
            SELECT shift_id, seq, break_type, start_time, end_time, latitude, longitude, accuracy
            FROM shift_breaks
            WHERE shift_id IN ({placeholders})
            ORDER BY shift_id, seq
            """,
            tuple(shift_ids),
        )
        for r in fetchall(cur):
            out[int(r["shift_id"])].append(
                BreakRecord(
                    kind=BreakKind(r["break_type"]),
                    interval=Interval(start=r["start_time"], end=r.get("end_time")),
                    location=_location(r, ""),
                )
            )
        return out

    def _to_shifts(self, cur, rows: Sequence[dict]) -> list[ShiftState]:
        breaks = self._load_breaks(cur, [int(r["shift_id"]) for r in rows])
        return [
            ShiftState(
                shift_id=int(r["shift_id"]),
                employee_id=int(r["employee_id"]),
                interval=Interval(start=r["start_time"], end=r.get("end_time")),
                start_location=_location(r, "start_"),
                end_location=_location(r, "end_"),
                breaks=breaks[int(r["shift_id"])],
                total_working_time=_optional_int(r.get("total_working_time")),
                total_break_time=_optional_int(r.get("total_break_time")),
            )
            for r in rows
        ]

    def find_active_shift(self, employee_id: int) -> Optional[ShiftState]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SHIFT_COLUMNS}
                FROM shifts
                WHERE employee_id=%s AND end_time IS NULL
                ORDER BY start_time DESC
                LIMIT 1
                """,
                (employee_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return self._to_shifts(cur, [r])[0]

    def find_shifts_in_range(self, employee_id: int, start: datetime, end: datetime) -> Sequence[ShiftState]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SHIFT_COLUMNS}
                FROM shifts
                WHERE employee_id=%s AND start_time BETWEEN %s AND %s
                ORDER BY start_time
                """,
                (employee_id, start, end),
            )
            return self._to_shifts(cur, fetchall(cur))

    def list_for_employee(self, employee_id: int, *, limit: int, offset: int) -> Sequence[ShiftState]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SHIFT_COLUMNS}
                FROM shifts
                WHERE employee_id=%s
                ORDER BY start_time DESC
                LIMIT %s OFFSET %s
                """,
                (employee_id, int(limit), int(offset)),
            )
            return self._to_shifts(cur, fetchall(cur))

    def count_for_employee(self, employee_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM shifts WHERE employee_id=%s", (employee_id,))
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def list_all(self, *, limit: int, offset: int) -> Sequence[ShiftState]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SHIFT_COLUMNS}
                FROM shifts
                ORDER BY start_time DESC
                LIMIT %s OFFSET %s
                """,
                (int(limit), int(offset)),
            )
            return self._to_shifts(cur, fetchall(cur))

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM shifts")
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def save(self, shift: ShiftState) -> ShiftState:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                if shift.shift_id is None:
                    cur.execute(
                        """
                        INSERT INTO shifts(
                            employee_id, start_time, end_time,
                            start_latitude, start_longitude, start_accuracy,
                            end_latitude, end_longitude, end_accuracy,
                            total_working_time, total_break_time
                        )
                        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                        """,
                        (
                            shift.employee_id,
                            shift.interval.start,
                            shift.interval.end,
                            *_location_params(shift.start_location),
                            *_location_params(shift.end_location),
                            shift.total_working_time,
                            shift.total_break_time,
                        ),
                    )
                    shift_id = int(cur.lastrowid)
                else:
                    shift_id = shift.shift_id
                    cur.execute(
                        """
                        UPDATE shifts
                        SET end_time=%s, end_latitude=%s, end_longitude=%s, end_accuracy=%s,
                            total_working_time=%s, total_break_time=%s
                        WHERE shift_id=%s
                        """,
                        (
                            shift.interval.end,
                            *_location_params(shift.end_location),
                            shift.total_working_time,
                            shift.total_break_time,
                            shift_id,
                        ),
                    )

                # Breaks are append-only and only the last one can change.
                for seq, b in enumerate(shift.breaks):
                    cur.execute(
                        """
                        INSERT INTO shift_breaks(shift_id, seq, break_type, start_time, end_time, latitude, longitude, accuracy)
                        VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                        ON DUPLICATE KEY UPDATE end_time=VALUES(end_time)
                        """,
                        (shift_id, seq, b.kind.value, b.interval.start, b.interval.end, *_location_params(b.location)),
                    )
        except mysql.connector.IntegrityError as e:
            if getattr(e, "errno", None) == _DUPLICATE_ENTRY:
                raise ConflictError("You already have an active shift") from e
            raise

        shift.shift_id = shift_id
        return shift
