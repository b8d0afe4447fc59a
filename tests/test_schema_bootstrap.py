from __future__ import annotations

from pathlib import Path

from src.shift_tracker.shift_tracker.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use

SCHEMA = Path(__file__).resolve().parents[1] / "database" / "schema.sql"


def test_schema_splits_into_table_statements():
    sql = _strip_create_db_and_use(SCHEMA.read_text(encoding="utf-8"))
    statements = list(_iter_sql_statements(sql))

    assert [s.split("(")[0].split()[-1] for s in statements] == ["users", "shifts", "shift_breaks"]
    assert all(s.startswith("CREATE TABLE IF NOT EXISTS") for s in statements)


def test_open_shift_uniqueness_is_enforced_by_schema():
    sql = SCHEMA.read_text(encoding="utf-8")

    assert "active_employee_id INT AS (IF(end_time IS NULL, employee_id, NULL)) STORED" in sql
    assert "UNIQUE KEY uq_shifts_active_employee (active_employee_id)" in sql
