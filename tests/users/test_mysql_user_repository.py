from __future__ import annotations

import mysql.connector
import pytest

from src.shift_tracker.shift_tracker.core.enums import Role
from src.shift_tracker.shift_tracker.core.exceptions import ValidationError
from src.shift_tracker.shift_tracker.users.mysql_user_repository import MySQLUserRepository


class FakeCursor:
    def __init__(self, error: Exception):
        self._error = error
        self.lastrowid = None

    def execute(self, sql, params=None):
        raise self._error

    def close(self):
        pass


class FakeConnection:
    def __init__(self, error: Exception):
        self._error = error
        self.rolled_back = False

    def cursor(self, dictionary=False):
        return FakeCursor(self._error)

    def commit(self):
        raise AssertionError("commit after a failed insert")

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self, error: Exception):
        self.conn = FakeConnection(error)

    def connect(self):
        return self.conn


def _create(factory: FakeConnectionFactory) -> int:
    repo = MySQLUserRepository(factory)
    return repo.create_user(name="Lan", email="lan@example.com", password_hash="x", role=Role.EMPLOYEE)


def test_duplicate_email_on_insert_is_a_validation_error():
    factory = FakeConnectionFactory(mysql.connector.IntegrityError(msg="Duplicate entry", errno=1062))

    with pytest.raises(ValidationError, match="User already exists"):
        _create(factory)
    assert factory.conn.rolled_back


def test_other_integrity_errors_propagate():
    factory = FakeConnectionFactory(mysql.connector.IntegrityError(msg="Column cannot be null", errno=1048))

    with pytest.raises(mysql.connector.IntegrityError):
        _create(factory)
