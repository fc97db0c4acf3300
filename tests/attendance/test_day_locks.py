from __future__ import annotations

from datetime import date

import pytest

from src.timekeeper.timekeeper.attendance.locks import MySQLDayLocks
from src.timekeeper.timekeeper.core.exceptions import InvalidStateError

DAY = date(2025, 3, 3)
LOCK_NAME = "timekeeper.attendance.10.2025-03-03"


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self._row = None

    def execute(self, sql, params=()):
        self._conn.executed.append((sql, params))
        if sql.startswith("SELECT GET_LOCK"):
            self._row = (self._conn.granted,)
        else:
            self._row = (1,)

    def fetchone(self):
        return self._row

    def close(self):
        pass


class FakeConnection:
    def __init__(self, granted):
        self.granted = granted
        self.executed = []
        self.closed = False

    def cursor(self, **kwargs):
        return FakeCursor(self)

    def close(self):
        self.closed = True


class FakeConnectionFactory:
    def __init__(self, granted=1):
        self.granted = granted
        self.connections = []

    def connect(self, *, with_database=True):
        conn = FakeConnection(self.granted)
        self.connections.append(conn)
        return conn


def test_hold_takes_and_releases_the_named_lock():
    factory = FakeConnectionFactory()
    locks = MySQLDayLocks(factory, timeout_seconds=3)

    with locks.hold(10, DAY):
        [conn] = factory.connections
        assert conn.executed == [("SELECT GET_LOCK(%s, %s)", (LOCK_NAME, 3))]

    assert conn.executed[-1] == ("SELECT RELEASE_LOCK(%s)", (LOCK_NAME,))
    assert conn.closed


def test_nested_hold_takes_the_named_lock_once():
    factory = FakeConnectionFactory()
    locks = MySQLDayLocks(factory)

    with locks.hold(10, DAY):
        with locks.hold(10, DAY):
            pass
        assert len(factory.connections) == 1

    with locks.hold(10, DAY):
        pass
    assert len(factory.connections) == 2


def test_timeout_is_a_conflict_and_releases_nothing():
    factory = FakeConnectionFactory(granted=0)
    locks = MySQLDayLocks(factory)

    with pytest.raises(InvalidStateError, match="busy"):
        with locks.hold(10, DAY):
            pytest.fail("body must not run without the lock")

    [conn] = factory.connections
    assert [sql for sql, _ in conn.executed] == ["SELECT GET_LOCK(%s, %s)"]
    assert conn.closed


def test_release_runs_when_the_body_fails():
    factory = FakeConnectionFactory()
    locks = MySQLDayLocks(factory)

    with pytest.raises(RuntimeError):
        with locks.hold(10, DAY):
            raise RuntimeError("write failed")

    [conn] = factory.connections
    assert conn.executed[-1] == ("SELECT RELEASE_LOCK(%s)", (LOCK_NAME,))
