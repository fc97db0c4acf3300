from __future__ import annotations

import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from datetime import date
from typing import DefaultDict, Iterator, Tuple

from ..core.constants import DEFAULT_DAY_LOCK_TIMEOUT_SECONDS
from ..core.exceptions import InvalidStateError
from ..database.connection import DatabaseConnection

logger = logging.getLogger(__name__)

Key = Tuple[int, date]


class KeyedLocks:
    """One re-entrant lock per (user_id, work_date), released when unused.

    Serializes read-modify-write cycles on the same day record inside one
    process; different users never contend.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Key, threading.RLock] = {}
        self._waiters: DefaultDict[Key, int] = defaultdict(int)

    @contextmanager
    def hold(self, user_id: int, work_date: date) -> Iterator[None]:
        key = (int(user_id), work_date)
        with self._guard:
            lock = self._locks.setdefault(key, threading.RLock())
            self._waiters[key] += 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] <= 0:
                    del self._waiters[key]
                    self._locks.pop(key, None)


class MySQLDayLocks(KeyedLocks):
    """``KeyedLocks`` plus a MySQL named lock, so workers in other processes wait too.

    The named lock lives on its own connection for the duration of ``hold``.
    Nested holds of the same key in one thread take the named lock once.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, timeout_seconds: int = DEFAULT_DAY_LOCK_TIMEOUT_SECONDS):
        super().__init__()
        self._conn_factory = conn_factory
        self._timeout = int(timeout_seconds)
        self._held = threading.local()

    @staticmethod
    def lock_name(user_id: int, work_date: date) -> str:
        return f"timekeeper.attendance.{int(user_id)}.{work_date.isoformat()}"

    @contextmanager
    def hold(self, user_id: int, work_date: date) -> Iterator[None]:
        key = (int(user_id), work_date)
        with super().hold(user_id, work_date):
            depth = getattr(self._held, "depth", None)
            if depth is None:
                depth = self._held.depth = defaultdict(int)
            if depth[key]:
                depth[key] += 1
                try:
                    yield
                finally:
                    depth[key] -= 1
                return

            name = self.lock_name(user_id, work_date)
            conn = self._conn_factory.connect()
            try:
                cur = conn.cursor()
                try:
                    cur.execute("SELECT GET_LOCK(%s, %s)", (name, self._timeout))
                    (acquired,) = cur.fetchone()
                    if acquired != 1:
                        logger.warning("Timed out waiting for lock %s", name)
                        raise InvalidStateError("Attendance record is busy; please retry")
                    depth[key] = 1
                    try:
                        yield
                    finally:
                        depth[key] = 0
                        cur.execute("SELECT RELEASE_LOCK(%s)", (name,))
                        cur.fetchone()
                finally:
                    cur.close()
            finally:
                conn.close()
