from __future__ import annotations

import threading
from concurrent.futures import Executor, Future
from dataclasses import replace
from datetime import date
from typing import Any, Mapping, Optional

import pytest
from werkzeug.security import generate_password_hash

from src.timekeeper.timekeeper.activity.service import ActivityLogger
from src.timekeeper.timekeeper.attendance.admin_service import AttendanceAdminService
from src.timekeeper.timekeeper.attendance.locks import KeyedLocks
from src.timekeeper.timekeeper.attendance.model import AttendanceRecord
from src.timekeeper.timekeeper.attendance.monitoring import AttendanceMonitor
from src.timekeeper.timekeeper.attendance.service import AttendanceService
from src.timekeeper.timekeeper.core.enums import Role
from src.timekeeper.timekeeper.notifications.dispatcher import NotificationDispatcher
from src.timekeeper.timekeeper.policy.time_policy import TimePolicy
from src.timekeeper.timekeeper.reports.service import AttendanceReportService
from src.timekeeper.timekeeper.users.model import User


class InMemoryUsers:
    def __init__(self, users=()):
        self.users_by_id: dict[int, User] = {u.user_id: u for u in users}

    def add(self, user: User) -> None:
        self.users_by_id[user.user_id] = user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users_by_id.get(int(user_id))

    def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.users_by_id.values() if u.username == username), None)

    def list_active_by_role(self, role: Role):
        return sorted(
            (u for u in self.users_by_id.values() if u.role == role and u.is_active),
            key=lambda u: u.user_id,
        )


class InMemoryAttendance:
    """Keeps (user_id, work_date) unique like the MySQL table does."""

    def __init__(self):
        self._by_id: dict[int, AttendanceRecord] = {}
        self._id = 0
        self._mutex = threading.Lock()
        self.fail_upsert_for: set[int] = set()
        self.writes = 0

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        with self._mutex:
            self._id += 1
            stored = replace(record, attendance_id=self._id)
            self._by_id[self._id] = stored
            return stored

    def all(self):
        return list(self._by_id.values())

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._by_id.get(int(attendance_id))

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return next(
            (r for r in self._by_id.values() if r.user_id == int(user_id) and r.work_date == work_date), None
        )

    def upsert_for_user_and_date(self, record: AttendanceRecord) -> AttendanceRecord:
        if record.user_id in self.fail_upsert_for:
            raise RuntimeError("database unavailable")
        self.writes += 1
        existing = self.get_for_user_and_date(record.user_id, record.work_date)
        if existing is None:
            return self.add(record)
        stored = replace(record, attendance_id=existing.attendance_id)
        self._by_id[existing.attendance_id] = stored
        return stored

    def update_by_id(self, attendance_id: int, changes: Mapping[str, Any]) -> Optional[AttendanceRecord]:
        current = self._by_id.get(int(attendance_id))
        if current is None:
            return None
        self.writes += 1
        updated = current.with_changes(changes)
        self._by_id[current.attendance_id] = updated
        return updated

    def list_for_date(self, work_date: date, *, mode=None):
        return sorted(
            (r for r in self._by_id.values() if r.work_date == work_date and (mode is None or r.mode == mode)),
            key=lambda r: r.user_id,
        )

    def list_open_wfh(self, work_date: date):
        return [r for r in self.list_for_date(work_date) if r.mode.value == "WFH" and r.is_open]

    def list_for_range(self, *, start_date: date, end_date: date, user_id=None):
        rows = [
            r
            for r in self._by_id.values()
            if start_date <= r.work_date <= end_date and (user_id is None or r.user_id == int(user_id))
        ]
        return sorted(rows, key=lambda r: (r.work_date, -r.user_id), reverse=True)


class InMemoryActivity:
    def __init__(self):
        self.entries: list[dict] = []
        self.fail = False

    def log(self, *, user_id, action, entity_type, entity_id) -> None:
        if self.fail:
            raise RuntimeError("activity table is locked")
        self.entries.append(
            {"user_id": user_id, "action": action, "entity_type": entity_type, "entity_id": entity_id}
        )


class RecordingNotifier:
    def __init__(self):
        self.events = []
        self.fail = False

    def notify(self, event) -> None:
        if self.fail:
            raise ConnectionError("webhook down")
        self.events.append(event)


class ImmediateExecutor(Executor):
    """Runs submitted work inline so delivery is observable right after dispatch."""

    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


ADMIN_ID = 1
MANAGER_ID = 2
EMPLOYEE_ID = 10
OTHER_EMPLOYEE_ID = 11
INACTIVE_ID = 12


def _user(user_id: int, username: str, role: Role, *, is_active: bool = True) -> User:
    return User(
        user_id=user_id,
        full_name=username.title(),
        username=username,
        password_hash=generate_password_hash(f"{username}-pw", method="pbkdf2:sha256:1000"),
        role=role,
        is_active=is_active,
    )


@pytest.fixture
def policy() -> TimePolicy:
    return TimePolicy()


@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers(
        [
            _user(ADMIN_ID, "admin", Role.ADMIN),
            _user(MANAGER_ID, "manager", Role.MANAGER),
            _user(EMPLOYEE_ID, "alice", Role.EMPLOYEE),
            _user(OTHER_EMPLOYEE_ID, "bob", Role.EMPLOYEE),
            _user(INACTIVE_ID, "carol", Role.EMPLOYEE, is_active=False),
        ]
    )


@pytest.fixture
def attendance() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def activity_repo() -> InMemoryActivity:
    return InMemoryActivity()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def dispatcher(notifier) -> NotificationDispatcher:
    return NotificationDispatcher(notifier, executor=ImmediateExecutor())


@pytest.fixture
def locks() -> KeyedLocks:
    return KeyedLocks()


@pytest.fixture
def service(attendance, users, policy, dispatcher, activity_repo, locks) -> AttendanceService:
    return AttendanceService(
        attendance,
        users,
        policy=policy,
        dispatcher=dispatcher,
        activity=ActivityLogger(activity_repo),
        locks=locks,
        recipients=("hr",),
    )


@pytest.fixture
def admin_service(attendance, users, policy, activity_repo, locks) -> AttendanceAdminService:
    return AttendanceAdminService(attendance, users, policy=policy, activity=ActivityLogger(activity_repo), locks=locks)


@pytest.fixture
def monitor(attendance, users, policy, dispatcher) -> AttendanceMonitor:
    return AttendanceMonitor(attendance, users, policy=policy, dispatcher=dispatcher)


@pytest.fixture
def report_service(attendance, users, policy) -> AttendanceReportService:
    return AttendanceReportService(attendance, users, policy=policy)
