from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from ..activity.service import ActivityLogger
from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import parse_mode
from ..core.enums import ActivityAction, AttendanceMode, AttendanceStatus, Role
from ..core.exceptions import NotFoundError
from ..policy.time_policy import TimePolicy
from ..users.model import User
from ..users.repository import UserRepository
from ..users.service import AccessGuard
from .conversions import CONVERSIONS
from .field_profile import apply_field_profile
from .locks import KeyedLocks
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .service import ENTITY_TYPE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BulkItemError:
    user_id: int
    error: str
    attendance_id: Optional[int] = None


@dataclass
class BulkResult:
    success_count: int = 0
    errors: List[BulkItemError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def to_dict(self) -> dict:
        return {
            "success_count": self.success_count,
            "error_count": self.error_count,
            "errors": [
                {"user_id": e.user_id, "attendance_id": e.attendance_id, "error": e.error} for e in self.errors
            ],
        }


class AttendanceAdminService:
    """Administrative overrides: mode conversion and whole-day marking."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        policy: Optional[TimePolicy] = None,
        activity: Optional[ActivityLogger] = None,
        locks: Optional[KeyedLocks] = None,
    ):
        self._attendance = attendance
        self._users = users
        self._guard = AccessGuard(users)
        self._policy = policy or TimePolicy()
        self._activity = activity or ActivityLogger()
        self._locks = locks or KeyedLocks()

    def convert_mode(
        self,
        record_id: int,
        new_mode: AttendanceMode | str,
        actor_id: int,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        admin = self._guard.require_admin(actor_id)
        new_mode = parse_mode(new_mode)
        now = now or now_local()

        record = self._attendance.get_by_id(int(record_id))
        if record is None:
            raise NotFoundError("Attendance record not found")
        return self._convert(record, new_mode, admin, now)

    def _convert(self, record: AttendanceRecord, new_mode: AttendanceMode, admin: User, now: datetime) -> AttendanceRecord:
        with self._locks.hold(record.user_id, record.work_date):
            current = self._attendance.get_by_id(record.attendance_id)
            if current is None:
                raise NotFoundError("Attendance record not found")
            if current.mode == new_mode:
                return current

            changes = CONVERSIONS[new_mode](current, self._policy, now)
            changes.update(edited_by=admin.user_id, edited_at=now)
            updated = self._attendance.update_by_id(current.attendance_id, changes)
            if updated is None:
                raise NotFoundError("Attendance record not found")

        logger.info(
            "Admin %s converted attendance %s from %s to %s",
            admin.user_id,
            current.attendance_id,
            current.mode.value,
            new_mode.value,
        )
        self._activity.record(
            user_id=admin.user_id, action=ActivityAction.UPDATE, entity_type=ENTITY_TYPE, entity_id=updated.attendance_id
        )
        return updated

    def convert_day(
        self,
        work_date: date | str,
        from_mode: AttendanceMode | str,
        to_mode: AttendanceMode | str,
        actor_id: int,
        *,
        now: Optional[datetime] = None,
    ) -> BulkResult:
        """Convert every record of ``work_date`` currently in ``from_mode``."""
        admin = self._guard.require_admin(actor_id)
        work_date = parse_iso_date(work_date) if isinstance(work_date, str) else work_date
        from_mode = parse_mode(from_mode)
        to_mode = parse_mode(to_mode)
        now = now or now_local()

        result = BulkResult()
        for record in self._attendance.list_for_date(work_date, mode=from_mode):
            try:
                self._convert(record, to_mode, admin, now)
            except Exception as exc:
                logger.exception("Failed to convert attendance %s", record.attendance_id)
                result.errors.append(BulkItemError(user_id=record.user_id, attendance_id=record.attendance_id, error=str(exc)))
            else:
                result.success_count += 1
        return result

    def bulk_mark_day(
        self,
        work_date: date | str,
        mode: AttendanceMode | str,
        actor_id: int,
        *,
        now: Optional[datetime] = None,
    ) -> BulkResult:
        """Write a full office-hours record for every active employee on ``work_date``.

        Failures for one employee are collected and do not stop the batch.
        """
        admin = self._guard.require_admin(actor_id)
        work_date = parse_iso_date(work_date) if isinstance(work_date, str) else work_date
        mode = parse_mode(mode)
        now = now or now_local()

        result = BulkResult()
        for employee in self._users.list_active_by_role(Role.EMPLOYEE):
            try:
                with self._locks.hold(employee.user_id, work_date):
                    existing = self._attendance.get_for_user_and_date(employee.user_id, work_date)
                    record = self._attendance.upsert_for_user_and_date(
                        self._full_day_record(employee.user_id, work_date, mode, admin, now, existing)
                    )
            except Exception as exc:
                logger.exception("Bulk mark failed for user %s on %s", employee.user_id, work_date)
                result.errors.append(BulkItemError(user_id=employee.user_id, error=str(exc)))
                continue

            result.success_count += 1
            self._activity.record(
                user_id=admin.user_id,
                action=ActivityAction.CREATE if existing is None else ActivityAction.UPDATE,
                entity_type=ENTITY_TYPE,
                entity_id=record.attendance_id,
            )

        logger.info(
            "Admin %s bulk-marked %s as %s: %s ok, %s failed",
            admin.user_id,
            work_date,
            mode.value,
            result.success_count,
            result.error_count,
        )
        return result

    def _full_day_record(
        self,
        user_id: int,
        work_date: date,
        mode: AttendanceMode,
        admin: User,
        now: datetime,
        existing: Optional[AttendanceRecord],
    ) -> AttendanceRecord:
        hours = None
        if mode == AttendanceMode.OFFICE:
            hours = self._policy.office_span_hours(work_date) - self._policy.lunch_deduction_hours

        changes = apply_field_profile(
            mode,
            {
                "login_time": self._policy.office_start(work_date),
                "logout_time": self._policy.office_end(work_date),
                "status": AttendanceStatus.PRESENT,
                "early_sign_in_minutes": 0,
                "late_sign_in_minutes": 0,
                "early_logout_minutes": 0,
                "late_logout_minutes": 0,
                "total_hours": hours,
                "last_activity_time": None,
                "wfh_activity_pings": 0,
                "edited_by": admin.user_id,
                "edited_at": now,
            },
        )
        base = existing or AttendanceRecord(
            attendance_id=0, user_id=user_id, work_date=work_date, mode=mode, status=AttendanceStatus.PRESENT
        )
        return base.with_changes(changes)
