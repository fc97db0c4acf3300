from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..core.constants import MAX_LISTING_DAYS_WITH_ABSENTS
from ..core.enums import AttendanceMode, AttendanceStatus, Role
from ..core.exceptions import ValidationError
from ..policy.time_policy import TimePolicy
from ..users.permissions import can_view_all_attendance
from ..users.repository import UserRepository
from ..users.service import AccessGuard


@dataclass(frozen=True)
class AttendanceListing:
    rows: list[dict]
    summary: dict


class AttendanceReportService:
    """Attendance listing for a date range.

    Days without a record become derived ``Absent`` rows (not persisted),
    except on public holidays and for ranges longer than 90 days.
    """

    def __init__(self, attendance: AttendanceRepository, users: UserRepository, *, policy: Optional[TimePolicy] = None):
        self._attendance = attendance
        self._users = users
        self._guard = AccessGuard(users)
        self._policy = policy or TimePolicy()

    def list_attendance(
        self,
        *,
        actor_id: int,
        start: date,
        end: date,
        user_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceListing:
        actor = self._guard.require_active(actor_id)
        if end < start:
            raise ValidationError("End date must not be before start date")

        # Employees only ever see their own attendance.
        if not can_view_all_attendance(actor.role):
            user_id = actor.user_id

        records = self._attendance.list_for_range(start_date=start, end_date=end, user_id=user_id)
        rows = [dict(r.to_dict(), derived=False) for r in records]

        summary = {
            "office_lates": sum(
                1 for r in records if r.mode == AttendanceMode.OFFICE and r.status == AttendanceStatus.LATE
            ),
            "wfh_days": sum(1 for r in records if r.mode == AttendanceMode.WFH and r.status == AttendanceStatus.PRESENT),
        }

        if (end - start).days <= MAX_LISTING_DAYS_WITH_ABSENTS:
            today = (now or now_local()).date()
            seen = {(r.user_id, r.work_date) for r in records}
            employees = [
                u for u in self._users.list_active_by_role(Role.EMPLOYEE) if user_id is None or u.user_id == int(user_id)
            ]
            day = start
            while day <= min(end, today):
                if not self._policy.is_public_holiday(day):
                    for employee in employees:
                        if (employee.user_id, day) not in seen:
                            rows.append(_absent_row(employee.user_id, day))
                day += timedelta(days=1)

        rows.sort(key=lambda r: (r["work_date"], -int(r["user_id"])), reverse=True)
        summary["derived_absences"] = sum(1 for r in rows if r["derived"])
        return AttendanceListing(rows=rows, summary=summary)


def _absent_row(user_id: int, day: date) -> dict:
    return {
        "attendance_id": None,
        "user_id": user_id,
        "work_date": day.isoformat(),
        "mode": AttendanceMode.OFFICE.value,
        "status": AttendanceStatus.ABSENT.value,
        "login_time": None,
        "logout_time": None,
        "total_hours": None,
        "derived": True,
    }
