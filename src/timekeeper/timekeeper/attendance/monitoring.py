from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..common.datetime_utils import elapsed_hours, elapsed_minutes, isoformat_or_none, now_local
from ..core.enums import AttendanceMode, NotificationKind, Role
from ..core.exceptions import AuthorizationError
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.model import NotificationEvent
from ..policy.time_policy import TimePolicy
from ..users.permissions import is_admin
from ..users.repository import UserRepository
from ..users.service import AccessGuard
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WfhActivityMetrics:
    activity_score: int
    expected_pings: int
    actual_pings: int
    minutes_inactive: Optional[int]
    inactive: bool

    def to_dict(self) -> dict:
        return {
            "activity_score": self.activity_score,
            "expected_pings": self.expected_pings,
            "actual_pings": self.actual_pings,
            "minutes_inactive": self.minutes_inactive,
            "inactive": self.inactive,
        }


def compute_activity_metrics(record: Optional[AttendanceRecord], policy: TimePolicy, now: datetime) -> WfhActivityMetrics:
    """Heartbeat coverage and inactivity for display; never alters the record."""
    if record is None or record.mode != AttendanceMode.WFH or record.login_time is None:
        return WfhActivityMetrics(activity_score=0, expected_pings=0, actual_pings=0, minutes_inactive=None, inactive=False)

    until = record.logout_time or now
    interval_hours = policy.wfh_heartbeat_interval_minutes / 60
    expected = max(int(math.floor(elapsed_hours(record.login_time, until) / interval_hours)), 0)
    actual = record.wfh_activity_pings or 0
    score = 100 if expected == 0 else min(100, int(math.floor(actual / expected * 100 + 0.5)))

    minutes_inactive = None
    inactive = False
    if record.is_open and record.last_activity_time is not None:
        minutes_inactive = int(math.floor(elapsed_minutes(record.last_activity_time, now) + 0.5))
        inactive = elapsed_minutes(record.last_activity_time, now) >= policy.wfh_inactivity_threshold_minutes

    return WfhActivityMetrics(
        activity_score=score,
        expected_pings=expected,
        actual_pings=actual,
        minutes_inactive=minutes_inactive,
        inactive=inactive,
    )


@dataclass(frozen=True)
class InactiveEmployee:
    user_id: int
    full_name: str
    minutes_inactive: int
    activity_score: int
    wfh_activity_pings: int
    last_activity_time: Optional[datetime]

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "full_name": self.full_name,
            "minutes_inactive": self.minutes_inactive,
            "activity_score": self.activity_score,
            "wfh_activity_pings": self.wfh_activity_pings,
            "last_activity_time": isoformat_or_none(self.last_activity_time),
        }


@dataclass
class SweepResult:
    employees_checked: int = 0
    notifications_dispatched: int = 0
    inactive: List[InactiveEmployee] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    skipped_reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "employees_checked": self.employees_checked,
            "inactive_employees": [e.to_dict() for e in self.inactive],
            "notifications_dispatched": self.notifications_dispatched,
            "errors": list(self.errors),
            "skipped_reason": self.skipped_reason,
        }


class AttendanceMonitor:
    """WFH liveness views and the periodic sweeps behind the cron endpoints.

    Inactivity is only flagged and notified; no session is ever closed here.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        policy: Optional[TimePolicy] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        self._attendance = attendance
        self._users = users
        self._guard = AccessGuard(users)
        self._policy = policy or TimePolicy()
        self._dispatcher = dispatcher

    def wfh_snapshot(self, user_id: int, actor_id: int, *, now: Optional[datetime] = None) -> dict:
        actor = self._guard.require_active(actor_id)
        if int(user_id) != actor.user_id and not is_admin(actor.role):
            raise AuthorizationError("Only admins can view other users' activity")

        now = now or now_local()
        record = self._attendance.get_for_user_and_date(int(user_id), now.date())
        return {
            "attendance": record.to_dict() if record else None,
            "metrics": compute_activity_metrics(record, self._policy, now).to_dict(),
        }

    def sweep_wfh_inactivity(self, *, now: Optional[datetime] = None) -> SweepResult:
        now = now or now_local()
        result = SweepResult()
        sessions = self._attendance.list_open_wfh(now.date())
        result.employees_checked = len(sessions)

        for record in sessions:
            if record.last_activity_time is None:
                continue
            metrics = compute_activity_metrics(record, self._policy, now)
            if not metrics.inactive:
                continue
            user = self._users.get_by_id(record.user_id)
            result.inactive.append(
                InactiveEmployee(
                    user_id=record.user_id,
                    full_name=user.full_name if user else f"user-{record.user_id}",
                    minutes_inactive=metrics.minutes_inactive or 0,
                    activity_score=metrics.activity_score,
                    wfh_activity_pings=record.wfh_activity_pings,
                    last_activity_time=record.last_activity_time,
                )
            )

        if not result.inactive:
            logger.info("WFH inactivity check: %s active sessions, none inactive", result.employees_checked)
            return result

        admins = self._users.list_active_by_role(Role.ADMIN)
        for employee in result.inactive:
            logger.warning(
                "WFH inactivity: %s inactive for %s minutes (score %s%%)",
                employee.full_name,
                employee.minutes_inactive,
                employee.activity_score,
            )
            for admin in admins:
                event = NotificationEvent(
                    actor_name=employee.full_name,
                    kind=NotificationKind.WFH_INACTIVE,
                    timestamp=now,
                    mode=AttendanceMode.WFH,
                    recipients=(admin.username,),
                    details={"minutes_inactive": employee.minutes_inactive, "activity_score": employee.activity_score},
                )
                self._send(event, result)
        return result

    def send_clock_in_reminders(self, *, now: Optional[datetime] = None) -> SweepResult:
        now = now or now_local()
        today = now.date()
        result = SweepResult()
        if self._policy.is_public_holiday(today):
            result.skipped_reason = "public holiday"
            logger.info("Skipping clock-in reminders: %s is a public holiday", today)
            return result

        for employee in self._users.list_active_by_role(Role.EMPLOYEE):
            result.employees_checked += 1
            record = self._attendance.get_for_user_and_date(employee.user_id, today)
            if record is not None and record.login_time is not None:
                continue
            event = NotificationEvent(
                actor_name=employee.full_name,
                kind=NotificationKind.CLOCK_IN_REMINDER,
                timestamp=now,
                recipients=(employee.username,),
            )
            self._send(event, result)
        return result

    def _send(self, event: NotificationEvent, result: SweepResult) -> None:
        if self._dispatcher is None:
            result.errors.append(f"{event.kind.value}: no notification dispatcher configured")
            return
        try:
            future = self._dispatcher.dispatch(event)
        except Exception as exc:
            logger.exception("Could not queue %s notification for %s", event.kind.value, event.actor_name)
            result.errors.append(f"{event.kind.value} for {event.actor_name}: {exc}")
            return
        if future is None:
            result.errors.append(f"{event.kind.value} for {event.actor_name}: dispatcher closed")
            return
        result.notifications_dispatched += 1
