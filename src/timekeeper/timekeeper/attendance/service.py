from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional

from ..activity.service import ActivityLogger
from ..common.datetime_utils import now_local
from ..common.validators import parse_mode
from ..core.enums import ActivityAction, AttendanceMode, NotificationKind
from ..core.exceptions import InvalidStateError, NotFoundError
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.model import NotificationEvent
from ..policy.time_policy import TimePolicy
from ..users.model import User
from ..users.repository import UserRepository
from ..users.service import AccessGuard
from .factory import AttendanceStrategyFactory
from .field_profile import LOGOUT_MINUTE_FIELDS, apply_field_profile
from .locks import KeyedLocks
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

ENTITY_TYPE = "Attendance"


class AttendanceService:
    """Self-service clock events: the per-user, per-day attendance state machine.

    ``NoRecord -> open[mode] -> closed``; a clock-in with another mode while
    open switches mode and keeps the original login instant. Every operation
    is one read-modify-write on the (user, day) record, serialized by a keyed
    lock and the store's atomic upsert.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        policy: Optional[TimePolicy] = None,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        activity: Optional[ActivityLogger] = None,
        locks: Optional[KeyedLocks] = None,
        recipients: Iterable[str] = (),
    ):
        self._attendance = attendance
        self._guard = AccessGuard(users)
        self._policy = policy or TimePolicy()
        self._factory = strategy_factory or AttendanceStrategyFactory(self._policy)
        self._dispatcher = dispatcher
        self._activity = activity or ActivityLogger()
        self._locks = locks or KeyedLocks()
        self._recipients = tuple(recipients)

    @property
    def policy(self) -> TimePolicy:
        return self._policy

    def clock_in(
        self,
        user_id: int,
        mode: AttendanceMode | str | None = AttendanceMode.OFFICE,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        user = self._guard.require_clocking_actor(user_id)
        mode = parse_mode(mode, default=AttendanceMode.OFFICE)
        now = now or now_local()
        today = now.date()

        with self._locks.hold(user.user_id, today):
            existing = self._attendance.get_for_user_and_date(user.user_id, today)
            if existing is not None and existing.is_open:
                if existing.mode == mode:
                    raise InvalidStateError("Already clocked in today")
                record = self._switch_mode(existing, mode, now)
                action = ActivityAction.UPDATE
            else:
                record = self._start_session(user.user_id, today, existing, mode, now)
                action = ActivityAction.CREATE if existing is None else ActivityAction.UPDATE

        self._activity.record(user_id=user.user_id, action=action, entity_type=ENTITY_TYPE, entity_id=record.attendance_id)
        self._notify(user, NotificationKind.CLOCK_IN, now, record.mode)
        return record

    def _start_session(
        self,
        user_id: int,
        today: date,
        existing: Optional[AttendanceRecord],
        mode: AttendanceMode,
        now: datetime,
    ) -> AttendanceRecord:
        decision = self._factory.for_mode(mode).decide_sign_in(login=now, day=today)
        is_wfh = mode == AttendanceMode.WFH
        changes = apply_field_profile(
            mode,
            {
                "login_time": now,
                "logout_time": None,
                "status": decision.status,
                "early_sign_in_minutes": decision.early_minutes,
                "late_sign_in_minutes": decision.late_minutes,
                "early_logout_minutes": None,
                "late_logout_minutes": None,
                "total_hours": None,
                "last_activity_time": now if is_wfh else None,
                "wfh_activity_pings": 1 if is_wfh else 0,
            },
        )
        base = existing or AttendanceRecord(
            attendance_id=0, user_id=user_id, work_date=today, mode=mode, status=decision.status
        )
        return self._attendance.upsert_for_user_and_date(base.with_changes(changes))

    def _switch_mode(self, existing: AttendanceRecord, mode: AttendanceMode, now: datetime) -> AttendanceRecord:
        # Reclassify from the original login instant, not from now.
        decision = self._factory.for_mode(mode).decide_sign_in(login=existing.login_time, day=existing.work_date)
        is_wfh = mode == AttendanceMode.WFH
        changes = apply_field_profile(
            mode,
            {
                "status": decision.status,
                "early_sign_in_minutes": decision.early_minutes,
                "late_sign_in_minutes": decision.late_minutes,
                "last_activity_time": now if is_wfh else None,
                "wfh_activity_pings": 1 if is_wfh else 0,
            },
        )
        logger.info(
            "User %s switched %s -> %s on %s", existing.user_id, existing.mode.value, mode.value, existing.work_date
        )
        return self._update(existing.attendance_id, changes)

    def clock_out(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        user = self._guard.require_clocking_actor(user_id)
        now = now or now_local()
        today = now.date()

        with self._locks.hold(user.user_id, today):
            record = self._attendance.get_for_user_and_date(user.user_id, today)
            if record is None or record.login_time is None:
                raise InvalidStateError("Please clock in first")

            repair: Dict[str, Any] = {}
            if record.logout_time is not None:
                if record.login_time <= record.logout_time:
                    raise InvalidStateError("Already clocked out today")
                repair = self._stale_logout_repair(record)
                record = record.with_changes(repair)

            decision = self._factory.for_mode(record.mode).decide_sign_out(
                login=record.login_time, logout=now, day=today, current=record.status
            )
            changes = apply_field_profile(
                record.mode,
                {
                    "logout_time": now,
                    "total_hours": decision.total_hours,
                    "status": decision.status,
                    "early_logout_minutes": decision.early_logout_minutes,
                    "late_logout_minutes": decision.late_logout_minutes,
                },
            )
            # Repair and clock-out fields are persisted together.
            updated = self._update(record.attendance_id, {**repair, **changes})

        self._activity.record(
            user_id=user.user_id, action=ActivityAction.UPDATE, entity_type=ENTITY_TYPE, entity_id=updated.attendance_id
        )
        self._notify(user, NotificationKind.CLOCK_OUT, now, updated.mode)
        return updated

    def _stale_logout_repair(self, record: AttendanceRecord) -> Dict[str, Any]:
        """Changes that clear a logout predating the login (left over from an earlier cycle)."""
        logger.warning(
            "Repairing attendance %s: logout %s precedes login %s",
            record.attendance_id,
            record.logout_time,
            record.login_time,
        )
        changes: Dict[str, Any] = {"logout_time": None, "total_hours": None}
        for name in LOGOUT_MINUTE_FIELDS:
            changes[name] = None
        return changes

    def start_lunch(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        user = self._guard.require_clocking_actor(user_id)
        now = now or now_local()

        with self._locks.hold(user.user_id, now.date()):
            record = self._require_open_session(user.user_id, now.date())
            if record.lunch_start is not None:
                raise InvalidStateError("Lunch already started")
            updated = self._update(record.attendance_id, {"lunch_start": now})

        self._activity.record(
            user_id=user.user_id, action=ActivityAction.UPDATE, entity_type=ENTITY_TYPE, entity_id=updated.attendance_id
        )
        return updated

    def end_lunch(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        user = self._guard.require_clocking_actor(user_id)
        now = now or now_local()

        with self._locks.hold(user.user_id, now.date()):
            record = self._require_open_session(user.user_id, now.date())
            if record.lunch_start is None:
                raise InvalidStateError("Lunch has not started")
            if record.lunch_end is not None:
                raise InvalidStateError("Lunch already ended")
            updated = self._update(record.attendance_id, {"lunch_end": now})

        self._activity.record(
            user_id=user.user_id, action=ActivityAction.UPDATE, entity_type=ENTITY_TYPE, entity_id=updated.attendance_id
        )
        return updated

    def wfh_heartbeat(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        """Liveness ping for an open WFH session; never changes status."""
        user = self._guard.require_clocking_actor(user_id)
        now = now or now_local()

        with self._locks.hold(user.user_id, now.date()):
            record = self._attendance.get_for_user_and_date(user.user_id, now.date())
            if record is None:
                raise NotFoundError("No attendance record for today")
            if record.mode != AttendanceMode.WFH or not record.is_open:
                raise InvalidStateError("No active WFH session")
            updated = self._update(
                record.attendance_id,
                {"last_activity_time": now, "wfh_activity_pings": record.wfh_activity_pings + 1},
            )

        self._activity.record(
            user_id=user.user_id, action=ActivityAction.UPDATE, entity_type=ENTITY_TYPE, entity_id=updated.attendance_id
        )
        return updated

    def get_today_record(self, user_id: int, *, now: Optional[datetime] = None) -> Optional[AttendanceRecord]:
        user = self._guard.require_active(user_id)
        today = (now or now_local()).date()
        return self._attendance.get_for_user_and_date(user.user_id, today)

    def _require_open_session(self, user_id: int, today: date) -> AttendanceRecord:
        record = self._attendance.get_for_user_and_date(user_id, today)
        if record is None or not record.is_open:
            raise InvalidStateError("No active session; please clock in first")
        return record

    def _update(self, attendance_id: int, changes: Dict[str, Any]) -> AttendanceRecord:
        updated = self._attendance.update_by_id(attendance_id, changes)
        if updated is None:
            raise NotFoundError("Attendance record not found")
        return updated

    def _notify(self, user: User, kind: NotificationKind, now: datetime, mode: AttendanceMode) -> None:
        if self._dispatcher is None:
            return
        try:
            self._dispatcher.dispatch(
                NotificationEvent(
                    actor_name=user.full_name,
                    kind=kind,
                    timestamp=now,
                    mode=mode,
                    recipients=self._recipients,
                )
            )
        except Exception:
            logger.exception("Could not queue %s notification for user %s", kind.value, user.user_id)
