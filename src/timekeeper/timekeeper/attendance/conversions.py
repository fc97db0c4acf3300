"""Retroactive recomputation when an administrator changes a record's mode.

One function per target mode, each returning the column changes to apply.
They rewrite history, so they stay separate and individually testable.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict

from ..core.enums import AttendanceMode, AttendanceStatus
from ..policy.time_policy import TimePolicy
from .classifier import classify_office, classify_office_logout, total_hours, wfh_status
from .field_profile import apply_field_profile
from .model import AttendanceRecord

Changes = Dict[str, Any]


def _wfh_hours_for_closed(record: AttendanceRecord, policy: TimePolicy) -> float:
    day = record.work_date
    if (
        record.mode == AttendanceMode.OFFICE
        and record.total_hours is not None
        and record.logout_time >= policy.lunch_window_start(day)
    ):
        # Give back the lunch deduction OFFICE applied at clock-out.
        return record.total_hours + policy.lunch_deduction_hours
    return total_hours(record.login_time, record.logout_time, AttendanceMode.WFH, day, policy)


def to_wfh(record: AttendanceRecord, policy: TimePolicy, now: datetime) -> Changes:
    if record.is_open:
        # Placeholder until clock-out decides on hours.
        changes: Changes = {
            "status": AttendanceStatus.PRESENT,
            "last_activity_time": now,
            "wfh_activity_pings": 1,
        }
    elif record.is_closed:
        hours = _wfh_hours_for_closed(record, policy)
        changes = {
            "total_hours": hours,
            "status": wfh_status(hours, policy),
            "last_activity_time": None,
            "wfh_activity_pings": 0,
        }
    else:
        changes = {"status": AttendanceStatus.PRESENT, "last_activity_time": None, "wfh_activity_pings": 0}
    return apply_field_profile(AttendanceMode.WFH, changes)


def to_office(record: AttendanceRecord, policy: TimePolicy, now: datetime) -> Changes:
    changes: Changes = {}
    day = record.work_date
    if record.login_time is not None:
        decision = classify_office(record.login_time, day, policy)
        changes.update(
            status=decision.status,
            early_sign_in_minutes=decision.early_minutes,
            late_sign_in_minutes=decision.late_minutes,
        )
        if record.logout_time is not None:
            early, late = classify_office_logout(record.logout_time, day, policy)
            changes.update(
                total_hours=total_hours(record.login_time, record.logout_time, AttendanceMode.OFFICE, day, policy),
                early_logout_minutes=early,
                late_logout_minutes=late,
            )
    return apply_field_profile(AttendanceMode.OFFICE, changes)


def to_leave(record: AttendanceRecord, policy: TimePolicy, now: datetime) -> Changes:
    return apply_field_profile(AttendanceMode.LEAVE, {"status": AttendanceStatus.PRESENT})


CONVERSIONS: Dict[AttendanceMode, Callable[[AttendanceRecord, TimePolicy, datetime], Changes]] = {
    AttendanceMode.WFH: to_wfh,
    AttendanceMode.OFFICE: to_office,
    AttendanceMode.LEAVE: to_leave,
}
