"""Pure status/offset calculations over a :class:`TimePolicy`."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from ..common.datetime_utils import elapsed_hours, round_minutes
from ..core.enums import AttendanceMode, AttendanceStatus
from ..policy.time_policy import TimePolicy


@dataclass(frozen=True)
class SignInDecision:
    status: AttendanceStatus
    early_minutes: Optional[int] = None
    late_minutes: Optional[int] = None


@dataclass(frozen=True)
class SignOutDecision:
    status: AttendanceStatus
    total_hours: float
    early_logout_minutes: Optional[int] = None
    late_logout_minutes: Optional[int] = None


def classify_office(login: datetime, day: date, policy: TimePolicy) -> SignInDecision:
    # Thresholds nest (absent > half-day > late), so the order of checks matters.
    diff = round_minutes(policy.office_start(day), login)

    if login >= policy.absent_threshold(day):
        return SignInDecision(AttendanceStatus.ABSENT, early_minutes=0, late_minutes=diff)
    if login >= policy.half_day_threshold(day):
        return SignInDecision(AttendanceStatus.HALF_DAY, early_minutes=0, late_minutes=diff)
    if diff > policy.late_threshold_minutes:
        return SignInDecision(AttendanceStatus.LATE, early_minutes=0, late_minutes=diff)
    if diff < 0:
        return SignInDecision(AttendanceStatus.PRESENT, early_minutes=-diff, late_minutes=0)
    return SignInDecision(AttendanceStatus.PRESENT, early_minutes=0, late_minutes=0)


def classify_office_logout(logout: datetime, day: date, policy: TimePolicy) -> Tuple[int, int]:
    """Return ``(early_logout_minutes, late_logout_minutes)`` against office end."""
    diff = round_minutes(policy.office_end(day), logout)
    if diff < 0:
        return -diff, 0
    return 0, diff


def total_hours(login: datetime, logout: datetime, mode: AttendanceMode, day: date, policy: TimePolicy) -> float:
    """Elapsed hours; OFFICE loses the fixed lunch deduction once logout reaches the lunch window.

    Recorded lunch start/end timestamps do not take part in this.
    """
    hours = elapsed_hours(login, logout)
    if mode == AttendanceMode.OFFICE and logout >= policy.lunch_window_start(day):
        hours -= policy.lunch_deduction_hours
    return max(hours, 0.0)


def wfh_status(hours: float, policy: TimePolicy) -> AttendanceStatus:
    if hours >= policy.wfh_min_hours_for_present:
        return AttendanceStatus.PRESENT
    return AttendanceStatus.ABSENT
