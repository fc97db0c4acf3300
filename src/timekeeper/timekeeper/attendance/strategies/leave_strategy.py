from __future__ import annotations

from datetime import date, datetime

from ...core.enums import AttendanceMode, AttendanceStatus
from ..classifier import SignInDecision, SignOutDecision, total_hours
from .base import ModeStrategy


class LeaveStrategy(ModeStrategy):
    """Leave day: always Present, excluded from late/absent counts."""

    mode = AttendanceMode.LEAVE

    def decide_sign_in(self, *, login: datetime, day: date) -> SignInDecision:
        return SignInDecision(status=AttendanceStatus.PRESENT)

    def decide_sign_out(self, *, login: datetime, logout: datetime, day: date, current: AttendanceStatus) -> SignOutDecision:
        return SignOutDecision(
            status=AttendanceStatus.PRESENT,
            total_hours=total_hours(login, logout, self.mode, day, self._policy),
        )
