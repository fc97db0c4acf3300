from __future__ import annotations

from datetime import date, datetime

from ...core.enums import AttendanceMode, AttendanceStatus
from ..classifier import SignInDecision, SignOutDecision, total_hours, wfh_status
from .base import ModeStrategy


class WfhStrategy(ModeStrategy):
    """Work from home: Present placeholder until hours are known at sign-out."""

    mode = AttendanceMode.WFH

    def decide_sign_in(self, *, login: datetime, day: date) -> SignInDecision:
        return SignInDecision(status=AttendanceStatus.PRESENT)

    def decide_sign_out(self, *, login: datetime, logout: datetime, day: date, current: AttendanceStatus) -> SignOutDecision:
        hours = total_hours(login, logout, self.mode, day, self._policy)
        return SignOutDecision(status=wfh_status(hours, self._policy), total_hours=hours)
