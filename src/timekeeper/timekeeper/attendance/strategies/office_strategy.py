from __future__ import annotations

from datetime import date, datetime

from ...core.enums import AttendanceMode, AttendanceStatus
from ..classifier import SignInDecision, SignOutDecision, classify_office, classify_office_logout, total_hours
from .base import ModeStrategy


class OfficeStrategy(ModeStrategy):
    """Office day: threshold ladder at sign-in, status kept at sign-out."""

    mode = AttendanceMode.OFFICE

    def decide_sign_in(self, *, login: datetime, day: date) -> SignInDecision:
        return classify_office(login, day, self._policy)

    def decide_sign_out(self, *, login: datetime, logout: datetime, day: date, current: AttendanceStatus) -> SignOutDecision:
        early, late = classify_office_logout(logout, day, self._policy)
        return SignOutDecision(
            status=current,
            total_hours=total_hours(login, logout, self.mode, day, self._policy),
            early_logout_minutes=early,
            late_logout_minutes=late,
        )
