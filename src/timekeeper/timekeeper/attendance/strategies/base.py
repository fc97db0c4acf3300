from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime

from ...core.enums import AttendanceMode, AttendanceStatus
from ...policy.time_policy import TimePolicy
from ..classifier import SignInDecision, SignOutDecision


class ModeStrategy(ABC):
    """Strategy Pattern: how one attendance mode derives status and offsets."""

    mode: AttendanceMode

    def __init__(self, policy: TimePolicy):
        self._policy = policy

    @abstractmethod
    def decide_sign_in(self, *, login: datetime, day: date) -> SignInDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_sign_out(
        self,
        *,
        login: datetime,
        logout: datetime,
        day: date,
        current: AttendanceStatus,
    ) -> SignOutDecision:
        raise NotImplementedError
