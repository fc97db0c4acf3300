from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from ..core.enums import AttendanceMode
from ..policy.time_policy import TimePolicy
from .strategies.base import ModeStrategy
from .strategies.leave_strategy import LeaveStrategy
from .strategies.office_strategy import OfficeStrategy
from .strategies.wfh_strategy import WfhStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the strategy for an attendance mode."""

    policy: TimePolicy = field(default_factory=TimePolicy)
    _cache: Dict[AttendanceMode, ModeStrategy] = field(default_factory=dict, init=False, repr=False)

    def for_mode(self, mode: AttendanceMode) -> ModeStrategy:
        strategy = self._cache.get(mode)
        if strategy is None:
            if mode == AttendanceMode.OFFICE:
                strategy = OfficeStrategy(self.policy)
            elif mode == AttendanceMode.WFH:
                strategy = WfhStrategy(self.policy)
            else:
                strategy = LeaveStrategy(self.policy)
            self._cache[mode] = strategy
        return strategy
