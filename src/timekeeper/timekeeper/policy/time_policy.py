from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, FrozenSet, Iterable

from ..common.datetime_utils import at, parse_hhmm, parse_iso_date
from ..core import constants
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class TimePolicy:
    """Office hours and classification thresholds.

    Immutable and shared read-only between services; build one per app with
    :meth:`from_settings` or construct directly in tests.
    """

    office_start_time: time = time(10, 0)
    office_end_time: time = time(19, 0)
    lunch_start_time: time = time(13, 0)
    lunch_end_time: time = time(13, 30)
    lunch_duration_minutes: int = constants.DEFAULT_LUNCH_DURATION_MINUTES
    late_threshold_minutes: int = constants.DEFAULT_LATE_THRESHOLD_MINUTES
    half_day_after: time = time(12, 5)
    absent_after: time = time(14, 0)
    wfh_min_hours_for_present: float = constants.DEFAULT_WFH_MIN_HOURS_FOR_PRESENT
    wfh_heartbeat_interval_minutes: int = constants.DEFAULT_WFH_HEARTBEAT_INTERVAL_MINUTES
    wfh_inactivity_threshold_minutes: int = constants.DEFAULT_WFH_INACTIVITY_THRESHOLD_MINUTES
    public_holidays: FrozenSet[date] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.office_end_time <= self.office_start_time:
            raise ValidationError("Office end must be after office start")
        if self.late_threshold_minutes < 0 or self.lunch_duration_minutes < 0:
            raise ValidationError("Threshold minutes must be non-negative")
        probe = date(2000, 1, 3)
        if not (self.late_boundary(probe) < self.half_day_threshold(probe) < self.absent_threshold(probe)):
            raise ValidationError("Thresholds must escalate: late < half-day < absent")
        if self.wfh_heartbeat_interval_minutes <= 0:
            raise ValidationError("WFH heartbeat interval must be positive")

    @classmethod
    def from_settings(cls, settings: Any) -> "TimePolicy":
        def _get(name: str, default: Any) -> Any:
            return getattr(settings, name, default)

        return cls(
            office_start_time=parse_hhmm(_get("ATTENDANCE_OFFICE_START", constants.DEFAULT_OFFICE_START)),
            office_end_time=parse_hhmm(_get("ATTENDANCE_OFFICE_END", constants.DEFAULT_OFFICE_END)),
            lunch_start_time=parse_hhmm(_get("ATTENDANCE_LUNCH_START", constants.DEFAULT_LUNCH_START)),
            lunch_end_time=parse_hhmm(_get("ATTENDANCE_LUNCH_END", constants.DEFAULT_LUNCH_END)),
            lunch_duration_minutes=int(_get("ATTENDANCE_LUNCH_DURATION_MINUTES", constants.DEFAULT_LUNCH_DURATION_MINUTES)),
            late_threshold_minutes=int(_get("ATTENDANCE_LATE_THRESHOLD_MINUTES", constants.DEFAULT_LATE_THRESHOLD_MINUTES)),
            half_day_after=parse_hhmm(_get("ATTENDANCE_HALF_DAY_AFTER", constants.DEFAULT_HALF_DAY_AFTER)),
            absent_after=parse_hhmm(_get("ATTENDANCE_ABSENT_AFTER", constants.DEFAULT_ABSENT_AFTER)),
            wfh_min_hours_for_present=float(
                _get("ATTENDANCE_WFH_MIN_HOURS_FOR_PRESENT", constants.DEFAULT_WFH_MIN_HOURS_FOR_PRESENT)
            ),
            wfh_heartbeat_interval_minutes=int(
                _get("ATTENDANCE_WFH_HEARTBEAT_INTERVAL_MINUTES", constants.DEFAULT_WFH_HEARTBEAT_INTERVAL_MINUTES)
            ),
            wfh_inactivity_threshold_minutes=int(
                _get("ATTENDANCE_WFH_INACTIVITY_THRESHOLD_MINUTES", constants.DEFAULT_WFH_INACTIVITY_THRESHOLD_MINUTES)
            ),
            public_holidays=_parse_holidays(_get("ATTENDANCE_PUBLIC_HOLIDAYS", ())),
        )

    def office_start(self, day: date) -> datetime:
        return at(day, self.office_start_time)

    def office_end(self, day: date) -> datetime:
        return at(day, self.office_end_time)

    def lunch_window_start(self, day: date) -> datetime:
        return at(day, self.lunch_start_time)

    def lunch_window_end(self, day: date) -> datetime:
        return at(day, self.lunch_end_time)

    def late_boundary(self, day: date) -> datetime:
        return self.office_start(day) + timedelta(minutes=self.late_threshold_minutes)

    def half_day_threshold(self, day: date) -> datetime:
        return at(day, self.half_day_after)

    def absent_threshold(self, day: date) -> datetime:
        return at(day, self.absent_after)

    @property
    def lunch_deduction_hours(self) -> float:
        return self.lunch_duration_minutes / 60

    def office_span_hours(self, day: date) -> float:
        return (self.office_end(day) - self.office_start(day)).total_seconds() / 3600

    def is_public_holiday(self, day: date) -> bool:
        return day in self.public_holidays


def _parse_holidays(values: Iterable[Any] | str) -> FrozenSet[date]:
    if isinstance(values, str):
        values = [v for v in values.split(",") if v.strip()]
    out = set()
    for v in values:
        out.add(v if isinstance(v, date) else parse_iso_date(str(v)))
    return frozenset(out)
