from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import isoformat_or_none
from ..core.enums import AttendanceMode, AttendanceStatus

# Columns a caller may change through ``update_by_id``; the natural key and id are fixed.
MUTABLE_FIELDS = frozenset(
    {
        "login_time",
        "logout_time",
        "mode",
        "status",
        "early_sign_in_minutes",
        "late_sign_in_minutes",
        "early_logout_minutes",
        "late_logout_minutes",
        "total_hours",
        "lunch_start",
        "lunch_end",
        "last_activity_time",
        "wfh_activity_pings",
        "edited_by",
        "edited_at",
    }
)


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per (user, calendar day)."""

    attendance_id: int
    user_id: int
    work_date: date
    mode: AttendanceMode
    status: AttendanceStatus
    login_time: Optional[datetime] = None
    logout_time: Optional[datetime] = None
    early_sign_in_minutes: Optional[int] = None
    late_sign_in_minutes: Optional[int] = None
    early_logout_minutes: Optional[int] = None
    late_logout_minutes: Optional[int] = None
    total_hours: Optional[float] = None
    lunch_start: Optional[datetime] = None
    lunch_end: Optional[datetime] = None
    last_activity_time: Optional[datetime] = None
    wfh_activity_pings: int = 0
    edited_by: Optional[int] = None
    edited_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        """True while the user has an active clocked-in session."""
        return self.login_time is not None and self.logout_time is None

    @property
    def is_closed(self) -> bool:
        return self.login_time is not None and self.logout_time is not None

    def with_changes(self, changes: Mapping[str, Any]) -> "AttendanceRecord":
        unknown = set(changes) - MUTABLE_FIELDS
        if unknown:
            raise KeyError(f"Not updatable: {sorted(unknown)}")
        return replace(self, **dict(changes))

    def to_dict(self) -> dict:
        """Serializable snapshot; instants as ISO-8601 strings."""
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (datetime, date)):
                value = isoformat_or_none(value)
            elif isinstance(value, (AttendanceMode, AttendanceStatus)):
                value = value.value
            out[f.name] = value
        return out
