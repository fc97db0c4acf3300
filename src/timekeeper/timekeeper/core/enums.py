from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for capability checks."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class AttendanceMode(str, Enum):
    """Where the user works for the day."""

    OFFICE = "OFFICE"
    WFH = "WFH"
    LEAVE = "LEAVE"


class AttendanceStatus(str, Enum):
    """Derived daily status as stored in the database."""

    PRESENT = "Present"
    LATE = "Late"
    HALF_DAY = "HalfDay"
    ABSENT = "Absent"


class ActivityAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"


class NotificationKind(str, Enum):
    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"
    WFH_INACTIVE = "wfh_inactive"
    CLOCK_IN_REMINDER = "clock_in_reminder"
