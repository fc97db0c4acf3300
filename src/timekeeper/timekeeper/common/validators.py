from __future__ import annotations

from typing import Optional

from ..core.enums import AttendanceMode
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def parse_mode(value: Optional[str | AttendanceMode], *, default: Optional[AttendanceMode] = None) -> AttendanceMode:
    if isinstance(value, AttendanceMode):
        return value
    if value is None or not str(value).strip():
        if default is None:
            raise ValidationError("Attendance mode is required")
        return default
    try:
        return AttendanceMode(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(m.value for m in AttendanceMode)
        raise ValidationError(f"Unsupported attendance mode {value!r} (expected one of {allowed})")
