"""Which record fields apply to which attendance mode.

Every write path passes its changes through :func:`apply_field_profile` so the
nulling rules live in one table instead of at each call site.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from ..core.enums import AttendanceMode

SIGN_IN_MINUTE_FIELDS = ("early_sign_in_minutes", "late_sign_in_minutes")
LOGOUT_MINUTE_FIELDS = ("early_logout_minutes", "late_logout_minutes")


@dataclass(frozen=True)
class FieldProfile:
    sign_in_minutes: bool
    logout_minutes: bool
    wfh_tracking: bool


FIELD_PROFILES: Dict[AttendanceMode, FieldProfile] = {
    AttendanceMode.OFFICE: FieldProfile(sign_in_minutes=True, logout_minutes=True, wfh_tracking=False),
    AttendanceMode.WFH: FieldProfile(sign_in_minutes=False, logout_minutes=False, wfh_tracking=True),
    AttendanceMode.LEAVE: FieldProfile(sign_in_minutes=False, logout_minutes=False, wfh_tracking=False),
}


def apply_field_profile(mode: AttendanceMode, changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Return ``changes`` with every field that does not apply to ``mode`` cleared."""
    profile = FIELD_PROFILES[mode]
    out = dict(changes)
    out["mode"] = mode

    if not profile.sign_in_minutes:
        for name in SIGN_IN_MINUTE_FIELDS:
            out[name] = None
    if not profile.logout_minutes:
        for name in LOGOUT_MINUTE_FIELDS:
            out[name] = None
    if not profile.wfh_tracking:
        out["last_activity_time"] = None
        out["wfh_activity_pings"] = 0
    return out
