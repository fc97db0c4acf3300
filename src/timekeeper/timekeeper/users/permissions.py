from __future__ import annotations

from ..core.enums import Role


def can_clock_in_out(role: Role) -> bool:
    return role == Role.EMPLOYEE


def is_admin(role: Role) -> bool:
    return role == Role.ADMIN


def can_view_all_attendance(role: Role) -> bool:
    return role in (Role.ADMIN, Role.MANAGER)
