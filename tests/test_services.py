from __future__ import annotations

import pytest

from src.timekeeper.timekeeper.activity.service import ActivityLogger
from src.timekeeper.timekeeper.core.enums import ActivityAction, Role
from src.timekeeper.timekeeper.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InactiveUserError,
    ValidationError,
)
from src.timekeeper.timekeeper.users.model import User
from src.timekeeper.timekeeper.users.service import AccessGuard, AuthService

ADMIN_ID, MANAGER_ID, EMPLOYEE_ID, INACTIVE_ID = 1, 2, 10, 12


def test_authenticate_ok(users):
    s_user = AuthService(users).authenticate("alice", "alice-pw")

    assert s_user.user_id == EMPLOYEE_ID
    assert s_user.full_name == "Alice"
    assert s_user.role == Role.EMPLOYEE


@pytest.mark.parametrize("username, password", [("alice", "nope"), ("ghost", "x"), ("carol", "carol-pw")])
def test_authenticate_rejects_bad_credentials_and_inactive_users(users, username, password):
    with pytest.raises(AuthenticationError):
        AuthService(users).authenticate(username, password)


def test_authenticate_requires_username(users):
    with pytest.raises(ValidationError):
        AuthService(users).authenticate("   ", "x")


def test_placeholder_password_hash_never_matches(users):
    users.add(User(user_id=50, full_name="Temp", username="temp", password_hash="CHANGE_ME", role=Role.EMPLOYEE))

    with pytest.raises(AuthenticationError):
        AuthService(users).authenticate("temp", "CHANGE_ME")


def test_guard_capabilities(users):
    guard = AccessGuard(users)

    assert guard.require_clocking_actor(EMPLOYEE_ID).user_id == EMPLOYEE_ID
    assert guard.require_admin(ADMIN_ID).role == Role.ADMIN
    assert guard.require_active(MANAGER_ID).role == Role.MANAGER

    with pytest.raises(AuthorizationError):
        guard.require_clocking_actor(MANAGER_ID)
    with pytest.raises(AuthorizationError):
        guard.require_admin(EMPLOYEE_ID)
    with pytest.raises(InactiveUserError):
        guard.require_active(INACTIVE_ID)
    with pytest.raises(AuthenticationError):
        guard.require_active(None)


def test_activity_logger_swallows_store_errors(activity_repo, caplog):
    activity_repo.fail = True

    ActivityLogger(activity_repo).record(
        user_id=EMPLOYEE_ID, action=ActivityAction.CREATE, entity_type="Attendance", entity_id=7
    )

    assert "Failed to log activity CREATE Attendance#7" in caplog.text


def test_activity_logger_without_store_is_a_no_op():
    ActivityLogger().record(user_id=EMPLOYEE_ID, action=ActivityAction.UPDATE, entity_type="Attendance", entity_id=1)
