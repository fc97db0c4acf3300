from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, InactiveUserError
from .model import User
from .permissions import can_clock_in_out, is_admin
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    full_name: str
    role: Role


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        username = require_non_empty(username, "Username")
        user = self._users.get_by_username(username)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid username or password")

        return SessionUser(user_id=user.user_id, full_name=user.full_name, role=user.role)


class AccessGuard:
    """Resolve the acting user and check a capability before any write."""

    def __init__(self, users: UserRepository):
        self._users = users

    def _load(self, actor_id: Optional[int]) -> User:
        if actor_id is None:
            raise AuthenticationError("Unauthorized")
        user = self._users.get_by_id(int(actor_id))
        if not user:
            raise AuthenticationError("Unauthorized")
        return user

    def require_active(self, actor_id: Optional[int]) -> User:
        user = self._load(actor_id)
        if not user.is_active:
            raise InactiveUserError("Your account is deactivated")
        return user

    def require_clocking_actor(self, actor_id: Optional[int]) -> User:
        user = self._load(actor_id)
        if not can_clock_in_out(user.role):
            raise AuthorizationError("Only employees can clock in/out")
        if not user.is_active:
            raise InactiveUserError("Your account is deactivated")
        return user

    def require_admin(self, actor_id: Optional[int]) -> User:
        user = self._load(actor_id)
        if not is_admin(user.role):
            logger.warning("User %s attempted an admin attendance action", user.user_id)
            raise AuthorizationError("Admin access required")
        if not user.is_active:
            raise InactiveUserError("Your account is deactivated")
        return user
