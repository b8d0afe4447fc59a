from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    name: str
    email: str
    role: Role


def _session_user(user: User) -> SessionUser:
    return SessionUser(user_id=user.user_id, name=user.name, email=user.email or "", role=user.role)


class AuthService:
    """Use case: register and authenticate users."""

    def __init__(self, users: UserRepository):
        self._users = users

    def register(self, *, name: str, email: str, password: str) -> SessionUser:
        name = require_non_empty(name, "Name")
        email = require_non_empty(email, "Email").lower()
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._users.get_by_email(email):
            raise ValidationError("User already exists")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=Role.EMPLOYEE,
        )
        logger.info("Registered user %s (%s)", user_id, email)
        return SessionUser(user_id=user_id, name=name, email=email, role=Role.EMPLOYEE)

    def authenticate(self, email: str, password: str) -> SessionUser:
        if not isinstance(email, str) or not isinstance(password, str):
            raise AuthenticationError("Invalid email or password")

        user = self._users.get_by_email(email.strip().lower())
        if not user:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")

        return _session_user(user)

    def current_user(self, user_id: int) -> User:
        """Resolve the session principal, rejecting deleted or deactivated accounts."""
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise AuthenticationError("User not found")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")
        return user


class UserService:
    """Use case: manage employees (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    @staticmethod
    def require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Access denied. Admin privileges required")

    def list_employees(self, *, current_role: Role) -> Sequence[User]:
        self.require_admin(current_role)
        return self._users.list_all()

    def update_role(self, *, current_role: Role, user_id: int, role: str) -> User:
        self.require_admin(current_role)
        try:
            new_role = Role(role)
        except ValueError:
            raise ValidationError("Invalid role")

        if not self._users.get_by_id(int(user_id)):
            raise NotFoundError("User not found")

        self._users.set_role(int(user_id), role=new_role)
        logger.info("User %s role set to %s", user_id, new_role.value)
        return self._users.get_by_id(int(user_id))

    def set_active(self, *, current_role: Role, user_id: int, active: bool) -> User:
        self.require_admin(current_role)
        if not isinstance(active, bool):
            raise ValidationError("active must be true or false")

        if not self._users.get_by_id(int(user_id)):
            raise NotFoundError("User not found")

        self._users.set_active(int(user_id), is_active=active)
        logger.info("User %s active=%s", user_id, active)
        return self._users.get_by_id(int(user_id))
