from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty, require_positive_id
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError
from .model import User
from .repository import UserRepository


@dataclass(frozen=True)
class AuthenticatedUser:
    """What goes into the access token after login."""

    user_id: int
    school_id: int
    role: Role
    username: str
    full_name: str


class AuthService:
    """Use case: authenticate a user of one school (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, *, school_id, username: str, password: str) -> AuthenticatedUser:
        school_id = require_positive_id(school_id, "school_id")
        username = require_non_empty(username, "username")

        user = self._users.get_by_username(school_id=school_id, username=username)
        if not user or not user.is_active:
            raise AuthenticationError("invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password if isinstance(password, str) else "")
        except ValueError:
            # placeholder or corrupted hash values
            ok = False

        if not ok:
            raise AuthenticationError("invalid credentials")

        return AuthenticatedUser(
            user_id=user.user_id,
            school_id=user.school_id,
            role=user.role,
            username=user.username,
            full_name=user.full_name,
        )

    def get_profile(self, *, school_id: int, user_id: int) -> User:
        user = self._users.get_by_id(school_id=school_id, user_id=user_id)
        if not user:
            raise NotFoundError("user not found")
        return user
