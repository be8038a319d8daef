from __future__ import annotations

from typing import Optional, Protocol

from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface, not on a concrete database.
    Every lookup is scoped by school.
    """

    def get_by_id(self, *, school_id: int, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, *, school_id: int, username: str) -> Optional[User]:
        raise NotImplementedError
