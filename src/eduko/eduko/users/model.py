from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an account inside one school.

    Plain data object, no DB access here.
    """

    user_id: int
    school_id: int
    username: str
    password_hash: str
    role: Role
    first_name: str
    last_name: str
    email: Optional[str] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
