from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import User
from .repository import UserRepository

_USER_COLUMNS = "user_id, school_id, username, password_hash, role, first_name, last_name, email, is_active"


def _row_to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["user_id"]),
        school_id=int(row["school_id"]),
        username=row["username"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        first_name=row["first_name"],
        last_name=row["last_name"],
        email=row.get("email"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, *, school_id: int, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE school_id=%s AND user_id=%s",
                (int(school_id), int(user_id)),
            )
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_username(self, *, school_id: int, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE school_id=%s AND username=%s",
                (int(school_id), username),
            )
            row = fetchone(cur)
            return _row_to_user(row) if row else None
