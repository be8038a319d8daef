from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import SchoolClass
from .repository import ClassRepository


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_by_school(self, *, school_id: int) -> Sequence[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT class_id, school_id, name, school_year
                FROM classes
                WHERE school_id=%s
                ORDER BY name
                """,
                (int(school_id),),
            )
            return [
                SchoolClass(
                    class_id=int(r["class_id"]),
                    school_id=int(r["school_id"]),
                    name=r["name"],
                    school_year=r.get("school_year"),
                )
                for r in fetchall(cur)
            ]
