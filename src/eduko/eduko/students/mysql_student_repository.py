from __future__ import annotations

from typing import Any, Dict, Optional

import mysql.connector

from ..core.enums import Role
from ..core.exceptions import DuplicateUsernameError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, is_duplicate_key
from .model import NewStudentAccount, Student
from .repository import StudentRepository

_STUDENT_COLUMNS = "student_id, user_id, school_id, class_id, date_of_birth, attestation_required"


def _row_to_student(row: Dict[str, Any]) -> Student:
    return Student(
        student_id=int(row["student_id"]),
        user_id=int(row["user_id"]),
        school_id=int(row["school_id"]),
        class_id=int(row["class_id"]) if row.get("class_id") is not None else None,
        date_of_birth=row["date_of_birth"],
        attestation_required=bool(row.get("attestation_required", False)),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_with_user(self, *, school_id: int, account: NewStudentAccount) -> Student:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users(school_id, username, password_hash, role, first_name, last_name, email, is_active)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,1)
                    """,
                    (
                        int(school_id),
                        account.username,
                        account.password_hash,
                        Role.STUDENT.value,
                        account.first_name,
                        account.last_name,
                        account.email,
                    ),
                )
                user_id = int(cur.lastrowid)
                cur.execute(
                    """
                    INSERT INTO students(user_id, school_id, class_id, date_of_birth, attestation_required)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (
                        user_id,
                        int(school_id),
                        account.class_id,
                        account.date_of_birth,
                        int(account.attestation_required),
                    ),
                )
                student_id = int(cur.lastrowid)
        except mysql.connector.Error as e:
            if is_duplicate_key(e):
                raise DuplicateUsernameError(account.username) from e
            raise

        return Student(
            student_id=student_id,
            user_id=user_id,
            school_id=int(school_id),
            class_id=account.class_id,
            date_of_birth=account.date_of_birth,
            attestation_required=account.attestation_required,
        )

    def get_by_id(self, *, school_id: int, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STUDENT_COLUMNS} FROM students WHERE school_id=%s AND student_id=%s",
                (int(school_id), int(student_id)),
            )
            row = fetchone(cur)
            return _row_to_student(row) if row else None

    def get_by_user_id(self, *, school_id: int, user_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STUDENT_COLUMNS} FROM students WHERE school_id=%s AND user_id=%s",
                (int(school_id), int(user_id)),
            )
            row = fetchone(cur)
            return _row_to_student(row) if row else None
