from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .classes.mysql_class_repository import MySQLClassRepository
from .core.constants import DEFAULT_UPLOAD_DIR, MAX_UPLOAD_BYTES
from .database.connection import DBConfig, DatabaseConnection
from .excuses.mysql_excuse_repository import MySQLExcuseRepository
from .excuses.service import ExcuseService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.service import StudentImportService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    classes_repo: MySQLClassRepository
    students_repo: MySQLStudentRepository
    attendance_repo: MySQLAttendanceRepository
    excuses_repo: MySQLExcuseRepository

    auth_service: AuthService
    student_import_service: StudentImportService
    attendance_service: AttendanceService
    excuse_service: ExcuseService


def build_container(
    *,
    db_config: dict,
    upload_dir: str | Path = DEFAULT_UPLOAD_DIR,
    max_upload_bytes: int = MAX_UPLOAD_BYTES,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    classes_repo = MySQLClassRepository(conn)
    students_repo = MySQLStudentRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    excuses_repo = MySQLExcuseRepository(conn)

    auth_service = AuthService(users_repo)
    student_import_service = StudentImportService(students_repo, classes_repo)
    attendance_service = AttendanceService(attendance_repo)
    excuse_service = ExcuseService(
        excuses_repo,
        students_repo,
        upload_dir=upload_dir,
        max_upload_bytes=max_upload_bytes,
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        classes_repo=classes_repo,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        excuses_repo=excuses_repo,
        auth_service=auth_service,
        student_import_service=student_import_service,
        attendance_service=attendance_service,
        excuse_service=excuse_service,
    )
