from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus, ExcuseStatus, SubmissionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Excuse, ExcuseWithLinks, NewExcuse
from .repository import ExcuseRepository

_COLUMNS = (
    "e.excuse_id, e.school_id, e.student_id, e.date_from, e.date_to, e.submission_type, e.status, "
    "e.reason, e.attestation_provided, e.file_path, e.rejection_reason, e.submitted_at, "
    "e.approved_by, e.approved_at"
)


def _row_to_excuse(r: Dict[str, Any]) -> Excuse:
    return Excuse(
        excuse_id=int(r["excuse_id"]),
        school_id=int(r["school_id"]),
        student_id=int(r["student_id"]),
        date_from=r["date_from"],
        date_to=r["date_to"],
        submission_type=SubmissionType(r["submission_type"]),
        status=ExcuseStatus(r["status"]),
        submitted_at=r["submitted_at"],
        reason=r.get("reason"),
        attestation_provided=bool(r.get("attestation_provided", False)),
        file_path=r.get("file_path"),
        rejection_reason=r.get("rejection_reason"),
        approved_by=r.get("approved_by"),
        approved_at=r.get("approved_at"),
    )


class MySQLExcuseRepository(ExcuseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _select_one(cur, *, school_id: int, excuse_id: int) -> Optional[Excuse]:
        cur.execute(
            f"SELECT {_COLUMNS} FROM excuses e WHERE e.school_id=%s AND e.excuse_id=%s",
            (int(school_id), int(excuse_id)),
        )
        row = fetchone(cur)
        return _row_to_excuse(row) if row else None

    def create_with_links(self, *, school_id: int, student_id: int, new: NewExcuse) -> Optional[ExcuseWithLinks]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS ok FROM students WHERE school_id=%s AND student_id=%s",
                (int(school_id), int(student_id)),
            )
            if not fetchone(cur):
                return None

            cur.execute(
                """
                INSERT INTO excuses(
                    school_id, student_id, date_from, date_to, submission_type, status, reason, attestation_provided
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(school_id),
                    int(student_id),
                    new.date_from,
                    new.date_to,
                    new.submission_type.value,
                    ExcuseStatus.PENDING.value,
                    new.reason,
                    int(new.attestation_provided),
                ),
            )
            excuse_id = int(cur.lastrowid)

            # Snapshot of the absences as they are now; later absences are not linked.
            cur.execute(
                """
                INSERT INTO excuse_attendance(excuse_id, attendance_id)
                SELECT %s, a.attendance_id
                FROM attendance a
                WHERE a.school_id=%s AND a.student_id=%s
                  AND a.att_date BETWEEN %s AND %s
                  AND a.status=%s
                """,
                (
                    excuse_id,
                    int(school_id),
                    int(student_id),
                    new.date_from,
                    new.date_to,
                    AttendanceStatus.ABSENT.value,
                ),
            )
            linked = max(int(cur.rowcount), 0)

            excuse = self._select_one(cur, school_id=school_id, excuse_id=excuse_id)
            return ExcuseWithLinks(excuse=excuse, linked_absences=linked)

    def list_excuses(
        self,
        *,
        school_id: int,
        status: Optional[ExcuseStatus] = None,
        student_id: Optional[int] = None,
        class_id: Optional[int] = None,
    ) -> Sequence[Excuse]:
        joins = ""
        clauses = ["e.school_id=%s"]
        params: list[object] = [int(school_id)]

        if status is not None:
            clauses.append("e.status=%s")
            params.append(status.value)
        if student_id is not None:
            clauses.append("e.student_id=%s")
            params.append(int(student_id))
        if class_id is not None:
            joins = "JOIN students s ON s.student_id = e.student_id"
            clauses.append("s.class_id=%s")
            params.append(int(class_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM excuses e
                {joins}
                WHERE {' AND '.join(clauses)}
                ORDER BY e.submitted_at DESC, e.excuse_id DESC
                """,
                tuple(params),
            )
            return [_row_to_excuse(r) for r in fetchall(cur)]

    def get(self, *, school_id: int, excuse_id: int) -> Optional[Excuse]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_one(cur, school_id=school_id, excuse_id=excuse_id)

    def linked_attendance_ids(self, *, school_id: int, excuse_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ea.attendance_id
                FROM excuse_attendance ea
                JOIN excuses e ON e.excuse_id = ea.excuse_id
                WHERE e.school_id=%s AND ea.excuse_id=%s
                ORDER BY ea.attendance_id
                """,
                (int(school_id), int(excuse_id)),
            )
            return [int(r["attendance_id"]) for r in fetchall(cur)]

    def approve(self, *, school_id: int, excuse_id: int, approved_by: int, approved_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE excuses
                SET status=%s, approved_by=%s, approved_at=%s
                WHERE school_id=%s AND excuse_id=%s AND status=%s
                """,
                (
                    ExcuseStatus.APPROVED.value,
                    int(approved_by),
                    approved_at,
                    int(school_id),
                    int(excuse_id),
                    ExcuseStatus.PENDING.value,
                ),
            )
            if cur.rowcount <= 0:
                return False

            cur.execute(
                """
                UPDATE attendance a
                JOIN excuse_attendance ea ON ea.attendance_id = a.attendance_id
                SET a.status=%s
                WHERE ea.excuse_id=%s AND a.school_id=%s AND a.status=%s
                """,
                (
                    AttendanceStatus.EXCUSED_LEAVE.value,
                    int(excuse_id),
                    int(school_id),
                    AttendanceStatus.ABSENT.value,
                ),
            )
            return True

    def reject(self, *, school_id: int, excuse_id: int, rejection_reason: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE excuses
                SET status=%s, rejection_reason=%s
                WHERE school_id=%s AND excuse_id=%s AND status=%s
                """,
                (
                    ExcuseStatus.REJECTED.value,
                    rejection_reason,
                    int(school_id),
                    int(excuse_id),
                    ExcuseStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def set_file_path(self, *, school_id: int, excuse_id: int, file_path: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE excuses SET file_path=%s WHERE school_id=%s AND excuse_id=%s",
                (file_path, int(school_id), int(excuse_id)),
            )
            return cur.rowcount > 0
