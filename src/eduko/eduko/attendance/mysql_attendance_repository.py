from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceEntry, AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = (
    "a.attendance_id, a.school_id, a.student_id, a.timetable_entry_id, a.att_date, "
    "a.status, a.recorded_by, a.note, a.created_at, a.updated_at"
)


def _row_to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        school_id=int(r["school_id"]),
        student_id=int(r["student_id"]),
        timetable_entry_id=int(r["timetable_entry_id"]),
        att_date=r["att_date"],
        status=AttendanceStatus(r["status"]),
        recorded_by=int(r["recorded_by"]),
        note=r.get("note"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _student_in_school(cur, *, school_id: int, student_id: int) -> bool:
        cur.execute(
            "SELECT 1 AS ok FROM students WHERE school_id=%s AND student_id=%s",
            (int(school_id), int(student_id)),
        )
        return fetchone(cur) is not None

    @staticmethod
    def _upsert(cur, *, school_id: int, recorded_by: int, entry: AttendanceEntry) -> None:
        cur.execute(
            """
            INSERT INTO attendance(school_id, student_id, timetable_entry_id, att_date, status, recorded_by, note)
            VALUES(%s,%s,%s,%s,%s,%s,%s)
            ON DUPLICATE KEY UPDATE status=%s, note=%s, recorded_by=%s
            """,
            (
                int(school_id),
                int(entry.student_id),
                int(entry.timetable_entry_id),
                entry.att_date,
                entry.status.value,
                int(recorded_by),
                entry.note,
                entry.status.value,
                entry.note,
                int(recorded_by),
            ),
        )

    def upsert(self, *, school_id: int, recorded_by: int, entry: AttendanceEntry) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            if not self._student_in_school(cur, school_id=school_id, student_id=entry.student_id):
                return None
            self._upsert(cur, school_id=school_id, recorded_by=recorded_by, entry=entry)
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance a
                WHERE a.school_id=%s AND a.student_id=%s AND a.timetable_entry_id=%s AND a.att_date=%s
                """,
                (int(school_id), int(entry.student_id), int(entry.timetable_entry_id), entry.att_date),
            )
            row = fetchone(cur)
            return _row_to_record(row) if row else None

    def upsert_many(self, *, school_id: int, recorded_by: int, entries: Sequence[AttendanceEntry]) -> int:
        count = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for entry in entries:
                if not self._student_in_school(cur, school_id=school_id, student_id=entry.student_id):
                    # rolls back the entries written so far
                    raise NotFoundError(f"student {entry.student_id} not found")
                self._upsert(cur, school_id=school_id, recorded_by=recorded_by, entry=entry)
                count += 1
        return count

    def update_status(
        self,
        *,
        school_id: int,
        attendance_id: int,
        status: AttendanceStatus,
        note: Optional[str],
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance SET status=%s, note=%s WHERE school_id=%s AND attendance_id=%s",
                (status.value, note, int(school_id), int(attendance_id)),
            )
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance a WHERE a.school_id=%s AND a.attendance_id=%s",
                (int(school_id), int(attendance_id)),
            )
            row = fetchone(cur)
            return _row_to_record(row) if row else None

    def list_for_class(self, *, school_id: int, class_id: int, att_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance a
                JOIN students s ON s.student_id = a.student_id
                WHERE a.school_id=%s AND s.class_id=%s AND a.att_date=%s
                ORDER BY a.att_date, a.created_at
                """,
                (int(school_id), int(class_id), att_date),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_for_date(self, *, school_id: int, att_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance a
                WHERE a.school_id=%s AND a.att_date=%s
                ORDER BY a.created_at
                """,
                (int(school_id), att_date),
            )
            return [_row_to_record(r) for r in fetchall(cur)]
