from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.validators import optional_text, require_date, require_enum, require_positive_id
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from .model import AttendanceEntry, AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use case: teachers record presence per lesson; re-recording overwrites."""

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def record(
        self,
        *,
        school_id: int,
        recorded_by: int,
        student_id: Any,
        timetable_entry_id: Any,
        att_date: Any,
        status: Any,
        note: Optional[str] = None,
    ) -> AttendanceRecord:
        entry = AttendanceEntry(
            student_id=require_positive_id(student_id, "student_id"),
            timetable_entry_id=require_positive_id(timetable_entry_id, "timetable_entry_id"),
            att_date=require_date(att_date, "date"),
            status=require_enum(AttendanceStatus, status, "status"),
            note=optional_text(note),
        )
        rec = self._attendance.upsert(school_id=school_id, recorded_by=recorded_by, entry=entry)
        if not rec:
            raise NotFoundError("student not found")
        return rec

    def record_batch(
        self,
        *,
        school_id: int,
        recorded_by: int,
        timetable_entry_id: Any,
        att_date: Any,
        entries: Iterable[Mapping[str, Any]],
    ) -> int:
        """Record a whole lesson at once. All entries are stored or none."""
        lesson_id = require_positive_id(timetable_entry_id, "timetable_entry_id")
        day = require_date(att_date, "date")

        parsed = [
            AttendanceEntry(
                student_id=require_positive_id(e.get("student_id"), "student_id"),
                timetable_entry_id=lesson_id,
                att_date=day,
                status=require_enum(AttendanceStatus, e.get("status"), "status"),
                note=optional_text(e.get("note")),
            )
            for e in entries
        ]
        if not parsed:
            raise ValidationError("entries must not be empty")

        count = self._attendance.upsert_many(school_id=school_id, recorded_by=recorded_by, entries=parsed)
        logger.info("Recorded %s attendance rows for lesson %s on %s", count, lesson_id, day)
        return count

    def update(self, *, school_id: int, attendance_id: Any, status: Any, note: Optional[str] = None) -> AttendanceRecord:
        rec = self._attendance.update_status(
            school_id=school_id,
            attendance_id=require_positive_id(attendance_id, "attendance_id"),
            status=require_enum(AttendanceStatus, status, "status"),
            note=optional_text(note),
        )
        if not rec:
            raise NotFoundError("attendance record not found")
        return rec

    def list_for_class(self, *, school_id: int, class_id: Any, att_date: Any) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_class(
            school_id=school_id,
            class_id=require_positive_id(class_id, "class_id"),
            att_date=require_date(att_date, "date"),
        )

    def list_for_date(self, *, school_id: int, att_date: Any) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_date(school_id=school_id, att_date=require_date(att_date, "date"))
