from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceEntry, AttendanceRecord


class AttendanceRepository(Protocol):
    def upsert(self, *, school_id: int, recorded_by: int, entry: AttendanceEntry) -> Optional[AttendanceRecord]:
        """Insert or overwrite the row keyed by (student, timetable entry, date).

        Returns None when the student does not belong to the school.
        """

        raise NotImplementedError

    def upsert_many(self, *, school_id: int, recorded_by: int, entries: Sequence[AttendanceEntry]) -> int:
        """All entries in one transaction; raises NotFoundError for a foreign student."""

        raise NotImplementedError

    def update_status(
        self,
        *,
        school_id: int,
        attendance_id: int,
        status: AttendanceStatus,
        note: Optional[str],
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_class(self, *, school_id: int, class_id: int, att_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_date(self, *, school_id: int, att_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
