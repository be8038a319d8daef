from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """One row per (student, timetable entry, date)."""

    attendance_id: int
    school_id: int
    student_id: int
    timetable_entry_id: int
    att_date: date
    status: AttendanceStatus
    recorded_by: int
    note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceEntry:
    """Validated input for one upsert."""

    student_id: int
    timetable_entry_id: int
    att_date: date
    status: AttendanceStatus
    note: Optional[str] = None
