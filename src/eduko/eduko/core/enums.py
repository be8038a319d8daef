from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role carried in the access token and used for route guards."""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the database."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED_LEAVE = "excused_leave"


class ExcuseStatus(str, Enum):
    """Excuse approval workflow state."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SubmissionType(str, Enum):
    DIGITAL = "digital"
    PAPER = "paper"
