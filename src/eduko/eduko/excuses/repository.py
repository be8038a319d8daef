from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ExcuseStatus
from .model import Excuse, ExcuseWithLinks, NewExcuse


class ExcuseRepository(Protocol):
    """Excuse storage. Every method is scoped by school."""

    def create_with_links(self, *, school_id: int, student_id: int, new: NewExcuse) -> Optional[ExcuseWithLinks]:
        """Insert a pending excuse and link the student's absences in its date range.

        One transaction. Returns None when the student is not in the school.
        """

        raise NotImplementedError

    def list_excuses(
        self,
        *,
        school_id: int,
        status: Optional[ExcuseStatus] = None,
        student_id: Optional[int] = None,
        class_id: Optional[int] = None,
    ) -> Sequence[Excuse]:
        """Newest first."""

        raise NotImplementedError

    def get(self, *, school_id: int, excuse_id: int) -> Optional[Excuse]:
        raise NotImplementedError

    def linked_attendance_ids(self, *, school_id: int, excuse_id: int) -> Sequence[int]:
        raise NotImplementedError

    def approve(self, *, school_id: int, excuse_id: int, approved_by: int, approved_at: datetime) -> bool:
        """pending -> approved and linked absences -> excused_leave, together.

        Returns False (and changes nothing) unless the excuse exists and is pending.
        """

        raise NotImplementedError

    def reject(self, *, school_id: int, excuse_id: int, rejection_reason: Optional[str]) -> bool:
        raise NotImplementedError

    def set_file_path(self, *, school_id: int, excuse_id: int, file_path: str) -> bool:
        raise NotImplementedError
