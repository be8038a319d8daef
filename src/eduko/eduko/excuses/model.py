from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ExcuseStatus, SubmissionType


@dataclass(frozen=True)
class Excuse:
    excuse_id: int
    school_id: int
    student_id: int
    date_from: date
    date_to: date
    submission_type: SubmissionType
    status: ExcuseStatus
    submitted_at: datetime
    reason: Optional[str] = None
    attestation_provided: bool = False
    file_path: Optional[str] = None
    rejection_reason: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewExcuse:
    """Validated input; date_from <= date_to already holds."""

    date_from: date
    date_to: date
    submission_type: SubmissionType
    reason: Optional[str] = None
    attestation_provided: bool = False


@dataclass(frozen=True)
class ExcuseWithLinks:
    """Result of creation: the excuse plus how many absences it now covers."""

    excuse: Excuse
    linked_absences: int
