from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Student:
    student_id: int
    user_id: int
    school_id: int
    class_id: Optional[int]
    date_of_birth: date
    attestation_required: bool = False


@dataclass(frozen=True)
class NewStudentAccount:
    """Validated input for one paired user + student insert."""

    username: str
    password_hash: str
    first_name: str
    last_name: str
    email: Optional[str]
    date_of_birth: date
    class_id: Optional[int]
    attestation_required: bool = False
