from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SchoolClass:
    class_id: int
    school_id: int
    name: str
    school_year: Optional[str] = None
