from __future__ import annotations

from typing import Protocol, Sequence

from .model import SchoolClass


class ClassRepository(Protocol):
    def list_by_school(self, *, school_id: int) -> Sequence[SchoolClass]:
        raise NotImplementedError


def build_name_index(classes: Sequence[SchoolClass]) -> dict[str, int]:
    """Map lower-cased, trimmed class name to class id."""
    return {c.name.strip().lower(): c.class_id for c in classes}
