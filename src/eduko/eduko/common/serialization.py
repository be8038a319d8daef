from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def to_json_dict(obj: Any, *, exclude: tuple[str, ...] = ()) -> dict:
    """Dataclass -> JSON-ready dict with ISO dates and enum values."""
    if not is_dataclass(obj):
        raise TypeError(f"expected a dataclass instance, got {type(obj)!r}")
    data = {k: v for k, v in asdict(obj).items() if k not in exclude}
    return _plain(data)
