from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from typing import IO, List, Union

from ..core.constants import CSV_DELIMITER
from ..core.exceptions import ImportFormatError

CsvSource = Union[bytes, str, IO[bytes], IO[str]]


def _as_text(source: CsvSource) -> str:
    raw = source.read() if hasattr(source, "read") else source
    if isinstance(raw, bytes):
        try:
            # utf-8-sig drops a leading BOM written by spreadsheet exports
            return raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            raise ImportFormatError("file is not valid UTF-8")
    return raw.lstrip("\ufeff")


def read_rows(source: CsvSource) -> List[List[str]]:
    """Read a semicolon separated file into trimmed rows.

    Quoting is tolerated leniently. Empty lines are dropped; a line of bare
    separators is kept so row numbers still follow the input.
    """
    reader = csv.reader(
        io.StringIO(_as_text(source), newline=""),
        delimiter=CSV_DELIMITER,
        skipinitialspace=True,
        strict=False,
    )
    try:
        return [[cell.strip() for cell in row] for row in reader if row]
    except csv.Error as e:
        raise ImportFormatError(f"invalid CSV: {e}")


@dataclass
class ImportReport:
    """Outcome of a row-by-row import; errors keep input order."""

    imported: int = 0
    errors: List[str] = field(default_factory=list)
    total: int = 0

    def to_dict(self) -> dict:
        return {"imported": self.imported, "errors": list(self.errors), "total": self.total}
