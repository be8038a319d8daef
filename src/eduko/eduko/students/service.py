from __future__ import annotations

import logging
from typing import Callable, Optional

from werkzeug.security import generate_password_hash

from ..classes.repository import ClassRepository, build_name_index
from ..common.csv_utils import CsvSource, ImportReport, read_rows
from ..common.datetime_utils import try_parse_iso_date
from ..common.validators import optional_text
from ..core.constants import STUDENT_IMPORT_REQUIRED_COLUMNS
from ..core.exceptions import DuplicateUsernameError, ImportFormatError
from .model import NewStudentAccount
from .repository import StudentRepository

logger = logging.getLogger(__name__)


class StudentImportService:
    """Use case: bulk-create student accounts from a semicolon separated file.

    Each data row is its own unit of work. A bad row is reported and skipped,
    rows before and after it are unaffected.
    """

    def __init__(
        self,
        students: StudentRepository,
        classes: ClassRepository,
        *,
        password_hasher: Callable[[str], str] = generate_password_hash,
    ):
        self._students = students
        self._classes = classes
        self._hash_password = password_hasher

    @staticmethod
    def _column_index(header: list[str]) -> dict[str, int]:
        index: dict[str, int] = {}
        for pos, name in enumerate(header):
            key = name.strip().lower()
            if key and key not in index:
                index[key] = pos

        for col in STUDENT_IMPORT_REQUIRED_COLUMNS:
            if col not in index:
                raise ImportFormatError(f"missing required column: {col} (have: {', '.join(header)})")
        return index

    def import_csv(self, *, school_id: int, source: CsvSource) -> ImportReport:
        rows = read_rows(source)
        if not rows:
            raise ImportFormatError("file is empty, a header row is required")

        index = self._column_index(rows[0])
        class_ids = build_name_index(self._classes.list_by_school(school_id=school_id))

        report = ImportReport()
        row_num = 1
        for cells in rows[1:]:
            row_num += 1
            report.total += 1
            error = self._import_row(school_id=school_id, row_num=row_num, cells=cells, index=index, class_ids=class_ids)
            if error:
                report.errors.append(error)
            else:
                report.imported += 1

        logger.info(
            "Student import school_id=%s: imported=%s errors=%s total=%s",
            school_id,
            report.imported,
            len(report.errors),
            report.total,
        )
        return report

    def _import_row(
        self,
        *,
        school_id: int,
        row_num: int,
        cells: list[str],
        index: dict[str, int],
        class_ids: dict[str, int],
    ) -> Optional[str]:
        def get(col: str) -> str:
            pos = index.get(col)
            if pos is None or pos >= len(cells):
                return ""
            return cells[pos].strip()

        username = get("username")
        password = get("password")
        first_name = get("first_name")
        last_name = get("last_name")
        if not (username and password and first_name and last_name):
            return f"row {row_num}: missing required fields"

        dob_raw = get("date_of_birth")
        date_of_birth = try_parse_iso_date(dob_raw)
        if date_of_birth is None:
            return f"row {row_num}: invalid date_of_birth '{dob_raw}'"

        class_id = None
        class_name = get("class_name")
        if class_name:
            class_id = class_ids.get(class_name.lower())
            if class_id is None:
                return f"row {row_num}: class '{class_name}' not found"

        account = NewStudentAccount(
            username=username,
            password_hash=self._hash_password(password),
            first_name=first_name,
            last_name=last_name,
            email=optional_text(get("email")),
            date_of_birth=date_of_birth,
            class_id=class_id,
        )
        try:
            self._students.create_with_user(school_id=school_id, account=account)
        except DuplicateUsernameError:
            logger.warning("Student import row %s: duplicate username %r", row_num, username)
            return f"row {row_num}: user '{username}' already exists"
        except Exception:
            logger.exception("Student import row %s: insert failed", row_num)
            return f"row {row_num}: student create error"
        return None
