from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path
from typing import IO, Any, Optional, Sequence

from werkzeug.utils import secure_filename

from ..common.csv_utils import CsvSource, ImportReport, read_rows
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_date, require_enum, require_positive_id
from ..core.constants import (
    DEFAULT_UPLOAD_DIR,
    EXCUSE_IMPORT_MIN_COLUMNS,
    MAX_UPLOAD_BYTES,
    UPLOAD_NAME_TOKEN_LENGTH,
)
from ..core.enums import ExcuseStatus, SubmissionType
from ..core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from ..students.model import Student
from ..students.repository import StudentRepository
from .model import Excuse, ExcuseWithLinks, NewExcuse
from .repository import ExcuseRepository

logger = logging.getLogger(__name__)


class ExcuseService:
    """Absence excuse lifecycle.

    An excuse is created pending and linked to the student's absences in its
    date range at that moment. Approval flips exactly those linked absences to
    excused leave; rejection leaves them absent. Only pending excuses move.
    """

    def __init__(
        self,
        excuses: ExcuseRepository,
        students: StudentRepository,
        *,
        upload_dir: str | Path = DEFAULT_UPLOAD_DIR,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
    ):
        self._excuses = excuses
        self._students = students
        self._upload_dir = Path(upload_dir)
        self._max_upload_bytes = int(max_upload_bytes)

    # -------- Input --------
    @staticmethod
    def _build_new_excuse(
        *,
        date_from: Any,
        date_to: Any,
        submission_type: Any,
        reason: Optional[str],
        attestation_provided: Any,
    ) -> NewExcuse:
        start = require_date(date_from, "date_from")
        end = require_date(date_to, "date_to")
        if start > end:
            raise ValidationError("date_from must not be after date_to")

        return NewExcuse(
            date_from=start,
            date_to=end,
            submission_type=require_enum(SubmissionType, submission_type, "submission_type"),
            reason=optional_text(reason),
            attestation_provided=bool(attestation_provided),
        )

    def student_for_user(self, *, school_id: int, user_id: int) -> Student:
        student = self._students.get_by_user_id(school_id=school_id, user_id=user_id)
        if not student:
            raise ValidationError("user is not a student")
        return student

    # -------- Create --------
    def create(
        self,
        *,
        school_id: int,
        student_id: int,
        date_from: Any,
        date_to: Any,
        submission_type: Any,
        reason: Optional[str] = None,
        attestation_provided: Any = False,
    ) -> ExcuseWithLinks:
        new = self._build_new_excuse(
            date_from=date_from,
            date_to=date_to,
            submission_type=submission_type,
            reason=reason,
            attestation_provided=attestation_provided,
        )
        result = self._excuses.create_with_links(school_id=school_id, student_id=int(student_id), new=new)
        if not result:
            raise NotFoundError("student not found")

        logger.info(
            "Excuse %s created for student %s (%s..%s), linked absences=%s",
            result.excuse.excuse_id,
            student_id,
            new.date_from,
            new.date_to,
            result.linked_absences,
        )
        return result

    # -------- Read --------
    def list_excuses(
        self,
        *,
        school_id: int,
        status: Any = None,
        student_id: Any = None,
        class_id: Any = None,
    ) -> Sequence[Excuse]:
        return self._excuses.list_excuses(
            school_id=school_id,
            status=require_enum(ExcuseStatus, status, "status") if status else None,
            student_id=require_positive_id(student_id, "student_id") if student_id else None,
            class_id=require_positive_id(class_id, "class_id") if class_id else None,
        )

    def get(self, *, school_id: int, excuse_id: Any, owner_student_id: Optional[int] = None) -> Excuse:
        """Fetch one excuse; with `owner_student_id` set, other students' excuses look missing."""
        excuse = self._excuses.get(school_id=school_id, excuse_id=require_positive_id(excuse_id, "excuse_id"))
        if not excuse or (owner_student_id is not None and excuse.student_id != owner_student_id):
            raise NotFoundError("excuse not found")
        return excuse

    def linked_attendance_ids(self, *, school_id: int, excuse_id: int) -> Sequence[int]:
        return self._excuses.linked_attendance_ids(school_id=school_id, excuse_id=excuse_id)

    # -------- Decide --------
    def _raise_not_decidable(self, *, school_id: int, excuse_id: int) -> None:
        current = self._excuses.get(school_id=school_id, excuse_id=excuse_id)
        if not current:
            raise NotFoundError("excuse not found")
        raise InvalidTransitionError(f"excuse is already {current.status.value}")

    def approve(self, *, school_id: int, excuse_id: Any, approver_id: int) -> Excuse:
        excuse_id = require_positive_id(excuse_id, "excuse_id")
        ok = self._excuses.approve(
            school_id=school_id,
            excuse_id=excuse_id,
            approved_by=int(approver_id),
            approved_at=now_local(),
        )
        if not ok:
            self._raise_not_decidable(school_id=school_id, excuse_id=excuse_id)

        logger.info("Excuse %s approved by user %s", excuse_id, approver_id)
        return self.get(school_id=school_id, excuse_id=excuse_id)

    def reject(self, *, school_id: int, excuse_id: Any, reason: Optional[str] = None) -> Excuse:
        excuse_id = require_positive_id(excuse_id, "excuse_id")
        ok = self._excuses.reject(
            school_id=school_id,
            excuse_id=excuse_id,
            rejection_reason=optional_text(reason),
        )
        if not ok:
            self._raise_not_decidable(school_id=school_id, excuse_id=excuse_id)

        logger.info("Excuse %s rejected", excuse_id)
        return self.get(school_id=school_id, excuse_id=excuse_id)

    # -------- Upload --------
    def attach_file(
        self,
        *,
        school_id: int,
        excuse_id: Any,
        filename: str,
        stream: IO[bytes],
        owner_student_id: Optional[int] = None,
    ) -> Excuse:
        """Store a scanned form next to the excuse and remember its file name."""
        excuse = self.get(school_id=school_id, excuse_id=excuse_id, owner_student_id=owner_student_id)

        content = stream.read(self._max_upload_bytes + 1)
        if len(content) > self._max_upload_bytes:
            raise ValidationError(f"file too large (max {self._max_upload_bytes // (1024 * 1024)}MB)")

        ext = os.path.splitext(secure_filename(filename or ""))[1].lower()
        stored_name = f"{excuse.excuse_id}_{uuid.uuid4().hex[:UPLOAD_NAME_TOKEN_LENGTH]}{ext}"

        self._upload_dir.mkdir(parents=True, exist_ok=True)
        target = self._upload_dir / stored_name
        target.write_bytes(content)

        if not self._excuses.set_file_path(school_id=school_id, excuse_id=excuse.excuse_id, file_path=stored_name):
            target.unlink(missing_ok=True)
            raise NotFoundError("excuse not found")

        logger.info("Stored form %s for excuse %s (%s bytes)", stored_name, excuse.excuse_id, len(content))
        return self.get(school_id=school_id, excuse_id=excuse.excuse_id)

    # -------- Bulk import --------
    def import_csv(self, *, school_id: int, source: CsvSource) -> ImportReport:
        """Create paper excuses from `student_id;date_from;date_to;submission_type;reason` rows.

        The header row is skipped. Every row is created on its own, so one bad
        row does not undo the others.
        """
        rows = read_rows(source)
        report = ImportReport()

        row_num = 1
        for cells in rows[1:]:
            row_num += 1
            report.total += 1
            error = self._import_row(school_id=school_id, row_num=row_num, cells=cells)
            if error:
                report.errors.append(error)
            else:
                report.imported += 1

        logger.info(
            "Excuse import school_id=%s: imported=%s errors=%s total=%s",
            school_id,
            report.imported,
            len(report.errors),
            report.total,
        )
        return report

    def _import_row(self, *, school_id: int, row_num: int, cells: list[str]) -> Optional[str]:
        if len(cells) < EXCUSE_IMPORT_MIN_COLUMNS:
            return f"row {row_num}: not enough columns"

        try:
            student_id = require_positive_id(cells[0], "student_id")
        except ValidationError:
            return f"row {row_num}: invalid student_id"

        if not self._students.get_by_id(school_id=school_id, student_id=student_id):
            return f"row {row_num}: student {student_id} not found"

        try:
            self.create(
                school_id=school_id,
                student_id=student_id,
                date_from=cells[1],
                date_to=cells[2],
                submission_type=cells[3],
                reason=cells[4] if len(cells) > 4 else None,
            )
        except (ValidationError, NotFoundError) as e:
            return f"row {row_num}: {e}"
        except Exception:
            logger.exception("Excuse import row %s: insert failed", row_num)
            return f"row {row_num}: excuse create error"
        return None
