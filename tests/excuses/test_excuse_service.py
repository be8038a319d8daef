from __future__ import annotations

import io
from datetime import date, datetime

import pytest

from src.eduko.eduko.core.enums import AttendanceStatus, ExcuseStatus, SubmissionType
from src.eduko.eduko.core.exceptions import ConflictError, InvalidTransitionError, NotFoundError, ValidationError
from src.eduko.eduko.excuses import service as excuse_service_module
from src.eduko.eduko.excuses.service import ExcuseService
from tests.fakes import FakeExcusesRepo, FakeSchoolDb, FakeStudentsRepo

SCHOOL = 1
OTHER_SCHOOL = 2


@pytest.fixture
def db():
    return FakeSchoolDb()


@pytest.fixture
def svc(db, tmp_path):
    return ExcuseService(
        FakeExcusesRepo(db),
        FakeStudentsRepo(db),
        upload_dir=tmp_path / "uploads",
        max_upload_bytes=1024,
    )


@pytest.fixture
def week(db):
    """Student with absences on Mar 2 and 3, a presence on Mar 3 and an absence on Mar 9."""
    student = db.add_student(school_id=SCHOOL, username="mia")
    other = db.add_student(school_id=SCHOOL, username="leo")
    return {
        "student": student,
        "abs_mon": db.add_attendance(school_id=SCHOOL, student_id=student.student_id, att_date=date(2026, 3, 2), status=AttendanceStatus.ABSENT),
        "abs_tue": db.add_attendance(
            school_id=SCHOOL, student_id=student.student_id, att_date=date(2026, 3, 3), status=AttendanceStatus.ABSENT, timetable_entry_id=2
        ),
        "present_tue": db.add_attendance(
            school_id=SCHOOL, student_id=student.student_id, att_date=date(2026, 3, 3), status=AttendanceStatus.PRESENT, timetable_entry_id=3
        ),
        "abs_next_week": db.add_attendance(school_id=SCHOOL, student_id=student.student_id, att_date=date(2026, 3, 9), status=AttendanceStatus.ABSENT),
        "other_abs": db.add_attendance(school_id=SCHOOL, student_id=other.student_id, att_date=date(2026, 3, 2), status=AttendanceStatus.ABSENT),
    }


def _create(svc, student, **overrides):
    params = dict(
        school_id=SCHOOL,
        student_id=student.student_id,
        date_from="2026-03-02",
        date_to="2026-03-06",
        submission_type="digital",
        reason="  flu  ",
    )
    params.update(overrides)
    return svc.create(**params)


def test_create_links_only_the_students_absences_in_range(svc, db, week):
    result = _create(svc, week["student"])

    assert result.linked_absences == 2
    assert result.excuse.status == ExcuseStatus.PENDING
    assert result.excuse.submission_type == SubmissionType.DIGITAL
    assert result.excuse.reason == "flu"
    assert sorted(db.links[result.excuse.excuse_id]) == sorted(
        [week["abs_mon"].attendance_id, week["abs_tue"].attendance_id]
    )


def test_create_without_absences_links_nothing(svc, week):
    result = _create(svc, week["student"], date_from="2026-03-04", date_to="2026-03-05")

    assert result.linked_absences == 0
    assert result.excuse.status == ExcuseStatus.PENDING


def test_single_day_range_is_inclusive(svc, week):
    result = _create(svc, week["student"], date_from="2026-03-09", date_to="2026-03-09")

    assert result.linked_absences == 1


def test_create_rejects_inverted_range_without_side_effects(svc, db, week):
    with pytest.raises(ValidationError):
        _create(svc, week["student"], date_from="2026-03-06", date_to="2026-03-02")

    assert db.excuses == {}


@pytest.mark.parametrize("field,value", [("submission_type", "fax"), ("date_from", "02.03.2026")])
def test_create_rejects_malformed_input(svc, db, week, field, value):
    with pytest.raises(ValidationError):
        _create(svc, week["student"], **{field: value})

    assert db.excuses == {}


def test_create_for_student_of_another_school_is_not_found(svc, db):
    foreign = db.add_student(school_id=OTHER_SCHOOL, username="ana")

    with pytest.raises(NotFoundError):
        _create(svc, foreign)


def test_approve_flips_only_linked_absences(svc, db, week, monkeypatch):
    monkeypatch.setattr(excuse_service_module, "now_local", lambda: datetime(2026, 3, 10, 9, 30))
    created = _create(svc, week["student"])
    # recorded after submission, inside the range: stays absent
    late_absence = db.add_attendance(
        school_id=SCHOOL, student_id=week["student"].student_id, att_date=date(2026, 3, 4), status=AttendanceStatus.ABSENT
    )

    approved = svc.approve(school_id=SCHOOL, excuse_id=created.excuse.excuse_id, approver_id=7)

    assert approved.status == ExcuseStatus.APPROVED
    assert approved.approved_by == 7
    assert approved.approved_at == datetime(2026, 3, 10, 9, 30)
    assert db.status_of(week["abs_mon"].attendance_id) == AttendanceStatus.EXCUSED_LEAVE
    assert db.status_of(week["abs_tue"].attendance_id) == AttendanceStatus.EXCUSED_LEAVE
    assert db.status_of(week["present_tue"].attendance_id) == AttendanceStatus.PRESENT
    assert db.status_of(week["abs_next_week"].attendance_id) == AttendanceStatus.ABSENT
    assert db.status_of(week["other_abs"].attendance_id) == AttendanceStatus.ABSENT
    assert db.status_of(late_absence.attendance_id) == AttendanceStatus.ABSENT


def test_reject_keeps_absences_and_stores_reason(svc, db, week):
    created = _create(svc, week["student"])

    rejected = svc.reject(school_id=SCHOOL, excuse_id=created.excuse.excuse_id, reason="  no signature ")

    assert rejected.status == ExcuseStatus.REJECTED
    assert rejected.rejection_reason == "no signature"
    assert rejected.approved_by is None
    assert db.status_of(week["abs_mon"].attendance_id) == AttendanceStatus.ABSENT
    assert db.status_of(week["abs_tue"].attendance_id) == AttendanceStatus.ABSENT


def test_second_approval_is_a_conflict_and_changes_nothing(svc, db, week):
    created = _create(svc, week["student"])
    first = svc.approve(school_id=SCHOOL, excuse_id=created.excuse.excuse_id, approver_id=7)

    with pytest.raises(InvalidTransitionError) as exc:
        svc.approve(school_id=SCHOOL, excuse_id=created.excuse.excuse_id, approver_id=8)

    assert isinstance(exc.value, ConflictError)
    assert "approved" in str(exc.value)
    current = svc.get(school_id=SCHOOL, excuse_id=created.excuse.excuse_id)
    assert current.approved_by == first.approved_by == 7


def test_rejected_excuse_cannot_be_approved(svc, db, week):
    created = _create(svc, week["student"])
    svc.reject(school_id=SCHOOL, excuse_id=created.excuse.excuse_id)

    with pytest.raises(InvalidTransitionError):
        svc.approve(school_id=SCHOOL, excuse_id=created.excuse.excuse_id, approver_id=7)

    assert db.status_of(week["abs_mon"].attendance_id) == AttendanceStatus.ABSENT


def test_decisions_are_tenant_scoped(svc, week):
    created = _create(svc, week["student"])

    with pytest.raises(NotFoundError):
        svc.approve(school_id=OTHER_SCHOOL, excuse_id=created.excuse.excuse_id, approver_id=7)
    with pytest.raises(NotFoundError):
        svc.reject(school_id=OTHER_SCHOOL, excuse_id=created.excuse.excuse_id)
    with pytest.raises(NotFoundError):
        svc.get(school_id=OTHER_SCHOOL, excuse_id=created.excuse.excuse_id)


@pytest.mark.parametrize("bad_id", ["abc", "0", "-3", ""])
def test_malformed_excuse_id_is_a_validation_error(svc, bad_id):
    with pytest.raises(ValidationError):
        svc.get(school_id=SCHOOL, excuse_id=bad_id)


def test_get_hides_excuses_of_other_students(svc, week):
    created = _create(svc, week["student"])

    assert svc.get(school_id=SCHOOL, excuse_id=created.excuse.excuse_id, owner_student_id=week["student"].student_id)
    with pytest.raises(NotFoundError):
        svc.get(school_id=SCHOOL, excuse_id=created.excuse.excuse_id, owner_student_id=12345)


def test_list_filters_and_orders_newest_first(svc, db, week):
    classmate = db.add_student(school_id=SCHOOL, username="zoe", class_id=42)
    first = _create(svc, week["student"])
    second = _create(svc, classmate)
    svc.approve(school_id=SCHOOL, excuse_id=first.excuse.excuse_id, approver_id=7)

    all_rows = svc.list_excuses(school_id=SCHOOL)
    pending = svc.list_excuses(school_id=SCHOOL, status="pending")
    by_class = svc.list_excuses(school_id=SCHOOL, class_id="42")

    assert [e.excuse_id for e in all_rows] == [second.excuse.excuse_id, first.excuse.excuse_id]
    assert [e.excuse_id for e in pending] == [second.excuse.excuse_id]
    assert [e.excuse_id for e in by_class] == [second.excuse.excuse_id]
    assert svc.list_excuses(school_id=OTHER_SCHOOL) == []

    with pytest.raises(ValidationError):
        svc.list_excuses(school_id=SCHOOL, status="archived")


def test_attach_file_stores_form_under_generated_name(svc, week, tmp_path):
    created = _create(svc, week["student"])

    excuse = svc.attach_file(
        school_id=SCHOOL,
        excuse_id=created.excuse.excuse_id,
        filename="Scan Page 1.PDF",
        stream=io.BytesIO(b"%PDF-1.4 fake"),
    )

    prefix = f"{created.excuse.excuse_id}_"
    assert excuse.file_path.startswith(prefix)
    assert excuse.file_path.endswith(".pdf")
    assert len(excuse.file_path) == len(prefix) + 8 + len(".pdf")
    assert (tmp_path / "uploads" / excuse.file_path).read_bytes() == b"%PDF-1.4 fake"


def test_attach_file_rejects_oversized_upload(svc, week, tmp_path):
    created = _create(svc, week["student"])

    with pytest.raises(ValidationError):
        svc.attach_file(
            school_id=SCHOOL,
            excuse_id=created.excuse.excuse_id,
            filename="big.png",
            stream=io.BytesIO(b"x" * 1025),
        )

    assert not (tmp_path / "uploads").exists()
    assert svc.get(school_id=SCHOOL, excuse_id=created.excuse.excuse_id).file_path is None


def test_attach_file_to_unknown_excuse_is_not_found(svc):
    with pytest.raises(NotFoundError):
        svc.attach_file(school_id=SCHOOL, excuse_id=999, filename="a.pdf", stream=io.BytesIO(b"a"))


def test_csv_import_creates_each_valid_row_and_reports_the_rest(svc, db, week):
    sid = week["student"].student_id
    foreign = db.add_student(school_id=OTHER_SCHOOL, username="ana")
    content = (
        "student_id;date_from;date_to;submission_type;reason\n"
        f"{sid};2026-03-02;2026-03-03;paper;doctor note\n"
        f"{sid};2026-03-02;not-a-date;paper;\n"
        f"{foreign.student_id};2026-03-02;2026-03-03;paper;\n"
        f"{sid};2026-03-02\n"
        f"x;2026-03-02;2026-03-03;paper\n"
        f"{sid};2026-03-09;2026-03-09;digital\n"
    ).encode("utf-8")

    report = svc.import_csv(school_id=SCHOOL, source=io.BytesIO(content))

    assert report.imported == 2
    assert report.total == 6
    assert [e.split(":")[0] for e in report.errors] == ["row 3", "row 4", "row 5", "row 6"]
    assert "not found" in report.errors[1]
    assert report.errors[2] == "row 5: not enough columns"
    assert report.errors[3] == "row 6: invalid student_id"

    paper = svc.list_excuses(school_id=SCHOOL, student_id=sid)
    assert {e.submission_type for e in paper} == {SubmissionType.PAPER, SubmissionType.DIGITAL}
