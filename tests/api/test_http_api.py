from __future__ import annotations

import io
from datetime import date, timedelta
from types import SimpleNamespace

import pytest
from flask_jwt_extended import create_access_token
from werkzeug.security import generate_password_hash

from src.eduko.eduko.attendance.service import AttendanceService
from src.eduko.eduko.common.auth import issue_token
from src.eduko.eduko.core.enums import AttendanceStatus, Role
from src.eduko.eduko.excuses.service import ExcuseService
from src.eduko.eduko.main import create_app
from src.eduko.eduko.students.service import StudentImportService
from src.eduko.eduko.users.service import AuthService
from tests.fakes import FakeClassesRepo, FakeExcusesRepo, FakeSchoolDb, FakeStudentsRepo, FakeUsersRepo

SCHOOL = 1


class UnusedAttendanceRepo:
    def upsert(self, **kwargs):
        raise AssertionError("not expected in these tests")


@pytest.fixture
def db():
    db = FakeSchoolDb()
    db.add_class(school_id=SCHOOL, name="1A")
    return db


@pytest.fixture
def app(db, tmp_path, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    students = FakeStudentsRepo(db)
    container = SimpleNamespace(
        auth_service=AuthService(FakeUsersRepo(db)),
        student_import_service=StudentImportService(students, FakeClassesRepo(db), password_hasher=lambda p: "h:" + p),
        attendance_service=AttendanceService(UnusedAttendanceRepo()),
        excuse_service=ExcuseService(FakeExcusesRepo(db), students, upload_dir=tmp_path / "uploads"),
    )
    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth(app, db):
    def make(user) -> dict:
        with app.app_context():
            token = issue_token(user_id=user.user_id, school_id=user.school_id, role=user.role)
        return {"Authorization": f"Bearer {token}"}

    return make


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_login_then_me(client, db):
    db.add_user(school_id=SCHOOL, username="admin", role=Role.ADMIN, password_hash=generate_password_hash("pw"))

    resp = client.post("/api/auth/login", json={"school_id": SCHOOL, "username": "admin", "password": "pw"})
    assert resp.status_code == 200
    token = resp.get_json()["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.get_json()["role"] == "admin"


def test_login_with_wrong_password_is_401(client, db):
    db.add_user(school_id=SCHOOL, username="admin", role=Role.ADMIN, password_hash=generate_password_hash("pw"))

    resp = client.post("/api/auth/login", json={"school_id": SCHOOL, "username": "admin", "password": "nope"})

    assert resp.status_code == 401
    assert resp.get_json() == {"error": "invalid credentials"}


def test_login_with_numeric_username_is_400(client):
    resp = client.post("/api/auth/login", json={"school_id": SCHOOL, "username": 5, "password": "pw"})

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "username is required"}


@pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer not-a-jwt"}])
def test_token_failures_use_the_error_body(client, headers):
    resp = client.get("/api/auth/me", headers=headers)

    assert resp.status_code == 401
    body = resp.get_json()
    assert set(body) == {"error"}


def test_expired_token_uses_the_error_body(app, client, db):
    user = db.add_user(school_id=SCHOOL, username="admin", role=Role.ADMIN)
    with app.app_context():
        token = create_access_token(
            identity=str(user.user_id),
            additional_claims={"school_id": SCHOOL, "role": "admin"},
            expires_delta=timedelta(seconds=-1),
        )

    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert resp.get_json() == {"error": "token has expired"}


def test_student_import_is_admin_only(client, db, auth):
    teacher = db.add_user(school_id=SCHOOL, username="t", role=Role.TEACHER)

    def data():
        return {"file": (io.BytesIO(b"username;password;first_name;last_name;date_of_birth\n"), "s.csv")}

    assert client.post("/api/students/import", data=data()).status_code == 401
    resp = client.post("/api/students/import", data=data(), headers=auth(teacher), content_type="multipart/form-data")
    assert resp.status_code == 403


def test_student_import_returns_report(client, db, auth):
    admin = db.add_user(school_id=SCHOOL, username="admin", role=Role.ADMIN)
    csv_bytes = (
        "username;password;first_name;last_name;class_name;date_of_birth\n"
        "anna;pw;Anna;Berg;1A;2012-04-01\n"
        "ben;pw;Ben;Cole;7C;2012-04-01\n"
    ).encode("utf-8")

    resp = client.post(
        "/api/students/import",
        data={"file": (io.BytesIO(csv_bytes), "students.csv")},
        headers=auth(admin),
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    assert resp.get_json() == {"imported": 1, "errors": ["row 3: class '7C' not found"], "total": 2}


def test_student_import_with_bad_header_is_400(client, db, auth):
    admin = db.add_user(school_id=SCHOOL, username="admin", role=Role.ADMIN)

    resp = client.post(
        "/api/students/import",
        data={"file": (io.BytesIO(b"username;password\nanna;pw\n"), "students.csv")},
        headers=auth(admin),
        content_type="multipart/form-data",
    )

    assert resp.status_code == 400
    assert resp.get_json()["error"].startswith("missing required column: first_name")


def test_excuse_flow_over_http(client, db, auth):
    student = db.add_student(school_id=SCHOOL, username="mia")
    student_user = db.users[student.user_id]
    teacher = db.add_user(school_id=SCHOOL, username="t", role=Role.TEACHER)
    absence = db.add_attendance(
        school_id=SCHOOL, student_id=student.student_id, att_date=date(2026, 3, 2), status=AttendanceStatus.ABSENT
    )

    created = client.post(
        "/api/excuses",
        json={"date_from": "2026-03-02", "date_to": "2026-03-03", "submission_type": "digital", "reason": "flu"},
        headers=auth(student_user),
    )
    assert created.status_code == 201
    body = created.get_json()
    assert body["linked_absences"] == 1
    assert body["excuse"]["date_from"] == "2026-03-02"
    excuse_id = body["excuse"]["excuse_id"]

    assert client.post(f"/api/excuses/{excuse_id}/approve", headers=auth(student_user)).status_code == 403

    approved = client.post(f"/api/excuses/{excuse_id}/approve", headers=auth(teacher))
    assert approved.status_code == 200
    assert approved.get_json()["status"] == "approved"
    assert db.status_of(absence.attendance_id) == AttendanceStatus.EXCUSED_LEAVE

    again = client.post(f"/api/excuses/{excuse_id}/approve", headers=auth(teacher))
    assert again.status_code == 409

    detail = client.get(f"/api/excuses/{excuse_id}", headers=auth(student_user))
    assert detail.get_json()["linked_attendance_ids"] == [absence.attendance_id]


def test_teacher_cannot_create_excuse(client, db, auth):
    teacher = db.add_user(school_id=SCHOOL, username="t", role=Role.TEACHER)

    resp = client.post("/api/excuses", json={"date_from": "2026-03-02", "date_to": "2026-03-02"}, headers=auth(teacher))

    assert resp.status_code == 403


def test_students_only_see_their_own_excuses(client, db, auth):
    mia = db.add_student(school_id=SCHOOL, username="mia")
    leo = db.add_student(school_id=SCHOOL, username="leo")
    created = client.post(
        "/api/excuses",
        json={"date_from": "2026-03-02", "date_to": "2026-03-02"},
        headers=auth(db.users[mia.user_id]),
    ).get_json()
    excuse_id = created["excuse"]["excuse_id"]

    assert client.get(f"/api/excuses/{excuse_id}", headers=auth(db.users[leo.user_id])).status_code == 404
    assert client.get("/api/excuses", headers=auth(db.users[leo.user_id])).get_json() == []
    assert client.get("/api/excuses/not-a-number", headers=auth(db.users[mia.user_id])).status_code == 400


def test_upload_excuse_form(client, db, auth, tmp_path):
    mia = db.add_student(school_id=SCHOOL, username="mia")
    headers = auth(db.users[mia.user_id])
    excuse_id = client.post(
        "/api/excuses", json={"date_from": "2026-03-02", "date_to": "2026-03-02"}, headers=headers
    ).get_json()["excuse"]["excuse_id"]

    resp = client.post(
        "/api/excuses/upload",
        data={"excuse_id": str(excuse_id), "file": (io.BytesIO(b"scan"), "form.jpg")},
        headers=headers,
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    stored = resp.get_json()["file_path"]
    assert stored.startswith(f"{excuse_id}_") and stored.endswith(".jpg")
    assert (tmp_path / "uploads" / stored).read_bytes() == b"scan"
