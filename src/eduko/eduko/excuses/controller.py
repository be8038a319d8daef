from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..common.auth import Actor, current_actor, role_required
from ..common.http import json_body
from ..common.serialization import to_json_dict
from ..common.uploads import require_upload
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    service = container.excuse_service

    def _own_student_id(actor: Actor) -> Optional[int]:
        # Students only ever see their own excuses; staff see the whole school.
        if actor.role != Role.STUDENT:
            return None
        return service.student_for_user(school_id=actor.school_id, user_id=actor.user_id).student_id

    @app.route("/api/excuses", methods=["POST"], endpoint="create_excuse")
    @role_required(Role.STUDENT)
    def create_excuse():
        actor = current_actor()
        data = json_body()
        student = service.student_for_user(school_id=actor.school_id, user_id=actor.user_id)
        result = service.create(
            school_id=actor.school_id,
            student_id=student.student_id,
            date_from=data.get("date_from"),
            date_to=data.get("date_to"),
            submission_type=data.get("submission_type", "digital"),
            reason=data.get("reason"),
            attestation_provided=data.get("attestation_provided", False),
        )
        return jsonify({"excuse": to_json_dict(result.excuse), "linked_absences": result.linked_absences}), 201

    @app.route("/api/excuses", methods=["GET"], endpoint="list_excuses")
    @role_required()
    def list_excuses():
        actor = current_actor()
        own = _own_student_id(actor)
        rows = service.list_excuses(
            school_id=actor.school_id,
            status=request.args.get("status"),
            student_id=own if own is not None else request.args.get("student_id"),
            class_id=request.args.get("class_id"),
        )
        return jsonify([to_json_dict(e) for e in rows])

    @app.route("/api/excuses/<excuse_id>", methods=["GET"], endpoint="get_excuse")
    @role_required()
    def get_excuse(excuse_id: str):
        actor = current_actor()
        excuse = service.get(school_id=actor.school_id, excuse_id=excuse_id, owner_student_id=_own_student_id(actor))
        body = to_json_dict(excuse)
        body["linked_attendance_ids"] = list(
            service.linked_attendance_ids(school_id=actor.school_id, excuse_id=excuse.excuse_id)
        )
        return jsonify(body)

    @app.route("/api/excuses/<excuse_id>/approve", methods=["POST"], endpoint="approve_excuse")
    @role_required(Role.TEACHER, Role.ADMIN)
    def approve_excuse(excuse_id: str):
        actor = current_actor()
        excuse = service.approve(school_id=actor.school_id, excuse_id=excuse_id, approver_id=actor.user_id)
        return jsonify(to_json_dict(excuse))

    @app.route("/api/excuses/<excuse_id>/reject", methods=["POST"], endpoint="reject_excuse")
    @role_required(Role.TEACHER, Role.ADMIN)
    def reject_excuse(excuse_id: str):
        actor = current_actor()
        data = json_body()
        excuse = service.reject(school_id=actor.school_id, excuse_id=excuse_id, reason=data.get("reason"))
        return jsonify(to_json_dict(excuse))

    @app.route("/api/excuses/upload", methods=["POST"], endpoint="upload_excuse_form")
    @role_required()
    def upload_excuse_form():
        actor = current_actor()
        upload = require_upload("file")
        excuse = service.attach_file(
            school_id=actor.school_id,
            excuse_id=request.form.get("excuse_id"),
            filename=upload.filename,
            stream=upload.stream,
            owner_student_id=_own_student_id(actor),
        )
        return jsonify({"message": "file uploaded", "file_path": excuse.file_path})

    @app.route("/api/excuses/import", methods=["POST"], endpoint="import_excuses")
    @role_required(Role.ADMIN)
    def import_excuses():
        actor = current_actor()
        upload = require_upload("file")
        report = service.import_csv(school_id=actor.school_id, source=upload.stream)
        return jsonify(report.to_dict())
