from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_actor, role_required
from ..common.http import json_body
from ..common.serialization import to_json_dict
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    staff_roles = (Role.TEACHER, Role.ADMIN)

    @app.route("/api/attendance", methods=["POST"], endpoint="record_attendance")
    @role_required(*staff_roles)
    def record_attendance():
        actor = current_actor()
        data = json_body()

        # A non-empty "entries" list records a whole lesson; otherwise one row.
        entries = data.get("entries")
        if entries:
            if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
                raise ValidationError("entries must be a list of objects")
            count = container.attendance_service.record_batch(
                school_id=actor.school_id,
                recorded_by=actor.user_id,
                timetable_entry_id=data.get("timetable_entry_id"),
                att_date=data.get("date"),
                entries=entries,
            )
            return jsonify({"recorded": count})

        rec = container.attendance_service.record(
            school_id=actor.school_id,
            recorded_by=actor.user_id,
            student_id=data.get("student_id"),
            timetable_entry_id=data.get("timetable_entry_id"),
            att_date=data.get("date"),
            status=data.get("status"),
            note=data.get("note"),
        )
        return jsonify(to_json_dict(rec)), 201

    @app.route("/api/attendance/<attendance_id>", methods=["PUT"], endpoint="update_attendance")
    @role_required(*staff_roles)
    def update_attendance(attendance_id: str):
        actor = current_actor()
        data = json_body()
        rec = container.attendance_service.update(
            school_id=actor.school_id,
            attendance_id=attendance_id,
            status=data.get("status"),
            note=data.get("note"),
        )
        return jsonify(to_json_dict(rec))

    @app.route("/api/attendance/class/<class_id>", methods=["GET"], endpoint="class_attendance")
    @role_required(*staff_roles)
    def class_attendance(class_id: str):
        actor = current_actor()
        rows = container.attendance_service.list_for_class(
            school_id=actor.school_id,
            class_id=class_id,
            att_date=request.args.get("date", ""),
        )
        return jsonify([to_json_dict(r) for r in rows])

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_by_date")
    @role_required(*staff_roles)
    def attendance_by_date():
        actor = current_actor()
        rows = container.attendance_service.list_for_date(
            school_id=actor.school_id,
            att_date=request.args.get("date", ""),
        )
        return jsonify([to_json_dict(r) for r in rows])
