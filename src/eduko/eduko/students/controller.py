from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import current_actor, role_required
from ..common.uploads import require_upload
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students/import", methods=["POST"], endpoint="import_students")
    @role_required(Role.ADMIN)
    def import_students():
        actor = current_actor()
        upload = require_upload("file")
        report = container.student_import_service.import_csv(school_id=actor.school_id, source=upload.stream)
        return jsonify(report.to_dict())
