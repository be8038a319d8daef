from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import current_actor, issue_token, role_required
from ..common.http import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        user = container.auth_service.authenticate(
            school_id=data.get("school_id"),
            username=data.get("username", ""),
            password=data.get("password", ""),
        )
        token = issue_token(user_id=user.user_id, school_id=user.school_id, role=user.role)
        return jsonify(
            {
                "token": token,
                "user": {
                    "user_id": user.user_id,
                    "school_id": user.school_id,
                    "username": user.username,
                    "full_name": user.full_name,
                    "role": user.role.value,
                },
            }
        )

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @role_required()
    def me():
        actor = current_actor()
        user = container.auth_service.get_profile(school_id=actor.school_id, user_id=actor.user_id)
        return jsonify(
            {
                "user_id": user.user_id,
                "school_id": user.school_id,
                "username": user.username,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "email": user.email,
                "role": user.role.value,
            }
        )
