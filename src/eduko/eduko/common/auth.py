from __future__ import annotations

from dataclasses import dataclass
from functools import wraps

from flask import g
from flask_jwt_extended import JWTManager, create_access_token, get_jwt, verify_jwt_in_request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from .http import json_error


@dataclass(frozen=True)
class Actor:
    """Caller identity extracted from the bearer token."""

    user_id: int
    school_id: int
    role: Role


def issue_token(*, user_id: int, school_id: int, role: Role) -> str:
    return create_access_token(
        identity=str(user_id),
        additional_claims={"school_id": int(school_id), "role": role.value},
    )


def _actor_from_claims(claims: dict) -> Actor:
    try:
        return Actor(
            user_id=int(claims["sub"]),
            school_id=int(claims["school_id"]),
            role=Role(claims["role"]),
        )
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError("invalid token claims")


def role_required(*allowed_roles: Role):
    """Require a valid bearer token, and one of `allowed_roles` when given.

    Usage: @role_required(Role.TEACHER, Role.ADMIN)
    """
    allowed = {Role(r) for r in allowed_roles}

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            actor = _actor_from_claims(get_jwt())
            if allowed and actor.role not in allowed:
                raise AuthorizationError("insufficient permissions")
            g.actor = actor
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def current_actor() -> Actor:
    actor = g.get("actor")
    if actor is None:
        raise AuthenticationError("not authenticated")
    return actor


def register_jwt_handlers(jwt: JWTManager) -> None:
    """Token failures answer with the same error body as every other 401."""

    @jwt.unauthorized_loader
    def missing_token(reason: str):
        return json_error(reason or "missing token", 401)

    @jwt.invalid_token_loader
    def invalid_token(reason: str):
        return json_error(reason or "invalid token", 401)

    @jwt.expired_token_loader
    def expired_token(jwt_header: dict, jwt_payload: dict):
        return json_error("token has expired", 401)
