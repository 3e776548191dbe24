from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify, request, session

from ..audit.model import Actor
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    DomainError,
    Expired,
    InvalidTransition,
    NotFound,
    PolicyViolation,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 400,
    AuthenticationError: 401,
    PolicyViolation: 403,
    NotFound: 404,
    InvalidTransition: 409,
    Expired: 410,
}


def status_for(error: DomainError) -> int:
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 400


def ok(data=None, status: int = 200, **extra):
    body = {"success": True, "data": data}
    body.update(extra)
    return jsonify(body), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def query_flag(name: str) -> Optional[bool]:
    value = request.args.get(name)
    if value is None or value == "":
        return None
    return value.lower() in {"1", "true", "yes"}


def current_actor(payload: Optional[dict] = None, *, required: bool = True) -> Optional[Actor]:
    """Who is calling: the logged-in host, else the ``actor`` object of the body."""
    ip_address = request.remote_addr or "unknown"
    user_agent = request.user_agent.string or None

    if "host_id" in session:
        return Actor(
            actor_id=str(session["host_id"]),
            name=session.get("name", ""),
            role=Role(session.get("role", Role.HOST.value)),
            ip_address=ip_address,
            user_agent=user_agent,
        )

    raw = (payload or {}).get("actor")
    if not raw:
        if required:
            raise ValidationError("Actor is required")
        return None
    if not isinstance(raw, dict) or not raw.get("id") or not raw.get("name"):
        raise ValidationError("Actor needs an id and a name")

    try:
        role = Role(raw.get("role", Role.SECURITY.value))
    except ValueError:
        raise ValidationError("Actor role is not valid")

    return Actor(
        actor_id=str(raw["id"]),
        name=str(raw["name"]),
        role=role,
        ip_address=ip_address,
        user_agent=user_agent,
    )


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = status_for(e)
        logger.info("%s %s rejected (%d): %s", request.method, request.path, status, e)
        return jsonify({"success": False, "error": type(e).__name__, "message": str(e)}), status
