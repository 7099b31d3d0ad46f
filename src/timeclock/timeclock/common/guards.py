from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..core.enums import Role


def _deny(status: int, message: str):
    return jsonify({"success": False, "error": "AuthorizationError", "message": message}), status


def login_required(view):
    """Identity comes from the session set by the external auth service."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return _deny(401, "Please sign in to continue")
        return view(*args, **kwargs)

    return wrapper


def approver_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return _deny(401, "Please sign in to continue")
        if session.get("role") != Role.APPROVER.value:
            return _deny(403, "Approver role required")
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])
