from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import ValidationError


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "Unauthenticated", "message": "Please log in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "Unauthenticated", "message": "Please log in to continue"}), 401

        if session.get("role") != Role.ADMIN.value:
            return jsonify({"success": False, "error": "AuthorizationError", "message": "Administrator access required"}), 403

        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    try:
        return Role(session.get("role", Role.STAFF.value))
    except ValueError:
        return Role.STAFF


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def optional_int(value, field_name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer") from None


def flag(value) -> bool:
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None
