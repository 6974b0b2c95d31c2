"""Helpers shared by the JSON controllers.

Every route is wrapped by :func:`api_endpoint`, which turns domain exceptions
into ``{"success": false, "message": ...}`` responses with the exception's
status code.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime, time
from enum import Enum
from functools import wraps
from typing import Any, Optional

from flask import current_app, g, jsonify, request, session

from ..core.exceptions import AuthenticationError, DomainError, ValidationError
from ..users.model import SessionUser

logger = logging.getLogger(__name__)


def serialize(value: Any) -> Any:
    """Make dataclasses, enums and date/time values JSON friendly."""

    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return serialize(asdict(value))
    if isinstance(value, dict):
        return {(k.value if isinstance(k, Enum) else str(k)): serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [serialize(v) for v in value]
    return value


def ok(status: int = 200, **payload):
    body = {"success": True}
    body.update(serialize(payload))
    return jsonify(body), status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def api_endpoint(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            if e.status_code >= 500:
                logger.error("%s %s failed: %s", request.method, request.path, e)
            return fail(str(e), e.status_code)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.path)
            return fail("Internal server error", 500)

    return wrapper


def current_user() -> SessionUser:
    """The signed-in user, reloaded from the database once per request.

    Role, company and active flag come from the user row, so deactivating or
    re-roling a user takes effect on sessions that are already open.
    """

    cached = g.get("holitime_user")
    if cached is not None:
        return cached
    if "user_id" not in session:
        raise AuthenticationError("Authentication required")
    try:
        user_id = int(session["user_id"])
    except (TypeError, ValueError):
        session.clear()
        raise AuthenticationError("Authentication required")

    users = current_app.extensions["holitime.container"].users_repo
    user = users.get_by_id(user_id)
    if not user or not user.is_active:
        logger.info("Dropping session of missing or inactive user %s", user_id)
        session.clear()
        raise AuthenticationError("Authentication required")

    actor = SessionUser(
        user_id=user.user_id,
        name=user.name,
        email=user.email,
        role=user.role,
        company_id=user.company_id,
    )
    g.holitime_user = actor
    return actor


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        current_user()
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def query_int(name: str, default: Optional[int] = None) -> Optional[int]:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def query_bool(name: str, default: bool = False) -> bool:
    raw = request.args.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}
