from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from .actor import Actor
from .serialization import to_jsonable

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
)


def ok(data: Any = None, *, message: Optional[str] = None, count: Optional[int] = None, status: int = 200, **extra):
    """Build the `{success, data?, message?, count?}` envelope."""
    body: dict = {"success": True}
    if message is not None:
        body["message"] = message
    if count is not None:
        body["count"] = int(count)
    if data is not None:
        body["data"] = to_jsonable(data)
    for key, value in extra.items():
        body[key] = to_jsonable(value)
    return jsonify(body), status


def fail(message: str, status: int, data: Any = None):
    body: dict = {"success": False, "message": message}
    if data is not None:
        body["data"] = to_jsonable(data)
    return jsonify(body), status


def json_body() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def client_ip() -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr


def current_actor() -> Actor:
    if "user_id" not in session:
        raise AuthenticationError("Not authenticated")
    return Actor(user_id=int(session["user_id"]), role=Role(session.get("role")), ip_address=client_ip())


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Not authenticated", 401)
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return fail("Not authenticated", 401)
            if session.get("role") not in allowed:
                return fail("You do not have permission to perform this action", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def register_error_handlers(app: Flask) -> None:
    def _domain_handler(status: int):
        def handler(error):
            return fail(str(error), status)

        return handler

    for error_cls, status in _STATUS_BY_ERROR:
        app.register_error_handler(error_cls, _domain_handler(status))

    @app.errorhandler(HTTPException)
    def _http_error(error: HTTPException):
        return fail(error.description or error.name, error.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(error: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return fail(str(error) or "Internal server error", 500)
