from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    BusinessRuleError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from ..schedules.model import AcademicPeriod

logger = logging.getLogger(__name__)

# Most specific class first.
_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (BusinessRuleError, 422),
)


def status_for(error: DomainError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status
    return 400


def error_response(code: str, message: str, status: int):
    return jsonify({"error": code, "message": message}), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = status_for(e)
        logger.info("%s %s -> %s %s: %s", request.method, request.path, status, e.code, e)
        return error_response(e.code, str(e), status)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return error_response(e.name.replace(" ", ""), e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        return error_response("Internal", "Unexpected server error", 500)


def current_role() -> Role:
    raw = (request.headers.get("X-Role") or "").strip().lower()
    try:
        return Role(raw)
    except ValueError:
        raise AuthorizationError("X-Role header must be 'admin' or 'teacher'")


def json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def require_int(source: Any, key: str) -> int:
    value = source.get(key)
    if value is None or str(value).strip() == "":
        raise ValidationError(f"{key} is required")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer")


def optional_int(source: Any, key: str) -> Optional[int]:
    value = source.get(key)
    if value is None or str(value).strip() == "":
        return None
    return require_int(source, key)


def period_from(source: Any, *, required: bool = True) -> Optional[AcademicPeriod]:
    if not required and source.get("academic_year_id") in (None, "") and source.get("semester_id") in (None, ""):
        return None
    return AcademicPeriod(
        academic_year_id=require_int(source, "academic_year_id"),
        semester_id=require_int(source, "semester_id"),
    )
