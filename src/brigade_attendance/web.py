from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BusinessRuleError,
    DomainError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from .visibility.caller import Caller, caller_from

logger = logging.getLogger(__name__)

_STATUS = {
    ValidationError: 400,
    BusinessRuleError: 400,
    AuthenticationError: 401,
    AuthorizationError: 403,
    NotFoundError: 404,
    StoreError: 500,
}


def status_for(error: DomainError) -> int:
    for cls in type(error).__mro__:
        if cls in _STATUS:
            return _STATUS[cls]
    return 400


def current_caller() -> Caller:
    """Caller identity of the logged-in session user."""

    if "user_id" not in session:
        raise AuthenticationError("Authentication required")
    return caller_from(session.get("user_id"), session.get("role"))


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        return view(current_caller(), *args, **kwargs)

    return wrapper


def register(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        code = status_for(e)
        if code >= 500:
            logger.error("Request failed: %s %s: %s", request.method, request.path, e)
        return jsonify({"error": str(e)}), code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500

    @app.get("/health")
    def health():
        return jsonify(status="ok")
