from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from flask import Flask, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    InternalInvariantViolation,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (ConflictError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        for error_type, status in _STATUS_BY_ERROR:
            if isinstance(e, error_type):
                return jsonify({"message": str(e)}), status
        return jsonify({"message": str(e)}), 400

    @app.errorhandler(InternalInvariantViolation)
    def handle_invariant_violation(e: InternalInvariantViolation):
        logger.critical("Invariant violation on %s %s", request.method, request.path, exc_info=e)
        return jsonify({"message": "Server error"}), 500

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify({"message": e.description}), e.code
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"message": "Server error"}), 500


def make_guards(auth_service: Any):
    """Build ``login_required`` / ``admin_required`` bound to ``auth_service``.

    The session only carries the user id; the account is re-read on every
    request so deactivation takes effect immediately.
    """

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"message": "Not authenticated"}), 401
            try:
                g.current_user = auth_service.current_user(int(session["user_id"]))
            except AuthenticationError as e:
                session.clear()
                return jsonify({"message": str(e)}), 401
            return view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        @login_required
        def wrapper(*args, **kwargs):
            if g.current_user.role != Role.ADMIN:
                return jsonify({"message": "Access denied. Admin privileges required"}), 403
            return view(*args, **kwargs)

        return wrapper

    return login_required, admin_required
