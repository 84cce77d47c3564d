from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, current_app, jsonify, session

from ..core.exceptions import DomainError, PersistenceError

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    """JSON failures for every API route: {"success": false, "error": "..."}."""

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return jsonify({"success": False, "error": str(e)}), e.status_code

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(e: PersistenceError):
        logger.error("Persistence failure, request aborted: %s", e, exc_info=e)
        return jsonify({"success": False, "error": "Could not save data. Please try again."}), 500


def json_body(request) -> dict:
    """Accept JSON or form posts, like the student form and the teacher app send."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def teacher_required(view):
    """Teacher-only API: 401 JSON unless a teacher is logged in.

    Switched off with TEACHER_LOGIN_REQUIRED=0 (open dashboard on a trusted LAN).
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_app.config.get("TEACHER_LOGIN_REQUIRED", True) and "user_id" not in session:
            return jsonify({"success": False, "error": "Please log in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper
