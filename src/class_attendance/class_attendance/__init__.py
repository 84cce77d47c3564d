"""Classroom attendance sessions.

This package is organized by feature modules (sessions, attendance, reports,
retention, users, ...) with a thin Flask controller layer over service and
repository layers. All state lives in one JSON document (database/json_store.py).
"""
from __future__ import annotations

import importlib
import logging
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .common.logging_setup import configure_logging
from .container import Container, build_container
from .core.settings import AppSettings
from .scheduling.jobs import start_background_jobs
from .attendance.controller import register as register_attendance
from .reports.controller import register as register_reports
from .sessions.controller import register as register_sessions
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__, template_folder="../../../templates")

    settings_module = get_settings_module()
    settings = AppSettings.from_module(importlib.import_module(settings_module), overrides)

    configure_logging(settings.log_level, settings.log_file)
    app.secret_key = settings.secret_key
    app.config["DEBUG"] = settings.debug
    app.config["TESTING"] = settings.testing
    app.config["TEACHER_LOGIN_REQUIRED"] = settings.teacher_login_required

    logger.info(
        "settings=%s data=%s policy=%s domain=%s",
        settings_module,
        settings.data_path,
        settings.session_policy.value,
        settings.allowed_email_domain,
    )

    container = build_container(settings)
    app.extensions["class_attendance"] = container

    register_error_handlers(app)
    register_sessions(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_users(app, container)

    if settings.scheduler_enabled:
        start_background_jobs(
            sessions=container.session_service,
            retention=container.retention_service,
            expire_seconds=settings.expire_sweep_seconds,
            retention_minutes=settings.retention_sweep_minutes,
        )

    return app


def get_container(app: Flask) -> Container:
    return app.extensions["class_attendance"]
