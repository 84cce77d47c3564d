from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.http import teacher_required
from ..container import Container
from ..core.exceptions import ValidationError
from ..sessions.controller import parse_ids
from .service import ExportFile


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    def _send(export: ExportFile):
        return send_file(
            io.BytesIO(export.content),
            mimetype=export.mimetype,
            as_attachment=True,
            download_name=export.filename,
        )

    @app.route("/api/responses", methods=["GET"], endpoint="responses")
    @teacher_required
    def responses():
        session_id = request.args.get("sessionId")
        if session_id is not None and not session_id.strip().isdigit():
            raise ValidationError("sessionId must be a number")
        data = reports.responses(
            session_name=request.args.get("sessionName") or None,
            session_id=int(session_id) if session_id else None,
        )
        return jsonify({"success": True, **data})

    @app.route("/api/export", methods=["GET"], endpoint="export_attendance")
    @teacher_required
    def export_attendance():
        return _send(reports.export_for_session_name(request.args.get("sessionName") or None))

    @app.route("/api/export-multi", methods=["GET"], endpoint="export_attendance_multi")
    @teacher_required
    def export_attendance_multi():
        return _send(reports.export_for_ids(parse_ids(request.args.get("ids"))))
