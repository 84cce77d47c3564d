from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.datetime_utils import to_iso
from ..common.http import json_body, teacher_required
from ..common.validators import optional_float
from ..core.exceptions import ValidationError
from ..container import Container


def parse_ids(raw) -> list[int]:
    """Accept [1, 2], "1,2" or a single id."""
    if raw is None or raw == "":
        return []
    items = raw if isinstance(raw, (list, tuple)) else str(raw).split(",")
    try:
        return [int(str(i).strip()) for i in items if str(i).strip()]
    except ValueError:
        raise ValidationError("Session ids must be numbers")


def register(app: Flask, container: Container) -> None:
    sessions = container.session_service

    @app.route("/api/start-session", methods=["POST"], endpoint="start_session")
    @teacher_required
    def start_session():
        data = json_body(request)
        session = sessions.start_session(
            data.get("sessionName", ""),
            lat=optional_float(data.get("lat"), "Latitude"),
            lon=optional_float(data.get("lon"), "Longitude"),
        )
        return jsonify(
            {
                "success": True,
                "sessionId": session.session_id,
                "sessionName": session.name,
                "sessionCode": session.code,
                "formUrl": sessions.form_url(session),
            }
        )

    @app.route("/api/stop-session", methods=["POST"], endpoint="stop_session")
    @teacher_required
    def stop_session():
        stopped = sessions.stop_session()
        return jsonify({"success": True, "message": "Session stopped", "stopped": [s.session_id for s in stopped]})

    @app.route("/api/sessions/<int:session_id>/stop", methods=["POST"], endpoint="stop_session_by_id")
    @teacher_required
    def stop_session_by_id(session_id: int):
        sessions.stop_session(session_id)
        return jsonify({"success": True})

    @app.route("/api/status", methods=["GET"], endpoint="session_status")
    @teacher_required
    def session_status():
        session = sessions.status()
        payload = None
        if session:
            payload = session.to_dict()
            payload["formUrl"] = sessions.form_url(session)
            payload["expiresAt"] = to_iso(session.expires_at(sessions.duration))
        return jsonify(
            {
                "active": session is not None,
                "session": payload,
                "activeCount": len(sessions.active_sessions()),
                "policy": sessions.policy.value,
            }
        )

    @app.route("/api/history", methods=["GET"], endpoint="session_history")
    @app.route("/api/sessions", methods=["GET"], endpoint="session_list")
    @teacher_required
    def session_history():
        return jsonify({"success": True, "sessions": sessions.history()})

    @app.route("/api/sessions/<int:session_id>", methods=["DELETE"], endpoint="delete_session")
    @teacher_required
    def delete_session(session_id: int):
        sessions.delete_session(session_id)
        return jsonify({"success": True})

    @app.route("/api/sessions/delete-many", methods=["POST"], endpoint="delete_sessions")
    @teacher_required
    def delete_sessions():
        ids = parse_ids(json_body(request).get("ids"))
        if not ids:
            raise ValidationError("No sessions selected")
        deleted = sessions.delete_many(ids)
        return jsonify({"success": True, "deleted": deleted})

    @app.route("/api/sessions/clear-all", methods=["POST"], endpoint="clear_sessions")
    @teacher_required
    def clear_sessions():
        deleted = sessions.clear_all()
        return jsonify({"success": True, "deleted": deleted})

    @app.route("/api/sessions/<int:session_id>/qr", methods=["GET"], endpoint="session_qr")
    @teacher_required
    def session_qr(session_id: int):
        """PNG QR code of the session's student form link, for projecting in class."""
        session = sessions.get(session_id)
        png = container.report_service.qr_png(sessions.form_url(session))
        return send_file(io.BytesIO(png), mimetype="image/png")
