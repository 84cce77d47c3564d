from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, render_template, request

from ..common.http import json_body
from ..common.validators import optional_float, require_coordinates
from ..core.exceptions import SubmissionError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    submissions = container.submission_service

    def _render_form(code: Optional[str]):
        try:
            session = submissions.form_session(code)
        except SubmissionError as e:
            return render_template("session_closed.html", message=str(e)), e.status_code

        return render_template(
            "student_form.html",
            session=session,
            session_code=session.code,
            needs_location=session.has_geofence,
            email_domain=submissions.allowed_domain,
        )

    @app.route("/", methods=["GET"], endpoint="student_form")
    def student_form():
        return _render_form(None)

    @app.route("/s/<code>", methods=["GET"], endpoint="student_form_for_code")
    def student_form_for_code(code: str):
        return _render_form(code)

    @app.route("/submit", methods=["POST"], endpoint="submit_attendance")
    def submit_attendance():
        data = json_body(request)
        try:
            coords = require_coordinates(
                optional_float(data.get("lat"), "Latitude"),
                optional_float(data.get("lon"), "Longitude"),
            )
        except ValidationError:
            # Garbage, partial, NaN or out-of-range coordinates count as "no location"
            coords = None

        record = submissions.validate_and_record(
            email=data.get("email"),
            name=data.get("name"),
            session_code=data.get("sessionCode"),
            coords=coords,
        )
        return jsonify(
            {
                "success": True,
                "message": "Attendance recorded!",
                "rollNumber": record.roll_number,
                "date": record.date,
                "time": record.time,
            }
        )
