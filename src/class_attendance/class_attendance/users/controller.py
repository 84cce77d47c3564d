from __future__ import annotations

from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.http import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "error": "Please log in to continue"}), 401
            return view(*args, **kwargs)

        return wrapper

    @app.route("/api/register", methods=["POST"], endpoint="register")
    def register_user():
        data = json_body(request)
        user = auth.register(
            email=data.get("email", ""),
            name=data.get("name", ""),
            password=data.get("password", ""),
            college=data.get("college"),
            department=data.get("department"),
        )
        session["user_id"] = user.user_id
        return jsonify({"success": True, "user": user.public_view()}), 201

    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body(request)
        user = auth.authenticate(data.get("email", ""), data.get("password", ""))
        session.clear()
        session["user_id"] = user.user_id
        return jsonify({"success": True, "user": user.public_view()})

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return jsonify({"success": True, "user": auth.get_user(session["user_id"]).public_view()})

    @app.route("/api/forgot-password", methods=["POST"], endpoint="forgot_password")
    def forgot_password():
        auth.request_password_reset(json_body(request).get("email", ""))
        return jsonify({"success": True, "message": "A reset code has been sent"})

    @app.route("/api/reset-password", methods=["POST"], endpoint="reset_password")
    def reset_password():
        data = json_body(request)
        auth.reset_password(
            email=data.get("email", ""),
            otp=data.get("otp", ""),
            new_password=data.get("newPassword", ""),
        )
        return jsonify({"success": True, "message": "Password updated"})

    @app.route("/api/change-password", methods=["POST"], endpoint="change_password")
    @login_required
    def change_password():
        data = json_body(request)
        auth.change_password(
            user_id=session["user_id"],
            current_password=data.get("currentPassword", ""),
            new_password=data.get("newPassword", ""),
        )
        return jsonify({"success": True, "message": "Password updated"})

    @app.route("/api/update-profile", methods=["POST"], endpoint="update_profile")
    @login_required
    def update_profile():
        data = json_body(request)
        user = auth.update_profile(
            user_id=session["user_id"],
            name=data.get("name"),
            college=data.get("college"),
            department=data.get("department"),
        )
        return jsonify({"success": True, "user": user.public_view()})
