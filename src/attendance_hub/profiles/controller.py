from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import require_bool
from ..common.web import client_context, current_identity, hoc_required, json_body, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = json_body()
        profile = container.auth_service.register(
            full_name=data.get("full_name", ""),
            matric_no=data.get("matric_no", ""),
            level=data.get("level", 100),
            department=data.get("department", ""),
            password=data.get("password", ""),
            signature=data.get("signature", ""),
            is_hoc=require_bool(data.get("is_hoc", False), "is_hoc"),
            hoc_secret=data.get("hoc_secret", ""),
        )
        return jsonify({"success": True, "message": "Registration successful. Please log in.", "profile": profile.public_dict()}), 201

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = json_body()
        profile = container.auth_service.authenticate(data.get("matric_no", ""), data.get("password", ""))

        ctx = client_context()
        ctx.login(profile)
        return jsonify(
            {
                "success": True,
                "profile": profile.public_dict(),
                "theme": ctx.theme.value,
                "pending_pin": ctx.peek_pin(),
            }
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def auth_logout():
        client_context().logout()
        return jsonify({"success": True})

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        profile = container.profile_service.get(current_identity().profile_id)
        ctx = client_context()
        return jsonify({"success": True, "profile": profile.public_dict(), "theme": ctx.theme.value})

    @app.route("/api/me/level", methods=["PATCH", "POST"], endpoint="me_level")
    @login_required
    def me_level():
        data = json_body()
        profile = container.profile_service.update_level(current_identity().profile_id, data.get("level"))
        client_context().update_level(profile.level)
        return jsonify({"success": True, "profile": profile.public_dict()})

    @app.route("/api/me/theme", methods=["PUT", "POST"], endpoint="me_theme")
    def me_theme():
        # theme is client state; no login needed
        theme = client_context().set_theme(json_body().get("theme", ""))
        return jsonify({"success": True, "theme": theme.value})

    @app.route("/api/department/students", methods=["GET"], endpoint="department_students")
    @hoc_required
    def department_students():
        identity = current_identity()
        students = container.profile_service.department_students(identity.department, request.args.get("q", ""))
        return jsonify(
            {
                "success": True,
                "department": identity.department,
                "students": [
                    {k: v for k, v in s.public_dict().items() if k != "signature"}
                    for s in students
                ],
            }
        )
