from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import client_context, current_identity, hoc_required, json_body, student_required
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_submit")
    @student_required
    def attendance_submit():
        identity = current_identity()
        data = json_body()
        pin = str(data.get("pin") or "").strip()
        if not pin:
            raise ValidationError("Enter the 6-digit PIN shown in class")

        session_id = data.get("session_id")
        if session_id in (None, ""):
            entry = container.checkin_service.submit_by_pin(identity.profile_id, identity.department, pin)
        else:
            try:
                session_id = int(session_id)
            except (TypeError, ValueError):
                raise ValidationError("session_id must be a number")
            entry = container.checkin_service.submit(identity.profile_id, session_id, pin)

        # a staged deep-link PIN is spent once it has been used
        ctx = client_context()
        if ctx.peek_pin() == pin:
            ctx.consume_pin()

        return jsonify({"success": True, "message": "Attendance recorded.", "entry": entry.to_dict()}), 201

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @student_required
    def attendance_history():
        rows = container.checkin_service.history_for_student(current_identity().profile_id)
        return jsonify({"success": True, "history": [r.to_dict() for r in rows]})

    @app.route("/api/attendance/<int:entry_id>", methods=["DELETE"], endpoint="attendance_void")
    @hoc_required
    def attendance_void(entry_id: int):
        container.checkin_service.void(entry_id, current_identity().profile_id)
        return jsonify({"success": True})
