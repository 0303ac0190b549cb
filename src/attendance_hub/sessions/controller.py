from __future__ import annotations

from flask import Flask, Response, current_app, jsonify, request, stream_with_context

from ..common.validators import require_bool
from ..common.web import current_identity, hoc_required, json_body, login_required
from ..container import Container
from ..core.exceptions import ForbiddenError, ValidationError
from ..realtime.stream import live_view_events


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sessions", methods=["GET"], endpoint="sessions_list")
    @login_required
    def sessions_list():
        identity = current_identity()
        sessions = container.session_service.list_for_department(identity.department)
        if not identity.is_hoc:
            # students never see the PIN of a session in the list
            items = [{k: v for k, v in s.to_dict().items() if k != "unique_code"} for s in sessions]
        else:
            items = [s.to_dict() for s in sessions]
        return jsonify({"success": True, "department": identity.department, "sessions": items})

    @app.route("/api/sessions", methods=["POST"], endpoint="sessions_open")
    @hoc_required
    def sessions_open():
        identity = current_identity()
        session = container.session_service.open(
            json_body().get("course_code", ""),
            identity.department,
            identity.profile_id,
        )
        return jsonify(
            {
                "success": True,
                "session": session.to_dict(),
                "join_url": container.join_resolver.build_join_url(session.unique_code),
            }
        ), 201

    @app.route("/api/sessions/resume", methods=["GET"], endpoint="sessions_resume")
    @hoc_required
    def sessions_resume():
        session = container.session_service.resume_active(current_identity().profile_id)
        if not session:
            return jsonify({"success": True, "session": None, "roster": []})
        roster = container.checkin_service.roster(session.session_id)
        return jsonify(
            {
                "success": True,
                "session": session.to_dict(),
                "join_url": container.join_resolver.build_join_url(session.unique_code),
                "roster": [r.to_dict() for r in roster],
            }
        )

    @app.route("/api/sessions/<int:session_id>/active", methods=["POST"], endpoint="sessions_set_active")
    @hoc_required
    def sessions_set_active(session_id: int):
        active = require_bool(json_body().get("active"), "active")
        container.session_service.set_active(session_id, active, current_identity().profile_id)
        return jsonify({"success": True, "session": container.session_service.get(session_id).to_dict()})

    @app.route("/api/sessions/<int:session_id>/close", methods=["POST"], endpoint="sessions_close")
    @hoc_required
    def sessions_close(session_id: int):
        container.session_service.close(session_id, current_identity().profile_id)
        return jsonify({"success": True, "message": "Portal closed successfully."})

    @app.route("/api/sessions/<int:session_id>", methods=["DELETE"], endpoint="sessions_delete")
    @hoc_required
    def sessions_delete(session_id: int):
        confirmed = request.args.get("confirm") or json_body().get("confirm")
        if not confirmed or not require_bool(confirmed, "confirm"):
            raise ValidationError(
                "Deleting a session permanently removes all of its attendance logs. Repeat with confirm=true."
            )
        container.session_service.delete(session_id, current_identity().profile_id)
        return jsonify({"success": True})

    @app.route("/api/sessions/<int:session_id>/roster", methods=["GET"], endpoint="sessions_roster")
    @hoc_required
    def sessions_roster(session_id: int):
        session = container.session_service.get_owned(session_id, current_identity().profile_id)
        roster = container.checkin_service.roster(session.session_id)
        return jsonify({"success": True, "session": session.to_dict(), "roster": [r.to_dict() for r in roster]})

    @app.route("/api/sessions/stream", methods=["GET"], endpoint="sessions_stream")
    @login_required
    def sessions_stream():
        identity = current_identity()
        session_id = request.args.get("session_id", type=int)
        if session_id is not None and identity.is_hoc:
            container.session_service.get_owned(session_id, identity.profile_id)
        elif session_id is not None:
            raise ForbiddenError("Only the HOC can follow a live roster")

        events = live_view_events(
            lambda on_change: container.make_projector(identity.department, on_change),
            session_id=session_id,
            keepalive_seconds=float(current_app.config["SSE_KEEPALIVE_SECONDS"]),
            include_codes=identity.is_hoc,
        )
        return Response(
            stream_with_context(events),
            mimetype="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )
