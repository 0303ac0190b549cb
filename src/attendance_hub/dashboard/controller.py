from __future__ import annotations

from typing import Callable, Dict

from flask import Flask, jsonify

from ..client.context import ClientContext, ClientIdentity
from ..common.web import client_context, current_identity, login_required
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    def hoc_view(identity: ClientIdentity, ctx: ClientContext) -> dict:
        sessions = container.session_service.list_for_department(identity.department)
        live = container.session_service.resume_active(identity.profile_id)
        roster = container.checkin_service.roster(live.session_id) if live else []
        return {
            "sessions": [s.to_dict() for s in sessions],
            "live_session": live.to_dict() if live else None,
            "pin": live.unique_code if live else None,
            "join_url": container.join_resolver.build_join_url(live.unique_code) if live else None,
            "roster": [r.to_dict() for r in roster],
        }

    def student_view(identity: ClientIdentity, ctx: ClientContext) -> dict:
        sessions = container.session_service.list_for_department(identity.department)
        history = container.checkin_service.history_for_student(identity.profile_id)
        return {
            "sessions": [{k: v for k, v in s.to_dict().items() if k != "unique_code"} for s in sessions],
            "history": [h.to_dict() for h in history],
            "pending_pin": ctx.consume_pin(),
        }

    views: Dict[Role, Callable[[ClientIdentity, ClientContext], dict]] = {
        Role.HOC: hoc_view,
        Role.STUDENT: student_view,
    }

    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    @login_required
    def dashboard():
        identity = current_identity()
        ctx = client_context()
        payload = views[identity.role](identity, ctx)
        return jsonify(
            {
                "success": True,
                "role": identity.role.value,
                "name": identity.full_name,
                "department": identity.department,
                "theme": ctx.theme.value,
                **payload,
            }
        )

    @app.route("/api/health/tables", methods=["GET"], endpoint="health_tables")
    def health_tables():
        statuses = container.table_statuses()
        ok = all(s.status == "success" for s in statuses)
        return jsonify({"success": ok, "tables": [s.to_dict() for s in statuses]}), 200 if ok else 503
