from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_identity, hoc_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sessions/history.csv", methods=["GET"], endpoint="export_history_csv")
    @hoc_required
    def export_history_csv():
        identity = current_identity()
        sessions = container.session_service.list_for_department(identity.department)
        filename = container.export_service.history_filename(identity.department)
        return app.response_class(
            container.export_service.session_history_csv(sessions),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/sessions/summary", methods=["GET"], endpoint="export_summary")
    @hoc_required
    def export_summary():
        identity = current_identity()
        sessions = container.session_service.list_for_department(identity.department)
        text = container.export_service.department_summary(identity.department, list(sessions))
        return jsonify({"success": True, "text": text})

    @app.route("/api/sessions/<int:session_id>/registry.xlsx", methods=["GET"], endpoint="export_registry")
    @hoc_required
    def export_registry(session_id: int):
        session = container.session_service.get_owned(session_id, current_identity().profile_id)
        roster = container.checkin_service.roster(session.session_id)
        filename = container.export_service.registry_filename(session)
        return app.response_class(
            container.export_service.attendance_registry_xlsx(session, roster),
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/sessions/<int:session_id>/qr.png", methods=["GET"], endpoint="export_qr")
    @hoc_required
    def export_qr(session_id: int):
        session = container.session_service.get_owned(session_id, current_identity().profile_id)
        join_url = container.join_resolver.build_join_url(session.unique_code)
        return app.response_class(container.export_service.join_qr_png(join_url), mimetype="image/png")

    @app.route("/api/sessions/<int:session_id>/share", methods=["GET"], endpoint="export_share")
    @hoc_required
    def export_share(session_id: int):
        session = container.session_service.get_owned(session_id, current_identity().profile_id)
        join_url = container.join_resolver.build_join_url(session.unique_code)
        return jsonify(
            {
                "success": True,
                "title": "Class Attendance PIN",
                "text": container.export_service.share_text(session, join_url),
                "join_url": join_url,
            }
        )
