from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_principal, json_body, make_guards
from ..container import Container
from .service import MarkAttendance


def register(app: Flask, container: Container) -> None:
    guards = make_guards(container.auth_service)

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="attendance_mark")
    @guards.login_required
    def attendance_mark():
        data = MarkAttendance.from_payload(json_body())
        result = container.attendance_service.record_attendance(
            meeting_id=data.meeting_id,
            user_id=current_principal().user_id,
            status=data.status,
        )
        body = {"message": result.message, "attendance": result.attendance.to_dict()}
        return jsonify(body), 201 if result.created else 200

    @app.route("/api/attendance/meeting/<int:meeting_id>", methods=["GET"], endpoint="attendance_mine")
    @guards.login_required
    def attendance_mine(meeting_id: int):
        detail = container.attendance_service.get_attendance(
            meeting_id=meeting_id,
            user_id=current_principal().user_id,
        )
        return jsonify(detail.to_dict())

    @app.route("/api/attendance/meeting/<int:meeting_id>/all", methods=["GET"], endpoint="attendance_roster")
    @guards.login_required
    def attendance_roster(meeting_id: int):
        principal = current_principal()
        roster = container.attendance_service.list_meeting_attendance(
            meeting_id=meeting_id,
            caller_id=principal.user_id,
            caller_role=principal.role,
        )
        return jsonify(roster.to_dict())
