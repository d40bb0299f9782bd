from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_principal, json_body, make_guards
from ..container import Container
from .service import NewMeeting


def register(app: Flask, container: Container) -> None:
    guards = make_guards(container.auth_service)

    @app.route("/api/meetings/committee/<int:committee_id>", methods=["GET"], endpoint="meetings_for_committee")
    @guards.login_required
    def meetings_for_committee(committee_id: int):
        page = container.meeting_service.list_committee_meetings(
            committee_id=committee_id,
            status=request.args.get("status"),
            limit=request.args.get("limit"),
            offset=request.args.get("offset"),
        )
        return jsonify(page.to_dict())

    @app.route("/api/meetings/my-upcoming", methods=["GET"], endpoint="meetings_my_upcoming")
    @guards.login_required
    def meetings_my_upcoming():
        upcoming = container.meeting_service.list_upcoming_for_user(current_principal().user_id)
        return jsonify([m.to_dict() for m in upcoming])

    @app.route("/api/meetings", methods=["POST"], endpoint="meetings_create")
    @guards.admin_required
    def meetings_create():
        data = NewMeeting.from_payload(json_body())
        meeting = container.meeting_service.create_meeting(current_role=current_principal().role, data=data)
        return jsonify({"message": "Meeting created successfully", "meeting": meeting.to_dict()}), 201

    @app.route("/api/meetings/<int:meeting_id>/status", methods=["PATCH"], endpoint="meetings_update_status")
    @guards.admin_required
    def meetings_update_status(meeting_id: int):
        meeting = container.meeting_service.update_meeting_status(
            current_role=current_principal().role,
            meeting_id=meeting_id,
            status=json_body().get("status"),
        )
        return jsonify({"message": "Meeting status updated successfully", "meeting": meeting.to_dict()})

    @app.route("/api/meetings/<int:meeting_id>", methods=["GET"], endpoint="meetings_detail")
    @guards.login_required
    def meetings_detail(meeting_id: int):
        detail = container.meeting_service.get_meeting(meeting_id=meeting_id, principal=current_principal())
        return jsonify(detail.to_dict())
