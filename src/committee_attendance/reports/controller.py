from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_principal, make_guards
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guards = make_guards(container.auth_service)

    @app.route("/api/reports/committee/<int:committee_id>", methods=["GET"], endpoint="reports_committee")
    @guards.login_required
    def reports_committee(committee_id: int):
        principal = current_principal()
        report = container.report_service.committee_report(
            committee_id=committee_id,
            start_date=request.args.get("startDate"),
            end_date=request.args.get("endDate"),
            caller_id=principal.user_id,
            caller_role=principal.role,
        )
        return jsonify(report.to_dict())

    @app.route("/api/reports/member/<int:user_id>", methods=["GET"], endpoint="reports_member")
    @guards.login_required
    def reports_member(user_id: int):
        principal = current_principal()
        report = container.report_service.member_report(
            user_id=user_id,
            start_date=request.args.get("startDate"),
            end_date=request.args.get("endDate"),
            committee_id=request.args.get("committeeId"),
            caller_id=principal.user_id,
            caller_role=principal.role,
        )
        return jsonify(report.to_dict())
