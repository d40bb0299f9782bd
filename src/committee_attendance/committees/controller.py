from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_principal, json_body, make_guards
from ..container import Container
from .service import NewCommittee


def register(app: Flask, container: Container) -> None:
    guards = make_guards(container.auth_service)

    @app.route("/api/committees", methods=["GET"], endpoint="committees_list")
    @guards.login_required
    def committees_list():
        return jsonify([c.to_dict() for c in container.committee_service.list_committees()])

    @app.route("/api/committees/my-committees", methods=["GET"], endpoint="committees_mine")
    @guards.login_required
    def committees_mine():
        listings = container.committee_service.list_my_committees(current_principal().user_id)
        return jsonify([c.to_dict() for c in listings])

    @app.route("/api/committees/<int:committee_id>", methods=["GET"], endpoint="committees_detail")
    @guards.login_required
    def committees_detail(committee_id: int):
        return jsonify(container.committee_service.get_committee(committee_id).to_dict())

    @app.route("/api/committees", methods=["POST"], endpoint="committees_create")
    @guards.admin_required
    def committees_create():
        data = NewCommittee.from_payload(json_body())
        committee = container.committee_service.create_committee(
            current_role=current_principal().role,
            data=data,
        )
        return jsonify({"message": "Committee created successfully", "committee": committee.to_dict()}), 201

    @app.route("/api/committees/<int:committee_id>/members", methods=["POST"], endpoint="committees_add_member")
    @guards.admin_required
    def committees_add_member(committee_id: int):
        change = container.membership_service.add_member(
            current_role=current_principal().role,
            committee_id=committee_id,
            user_id=json_body().get("userId"),
        )
        body = {"message": change.message, "member": change.member.to_dict()}
        return jsonify(body), 201 if change.created else 200

    @app.route(
        "/api/committees/<int:committee_id>/members/<int:user_id>",
        methods=["DELETE"],
        endpoint="committees_remove_member",
    )
    @guards.admin_required
    def committees_remove_member(committee_id: int, user_id: int):
        container.membership_service.remove_member(
            current_role=current_principal().role,
            committee_id=committee_id,
            user_id=user_id,
        )
        return jsonify({"message": "Member removed successfully"})
