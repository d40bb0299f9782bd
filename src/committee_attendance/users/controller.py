from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        payload = json_body()
        result = container.auth_service.register(
            email=payload.get("email") or "",
            password=payload.get("password") or "",
            name=payload.get("name") or "",
        )
        return jsonify({"message": "User created successfully", **result.to_dict()}), 201

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        payload = json_body()
        result = container.auth_service.login(
            email=payload.get("email") or "",
            password=payload.get("password") or "",
        )
        return jsonify({"message": "Login successful", **result.to_dict()}), 200
