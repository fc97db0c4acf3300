from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..container import Container
from ..core.exceptions import AuthenticationError


def register(app: Flask, container: Container) -> None:
    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        data = request.get_json(silent=True) or request.form
        s_user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))

        session.clear()
        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value

        return jsonify(
            {"user": {"user_id": s_user.user_id, "full_name": s_user.full_name, "role": s_user.role.value}}
        )

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"message": "Logged out"})

    @app.route("/api/me", methods=["GET"], endpoint="me")
    def me():
        if "user_id" not in session:
            raise AuthenticationError("Unauthorized")
        return jsonify({"user_id": session["user_id"], "full_name": session.get("name"), "role": session.get("role")})
