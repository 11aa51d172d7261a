from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..core.exceptions import AuthenticationError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _body() -> dict:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    @app.route("/", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok"}), 200

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def register_user():
        data = _body()
        try:
            user = container.auth_service.register(
                name=data.get("name", ""),
                email=data.get("email", ""),
                password=data.get("password", ""),
                role=data.get("role", ""),
            )
            return jsonify({"user": user.to_public_dict()}), 201
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except Exception as e:
            logger.exception("registration failed")
            return jsonify({"error": str(e)}), 500

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = _body()
        try:
            result = container.auth_service.login(data.get("email", ""), data.get("password", ""))
            return jsonify({"token": result.token, "user": result.user.to_public_dict()}), 200
        except AuthenticationError as e:
            return jsonify({"error": str(e)}), 401
        except Exception as e:
            logger.exception("login failed")
            return jsonify({"error": str(e)}), 500
