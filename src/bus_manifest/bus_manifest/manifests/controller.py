from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.auth import make_token_required
from ..common.validators import require_id, require_latitude, require_longitude
from ..core.exceptions import ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.token_service)

    def _scan_payload() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("request body must be a JSON object")
        return {
            "student_id": require_id(data, "studentId"),
            "bus_id": require_id(data, "busId"),
            "assistant_id": require_id(data, "assistantId"),
            "latitude": require_latitude(data),
            "longitude": require_longitude(data),
        }

    def _record(action):
        try:
            manifest = action(**_scan_payload())
            return jsonify({"manifest": manifest.to_dict()}), 201
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except Exception as e:
            logger.exception("manifest write failed")
            return jsonify({"error": str(e)}), 500

    @app.route("/api/manifests/checkin", methods=["POST"], endpoint="manifest_checkin")
    @token_required
    def checkin():
        return _record(container.manifest_ledger.record_check_in)

    @app.route("/api/manifests/checkout", methods=["POST"], endpoint="manifest_checkout")
    @token_required
    def checkout():
        return _record(container.manifest_ledger.record_check_out)

    @app.route("/api/manifests/bus/<int:bus_id>", methods=["GET"], endpoint="manifests_by_bus")
    @token_required
    def by_bus(bus_id: int):
        try:
            manifests = container.manifest_ledger.list_by_bus(bus_id)
            return jsonify({"manifests": [m.to_dict() for m in manifests]}), 200
        except Exception as e:
            logger.exception("listing manifests for bus %s failed", bus_id)
            return jsonify({"error": str(e)}), 500

    @app.route("/api/manifests/student/<int:student_id>", methods=["GET"], endpoint="manifests_by_student")
    @token_required
    def by_student(student_id: int):
        try:
            manifests = container.manifest_ledger.list_by_student(student_id)
            return jsonify({"manifests": [m.to_dict() for m in manifests]}), 200
        except Exception as e:
            logger.exception("listing manifests for student %s failed", student_id)
            return jsonify({"error": str(e)}), 500

    @app.route("/api/manifests/student/<int:student_id>/today", methods=["GET"], endpoint="manifest_today")
    @token_required
    def today(student_id: int):
        try:
            state = container.manifest_ledger.today_for_student(student_id)
            return jsonify(state.to_dict()), 200
        except Exception as e:
            logger.exception("reading today's manifests for student %s failed", student_id)
            return jsonify({"error": str(e)}), 500
