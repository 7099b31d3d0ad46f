from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.guards import approver_required, current_user_id, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    corrections = container.correction_service

    def _body() -> dict:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    @app.route("/api/corrections", methods=["POST"], endpoint="api_submit_correction")
    @login_required
    def api_submit_correction():
        data = _body()
        req = corrections.submit(
            current_user_id(),
            parse_iso_date(data.get("target_day")),
            data.get("missing_field"),
            data.get("requested_time") or "",
            data.get("reason") or "",
        )
        return jsonify({"success": True, "request": req.to_dict()}), 201

    @app.route("/api/corrections", methods=["GET"], endpoint="api_my_corrections")
    @login_required
    def api_my_corrections():
        rows = corrections.list_for_worker(current_user_id())
        return jsonify({"success": True, "requests": [r.to_dict() for r in rows]}), 200

    @app.route("/api/corrections/pending", methods=["GET"], endpoint="api_pending_corrections")
    @approver_required
    def api_pending_corrections():
        rows = corrections.list_pending()
        return jsonify({"success": True, "requests": [r.to_dict() for r in rows]}), 200

    @app.route("/api/corrections/<int:request_id>/approve", methods=["POST"], endpoint="api_approve_correction")
    @approver_required
    def api_approve_correction(request_id: int):
        result = corrections.approve(request_id, current_user_id(), _body().get("remarks"))
        return jsonify(
            {"success": True, "request": result.request.to_dict(), "record": result.record.to_dict()}
        ), 200

    @app.route("/api/corrections/<int:request_id>/reject", methods=["POST"], endpoint="api_reject_correction")
    @approver_required
    def api_reject_correction(request_id: int):
        req = corrections.reject(request_id, current_user_id(), _body().get("remarks"))
        return jsonify({"success": True, "request": req.to_dict()}), 200
