from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request

from ..common.datetime_utils import civil_day, now_utc, parse_iso_date
from ..common.guards import current_user_id, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service
    timesheet = container.timesheet_service

    def _date_args(default_days: int):
        today = civil_day(now_utc(), container.policy.tz)
        start_s = request.args.get("start")
        end_s = request.args.get("end")
        start = parse_iso_date(start_s) if start_s else today - timedelta(days=default_days)
        end = parse_iso_date(end_s) if end_s else today
        return start, end

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="api_check_in")
    @login_required
    def api_check_in():
        data = request.get_json(silent=True)
        geolocation = data.get("geolocation") if isinstance(data, dict) else None
        record = attendance.check_in(current_user_id(), geolocation=geolocation)
        return jsonify({"success": True, "record": record.to_dict()}), 201

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="api_check_out")
    @login_required
    def api_check_out():
        record = attendance.check_out(current_user_id())
        return jsonify({"success": True, "record": record.to_dict()}), 200

    @app.route("/api/attendance/today", methods=["GET"], endpoint="api_today")
    @login_required
    def api_today():
        record = attendance.get_today_attendance(current_user_id())
        return jsonify({"success": True, "record": record.to_dict() if record else None}), 200

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance_range")
    @login_required
    def api_attendance_range():
        start, end = _date_args(default_days=7)
        rows = attendance.get_attendance_range(current_user_id(), start, end)
        return jsonify({"success": True, "records": [r.to_dict() for r in rows]}), 200

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="api_attendance_summary")
    @login_required
    def api_attendance_summary():
        start, end = _date_args(default_days=30)
        summary = timesheet.compute_aggregates(current_user_id(), start, end)
        return jsonify({"success": True, "summary": summary.to_dict()}), 200
