from __future__ import annotations

import hmac
from datetime import date
from functools import wraps

from flask import Flask, current_app, jsonify, request, session

from ..common.datetime_utils import now_local, parse_iso_date
from ..container import Container
from ..core.exceptions import AuthenticationError, ValidationError


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _optional_int(value, field_name: str):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def register(app: Flask, container: Container) -> None:
    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                raise AuthenticationError("Unauthorized")
            return view(*args, **kwargs)

        return wrapper

    def cron_secret_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            secret = current_app.config.get("CRON_SECRET", "")
            header = request.headers.get("Authorization", "")
            if not secret or not hmac.compare_digest(header, f"Bearer {secret}"):
                raise AuthenticationError("Unauthorized")
            return view(*args, **kwargs)

        return wrapper

    def actor_id() -> int:
        return int(session["user_id"])

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="clock_in")
    @login_required
    def clock_in():
        record = container.attendance_service.clock_in(actor_id(), _json_body().get("mode"))
        return jsonify({"message": "Clocked in", "attendance": record.to_dict()})

    @app.route("/api/attendance/clock-out", methods=["POST"], endpoint="clock_out")
    @login_required
    def clock_out():
        record = container.attendance_service.clock_out(actor_id())
        return jsonify({"message": "Clocked out", "attendance": record.to_dict()})

    @app.route("/api/attendance/lunch/start", methods=["POST"], endpoint="lunch_start")
    @login_required
    def lunch_start():
        record = container.attendance_service.start_lunch(actor_id())
        return jsonify({"message": "Lunch started", "attendance": record.to_dict()})

    @app.route("/api/attendance/lunch/end", methods=["POST"], endpoint="lunch_end")
    @login_required
    def lunch_end():
        record = container.attendance_service.end_lunch(actor_id())
        return jsonify({"message": "Lunch ended", "attendance": record.to_dict()})

    @app.route("/api/attendance/wfh-activity", methods=["POST"], endpoint="wfh_heartbeat")
    @login_required
    def wfh_heartbeat():
        record = container.attendance_service.wfh_heartbeat(actor_id())
        return jsonify(
            {
                "message": "Activity recorded",
                "wfh_activity_pings": record.wfh_activity_pings,
                "last_activity_time": record.last_activity_time.isoformat(),
            }
        )

    @app.route("/api/attendance/wfh-activity", methods=["GET"], endpoint="wfh_activity")
    @login_required
    def wfh_activity():
        user_id = _optional_int(request.args.get("user_id"), "user_id") or actor_id()
        return jsonify(container.monitor.wfh_snapshot(user_id, actor_id()))

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def attendance_today():
        record = container.attendance_service.get_today_record(actor_id())
        return jsonify({"attendance": record.to_dict() if record else None})

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @login_required
    def attendance_list():
        today = now_local().date()
        start_s = request.args.get("start")
        end_s = request.args.get("end")
        start = parse_iso_date(start_s) if start_s else date(today.year, today.month, 1)
        end = parse_iso_date(end_s) if end_s else today

        listing = container.report_service.list_attendance(
            actor_id=actor_id(),
            start=start,
            end=end,
            user_id=_optional_int(request.args.get("user_id"), "user_id"),
        )
        return jsonify({"attendance": listing.rows, "summary": listing.summary})

    @app.route("/api/admin/attendance/<int:attendance_id>/mode", methods=["POST"], endpoint="admin_convert_mode")
    @login_required
    def admin_convert_mode(attendance_id: int):
        record = container.admin_service.convert_mode(attendance_id, _json_body().get("mode"), actor_id())
        return jsonify({"message": "Attendance mode updated", "attendance": record.to_dict()})

    @app.route("/api/admin/attendance/bulk-mark", methods=["POST"], endpoint="admin_bulk_mark")
    @login_required
    def admin_bulk_mark():
        body = _json_body()
        if not body.get("date"):
            raise ValidationError("date is required")
        result = container.admin_service.bulk_mark_day(body["date"], body.get("mode"), actor_id())
        return jsonify(result.to_dict())

    @app.route("/api/cron/wfh-inactivity-check", methods=["POST"], endpoint="cron_wfh_inactivity")
    @cron_secret_required
    def cron_wfh_inactivity():
        return jsonify(container.monitor.sweep_wfh_inactivity().to_dict())

    @app.route("/api/cron/attendance-reminder", methods=["POST"], endpoint="cron_attendance_reminder")
    @cron_secret_required
    def cron_attendance_reminder():
        return jsonify(container.monitor.send_clock_in_reminders().to_dict())
