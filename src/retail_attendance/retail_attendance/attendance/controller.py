from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import (
    json_body,
    optional_date,
    optional_location,
    optional_time,
    register_error_handlers,
    required_date,
    to_primitive,
)
from ..container import Container


def register(app: Flask, container: Container) -> None:
    register_error_handlers(app)
    attendance = container.attendance_service
    reconciliation = container.reconciliation_service

    @app.route("/api/attendance/<employee_id>/reconcile", methods=["POST"], endpoint="attendance_reconcile")
    def reconcile(employee_id: str):
        result = reconciliation.reconcile(employee_id)
        return jsonify({"success": result.error is None, "data": to_primitive(result)})

    @app.route("/api/attendance/<employee_id>/check-in", methods=["POST"], endpoint="attendance_check_in")
    def check_in(employee_id: str):
        data = json_body()
        record = attendance.check_in(
            employee_id,
            data.get("employee_name", ""),
            optional_date(data.get("date"), "date"),
            optional_time(data.get("time"), "time"),
            photo=data.get("photo"),
            location=optional_location(data.get("location")),
        )
        return jsonify({"success": True, "data": to_primitive(record)}), 201

    @app.route("/api/attendance/<employee_id>/breaks/start", methods=["POST"], endpoint="attendance_break_start")
    def break_start(employee_id: str):
        data = json_body()
        record = attendance.start_break(
            employee_id, optional_date(data.get("date"), "date"), optional_time(data.get("time"), "time")
        )
        return jsonify({"success": True, "data": to_primitive(record)})

    @app.route("/api/attendance/<employee_id>/breaks/end", methods=["POST"], endpoint="attendance_break_end")
    def break_end(employee_id: str):
        data = json_body()
        record = attendance.end_break(
            employee_id, optional_date(data.get("date"), "date"), optional_time(data.get("time"), "time")
        )
        return jsonify({"success": True, "data": to_primitive(record)})

    @app.route("/api/attendance/<employee_id>/check-out", methods=["POST"], endpoint="attendance_check_out")
    def check_out(employee_id: str):
        data = json_body()
        record = attendance.check_out(
            employee_id,
            optional_date(data.get("date"), "date"),
            optional_time(data.get("time"), "time"),
            location=optional_location(data.get("location")),
        )
        return jsonify({"success": True, "data": to_primitive(record)})

    @app.route("/api/attendance/<employee_id>/leave", methods=["POST"], endpoint="attendance_mark_leave")
    def mark_leave(employee_id: str):
        data = json_body()
        record = attendance.mark_leave(
            employee_id,
            data.get("employee_name", ""),
            optional_date(data.get("date"), "date"),
            data.get("leave_type"),
            data.get("reason"),
        )
        return jsonify({"success": True, "data": to_primitive(record)}), 201

    @app.route("/api/attendance/<employee_id>/leave/<work_date>", methods=["PATCH"], endpoint="attendance_edit_leave")
    def edit_leave(employee_id: str, work_date: str):
        data = json_body()
        record = attendance.edit_leave(
            employee_id, required_date(work_date, "date"), data.get("leave_type"), data.get("reason")
        )
        return jsonify({"success": True, "data": to_primitive(record)})

    @app.route("/api/attendance/<employee_id>/today", methods=["GET"], endpoint="attendance_today")
    def today(employee_id: str):
        return jsonify({"success": True, "data": to_primitive(attendance.get_today_attendance(employee_id))})

    @app.route("/api/attendance/<employee_id>", methods=["GET"], endpoint="attendance_range")
    def attendance_range(employee_id: str):
        start = required_date(request.args.get("from"), "from")
        end = required_date(request.args.get("to"), "to")
        rows = attendance.get_attendance_range(employee_id, start, end)
        return jsonify({"success": True, "data": to_primitive(list(rows))})

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_roster")
    def roster():
        rows = attendance.get_all_attendance(optional_date(request.args.get("date"), "date"))
        return jsonify({"success": True, "data": to_primitive(rows)})

    @app.route("/api/attendance/<employee_id>/stats", methods=["GET"], endpoint="attendance_stats")
    def stats(employee_id: str):
        return jsonify({"success": True, "data": to_primitive(attendance.get_attendance_stats(employee_id))})

    @app.route("/api/attendance/<employee_id>/leave-stats", methods=["GET"], endpoint="attendance_leave_stats")
    def leave_stats(employee_id: str):
        year = request.args.get("year", type=int)
        month = request.args.get("month", type=int)
        return jsonify({"success": True, "data": to_primitive(attendance.get_leave_stats(employee_id, year, month))})

    @app.route("/api/attendance/penalties/retry-pending", methods=["POST"], endpoint="attendance_retry_pending")
    def retry_pending():
        settled = attendance.retry_pending_penalties()
        return jsonify({"success": True, "data": {"settled": len(settled)}})
