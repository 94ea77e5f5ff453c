from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import actor, json_body, optional_date, required_date, to_primitive
from ..container import Container
from .service import policy_from_mapping


def register(app: Flask, container: Container) -> None:
    penalties = container.penalty_service
    payroll = container.payroll_service

    @app.route("/api/penalties/settings", methods=["GET"], endpoint="penalty_settings")
    def get_settings():
        return jsonify({"success": True, "data": to_primitive(penalties.get_penalty_settings())})

    @app.route("/api/penalties/settings", methods=["PUT"], endpoint="penalty_settings_update")
    def update_settings():
        policy = policy_from_mapping(json_body(), base=penalties.get_penalty_settings())
        saved = penalties.update_penalty_settings(policy, updated_by=actor())
        return jsonify({"success": True, "data": to_primitive(saved)})

    @app.route("/api/penalties", methods=["POST"], endpoint="penalty_apply_manual")
    def apply_manual():
        data = json_body()
        entry = penalties.apply_manual_penalty(
            str(data.get("employee_id") or ""),
            required_date(data.get("date"), "date"),
            data.get("amount"),
            data.get("reason") or "",
            actor(),
            employee_name=data.get("employee_name"),
        )
        return jsonify({"success": True, "data": to_primitive(entry)}), 201

    @app.route("/api/penalties/<int:penalty_id>/remove", methods=["POST"], endpoint="penalty_remove")
    def remove(penalty_id: int):
        entry = penalties.remove_penalty(penalty_id, actor(), json_body().get("reason", ""))
        return jsonify({"success": True, "data": to_primitive(entry)})

    @app.route("/api/penalties/employees/<employee_id>/remove-daily", methods=["POST"], endpoint="penalty_remove_daily")
    def remove_daily(employee_id: str):
        data = json_body()
        removed = penalties.remove_daily_penalties(
            employee_id, required_date(data.get("date"), "date"), actor(), data.get("reason", "")
        )
        return jsonify({"success": True, "data": to_primitive(removed)})

    @app.route("/api/penalties/employees/<employee_id>/remove-monthly", methods=["POST"], endpoint="penalty_remove_monthly")
    def remove_monthly(employee_id: str):
        data = json_body()
        removed = penalties.remove_monthly_penalties(
            employee_id, data.get("year"), data.get("month"), actor(), data.get("reason", "")
        )
        return jsonify({"success": True, "data": to_primitive(removed)})

    @app.route("/api/penalties/employees/<employee_id>", methods=["GET"], endpoint="penalty_list")
    def list_penalties(employee_id: str):
        rows = penalties.get_employee_penalties(
            employee_id,
            optional_date(request.args.get("from"), "from"),
            optional_date(request.args.get("to"), "to"),
        )
        return jsonify({"success": True, "data": to_primitive(rows)})

    @app.route("/api/penalties/employees/<employee_id>/totals", methods=["GET"], endpoint="penalty_totals")
    def totals(employee_id: str):
        result = penalties.calculate_total_penalties(
            employee_id,
            required_date(request.args.get("from"), "from"),
            required_date(request.args.get("to"), "to"),
        )
        return jsonify({"success": True, "data": to_primitive(result)})

    @app.route("/api/payroll/<employee_id>/salary", methods=["GET"], endpoint="payroll_final_salary")
    def final_salary(employee_id: str):
        summary = payroll.calculate_final_salary(
            employee_id,
            request.args.get("base_salary", "0"),
            required_date(request.args.get("from"), "from"),
            required_date(request.args.get("to"), "to"),
        )
        return jsonify({"success": True, "data": to_primitive(summary)})
