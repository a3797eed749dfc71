from __future__ import annotations

from decimal import Decimal

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import json_body
from ..common.validators import optional_text, require_amount, require_int
from ..core.enums import PayrollStatus
from ..core.exceptions import ValidationError
from ..container import Container
from ..time_records.controller import record_to_json
from .model import Payroll
from .report_service import MONEY_COLUMNS


def _status(value) -> PayrollStatus | None:
    raw = optional_text(value)
    if not raw or raw == "all":
        return None
    try:
        return PayrollStatus(raw)
    except ValueError:
        allowed = ", ".join(s.value for s in PayrollStatus)
        raise ValidationError(f"status must be one of: {allowed}")


def _optional_amount(data: dict, name: str):
    if data.get(name) is None:
        return None
    return require_amount(data.get(name), name)


def payroll_to_json(p: Payroll) -> dict:
    return {
        "id": p.payroll_id,
        "employee_id": p.employee_id,
        "period_start": p.period_start.isoformat(),
        "period_end": p.period_end.isoformat(),
        "regular_hours": str(p.regular_hours),
        "overtime_hours": str(p.overtime_hours),
        "basic_salary": str(p.basic_salary),
        "overtime_pay": str(p.overtime_pay),
        "allowances": str(p.allowances),
        "deductions": str(p.deductions),
        "gross_pay": str(p.gross_pay),
        "tax": str(p.tax),
        "net_salary": str(p.net_salary),
        "payment_method": p.payment_method,
        "status": p.status.value,
        "remarks": p.remarks,
        "paid_at": p.paid_at.isoformat() if p.paid_at else None,
    }


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    @app.route("/payroll", methods=["POST"], endpoint="payroll_create")
    def create_payroll():
        data = json_body()
        start = parse_optional_date(data.get("period_start"), "period_start")
        end = parse_optional_date(data.get("period_end"), "period_end")
        if not start or not end:
            raise ValidationError("period_start and period_end are required")

        run = service.compute_payroll(
            employee_id=require_int(data.get("employee_id"), "employee_id"),
            period_start=start,
            period_end=end,
            hourly_rate=_optional_amount(data, "hourly_rate"),
            overtime_rate=_optional_amount(data, "overtime_rate"),
            allowances=require_amount(data.get("allowances"), "allowances", default=Decimal("0")),
            deductions=require_amount(data.get("deductions"), "deductions", default=Decimal("0")),
            payment_method=data.get("payment_method"),
            remarks=data.get("remarks"),
        )
        body = {
            "success": True,
            "payroll": payroll_to_json(run.payroll),
            "covered_record_ids": run.covered_record_ids,
        }
        return jsonify(body), 201

    @app.route("/payroll", methods=["GET"], endpoint="payroll_list")
    def list_payrolls():
        employee_id = request.args.get("employee_id")
        payrolls = service.list_payrolls(
            employee_id=require_int(employee_id, "employee_id") if employee_id else None,
            status=_status(request.args.get("status")),
        )
        return jsonify({"success": True, "payrolls": [payroll_to_json(p) for p in payrolls]})

    @app.route("/payroll/report", methods=["GET"], endpoint="payroll_report")
    def payroll_report():
        start = parse_optional_date(request.args.get("start_date"), "start_date")
        end = parse_optional_date(request.args.get("end_date"), "end_date")
        if not start or not end:
            raise ValidationError("start_date and end_date are required")

        report = container.payroll_report_service.build_payroll_report(
            start=start, end=end, status=_status(request.args.get("status"))
        )
        return jsonify(
            {
                "success": True,
                "payrolls": [payroll_to_json(p) for p in report.rows],
                "totals": {col: str(report.totals[col]) for col in MONEY_COLUMNS},
            }
        )

    @app.route("/payroll/<int:payroll_id>", methods=["GET"], endpoint="payroll_show")
    def show_payroll(payroll_id: int):
        payroll = service.get(payroll_id)
        records = container.time_record_service.list_for_payroll(payroll.payroll_id)
        return jsonify(
            {
                "success": True,
                "payroll": payroll_to_json(payroll),
                "time_records": [
                    record_to_json(r, container.time_record_service.warnings_for(r)) for r in records
                ],
            }
        )

    @app.route("/payroll/<int:payroll_id>", methods=["PATCH"], endpoint="payroll_update")
    def update_payroll(payroll_id: int):
        data = json_body()
        payroll = service.update(
            payroll_id,
            allowances=_optional_amount(data, "allowances"),
            deductions=_optional_amount(data, "deductions"),
            payment_method=data.get("payment_method"),
            remarks=data.get("remarks"),
            status=_status(data.get("status")),
        )
        return jsonify({"success": True, "payroll": payroll_to_json(payroll)})

    @app.route("/payroll/<int:payroll_id>/cancel", methods=["POST"], endpoint="payroll_cancel")
    def cancel_payroll(payroll_id: int):
        released = service.cancel(payroll_id)
        return jsonify({"success": True, "released_records": released})
