from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import json_body, query_flag
from ..common.validators import require_int
from ..core.exceptions import ValidationError
from ..container import Container
from .model import DataQualityWarning, TimeRecord
from .service import PUNCH_FIELDS, TimeRecordInput


def _iso(value):
    return value.isoformat() if value else None


def record_to_json(r: TimeRecord, warnings: list[DataQualityWarning]) -> dict:
    data = {
        "id": r.record_id,
        "employee_id": r.employee_id,
        "date": r.record_date.isoformat(),
        "status": r.status.value,
        "leave_type": r.leave_type,
        "remarks": r.remarks,
        "hours_worked": r.hours_worked,
        "overtime_hours": r.overtime_hours,
        "is_paid": r.is_paid,
        "pay_period": _iso(r.pay_period),
        "payroll_id": r.payroll_id,
        "warnings": [{"code": w.code, "message": w.message} for w in warnings],
    }
    for name in PUNCH_FIELDS:
        data[name] = _iso(getattr(r.punches, name))
    return data


def register(app: Flask, container: Container) -> None:
    service = container.time_record_service

    def _out(record: TimeRecord) -> dict:
        return record_to_json(record, service.warnings_for(record))

    @app.route("/time-records", methods=["GET"], endpoint="time_records_list")
    def list_time_records():
        employee_id = request.args.get("employee_id")
        records = service.list_records(
            start_date=parse_optional_date(request.args.get("start_date"), "start_date"),
            end_date=parse_optional_date(request.args.get("end_date"), "end_date"),
            employee_id=require_int(employee_id, "employee_id") if employee_id not in (None, "", "all") else None,
            status=request.args.get("status") or None,
            is_paid=query_flag("is_paid"),
        )
        return jsonify({"success": True, "records": [_out(r) for r in records]})

    @app.route("/time-records", methods=["POST"], endpoint="time_records_save")
    def save_time_record():
        data = json_body()
        record_id = data.get("id")
        saved = service.save(
            TimeRecordInput(
                record_id=require_int(record_id, "id") if record_id is not None else None,
                employee_id=data.get("employee_id"),
                record_date=data.get("date"),
                status=data.get("status"),
                leave_type=data.get("leave_type"),
                remarks=data.get("remarks"),
                **{name: data.get(name) for name in PUNCH_FIELDS},
            )
        )
        body = {"success": True, "created": saved.created, "record": record_to_json(saved.record, saved.warnings)}
        return jsonify(body), 201 if saved.created else 200

    @app.route("/time-records/<int:record_id>", methods=["GET"], endpoint="time_records_show")
    def show_time_record(record_id: int):
        return jsonify({"success": True, "record": _out(service.get(record_id))})

    @app.route("/time-records/<int:record_id>", methods=["DELETE"], endpoint="time_records_delete")
    def delete_time_record(record_id: int):
        service.delete(record_id)
        return jsonify({"success": True})

    @app.route("/time-records/mark-paid", methods=["POST"], endpoint="time_records_mark_paid")
    def mark_paid():
        data = json_body()
        ids = data.get("record_ids")
        if not isinstance(ids, list):
            raise ValidationError("record_ids must be a list of time record ids")
        result = container.settlement_service.mark_as_paid(ids)
        return jsonify({"success": True, "updated": result.updated, "skipped": result.skipped})

    @app.route("/time-records/export", methods=["GET"], endpoint="time_records_export")
    def export_for_payroll():
        start = parse_optional_date(request.args.get("start_date"), "start_date")
        end = parse_optional_date(request.args.get("end_date"), "end_date")
        if not start or not end:
            raise ValidationError("start_date and end_date are required")
        employee_id = request.args.get("employee_id")

        export = container.payroll_report_service.build_attendance_export(
            start=start,
            end=end,
            employee_id=require_int(employee_id, "employee_id") if employee_id else None,
        )
        summary = [
            {**s, "total_hours": float(s["total_hours"]), "overtime_hours": float(s["overtime_hours"])}
            for s in export.summary
        ]
        return jsonify(
            {
                "success": True,
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
                "rows": export.rows,
                "summary": summary,
                "orphaned_count": export.orphaned_count,
                "unattached_count": export.unattached_count,
            }
        )
