from __future__ import annotations

import logging
from typing import Any, Optional

import mysql.connector
from flask import Flask, jsonify, request

from ..core.exceptions import (
    NotFound,
    PayrollLocked,
    RecordLocked,
    StorageError,
    UnknownEmployee,
    ValidationError,
)

logger = logging.getLogger(__name__)


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def query_flag(name: str) -> Optional[bool]:
    raw = (request.args.get(name) or "").strip().lower()
    if raw in ("", "all"):
        return None
    if raw in ("1", "true", "yes"):
        return True
    if raw in ("0", "false", "no"):
        return False
    raise ValidationError(f"{name} must be true, false or all")


def _error(status: int, error: str, message: str, **extra: Any):
    return jsonify({"success": False, "error": error, "message": message, **extra}), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return _error(400, "ValidationError", str(e))

    @app.errorhandler(NotFound)
    def _not_found(e: NotFound):
        return _error(404, "NotFound", str(e))

    @app.errorhandler(UnknownEmployee)
    def _unknown_employee(e: UnknownEmployee):
        return _error(404, "UnknownEmployee", str(e), employee_id=e.employee_id)

    @app.errorhandler(RecordLocked)
    def _record_locked(e: RecordLocked):
        return _error(409, "RecordLocked", str(e), record_id=e.record_id)

    @app.errorhandler(PayrollLocked)
    def _payroll_locked(e: PayrollLocked):
        return _error(409, "PayrollLocked", str(e))

    @app.errorhandler(StorageError)
    def _storage(e: StorageError):
        logger.error("Storage failure: %s", e)
        return _error(503, "StorageError", "Storage failure, nothing was changed; please retry")

    @app.errorhandler(mysql.connector.Error)
    def _driver(e: mysql.connector.Error):
        logger.exception("Database driver error")
        return _error(503, "StorageError", "Storage failure, nothing was changed; please retry")
