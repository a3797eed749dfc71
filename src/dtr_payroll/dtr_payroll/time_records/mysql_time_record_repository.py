from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import DTRStatus
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Punches, TimeRecord, TimeRecordDraft, TimeRecordReportRow
from .repository import TimeRecordRepository

RECORD_COLUMNS = """
    tr.id, tr.employee_id, tr.record_date,
    tr.time_in, tr.time_out, tr.lunch_start, tr.lunch_end, tr.overtime_start, tr.overtime_end,
    tr.status, tr.leave_type, tr.remarks, tr.hours_worked, tr.overtime_hours, tr.is_paid, tr.pay_period, tr.payroll_id
"""


def row_to_record(r: Dict[str, Any]) -> TimeRecord:
    employee_id = r.get("employee_id")
    return TimeRecord(
        record_id=int(r["id"]),
        employee_id=int(employee_id) if employee_id is not None else None,
        record_date=r["record_date"],
        punches=Punches(
            time_in=r.get("time_in"),
            time_out=r.get("time_out"),
            lunch_start=r.get("lunch_start"),
            lunch_end=r.get("lunch_end"),
            overtime_start=r.get("overtime_start"),
            overtime_end=r.get("overtime_end"),
        ),
        status=DTRStatus(r["status"]),
        leave_type=r.get("leave_type"),
        remarks=r.get("remarks"),
        hours_worked=float(r.get("hours_worked") or 0),
        overtime_hours=float(r.get("overtime_hours") or 0),
        is_paid=bool(r.get("is_paid")),
        pay_period=r.get("pay_period"),
        payroll_id=int(r["payroll_id"]) if r.get("payroll_id") is not None else None,
    )


def _draft_params(draft: TimeRecordDraft) -> tuple:
    p = draft.punches
    return (
        draft.employee_id,
        draft.record_date,
        p.time_in,
        p.time_out,
        p.lunch_start,
        p.lunch_end,
        p.overtime_start,
        p.overtime_end,
        draft.status.value,
        draft.leave_type,
        draft.remarks,
        draft.hours_worked,
        draft.overtime_hours,
    )


class MySQLTimeRecordRepository(TimeRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: int) -> Optional[TimeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {RECORD_COLUMNS} FROM time_records tr WHERE tr.id=%s", (int(record_id),))
            r = fetchone(cur)
            return row_to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, record_date: date) -> Optional[TimeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {RECORD_COLUMNS} FROM time_records tr WHERE tr.employee_id=%s AND tr.record_date=%s",
                (int(employee_id), record_date),
            )
            r = fetchone(cur)
            return row_to_record(r) if r else None

    def list_records(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
        status: Optional[DTRStatus] = None,
        is_paid: Optional[bool] = None,
    ) -> Sequence[TimeRecord]:
        clauses = ["tr.record_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if employee_id is not None:
            clauses.append("tr.employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            clauses.append("tr.status=%s")
            params.append(status.value)
        if is_paid is not None:
            clauses.append("tr.is_paid=%s")
            params.append(1 if is_paid else 0)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {RECORD_COLUMNS} FROM time_records tr WHERE {where} ORDER BY tr.record_date DESC, tr.id ASC",
                tuple(params),
            )
            return [row_to_record(r) for r in fetchall(cur)]

    def create(self, draft: TimeRecordDraft) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO time_records(
                        employee_id, record_date, time_in, time_out, lunch_start, lunch_end,
                        overtime_start, overtime_end, status, leave_type, remarks,
                        hours_worked, overtime_hours, is_paid
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,0)
                    """,
                    _draft_params(draft),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError:
            raise ValidationError("A time record already exists for this employee on this date")

    def update_unpaid(self, record_id: int, draft: TimeRecordDraft) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                # Affected rows count changed rows only, so decide from the locked row.
                cur.execute("SELECT is_paid FROM time_records WHERE id=%s FOR UPDATE", (int(record_id),))
                current = fetchone(cur)
                if not current or current["is_paid"]:
                    return False
                cur.execute(
                    """
                    UPDATE time_records
                    SET employee_id=%s, record_date=%s, time_in=%s, time_out=%s, lunch_start=%s, lunch_end=%s,
                        overtime_start=%s, overtime_end=%s, status=%s, leave_type=%s, remarks=%s,
                        hours_worked=%s, overtime_hours=%s
                    WHERE id=%s
                    """,
                    _draft_params(draft) + (int(record_id),),
                )
                return True
        except mysql.connector.IntegrityError:
            raise ValidationError("A time record already exists for this employee on this date")

    def delete_unpaid(self, record_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM time_records WHERE id=%s AND is_paid=0", (int(record_id),))
            return cur.rowcount > 0

    def distinct_employee_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT DISTINCT employee_id FROM time_records WHERE employee_id IS NOT NULL")
            return [int(r["employee_id"]) for r in fetchall(cur)]

    def list_by_employee_ids(self, employee_ids: Sequence[int]) -> Sequence[TimeRecord]:
        ids = [int(i) for i in employee_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {RECORD_COLUMNS} FROM time_records tr
                WHERE tr.employee_id IN ({in_clause(ids)})
                ORDER BY tr.id ASC
                """,
                tuple(ids),
            )
            return [row_to_record(r) for r in fetchall(cur)]

    def list_unattached(self) -> Sequence[TimeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {RECORD_COLUMNS} FROM time_records tr WHERE tr.employee_id IS NULL ORDER BY tr.id ASC")
            return [row_to_record(r) for r in fetchall(cur)]

    def list_by_payroll(self, payroll_id: int) -> Sequence[TimeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {RECORD_COLUMNS} FROM time_records tr WHERE tr.payroll_id=%s ORDER BY tr.record_date ASC, tr.id ASC",
                (int(payroll_id),),
            )
            return [row_to_record(r) for r in fetchall(cur)]

    def clear_employee_ref(self, record_id: int, *, expected_employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE time_records SET employee_id=NULL WHERE id=%s AND employee_id=%s",
                (int(record_id), int(expected_employee_id)),
            )
            return cur.rowcount > 0

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[TimeRecordReportRow]:
        clauses = ["tr.record_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]
        if employee_id is not None:
            clauses.append("tr.employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {RECORD_COLUMNS}, e.full_name
                FROM time_records tr
                LEFT JOIN employees e ON e.id = tr.employee_id
                WHERE {where}
                ORDER BY tr.record_date ASC, tr.employee_id ASC
                """,
                tuple(params),
            )
            return [TimeRecordReportRow(record=row_to_record(r), full_name=r.get("full_name")) for r in fetchall(cur)]
