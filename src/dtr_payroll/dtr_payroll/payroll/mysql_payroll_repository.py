from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..core.enums import PayrollStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import NewPayroll, Payroll, PayrollAmounts
from .repository import PayrollRepository

PAYROLL_COLUMNS = """
    id, employee_id, period_start, period_end, regular_hours, overtime_hours,
    basic_salary, overtime_pay, allowances, deductions, tax, net_salary,
    payment_method, status, remarks, paid_at, created_at
"""


def _dec(value: Any) -> Decimal:
    return Decimal(str(value if value is not None else 0))


def row_to_payroll(r: Dict[str, Any]) -> Payroll:
    return Payroll(
        payroll_id=int(r["id"]),
        employee_id=int(r["employee_id"]),
        period_start=r["period_start"],
        period_end=r["period_end"],
        regular_hours=_dec(r.get("regular_hours")),
        overtime_hours=_dec(r.get("overtime_hours")),
        basic_salary=_dec(r.get("basic_salary")),
        overtime_pay=_dec(r.get("overtime_pay")),
        allowances=_dec(r.get("allowances")),
        deductions=_dec(r.get("deductions")),
        tax=_dec(r.get("tax")),
        net_salary=_dec(r.get("net_salary")),
        payment_method=r["payment_method"],
        status=PayrollStatus(r["status"]),
        remarks=r.get("remarks"),
        paid_at=r.get("paid_at"),
        created_at=r.get("created_at"),
    )


def insert_payroll(cur, new: NewPayroll) -> int:
    """Insert inside the caller's transaction (used by period settlement)."""
    a = new.amounts
    cur.execute(
        """
        INSERT INTO payrolls(
            employee_id, period_start, period_end, regular_hours, overtime_hours,
            basic_salary, overtime_pay, allowances, deductions, tax, net_salary,
            payment_method, status, remarks
        )
        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
        """,
        (
            new.employee_id,
            new.period_start,
            new.period_end,
            a.regular_hours,
            a.overtime_hours,
            a.basic_salary,
            a.overtime_pay,
            a.allowances,
            a.deductions,
            a.tax,
            a.net_salary,
            new.payment_method,
            PayrollStatus.PENDING.value,
            new.remarks,
        ),
    )
    return int(cur.lastrowid)


def select_payroll(cur, payroll_id: int, *, for_update: bool = False) -> Optional[Payroll]:
    lock = " FOR UPDATE" if for_update else ""
    cur.execute(f"SELECT {PAYROLL_COLUMNS} FROM payrolls WHERE id=%s{lock}", (int(payroll_id),))
    r = fetchone(cur)
    return row_to_payroll(r) if r else None


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            return select_payroll(cur, payroll_id)

    def list_payrolls(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
        limit: int = 200,
    ) -> Sequence[Payroll]:
        clauses = ["1=1"]
        params: list[object] = []
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        params.append(int(limit))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {PAYROLL_COLUMNS} FROM payrolls
                WHERE {where}
                ORDER BY created_at DESC, id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [row_to_payroll(r) for r in fetchall(cur)]

    def update_pending(
        self,
        payroll_id: int,
        *,
        amounts: PayrollAmounts,
        payment_method: str,
        remarks: Optional[str],
        status: PayrollStatus,
        paid_at: Optional[datetime],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # Affected rows count changed rows only, so decide from the locked row.
            cur.execute("SELECT status FROM payrolls WHERE id=%s FOR UPDATE", (int(payroll_id),))
            current = fetchone(cur)
            if not current or current["status"] != PayrollStatus.PENDING.value:
                return False
            cur.execute(
                """
                UPDATE payrolls
                SET allowances=%s, deductions=%s, tax=%s, net_salary=%s,
                    payment_method=%s, remarks=%s, status=%s, paid_at=%s
                WHERE id=%s
                """,
                (
                    amounts.allowances,
                    amounts.deductions,
                    amounts.tax,
                    amounts.net_salary,
                    payment_method,
                    remarks,
                    status.value,
                    paid_at,
                    int(payroll_id),
                ),
            )
            return True

    def list_for_report(
        self,
        *,
        start_date: date,
        end_date: date,
        status: Optional[PayrollStatus] = None,
    ) -> Sequence[Payroll]:
        clauses = ["period_start BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {PAYROLL_COLUMNS} FROM payrolls
                WHERE {where}
                ORDER BY period_start ASC, employee_id ASC
                """,
                tuple(params),
            )
            return [row_to_payroll(r) for r in fetchall(cur)]
