from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .directory import EmployeeDirectory
from .model import Employee


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def employee_exists(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM employees WHERE id=%s", (int(employee_id),))
            return fetchone(cur) is not None

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, full_name, monthly_salary FROM employees WHERE id=%s",
                (int(employee_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            salary = row.get("monthly_salary")
            return Employee(
                employee_id=int(row["id"]),
                full_name=row["full_name"],
                monthly_salary=Decimal(str(salary)) if salary is not None else None,
            )

    def monthly_salary(self, employee_id: int) -> Optional[Decimal]:
        employee = self.get_by_id(employee_id)
        return employee.monthly_salary if employee else None
