"""Scripted DB-API stand-ins for exercising the MySQL repositories without a server."""

from datetime import date, datetime
from decimal import Decimal


class ScriptedCursor:
    """Replays one (rows, rowcount) step per execute call."""

    def __init__(self, script):
        self._script = list(script)
        self.statements = []
        self._rows = []
        self.rowcount = 0
        self.lastrowid = None

    def execute(self, sql, params=()):
        self.statements.append((" ".join(sql.split()), params))
        step = self._script.pop(0)
        if isinstance(step, Exception):
            raise step
        rows, self.rowcount = step
        self._rows = list(rows)
        if sql.lstrip().upper().startswith("INSERT"):
            self.lastrowid = 7

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return self._rows

    def close(self):
        pass


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


class FakeConnFactory:
    def __init__(self, *scripts):
        self.connections = [FakeConnection(ScriptedCursor(s)) for s in scripts]
        self._next = 0

    def connect(self):
        conn = self.connections[self._next]
        self._next += 1
        return conn

    def statements(self, index=0):
        return self.connections[index]._cursor.statements


def record_row(record_id, *, is_paid=0, employee_id=1, payroll_id=None):
    return {
        "id": record_id,
        "employee_id": employee_id,
        "record_date": date(2024, 1, 10),
        "time_in": datetime(2024, 1, 10, 8),
        "time_out": datetime(2024, 1, 10, 17),
        "lunch_start": datetime(2024, 1, 10, 12),
        "lunch_end": datetime(2024, 1, 10, 13),
        "overtime_start": None,
        "overtime_end": None,
        "status": "Present",
        "leave_type": None,
        "remarks": None,
        "hours_worked": Decimal("8.00"),
        "overtime_hours": Decimal("0.00"),
        "is_paid": is_paid,
        "pay_period": None,
        "payroll_id": payroll_id,
    }


def payroll_row(status="pending"):
    return {
        "id": 7,
        "employee_id": 1,
        "period_start": date(2024, 1, 1),
        "period_end": date(2024, 1, 15),
        "regular_hours": Decimal("8.00"),
        "overtime_hours": Decimal("0.00"),
        "basic_salary": Decimal("800.00"),
        "overtime_pay": Decimal("0.00"),
        "allowances": Decimal("0.00"),
        "deductions": Decimal("0.00"),
        "tax": Decimal("80.00"),
        "net_salary": Decimal("720.00"),
        "payment_method": "bank_transfer",
        "status": status,
        "remarks": None,
        "paid_at": None,
        "created_at": None,
    }
