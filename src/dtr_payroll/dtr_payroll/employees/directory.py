from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol

from .model import Employee


class EmployeeDirectory(Protocol):
    """Lookup interface onto the employee directory.

    Note: the engine never writes employees; it only asks whether a reference
    still resolves and, for default pay rates, what the salary is.
    """

    def employee_exists(self, employee_id: int) -> bool:
        raise NotImplementedError

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def monthly_salary(self, employee_id: int) -> Optional[Decimal]:
        raise NotImplementedError
