from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Read-only view of an employee owned by the external directory."""

    employee_id: int
    full_name: str
    monthly_salary: Optional[Decimal] = None
