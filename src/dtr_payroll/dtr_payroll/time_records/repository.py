from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import DTRStatus
from .model import TimeRecord, TimeRecordDraft, TimeRecordReportRow


class TimeRecordRepository(Protocol):
    def get_by_id(self, record_id: int) -> Optional[TimeRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, record_date: date) -> Optional[TimeRecord]:
        raise NotImplementedError

    def list_records(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
        status: Optional[DTRStatus] = None,
        is_paid: Optional[bool] = None,
    ) -> Sequence[TimeRecord]:
        raise NotImplementedError

    def create(self, draft: TimeRecordDraft) -> int:
        raise NotImplementedError

    def update_unpaid(self, record_id: int, draft: TimeRecordDraft) -> bool:
        """Overwrite a record only while it is unpaid; False if it is missing or paid."""

        raise NotImplementedError

    def delete_unpaid(self, record_id: int) -> bool:
        raise NotImplementedError

    def distinct_employee_ids(self) -> Sequence[int]:
        """Every non-null employee reference held by a time record."""

        raise NotImplementedError

    def list_by_employee_ids(self, employee_ids: Sequence[int]) -> Sequence[TimeRecord]:
        raise NotImplementedError

    def list_unattached(self) -> Sequence[TimeRecord]:
        raise NotImplementedError

    def list_by_payroll(self, payroll_id: int) -> Sequence[TimeRecord]:
        """Records settled by one payroll run (manually paid records carry no payroll)."""

        raise NotImplementedError

    def clear_employee_ref(self, record_id: int, *, expected_employee_id: int) -> bool:
        """Null the employee reference if it still equals ``expected_employee_id``."""

        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[TimeRecordReportRow]:
        raise NotImplementedError
