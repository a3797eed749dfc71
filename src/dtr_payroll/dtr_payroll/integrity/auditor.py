from __future__ import annotations

import logging
from typing import Iterable

from ..employees.directory import EmployeeDirectory
from ..time_records.model import TimeRecord
from ..time_records.repository import TimeRecordRepository

logger = logging.getLogger(__name__)


class IntegrityAuditor:
    """Detects and repairs time records whose employee reference no longer resolves.

    Detection and repair are separate calls so the orphan list can be reviewed
    before anything is written. Records with a null reference are unattached,
    not orphaned, and are reported separately.
    """

    def __init__(self, records: TimeRecordRepository, employees: EmployeeDirectory):
        self._records = records
        self._employees = employees

    def find_orphans(self) -> list[TimeRecord]:
        dangling = [i for i in self._records.distinct_employee_ids() if not self._employees.employee_exists(i)]
        if not dangling:
            return []
        orphans = list(self._records.list_by_employee_ids(dangling))
        logger.info("Found %d orphaned time records referencing %d missing employees", len(orphans), len(dangling))
        return orphans

    def find_unattached(self) -> list[TimeRecord]:
        return list(self._records.list_unattached())

    def repair_orphans(self, records: Iterable[TimeRecord]) -> int:
        """Null the employee reference of each record; punches, hours and paid flag are untouched."""

        repaired = 0
        for record in records:
            if record.employee_id is None:
                continue
            if self._employees.employee_exists(record.employee_id):
                logger.info(
                    "Time record #%s: employee %s resolves again, leaving it attached",
                    record.record_id,
                    record.employee_id,
                )
                continue
            if self._records.clear_employee_ref(record.record_id, expected_employee_id=record.employee_id):
                logger.info("Time record #%s detached from missing employee %s", record.record_id, record.employee_id)
                repaired += 1
        return repaired
