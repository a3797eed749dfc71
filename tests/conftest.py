from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from src.dtr_payroll.dtr_payroll.integrity.auditor import IntegrityAuditor
from src.dtr_payroll.dtr_payroll.payroll.service import PayrollService
from src.dtr_payroll.dtr_payroll.settlement.service import SettlementService
from src.dtr_payroll.dtr_payroll.time_records.service import TimeRecordService
from tests.fakes import FixedClock, InMemoryEmployees, InMemoryPayrolls, InMemoryStore


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 1, 20, 9, 30))


@pytest.fixture
def employees():
    directory = InMemoryEmployees()
    directory.add(1, "Maria Santos", Decimal("16000"))
    directory.add(2, "Jose Reyes", None)
    return directory


@pytest.fixture
def store(employees):
    return InMemoryStore(employees)


@pytest.fixture
def time_record_service(store, employees, clock):
    return TimeRecordService(store, employees, clock=clock)


@pytest.fixture
def payroll_service(store, employees, clock):
    return PayrollService(store, InMemoryPayrolls(store), employees, clock=clock)


@pytest.fixture
def settlement_service(store):
    return SettlementService(store)


@pytest.fixture
def auditor(store, employees):
    return IntegrityAuditor(store, employees)
