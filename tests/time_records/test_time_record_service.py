from datetime import date

import pytest

from src.dtr_payroll.dtr_payroll.core.enums import DTRStatus
from src.dtr_payroll.dtr_payroll.core.exceptions import NotFound, RecordLocked, ValidationError
from src.dtr_payroll.dtr_payroll.time_records.service import TimeRecordInput


def present(**overrides) -> TimeRecordInput:
    data = dict(
        employee_id=1,
        record_date="2024-01-15",
        status="Present",
        time_in="08:00",
        time_out="17:00",
        lunch_start="12:00",
        lunch_end="13:00",
    )
    data.update(overrides)
    return TimeRecordInput(**data)


def test_save_creates_record_with_derived_hours(time_record_service):
    saved = time_record_service.save(present(overtime_start="17:00", overtime_end="19:00"))

    assert saved.created is True
    assert saved.warnings == []
    assert saved.record.hours_worked == 8.00
    assert saved.record.overtime_hours == 2.00
    assert saved.record.is_paid is False
    assert saved.record.pay_period is None


def test_second_write_for_same_day_updates_and_recomputes(time_record_service, store):
    first = time_record_service.save(present())
    second = time_record_service.save(present(time_out="18:30"))

    assert second.created is False
    assert second.record.record_id == first.record.record_id
    assert second.record.hours_worked == 9.50
    assert len(store.records) == 1


def test_update_by_id_may_move_record_to_another_date(time_record_service):
    saved = time_record_service.save(present())
    moved = time_record_service.save(present(record_id=saved.record.record_id, record_date="2024-01-16"))

    assert moved.record.record_date == date(2024, 1, 16)


def test_update_by_id_cannot_collide_with_existing_day(time_record_service):
    time_record_service.save(present(record_date="2024-01-16"))
    saved = time_record_service.save(present())

    with pytest.raises(ValidationError):
        time_record_service.save(present(record_id=saved.record.record_id, record_date="2024-01-16"))


def test_update_of_missing_id_is_not_found(time_record_service):
    with pytest.raises(NotFound):
        time_record_service.save(present(record_id=999))


def test_paid_record_is_locked(time_record_service, settlement_service, store):
    saved = time_record_service.save(present())
    settlement_service.mark_as_paid([saved.record.record_id])

    with pytest.raises(RecordLocked) as exc:
        time_record_service.save(present(time_out="19:00"))

    assert exc.value.record_id == saved.record.record_id
    assert store.get_by_id(saved.record.record_id).hours_worked == 8.00


def test_paid_record_cannot_be_deleted(time_record_service, settlement_service):
    saved = time_record_service.save(present())
    settlement_service.mark_as_paid([saved.record.record_id])

    with pytest.raises(RecordLocked):
        time_record_service.delete(saved.record.record_id)


def test_delete_unpaid_record(time_record_service, store):
    saved = time_record_service.save(present())
    time_record_service.delete(saved.record.record_id)

    assert store.records == {}
    with pytest.raises(NotFound):
        time_record_service.get(saved.record.record_id)


def test_reversed_punches_are_saved_with_warnings(time_record_service):
    saved = time_record_service.save(present(time_in="17:00", time_out="08:00", lunch_start=None, lunch_end=None))

    assert saved.record.hours_worked == -9.00
    assert [w.code for w in saved.warnings] == ["time_out_before_time_in", "negative_hours_worked"]


def test_iso_datetime_punches_are_accepted(time_record_service):
    saved = time_record_service.save(present(time_in="2024-01-15T08:00:00", time_out="2024-01-15T17:00:00"))
    assert saved.record.hours_worked == 8.00


@pytest.mark.parametrize(
    "overrides",
    [
        {"employee_id": None},
        {"employee_id": "abc"},
        {"record_date": "15/01/2024"},
        {"status": "Sick"},
        {"status": None},
        {"time_in": None},
        {"time_out": None},
        {"time_in": "8am"},
        {"time_out": "2024-01-16T17:00:00"},
        {"status": "On Leave", "time_in": None, "time_out": None},
    ],
)
def test_invalid_input_is_rejected(time_record_service, store, overrides):
    with pytest.raises(ValidationError):
        time_record_service.save(present(**overrides))
    assert store.records == {}


def test_unknown_employee_is_rejected(time_record_service):
    with pytest.raises(ValidationError):
        time_record_service.save(present(employee_id=42))


def test_absent_and_leave_need_no_punches(time_record_service):
    absent = time_record_service.save(
        present(status="Absent", time_in=None, time_out=None, lunch_start=None, lunch_end=None)
    )
    leave = time_record_service.save(
        present(
            record_date="2024-01-16",
            status="On Leave",
            leave_type="Sick Leave",
            time_in=None,
            time_out=None,
            lunch_start=None,
            lunch_end=None,
        )
    )

    assert absent.record.status == DTRStatus.ABSENT
    assert absent.record.hours_worked == 0
    assert leave.record.leave_type == "Sick Leave"


def test_list_defaults_to_current_pay_period(time_record_service):
    # Clock is fixed on 2024-01-20, so the period is 16..31 January.
    time_record_service.save(present(record_date="2024-01-15"))
    time_record_service.save(present(record_date="2024-01-16"))
    time_record_service.save(present(record_date="2024-01-31"))
    time_record_service.save(present(record_date="2024-02-01"))

    dates = [r.record_date.day for r in time_record_service.list_records()]

    assert dates == [31, 16]


def test_list_filters_by_paid_flag(time_record_service, settlement_service):
    a = time_record_service.save(present(record_date="2024-01-16"))
    time_record_service.save(present(record_date="2024-01-17"))
    settlement_service.mark_as_paid([a.record.record_id])

    paid = time_record_service.list_records(is_paid=True)
    unpaid = time_record_service.list_records(is_paid=False)

    assert [r.record_id for r in paid] == [a.record.record_id]
    assert len(unpaid) == 1


def test_list_rejects_inverted_range(time_record_service):
    with pytest.raises(ValidationError):
        time_record_service.list_records(start_date=date(2024, 1, 31), end_date=date(2024, 1, 1))
