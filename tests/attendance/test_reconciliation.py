from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

from retail_attendance.core.enums import AttendanceStatus, PenaltyType
from retail_attendance.core.exceptions import PersistenceError

THURSDAY = date(2024, 3, 14)


def test_open_break_is_closed_at_checkout_time(attendance_service, reconciliation, penalty_repo, clock):
    attendance_service.check_in("E1", "Alice", THURSDAY, time(9, 0))
    attendance_service.start_break("E1", THURSDAY, time(14, 0))

    result = reconciliation.reconcile("E1")

    assert result.reconciled is True
    assert result.message == "Auto-checked out from 2024-03-14 at 22:00"
    assert result.previous_date == THURSDAY
    assert result.original_status == AttendanceStatus.ON_BREAK
    assert result.work_minutes == 300
    assert result.work_time == "5h 0m"

    record = result.record
    assert record.status == AttendanceStatus.CHECKED_OUT
    assert record.check_out_time == time(22, 0)
    assert record.breaks[0].end_time == time(22, 0)
    assert record.auto_checkout is True
    assert record.auto_checkout_at == clock.now()
    assert record.check_out_location.note == "Auto-checkout - Location not captured"
    assert record.penalty_evaluated is True

    (entry,) = penalty_repo.entries.values()
    assert entry.penalty_type == PenaltyType.HOURLY
    assert entry.amount == Decimal("150.00")
    assert entry.reason.endswith("(auto-checkout)")


def test_second_run_is_a_no_op(attendance_service, reconciliation, penalty_repo):
    attendance_service.check_in("E1", "Alice", THURSDAY, time(9, 0))
    attendance_service.start_break("E1", THURSDAY, time(14, 0))
    first = reconciliation.reconcile("E1")

    again = reconciliation.reconcile("E1")

    assert first.reconciled is True
    assert again.reconciled is False
    assert again.message == "No incomplete attendance from previous day"
    assert len(penalty_repo.entries) == 1


def test_nothing_to_do_without_previous_record(reconciliation):
    result = reconciliation.reconcile("E1")

    assert result.reconciled is False
    assert result.error is None
    assert result.previous_date == THURSDAY


def test_closed_previous_day_is_left_alone(attendance_service, reconciliation):
    attendance_service.check_in("E1", "Alice", THURSDAY, time(9, 0))
    attendance_service.check_out("E1", THURSDAY, time(17, 0))

    assert reconciliation.reconcile("E1").reconciled is False


def test_storage_failure_is_reported_not_raised(reconciliation, attendance_repo, monkeypatch):
    def broken(employee_id, work_date):
        raise PersistenceError("connection lost")

    monkeypatch.setattr(attendance_repo, "get_by_key", broken)

    result = reconciliation.reconcile("E1")

    assert result.reconciled is False
    assert result.message == "Failed to check incomplete attendance"
    assert result.error == "connection lost"
    assert reconciliation.can_start_fresh_today("E1") is False


def test_monday_reconciles_sunday_without_charge(attendance_service, reconciliation, penalty_repo, clock):
    attendance_service.check_in("E1", "Alice", date(2024, 3, 17), time(10, 0))
    clock.current = datetime(2024, 3, 18, 8, 30)

    result = reconciliation.reconcile("E1")

    assert result.reconciled is True
    assert result.previous_date == date(2024, 3, 17)
    assert penalty_repo.entries == {}


def test_can_start_fresh_today(attendance_service, reconciliation, clock):
    assert reconciliation.can_start_fresh_today("E1") is True

    attendance_service.check_in("E1", "Alice")

    assert reconciliation.can_start_fresh_today("E1") is False


def test_unreadable_previous_record_does_not_block_today(reconciliation, attendance_repo, monkeypatch):
    def corrupt(employee_id, work_date):
        raise ValueError("Expecting value: line 1 column 1 (char 0)")

    monkeypatch.setattr(attendance_repo, "get_by_key", corrupt)

    result = reconciliation.reconcile("E1")

    assert result.reconciled is False
    assert result.message == "Failed to check incomplete attendance"
    assert result.error.startswith("Expecting value")
    assert reconciliation.can_start_fresh_today("E1") is False
