from __future__ import annotations

from datetime import date, time
from decimal import Decimal

import pytest

from retail_attendance.core.enums import AttendanceStatus, LeaveType, PenaltyStatus, PenaltyType
from retail_attendance.core.exceptions import (
    AlreadyCheckedIn,
    AttendanceAlreadyExists,
    InvalidTransition,
    NotFound,
    ValidationError,
)
from retail_attendance.penalty.model import PenaltyPolicy

FRIDAY = date(2024, 3, 15)
SUNDAY = date(2024, 3, 17)


def _work_day(service, day, check_in, check_out, employee_id="E1"):
    service.check_in(employee_id, "Alice", day, check_in)
    return service.check_out(employee_id, day, check_out)


def test_full_day_has_no_hourly_penalty(attendance_service, penalty_repo):
    record = _work_day(attendance_service, FRIDAY, time(9, 0), time(17, 0))

    assert record.status == AttendanceStatus.CHECKED_OUT
    assert record.total_work_time == 480
    assert record.penalty_evaluated is True
    assert penalty_repo.entries == {}


def test_short_day_charges_one_hourly_rate(attendance_service, penalty_repo):
    record = _work_day(attendance_service, FRIDAY, time(9, 0), time(16, 0))

    assert record.total_work_time == 420
    (entry,) = penalty_repo.entries.values()
    assert entry.penalty_type == PenaltyType.HOURLY
    assert entry.amount == Decimal("50.00")
    assert entry.attendance_id == record.attendance_id
    assert entry.applied_by == "system"


def test_sunday_is_exempt_unless_weekend_penalties_enabled(attendance_service, penalty_service, penalty_repo):
    _work_day(attendance_service, SUNDAY, time(9, 0), time(12, 0))
    assert penalty_repo.entries == {}

    penalty_service.update_penalty_settings(PenaltyPolicy(weekend_penalty_enabled=True), updated_by="manager")
    _work_day(attendance_service, SUNDAY, time(9, 0), time(12, 0), employee_id="E2")

    (entry,) = penalty_repo.entries.values()
    assert entry.employee_id == "E2"
    assert entry.amount == Decimal("250.00")
    assert entry.reason.endswith("(Sunday work)")


def test_second_check_in_same_day_is_rejected(attendance_service):
    attendance_service.check_in("E1", "Alice", FRIDAY, time(9, 0))

    with pytest.raises(AlreadyCheckedIn):
        attendance_service.check_in("E1", "Alice", FRIDAY, time(9, 5))


def test_check_out_before_check_in_fails(attendance_service):
    with pytest.raises(InvalidTransition, match="No check-in found"):
        attendance_service.check_out("E1", FRIDAY, time(17, 0))


def test_break_then_check_out(attendance_service):
    attendance_service.check_in("E1", "Alice", FRIDAY, time(9, 0))
    attendance_service.start_break("E1", FRIDAY, time(12, 0))
    with pytest.raises(InvalidTransition):
        attendance_service.check_out("E1", FRIDAY, time(17, 0))

    attendance_service.end_break("E1", FRIDAY, time(13, 0))
    record = attendance_service.check_out("E1", FRIDAY, time(18, 0))

    assert record.total_break_time == 60
    assert record.total_work_time == 480


def test_third_leave_in_month_is_charged(attendance_service, penalty_repo):
    attendance_service.mark_leave("E1", "Alice", date(2024, 3, 1), "sick", "flu")
    attendance_service.mark_leave("E1", "Alice", date(2024, 3, 5), "personal", "errand")
    assert penalty_repo.entries == {}

    record = attendance_service.mark_leave("E1", "Alice", FRIDAY, "family", "wedding")

    (entry,) = penalty_repo.entries.values()
    assert entry.penalty_type == PenaltyType.LEAVE
    assert entry.amount == Decimal("500.00")
    assert entry.work_date == FRIDAY
    assert entry.status == PenaltyStatus.ACTIVE
    assert entry.attendance_id == record.attendance_id
    assert "family" in entry.reason


def test_leave_quota_is_counted_per_month(attendance_service, penalty_repo):
    attendance_service.mark_leave("E1", "Alice", date(2024, 2, 28), "sick", "")
    attendance_service.mark_leave("E1", "Alice", date(2024, 2, 29), "sick", "")
    attendance_service.mark_leave("E1", "Alice", date(2024, 3, 1), "sick", "")

    assert penalty_repo.entries == {}


def test_mark_leave_on_worked_day_fails(attendance_service):
    attendance_service.check_in("E1", "Alice", FRIDAY, time(9, 0))

    with pytest.raises(AttendanceAlreadyExists):
        attendance_service.mark_leave("E1", "Alice", FRIDAY, "sick", "flu")


def test_edit_leave_does_not_charge_again(attendance_service, penalty_repo):
    for day in (1, 5, 15):
        attendance_service.mark_leave("E1", "Alice", date(2024, 3, day), "sick", "")
    assert len(penalty_repo.entries) == 1

    edited = attendance_service.edit_leave("E1", FRIDAY, LeaveType.MEDICAL, "surgery")

    assert edited.leave_type == LeaveType.MEDICAL
    assert edited.leave_reason == "surgery"
    assert len(penalty_repo.entries) == 1


def test_edit_missing_leave_fails(attendance_service):
    with pytest.raises(NotFound):
        attendance_service.edit_leave("E1", FRIDAY, "sick", "flu")


def test_penalty_evaluation_is_idempotent(attendance_service, penalty_repo):
    record = _work_day(attendance_service, FRIDAY, time(9, 0), time(16, 0))

    attendance_service.settle_penalties(record)
    attendance_service.settle_penalties(record)

    assert len(penalty_repo.entries) == 1


def test_removed_penalty_is_not_reapplied(attendance_service, penalty_service, penalty_repo):
    record = _work_day(attendance_service, FRIDAY, time(9, 0), time(16, 0))
    (entry,) = penalty_repo.entries.values()
    penalty_service.remove_penalty(entry.penalty_id, "manager", "approved early leave")

    attendance_service.settle_penalties(record)

    assert len(penalty_repo.entries) == 1
    assert penalty_repo.entries[entry.penalty_id].status == PenaltyStatus.REMOVED


def test_failed_ledger_write_leaves_record_pending(attendance_service, attendance_repo, penalty_repo):
    penalty_repo.fail_writes = True

    record = _work_day(attendance_service, FRIDAY, time(9, 0), time(16, 0))

    assert record.status == AttendanceStatus.CHECKED_OUT
    assert record.penalty_evaluated is False
    assert attendance_repo.list_pending_penalty_evaluation() == [record]

    penalty_repo.fail_writes = False
    settled = attendance_service.retry_pending_penalties()

    assert [r.attendance_id for r in settled] == [record.attendance_id]
    assert attendance_repo.get_by_key("E1", FRIDAY).penalty_evaluated is True
    assert len(penalty_repo.entries) == 1
    assert attendance_service.retry_pending_penalties() == []


def test_auto_apply_disabled_writes_nothing(attendance_service, penalty_service, penalty_repo):
    penalty_service.update_penalty_settings(PenaltyPolicy(auto_apply_penalties=False), updated_by="manager")

    record = _work_day(attendance_service, FRIDAY, time(9, 0), time(12, 0))

    assert record.penalty_evaluated is True
    assert penalty_repo.entries == {}


def test_range_and_roster_reads(attendance_service):
    attendance_service.check_in("E2", "bob", FRIDAY, time(9, 0))
    attendance_service.check_in("E1", "Alice", FRIDAY, time(9, 0))
    attendance_service.mark_leave("E1", "Alice", date(2024, 3, 14), "sick", "")

    roster = attendance_service.get_all_attendance(FRIDAY)
    assert [r.employee_name for r in roster] == ["Alice", "bob"]

    rows = attendance_service.get_attendance_range("E1", date(2024, 3, 1), date(2024, 3, 31))
    assert [r.work_date for r in rows] == [FRIDAY, date(2024, 3, 14)]

    with pytest.raises(ValidationError):
        attendance_service.get_attendance_range("E1", date(2024, 3, 31), date(2024, 3, 1))


def test_today_defaults_to_clock(attendance_service, clock):
    record = attendance_service.check_in("E1", "Alice")

    assert record.work_date == clock.today()
    assert record.check_in_time == time(9, 0)
    assert attendance_service.get_today_attendance("E1") == record


def test_stats(attendance_service):
    _work_day(attendance_service, FRIDAY, time(9, 0), time(17, 0))
    attendance_service.mark_leave("E1", "Alice", date(2024, 3, 14), "sick", "")
    attendance_service.mark_leave("E1", "Alice", date(2024, 2, 14), "vacation", "")

    stats = attendance_service.get_attendance_stats("E1")
    assert stats.today_present == 1
    assert stats.monthly_present == 1
    assert stats.total_work_hours == 8.0
    assert stats.total_leaves == 2
    assert stats.monthly_leaves == 1

    leaves = attendance_service.get_leave_stats("E1", 2024)
    assert leaves.total_leaves == 2
    assert leaves.leaves_by_type == {"sick": 1, "vacation": 1}
    assert leaves.monthly_breakdown == {"2024-03": 1, "2024-02": 1}
