from datetime import date, time
from decimal import Decimal

from retail_attendance.attendance.model import AttendanceRecord
from retail_attendance.core.enums import AttendanceStatus
from retail_attendance.penalty.model import PenaltyPolicy


def _short_day(attendance_id=7):
    return AttendanceRecord(
        attendance_id=attendance_id,
        employee_id="E1",
        employee_name="Alice",
        work_date=date(2024, 3, 15),
        status=AttendanceStatus.CHECKED_OUT,
        check_in_time=time(9, 0),
        check_out_time=time(16, 0),
        total_work_time=420,
    )


def test_engine_writes_one_entry_per_attendance_and_type(engine, penalty_repo, clock):
    policy = PenaltyPolicy()

    first = engine.evaluate(_short_day(), policy)
    second = engine.evaluate(_short_day(), policy)

    assert len(first) == 1
    assert second == []
    (entry,) = penalty_repo.entries.values()
    assert entry.attendance_id == 7
    assert entry.employee_name == "Alice"
    assert entry.amount == Decimal("50.00")
    assert entry.applied_at == clock.now()


def test_engine_uses_the_policy_it_is_given(engine, penalty_repo):
    engine.evaluate(_short_day(attendance_id=1), PenaltyPolicy(hourly_penalty_rate=Decimal("120")))
    engine.evaluate(_short_day(attendance_id=2), PenaltyPolicy(hourly_penalty_rate=Decimal("30")))

    assert sorted(e.amount for e in penalty_repo.entries.values()) == [Decimal("30.00"), Decimal("120.00")]


def test_engine_skips_open_records_and_disabled_policy(engine, penalty_repo):
    open_record = AttendanceRecord(
        attendance_id=9,
        employee_id="E1",
        employee_name="Alice",
        work_date=date(2024, 3, 15),
        status=AttendanceStatus.CHECKED_IN,
    )

    assert engine.evaluate(open_record, PenaltyPolicy()) == []
    assert engine.evaluate(_short_day(), PenaltyPolicy(auto_apply_penalties=False)) == []
    assert penalty_repo.entries == {}
