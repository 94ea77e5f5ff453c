"""Legal moves for a single day's attendance record.

All functions are pure: they take a record (or nothing, for the implicit
NOT_CHECKED_IN state) and return a new record with totals recomputed.
Persistence and side effects belong to the services.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import minutes_between, work_minutes
from ..core.constants import DEFAULT_LEAVE_TYPE
from ..core.enums import AttendanceAction, AttendanceStatus, LeaveType
from ..core.exceptions import InvalidTransition, ValidationError
from .model import AttendanceRecord, BreakEntry, Location

S = AttendanceStatus
A = AttendanceAction

TRANSITIONS: dict[tuple[AttendanceStatus, AttendanceAction], AttendanceStatus] = {
    (S.NOT_CHECKED_IN, A.CHECK_IN): S.CHECKED_IN,
    (S.NOT_CHECKED_IN, A.MARK_LEAVE): S.ON_LEAVE,
    (S.CHECKED_IN, A.START_BREAK): S.ON_BREAK,
    (S.CHECKED_IN, A.CHECK_OUT): S.CHECKED_OUT,
    (S.ON_BREAK, A.END_BREAK): S.CHECKED_IN,
    (S.CHECKED_IN, A.AUTO_CHECKOUT): S.CHECKED_OUT,
    (S.ON_BREAK, A.AUTO_CHECKOUT): S.CHECKED_OUT,
    (S.ON_LEAVE, A.EDIT_LEAVE): S.ON_LEAVE,
}

_REJECTIONS: dict[tuple[AttendanceStatus, AttendanceAction], str] = {
    (S.NOT_CHECKED_IN, A.CHECK_OUT): "No check-in found for this day",
    (S.NOT_CHECKED_IN, A.START_BREAK): "You must be checked in to start a break",
    (S.ON_BREAK, A.CHECK_OUT): "Please end your break before checking out",
    (S.ON_BREAK, A.START_BREAK): "Break already in progress",
    (S.CHECKED_IN, A.END_BREAK): "No active break found",
    (S.CHECKED_OUT, A.CHECK_OUT): "You have already checked out for this day",
    (S.ON_LEAVE, A.START_BREAK): "Cannot start a break while on leave",
    (S.ON_LEAVE, A.CHECK_OUT): "Cannot check out while on leave",
}


def next_status(current: AttendanceStatus, action: AttendanceAction) -> AttendanceStatus:
    try:
        return TRANSITIONS[(current, action)]
    except KeyError:
        message = _REJECTIONS.get(
            (current, action),
            f"Cannot {action.value.lower().replace('_', ' ')} while {current.value.lower().replace('_', ' ')}",
        )
        raise InvalidTransition(message) from None


def coerce_leave_type(value: LeaveType | str | None) -> LeaveType:
    if value is None or value == "":
        return LeaveType(DEFAULT_LEAVE_TYPE)
    if isinstance(value, LeaveType):
        return value
    try:
        return LeaveType(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in LeaveType)
        raise ValidationError(f"Unknown leave type {value!r} (expected one of: {allowed})") from None


def _recompute(record: AttendanceRecord) -> AttendanceRecord:
    total_break = sum(b.duration_minutes for b in record.breaks if not b.is_open)
    total_work = work_minutes(record.work_date, record.check_in_time, record.check_out_time, total_break)
    return replace(record, total_break_time=total_break, total_work_time=total_work)


def _close_open_break(record: AttendanceRecord, at: time) -> tuple[BreakEntry, ...]:
    closed = []
    for entry in record.breaks:
        if entry.is_open:
            duration = max(minutes_between(record.work_date, entry.start_time, at), 0)
            entry = replace(entry, end_time=at, duration_minutes=duration)
        closed.append(entry)
    return tuple(closed)


def _current(record: Optional[AttendanceRecord]) -> AttendanceStatus:
    return record.status if record is not None else S.NOT_CHECKED_IN


def check_in(
    record: Optional[AttendanceRecord],
    *,
    employee_id: str,
    employee_name: str,
    work_date: date,
    at: time,
    now: datetime,
    photo: Optional[str] = None,
    location: Optional[Location] = None,
) -> AttendanceRecord:
    status = next_status(_current(record), A.CHECK_IN)
    base = record or AttendanceRecord(
        attendance_id=None,
        employee_id=employee_id,
        employee_name=employee_name,
        work_date=work_date,
        created_at=now,
    )
    return _recompute(
        replace(
            base,
            status=status,
            check_in_time=at,
            check_in_photo=photo,
            check_in_location=location,
            updated_at=now,
        )
    )


def start_break(record: Optional[AttendanceRecord], *, at: time, now: datetime) -> AttendanceRecord:
    status = next_status(_current(record), A.START_BREAK)
    if record.open_break is not None:
        raise InvalidTransition("Break already in progress")
    breaks = record.breaks + (BreakEntry(start_time=at),)
    return _recompute(replace(record, status=status, breaks=breaks, updated_at=now))


def end_break(record: Optional[AttendanceRecord], *, at: time, now: datetime) -> AttendanceRecord:
    status = next_status(_current(record), A.END_BREAK)
    if record.open_break is None:
        raise InvalidTransition("No active break found")
    return _recompute(replace(record, status=status, breaks=_close_open_break(record, at), updated_at=now))


def check_out(
    record: Optional[AttendanceRecord],
    *,
    at: time,
    now: datetime,
    location: Optional[Location] = None,
) -> AttendanceRecord:
    status = next_status(_current(record), A.CHECK_OUT)
    return _recompute(
        replace(
            record,
            status=status,
            check_out_time=at,
            check_out_location=location,
            penalty_evaluated=False,
            updated_at=now,
        )
    )


def mark_leave(
    record: Optional[AttendanceRecord],
    *,
    employee_id: str,
    employee_name: str,
    work_date: date,
    leave_type: LeaveType | str | None,
    reason: Optional[str],
    now: datetime,
) -> AttendanceRecord:
    status = next_status(_current(record), A.MARK_LEAVE)
    base = record or AttendanceRecord(
        attendance_id=None,
        employee_id=employee_id,
        employee_name=employee_name,
        work_date=work_date,
        created_at=now,
    )
    return _recompute(
        replace(
            base,
            status=status,
            leave_type=coerce_leave_type(leave_type),
            leave_reason=(reason or "").strip(),
            penalty_evaluated=False,
            updated_at=now,
        )
    )


def edit_leave(
    record: AttendanceRecord,
    *,
    leave_type: LeaveType | str | None,
    reason: Optional[str],
    now: datetime,
) -> AttendanceRecord:
    """Update type/reason in place; a None argument keeps the current value.

    Does not touch penalty state.
    """

    status = next_status(record.status, A.EDIT_LEAVE)
    return replace(
        record,
        status=status,
        leave_type=coerce_leave_type(leave_type) if leave_type else record.leave_type,
        leave_reason=reason.strip() if reason is not None else record.leave_reason,
        updated_at=now,
    )


def auto_checkout(
    record: AttendanceRecord,
    *,
    at: time,
    reason: str,
    location: Location,
    now: datetime,
) -> AttendanceRecord:
    """Force-close a stale CHECKED_IN/ON_BREAK record at a synthetic time."""

    status = next_status(record.status, A.AUTO_CHECKOUT)
    return _recompute(
        replace(
            record,
            status=status,
            breaks=_close_open_break(record, at),
            check_out_time=at,
            check_out_location=location,
            auto_checkout=True,
            auto_checkout_reason=reason,
            auto_checkout_at=now,
            penalty_evaluated=False,
            updated_at=now,
        )
    )
