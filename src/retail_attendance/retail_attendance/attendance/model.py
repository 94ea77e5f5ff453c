from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus, LeaveType


@dataclass(frozen=True)
class Location:
    """Device location captured by the client. Never validated here."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy: Optional[float] = None
    captured_at: Optional[datetime] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class BreakEntry:
    start_time: time
    end_time: Optional[time] = None
    duration_minutes: int = 0

    @property
    def is_open(self) -> bool:
        return self.end_time is None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per employee per calendar day."""

    attendance_id: Optional[int]
    employee_id: str
    employee_name: str
    work_date: date
    status: AttendanceStatus = AttendanceStatus.NOT_CHECKED_IN
    check_in_time: Optional[time] = None
    check_out_time: Optional[time] = None
    check_in_photo: Optional[str] = None
    check_in_location: Optional[Location] = None
    check_out_location: Optional[Location] = None
    breaks: tuple[BreakEntry, ...] = ()
    total_break_time: int = 0
    total_work_time: int = 0
    leave_type: Optional[LeaveType] = None
    leave_reason: Optional[str] = None
    auto_checkout: bool = False
    auto_checkout_reason: Optional[str] = None
    auto_checkout_at: Optional[datetime] = None
    penalty_evaluated: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> tuple[str, date]:
        return (self.employee_id, self.work_date)

    @property
    def open_break(self) -> Optional[BreakEntry]:
        for entry in self.breaks:
            if entry.is_open:
                return entry
        return None


@dataclass(frozen=True)
class ReconciliationResult:
    """Outcome of a smart auto-checkout run, surfaced once to the employee."""

    reconciled: bool
    message: str
    previous_date: Optional[date] = None
    employee_name: Optional[str] = None
    original_status: Optional[AttendanceStatus] = None
    auto_checkout_time: Optional[time] = None
    work_minutes: int = 0
    work_time: str = "0h 0m"
    record: Optional[AttendanceRecord] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class AttendanceStats:
    today_present: int = 0
    monthly_present: int = 0
    total_work_hours: float = 0.0
    average_work_hours: float = 0.0
    total_leaves: int = 0
    monthly_leaves: int = 0


@dataclass(frozen=True)
class LeaveStats:
    total_leaves: int = 0
    leaves_by_type: dict[str, int] = field(default_factory=dict)
    monthly_breakdown: dict[str, int] = field(default_factory=dict)
