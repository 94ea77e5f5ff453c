from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class LeaveCounter(Protocol):
    """Monthly leave aggregate used by the leave penalty rule.

    The default implementations scan the employee's records on every call; a
    running counter can replace them without touching the rule.
    """

    def count_leaves(self, employee_id: str, start: date, end: date, *, exclude: Optional[date] = None) -> int:
        raise NotImplementedError


class AttendanceRepository(LeaveCounter, Protocol):
    def get_by_key(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert a new record and return it with its store-assigned id.

        Must fail with AttendanceAlreadyExists if (employee_id, work_date) is taken.
        """

        raise NotImplementedError

    def update(self, record: AttendanceRecord) -> AttendanceRecord:
        raise NotImplementedError

    def list_for_employee(self, employee_id: str, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[AttendanceRecord]:
        """Records for the employee within [start, end], newest first."""

        raise NotImplementedError

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_pending_penalty_evaluation(self) -> Sequence[AttendanceRecord]:
        """Terminal records whose penalty side effect has not been written yet."""

        raise NotImplementedError
