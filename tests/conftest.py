from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from retail_attendance.attendance.model import AttendanceRecord
from retail_attendance.attendance.reconciliation import SmartAutoCheckoutService
from retail_attendance.attendance.service import AttendanceService
from retail_attendance.common.clock import FixedClock
from retail_attendance.core.enums import AttendanceStatus, PenaltyStatus, PenaltyType
from retail_attendance.core.exceptions import AttendanceAlreadyExists, NotFound, PersistenceError, PolicyNotConfigured
from retail_attendance.penalty.engine import PenaltyCalculationEngine
from retail_attendance.penalty.factory import PenaltyRuleFactory
from retail_attendance.penalty.model import PenaltyEntry, PenaltyPolicy
from retail_attendance.penalty.service import PenaltyService


class InMemoryAttendance:
    def __init__(self):
        self._by_key: dict[tuple[str, date], AttendanceRecord] = {}
        self._id = 0

    def get_by_key(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        return self._by_key.get((employee_id, work_date))

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        for record in self._by_key.values():
            if record.attendance_id == attendance_id:
                return record
        return None

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        if record.key in self._by_key:
            raise AttendanceAlreadyExists("duplicate")
        self._id += 1
        stored = replace(record, attendance_id=self._id)
        self._by_key[stored.key] = stored
        return stored

    def update(self, record: AttendanceRecord) -> AttendanceRecord:
        self._by_key[record.key] = record
        return record

    def list_for_employee(self, employee_id: str, start: Optional[date] = None, end: Optional[date] = None):
        rows = [
            r
            for r in self._by_key.values()
            if r.employee_id == employee_id
            and (start is None or r.work_date >= start)
            and (end is None or r.work_date <= end)
        ]
        return sorted(rows, key=lambda r: r.work_date, reverse=True)

    def list_for_date(self, work_date: date):
        return [r for r in self._by_key.values() if r.work_date == work_date]

    def list_pending_penalty_evaluation(self):
        return [r for r in self._by_key.values() if r.status.is_terminal and not r.penalty_evaluated]

    def count_leaves(self, employee_id: str, start: date, end: date, *, exclude: Optional[date] = None) -> int:
        return sum(
            1
            for r in self.list_for_employee(employee_id, start, end)
            if r.status == AttendanceStatus.ON_LEAVE and r.work_date != exclude
        )


class InMemoryPenalties:
    def __init__(self):
        self.entries: dict[int, PenaltyEntry] = {}
        self.fail_writes = False
        self._id = 0

    def add(self, entry: PenaltyEntry) -> PenaltyEntry:
        if self.fail_writes:
            raise PersistenceError("ledger unavailable")
        self._id += 1
        stored = replace(entry, penalty_id=self._id)
        self.entries[self._id] = stored
        return stored

    def get(self, penalty_id: int) -> Optional[PenaltyEntry]:
        return self.entries.get(penalty_id)

    def update(self, entry: PenaltyEntry) -> PenaltyEntry:
        current = self.entries.get(entry.penalty_id)
        if current is None or current.status != PenaltyStatus.ACTIVE:
            raise NotFound(f"Active penalty {entry.penalty_id} not found")
        self.entries[entry.penalty_id] = entry
        return entry

    def list_for_employee(self, employee_id: str, start: Optional[date] = None, end: Optional[date] = None):
        return [
            e
            for e in self.entries.values()
            if e.employee_id == employee_id
            and (start is None or e.work_date >= start)
            and (end is None or e.work_date <= end)
        ]

    def exists_for_attendance(self, attendance_id: int, penalty_type: PenaltyType) -> bool:
        return any(e.attendance_id == attendance_id and e.penalty_type == penalty_type for e in self.entries.values())


class InMemoryPolicies:
    def __init__(self):
        self.versions: dict[str, list[PenaltyPolicy]] = {}

    def get_active(self, tenant: str) -> PenaltyPolicy:
        versions = self.versions.get(tenant)
        if not versions:
            raise PolicyNotConfigured(tenant)
        return versions[-1]

    def save(self, policy: PenaltyPolicy) -> PenaltyPolicy:
        self.versions.setdefault(policy.tenant, []).append(policy)
        return policy


@pytest.fixture
def clock() -> FixedClock:
    # Friday
    return FixedClock(datetime(2024, 3, 15, 9, 0))


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def penalty_repo() -> InMemoryPenalties:
    return InMemoryPenalties()


@pytest.fixture
def policy_repo() -> InMemoryPolicies:
    return InMemoryPolicies()


@pytest.fixture
def penalty_service(penalty_repo, policy_repo, clock) -> PenaltyService:
    return PenaltyService(penalty_repo, policy_repo, clock=clock, retries=2, retry_delay=0)


@pytest.fixture
def engine(penalty_repo, attendance_repo, clock) -> PenaltyCalculationEngine:
    return PenaltyCalculationEngine(penalty_repo, PenaltyRuleFactory(attendance_repo), clock=clock)


@pytest.fixture
def attendance_service(attendance_repo, engine, penalty_service, clock) -> AttendanceService:
    return AttendanceService(attendance_repo, engine, penalty_service, clock=clock, retries=2, retry_delay=0)


@pytest.fixture
def reconciliation(attendance_repo, attendance_service, clock) -> SmartAutoCheckoutService:
    return SmartAutoCheckoutService(attendance_repo, attendance_service, clock=clock)
