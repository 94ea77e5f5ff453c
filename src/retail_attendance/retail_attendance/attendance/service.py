from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional, Sequence

import structlog

from ..common.clock import Clock, SystemClock
from ..common.locks import KeyedLocks
from ..common.retry import with_retries
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_PERSISTENCE_RETRIES, DEFAULT_PERSISTENCE_RETRY_DELAY
from ..core.enums import AttendanceStatus, LeaveType
from ..core.exceptions import AlreadyCheckedIn, AttendanceAlreadyExists, NotFound, PersistenceError, ValidationError
from ..penalty.engine import PenaltyCalculationEngine
from ..penalty.service import PenaltyService
from . import state_machine as sm
from .model import AttendanceRecord, AttendanceStats, LeaveStats, Location
from .repository import AttendanceRepository

log = structlog.get_logger(__name__)


class AttendanceService:
    """Attendance mutations and reads for one tenant.

    Every mutation is a read-modify-write on the (employee_id, work_date) record
    performed while holding that key's lock. Reaching a terminal state runs the
    penalty engine once; if the ledger write keeps failing the record is left
    with penalty_evaluated=False for retry_pending_penalties().
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        engine: PenaltyCalculationEngine,
        penalties: PenaltyService,
        *,
        clock: Optional[Clock] = None,
        locks: Optional[KeyedLocks] = None,
        retries: int = DEFAULT_PERSISTENCE_RETRIES,
        retry_delay: float = DEFAULT_PERSISTENCE_RETRY_DELAY,
    ):
        self._attendance = attendance
        self._engine = engine
        self._penalties = penalties
        self._clock = clock or SystemClock()
        self._locks = locks or KeyedLocks()
        self._retries = int(retries)
        self._retry_delay = float(retry_delay)

    def _retry(self, operation, label: str):
        return with_retries(operation, attempts=self._retries, delay=self._retry_delay, label=label)

    def _get(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        return self._retry(lambda: self._attendance.get_by_key(employee_id, work_date), "get_attendance")

    def _save(self, record: AttendanceRecord) -> AttendanceRecord:
        if record.attendance_id is None:
            return self._retry(lambda: self._attendance.create(record), "create_attendance")
        return self._retry(lambda: self._attendance.update(record), "update_attendance")

    def _resolve(self, work_date: Optional[date], at: Optional[time]) -> tuple[datetime, date, time]:
        now = self._clock.now()
        return now, work_date or now.date(), at or now.time().replace(microsecond=0)

    def settle_penalties(self, record: AttendanceRecord) -> AttendanceRecord:
        """Run the one-time penalty side effect of a terminal transition."""

        try:
            policy = self._penalties.get_penalty_settings()
            self._retry(lambda: self._engine.evaluate(record, policy), "evaluate_penalties")
            return self._save(replace(record, penalty_evaluated=True))
        except PersistenceError as exc:
            log.error(
                "penalty_evaluation_pending",
                attendance_id=record.attendance_id,
                employee_id=record.employee_id,
                work_date=record.work_date.isoformat(),
                error=str(exc),
            )
            return record

    # Mutations

    def check_in(
        self,
        employee_id: str,
        employee_name: str,
        work_date: Optional[date] = None,
        at: Optional[time] = None,
        *,
        photo: Optional[str] = None,
        location: Optional[Location] = None,
    ) -> AttendanceRecord:
        employee_id = require_non_empty(employee_id, "employee_id")
        now, work_date, at = self._resolve(work_date, at)

        with self._locks.hold((employee_id, work_date)):
            existing = self._get(employee_id, work_date)
            if existing is not None and existing.status != AttendanceStatus.NOT_CHECKED_IN:
                raise AlreadyCheckedIn(f"Attendance already recorded for {work_date.isoformat()}")
            record = sm.check_in(
                existing,
                employee_id=employee_id,
                employee_name=(employee_name or "").strip(),
                work_date=work_date,
                at=at,
                now=now,
                photo=photo,
                location=location,
            )
            saved = self._save(record)

        log.info("checked_in", employee_id=employee_id, work_date=work_date.isoformat(), at=at.isoformat())
        return saved

    def start_break(self, employee_id: str, work_date: Optional[date] = None, at: Optional[time] = None) -> AttendanceRecord:
        now, work_date, at = self._resolve(work_date, at)
        with self._locks.hold((employee_id, work_date)):
            record = sm.start_break(self._get(employee_id, work_date), at=at, now=now)
            saved = self._save(record)
        log.info("break_started", employee_id=employee_id, work_date=work_date.isoformat(), at=at.isoformat())
        return saved

    def end_break(self, employee_id: str, work_date: Optional[date] = None, at: Optional[time] = None) -> AttendanceRecord:
        now, work_date, at = self._resolve(work_date, at)
        with self._locks.hold((employee_id, work_date)):
            record = sm.end_break(self._get(employee_id, work_date), at=at, now=now)
            saved = self._save(record)
        log.info(
            "break_ended",
            employee_id=employee_id,
            work_date=work_date.isoformat(),
            total_break_time=saved.total_break_time,
        )
        return saved

    def check_out(
        self,
        employee_id: str,
        work_date: Optional[date] = None,
        at: Optional[time] = None,
        *,
        location: Optional[Location] = None,
    ) -> AttendanceRecord:
        now, work_date, at = self._resolve(work_date, at)
        with self._locks.hold((employee_id, work_date)):
            record = sm.check_out(self._get(employee_id, work_date), at=at, now=now, location=location)
            saved = self.settle_penalties(self._save(record))
        log.info(
            "checked_out",
            employee_id=employee_id,
            work_date=work_date.isoformat(),
            total_work_time=saved.total_work_time,
        )
        return saved

    def mark_leave(
        self,
        employee_id: str,
        employee_name: str,
        work_date: Optional[date] = None,
        leave_type: LeaveType | str | None = None,
        reason: Optional[str] = None,
    ) -> AttendanceRecord:
        employee_id = require_non_empty(employee_id, "employee_id")
        now, work_date, _ = self._resolve(work_date, None)

        with self._locks.hold((employee_id, work_date)):
            existing = self._get(employee_id, work_date)
            if existing is not None and existing.status != AttendanceStatus.NOT_CHECKED_IN:
                raise AttendanceAlreadyExists("Attendance already exists for this date. Cannot mark leave.")
            record = sm.mark_leave(
                existing,
                employee_id=employee_id,
                employee_name=(employee_name or "").strip(),
                work_date=work_date,
                leave_type=leave_type,
                reason=reason,
                now=now,
            )
            saved = self.settle_penalties(self._save(record))

        log.info("leave_marked", employee_id=employee_id, work_date=work_date.isoformat(), leave_type=saved.leave_type.value)
        return saved

    def edit_leave(
        self,
        employee_id: str,
        work_date: date,
        leave_type: LeaveType | str | None = None,
        reason: Optional[str] = None,
    ) -> AttendanceRecord:
        """Change type/reason of an existing leave. Penalties are not re-evaluated."""

        with self._locks.hold((employee_id, work_date)):
            existing = self._get(employee_id, work_date)
            if existing is None:
                raise NotFound("Leave record not found")
            saved = self._save(sm.edit_leave(existing, leave_type=leave_type, reason=reason, now=self._clock.now()))

        log.info("leave_edited", employee_id=employee_id, work_date=work_date.isoformat())
        return saved

    def auto_checkout(
        self,
        employee_id: str,
        work_date: date,
        *,
        at: time,
        reason: str,
        location: Location,
    ) -> Optional[AttendanceRecord]:
        """Force-close a still-open record. Returns None when there is nothing open."""

        with self._locks.hold((employee_id, work_date)):
            existing = self._get(employee_id, work_date)
            if existing is None or not existing.status.is_open:
                return None
            record = sm.auto_checkout(existing, at=at, reason=reason, location=location, now=self._clock.now())
            return self.settle_penalties(self._save(record))

    def retry_pending_penalties(self) -> list[AttendanceRecord]:
        """Finish penalty evaluation for terminal records flagged as pending."""

        pending = self._retry(self._attendance.list_pending_penalty_evaluation, "list_pending")
        settled = []
        for record in pending:
            with self._locks.hold(record.key):
                current = self._get(record.employee_id, record.work_date)
                if current is None or current.penalty_evaluated or not current.status.is_terminal:
                    continue
                result = self.settle_penalties(current)
            if result.penalty_evaluated:
                settled.append(result)
        log.info("pending_penalties_retried", pending=len(pending), settled=len(settled))
        return settled

    # Reads

    def get_today_attendance(self, employee_id: str) -> Optional[AttendanceRecord]:
        return self._get(employee_id, self._clock.today())

    def get_attendance(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        return self._get(employee_id, work_date)

    def get_attendance_range(self, employee_id: str, start: date, end: date) -> Sequence[AttendanceRecord]:
        if end < start:
            raise ValidationError("End date must not be before start date")
        return self._retry(lambda: self._attendance.list_for_employee(employee_id, start, end), "list_attendance")

    def get_all_attendance(self, work_date: Optional[date] = None) -> list[AttendanceRecord]:
        """Admin roster for one day, ordered by employee name."""

        work_date = work_date or self._clock.today()
        rows = self._retry(lambda: self._attendance.list_for_date(work_date), "list_attendance_for_date")
        return sorted(rows, key=lambda r: (r.employee_name or "").lower())

    def get_attendance_stats(self, employee_id: str) -> AttendanceStats:
        today = self._clock.today()
        records = self._retry(lambda: self._attendance.list_for_employee(employee_id), "list_attendance")
        if not records:
            return AttendanceStats()

        monthly = [r for r in records if (r.work_date.year, r.work_date.month) == (today.year, today.month)]
        leaves = [r for r in records if r.status == AttendanceStatus.ON_LEAVE]
        working = [r for r in monthly if r.status != AttendanceStatus.ON_LEAVE]
        total_minutes = sum(r.total_work_time for r in monthly)

        return AttendanceStats(
            today_present=sum(1 for r in records if r.work_date == today and r.status != AttendanceStatus.ON_LEAVE),
            monthly_present=len(working),
            total_work_hours=round(total_minutes / 60, 2),
            average_work_hours=round(total_minutes / len(working) / 60, 2) if working else 0.0,
            total_leaves=len(leaves),
            monthly_leaves=sum(1 for r in monthly if r.status == AttendanceStatus.ON_LEAVE),
        )

    def get_leave_stats(self, employee_id: str, year: Optional[int] = None, month: Optional[int] = None) -> LeaveStats:
        records = self._retry(lambda: self._attendance.list_for_employee(employee_id), "list_attendance")
        leaves = [r for r in records if r.status == AttendanceStatus.ON_LEAVE]
        if year:
            leaves = [r for r in leaves if r.work_date.year == int(year)]
        if year and month:
            leaves = [r for r in leaves if r.work_date.month == int(month)]

        by_type: dict[str, int] = {}
        by_month: dict[str, int] = {}
        for r in leaves:
            kind = r.leave_type.value if r.leave_type else "unspecified"
            by_type[kind] = by_type.get(kind, 0) + 1
            month_key = r.work_date.strftime("%Y-%m")
            by_month[month_key] = by_month.get(month_key, 0) + 1
        return LeaveStats(total_leaves=len(leaves), leaves_by_type=by_type, monthly_breakdown=by_month)
