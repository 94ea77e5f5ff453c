from __future__ import annotations

from datetime import time
from typing import Optional

import structlog

from ..common.clock import Clock, SystemClock
from ..common.datetime_utils import format_duration, previous_day
from ..core.constants import AUTO_CHECKOUT_LOCATION_NOTE, AUTO_CHECKOUT_REASON, AUTO_CHECKOUT_TIME
from .model import Location, ReconciliationResult
from .repository import AttendanceRepository
from .service import AttendanceService

log = structlog.get_logger(__name__)


class SmartAutoCheckoutService:
    """Closes attendance left open on the previous day.

    Called once per employee at session start. Running it again the same day
    finds the record already closed and does nothing. Failures never block
    today's check-in: they are logged and reported as "no action".

    The previous day is a flat calendar -1 day, with no weekend or holiday
    skipping, even though penalties treat Sunday specially.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        attendance_service: AttendanceService,
        *,
        clock: Optional[Clock] = None,
        checkout_time: time = AUTO_CHECKOUT_TIME,
        reason: str = AUTO_CHECKOUT_REASON,
    ):
        self._attendance = attendance
        self._service = attendance_service
        self._clock = clock or SystemClock()
        self._checkout_time = checkout_time
        self._reason = reason

    def reconcile(self, employee_id: str) -> ReconciliationResult:
        previous = previous_day(self._clock.today())
        try:
            stale = self._attendance.get_by_key(employee_id, previous)
            if stale is None or not stale.status.is_open:
                return ReconciliationResult(
                    reconciled=False,
                    message="No incomplete attendance from previous day",
                    previous_date=previous,
                )

            closed = self._service.auto_checkout(
                employee_id,
                previous,
                at=self._checkout_time,
                reason=self._reason,
                location=Location(captured_at=self._clock.now(), note=AUTO_CHECKOUT_LOCATION_NOTE),
            )
            if closed is None:
                return ReconciliationResult(
                    reconciled=False,
                    message="No incomplete attendance from previous day",
                    previous_date=previous,
                )
        except Exception as exc:
            log.exception("reconciliation_failed", employee_id=employee_id, previous_date=previous.isoformat())
            return ReconciliationResult(
                reconciled=False,
                message="Failed to check incomplete attendance",
                previous_date=previous,
                error=str(exc),
            )

        log.warning(
            "attendance_auto_checked_out",
            employee_id=employee_id,
            previous_date=previous.isoformat(),
            original_status=stale.status.value,
            total_work_time=closed.total_work_time,
            penalty_evaluated=closed.penalty_evaluated,
        )
        at = self._checkout_time.strftime("%H:%M")
        return ReconciliationResult(
            reconciled=True,
            message=f"Auto-checked out from {previous.isoformat()} at {at}",
            previous_date=previous,
            employee_name=closed.employee_name,
            original_status=stale.status,
            auto_checkout_time=self._checkout_time,
            work_minutes=closed.total_work_time,
            work_time=format_duration(closed.total_work_time),
            record=closed,
        )

    def can_start_fresh_today(self, employee_id: str) -> bool:
        """True when the employee has no record for today yet."""

        try:
            return self._attendance.get_by_key(employee_id, self._clock.today()) is None
        except Exception:
            log.exception("today_attendance_lookup_failed", employee_id=employee_id)
            return False
