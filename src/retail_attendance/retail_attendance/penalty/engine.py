from __future__ import annotations

from typing import Optional

import structlog

from ..attendance.model import AttendanceRecord
from ..common.clock import Clock, SystemClock
from ..core.constants import SYSTEM_ACTOR
from .factory import PenaltyRuleFactory
from .model import PenaltyEntry, PenaltyPolicy
from .repository import PenaltyRepository

log = structlog.get_logger(__name__)


class PenaltyCalculationEngine:
    """Derives penalties from a record that just reached a terminal state.

    Safe to run more than once for the same record: a rule whose entry is
    already in the ledger for that attendance id is skipped, whatever the
    entry's status.
    """

    def __init__(self, penalties: PenaltyRepository, factory: PenaltyRuleFactory, *, clock: Optional[Clock] = None):
        self._penalties = penalties
        self._factory = factory
        self._clock = clock or SystemClock()

    def evaluate(self, record: AttendanceRecord, policy: PenaltyPolicy) -> list[PenaltyEntry]:
        if not policy.auto_apply_penalties:
            log.info("penalties_auto_apply_disabled", employee_id=record.employee_id, work_date=record.work_date.isoformat())
            return []
        if not record.status.is_terminal:
            return []

        written: list[PenaltyEntry] = []
        for rule in self._factory.for_record(record):
            if record.attendance_id is not None and self._penalties.exists_for_attendance(
                record.attendance_id, rule.penalty_type
            ):
                log.info(
                    "penalty_already_recorded",
                    attendance_id=record.attendance_id,
                    penalty_type=rule.penalty_type.value,
                )
                continue

            charge = rule.assess(record, policy)
            if charge is None:
                continue

            entry = self._penalties.add(
                PenaltyEntry(
                    penalty_id=None,
                    employee_id=record.employee_id,
                    employee_name=record.employee_name,
                    work_date=record.work_date,
                    penalty_type=charge.penalty_type,
                    amount=charge.amount,
                    reason=charge.reason,
                    attendance_id=record.attendance_id,
                    applied_by=SYSTEM_ACTOR,
                    applied_at=self._clock.now(),
                )
            )
            log.info(
                "penalty_applied",
                penalty_id=entry.penalty_id,
                employee_id=entry.employee_id,
                work_date=entry.work_date.isoformat(),
                penalty_type=entry.penalty_type.value,
                amount=str(entry.amount),
                policy_version=policy.version,
            )
            written.append(entry)
        return written
