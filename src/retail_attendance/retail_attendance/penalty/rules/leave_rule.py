from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ...attendance.model import AttendanceRecord
from ...attendance.repository import LeaveCounter
from ...common.datetime_utils import month_bounds
from ...core.enums import AttendanceStatus, PenaltyType
from ..model import PenaltyCharge, PenaltyPolicy
from .base import PenaltyRule, to_money


class LeavePenaltyRule(PenaltyRule):
    """Charge a leave only once the month's paid quota is used up.

    Prior leaves are counted on every call so retroactive edits are honoured.
    """

    penalty_type = PenaltyType.LEAVE

    def __init__(self, leaves: LeaveCounter):
        self._leaves = leaves

    def prior_leaves(self, record: AttendanceRecord) -> int:
        start, end = month_bounds(record.work_date.year, record.work_date.month)
        return self._leaves.count_leaves(record.employee_id, start, end, exclude=record.work_date)

    def assess(self, record: AttendanceRecord, policy: PenaltyPolicy) -> Optional[PenaltyCharge]:
        if record.status != AttendanceStatus.ON_LEAVE:
            return None
        if self.prior_leaves(record) < policy.paid_leaves_per_month:
            return None

        amount = to_money(Decimal(policy.leave_penalty_rate))
        if amount <= 0:
            return None

        leave_type = record.leave_type.value if record.leave_type else "unspecified"
        return PenaltyCharge(
            penalty_type=self.penalty_type,
            amount=amount,
            reason=f"Leave penalty for {leave_type} leave (exceeded paid leave quota)",
        )
