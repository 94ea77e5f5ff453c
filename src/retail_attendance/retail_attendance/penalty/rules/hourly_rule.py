from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ...attendance.model import AttendanceRecord
from ...common.datetime_utils import is_sunday, minutes_between
from ...core.enums import AttendanceStatus, PenaltyType
from ..model import PenaltyCharge, PenaltyPolicy
from .base import PenaltyRule, to_money


@dataclass(frozen=True)
class HourlyBreakdown:
    shortfall_minutes: int = 0
    late_excess_minutes: int = 0
    early_excess_minutes: int = 0

    @property
    def total_minutes(self) -> int:
        return self.shortfall_minutes + self.late_excess_minutes + self.early_excess_minutes


class HourlyPenaltyRule(PenaltyRule):
    """Shortfall against the standard day plus late/early minutes beyond grace."""

    penalty_type = PenaltyType.HOURLY

    def chargeable_minutes(self, record: AttendanceRecord, policy: PenaltyPolicy) -> HourlyBreakdown:
        if is_sunday(record.work_date) and not policy.weekend_penalty_enabled:
            return HourlyBreakdown()

        shortfall = max(0, int(policy.standard_work_minutes) - int(record.total_work_time))

        late_excess = 0
        if record.check_in_time and policy.expected_check_in:
            late = max(0, minutes_between(record.work_date, policy.expected_check_in, record.check_in_time))
            if late > policy.late_arrival_threshold_minutes:
                late_excess = late - policy.late_arrival_threshold_minutes

        early_excess = 0
        if record.check_out_time and policy.expected_check_out:
            early = max(0, minutes_between(record.work_date, record.check_out_time, policy.expected_check_out))
            if early > policy.early_departure_threshold_minutes:
                early_excess = early - policy.early_departure_threshold_minutes

        return HourlyBreakdown(shortfall, late_excess, early_excess)

    def assess(self, record: AttendanceRecord, policy: PenaltyPolicy) -> Optional[PenaltyCharge]:
        if record.status != AttendanceStatus.CHECKED_OUT:
            return None

        minutes = self.chargeable_minutes(record, policy).total_minutes
        amount = to_money(Decimal(minutes) / Decimal(60) * Decimal(policy.hourly_penalty_rate))
        if amount <= 0:
            return None

        reason = "Hourly penalty for incomplete work hours or late arrival/early departure"
        if is_sunday(record.work_date):
            reason += " (Sunday work)"
        if record.auto_checkout:
            reason += " (auto-checkout)"
        return PenaltyCharge(penalty_type=self.penalty_type, amount=amount, reason=reason)
