from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import LeaveCounter
from ..core.enums import AttendanceStatus
from .rules.base import PenaltyRule
from .rules.hourly_rule import HourlyPenaltyRule
from .rules.leave_rule import LeavePenaltyRule


@dataclass
class PenaltyRuleFactory:
    """Factory Pattern: choose the rules that apply to a terminal record."""

    leaves: LeaveCounter
    hourly: HourlyPenaltyRule = field(default_factory=HourlyPenaltyRule)

    def for_record(self, record: AttendanceRecord) -> Sequence[PenaltyRule]:
        if record.status == AttendanceStatus.CHECKED_OUT:
            return [self.hourly]
        if record.status == AttendanceStatus.ON_LEAVE:
            return [LeavePenaltyRule(self.leaves)]
        return []
