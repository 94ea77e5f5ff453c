from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ...attendance.model import AttendanceRecord
from ...core.enums import PenaltyType
from ..model import PenaltyCharge, PenaltyPolicy

CENTS = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


class PenaltyRule(ABC):
    """Strategy Pattern: one way of deriving a charge from a closed record."""

    penalty_type: PenaltyType

    @abstractmethod
    def assess(self, record: AttendanceRecord, policy: PenaltyPolicy) -> Optional[PenaltyCharge]:
        raise NotImplementedError
