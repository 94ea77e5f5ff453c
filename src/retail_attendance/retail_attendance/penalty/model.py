from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from ..core import constants as c
from ..core.enums import PenaltyStatus, PenaltyType


@dataclass(frozen=True)
class PenaltyPolicy:
    """Active penalty configuration for one tenant.

    Passed explicitly into every evaluation; changing it never recomputes past
    penalties. When expected_check_in/expected_check_out are unset the late
    arrival and early departure components are skipped.
    """

    tenant: str = c.DEFAULT_TENANT
    version: int = 0
    hourly_penalty_rate: Decimal = c.DEFAULT_HOURLY_PENALTY_RATE
    leave_penalty_rate: Decimal = c.DEFAULT_LEAVE_PENALTY_RATE
    late_arrival_threshold_minutes: int = c.DEFAULT_LATE_ARRIVAL_THRESHOLD_MINUTES
    early_departure_threshold_minutes: int = c.DEFAULT_EARLY_DEPARTURE_THRESHOLD_MINUTES
    expected_check_in: Optional[time] = None
    expected_check_out: Optional[time] = None
    standard_work_minutes: int = c.DEFAULT_STANDARD_WORK_MINUTES
    paid_leaves_per_month: int = c.DEFAULT_PAID_LEAVES_PER_MONTH
    weekend_penalty_enabled: bool = False
    auto_apply_penalties: bool = True
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None


@dataclass(frozen=True)
class PenaltyEntry:
    penalty_id: Optional[int]
    employee_id: str
    work_date: date
    penalty_type: PenaltyType
    amount: Decimal
    reason: str
    applied_by: str
    applied_at: datetime
    employee_name: Optional[str] = None
    attendance_id: Optional[int] = None
    status: PenaltyStatus = PenaltyStatus.ACTIVE
    removed_by: Optional[str] = None
    removed_at: Optional[datetime] = None
    removed_reason: Optional[str] = None


@dataclass(frozen=True)
class PenaltyCharge:
    """What a rule decided to charge, before it is written to the ledger."""

    penalty_type: PenaltyType
    amount: Decimal
    reason: str


@dataclass(frozen=True)
class PenaltyTotals:
    total_amount: Decimal = Decimal("0")
    penalty_count: int = 0
    removed_count: int = 0
    breakdown: dict[PenaltyType, Decimal] = field(default_factory=dict)
    penalties: list[PenaltyEntry] = field(default_factory=list)
